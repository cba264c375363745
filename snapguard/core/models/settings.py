"""
Settings model — what snapguard.yml may declare.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

from snapguard.core.models.build import PluginIdentity


class Settings(BaseModel):
    """Check settings, loaded from snapguard.yml and the environment."""

    reactor: str = "pom.xml"
    self_plugin: PluginIdentity | None = None
    integration_test: bool = False
    audit: bool = True

    @field_validator("self_plugin", mode="before")
    @classmethod
    def _parse_self_plugin(cls, value: object) -> object:
        if isinstance(value, str):
            return PluginIdentity.parse(value)
        return value
