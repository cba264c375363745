"""
Project model — a reactor module and its declared profiles.

Projects are produced by the reactor loader (from pom.xml files or a
reactor descriptor) and are read-only to the check.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from snapguard.core.models.build import BuildConfiguration


class PluginSurfaces(Protocol):
    """Anything with an optional build section: a project or a profile."""

    @property
    def build(self) -> BuildConfiguration | None: ...


class Profile(BaseModel):
    """A named build overlay declared on a project.

    Activation is not modelled; every declared profile is scanned.
    """

    id: str
    build: BuildConfiguration | None = None

    model_config = ConfigDict(extra="forbid")


class Project(BaseModel):
    """A module participating in the release."""

    group_id: str
    artifact_id: str
    version: str | None = None
    packaging: str = "jar"

    build: BuildConfiguration | None = None
    profiles: list[Profile] = Field(default_factory=list)

    path: str | None = None  # pom.xml this project was read from

    model_config = ConfigDict(extra="forbid")

    @property
    def identity(self) -> str:
        if self.version:
            return f"{self.group_id}:{self.artifact_id}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}"

    def get_profile(self, profile_id: str) -> Profile | None:
        """Look up a declared profile by id."""
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    def __str__(self) -> str:
        return self.identity
