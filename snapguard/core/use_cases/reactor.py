"""
Reactor use case — list the projects a check would cover.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from snapguard.core.config.loader import ConfigError, find_settings_file, load_settings, settings_root
from snapguard.core.config.reactor_loader import ReactorError, load_reactor
from snapguard.core.models.project import Project


@dataclass
class ProjectSummary:
    """What the check will look at in one project."""

    identity: str
    path: str | None = None
    managed_plugins: int = 0
    direct_plugins: int = 0
    profiles: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, project: Project) -> ProjectSummary:
        build = project.build
        return cls(
            identity=project.identity,
            path=project.path,
            managed_plugins=len(build.plugin_management or []) if build else 0,
            direct_plugins=len(build.plugins or []) if build else 0,
            profiles=[p.id for p in project.profiles],
        )

    def to_dict(self) -> dict:
        return {
            "identity": self.identity,
            "path": self.path,
            "managed_plugins": self.managed_plugins,
            "direct_plugins": self.direct_plugins,
            "profiles": self.profiles,
        }


@dataclass
class ReactorListing:
    """Result of the reactor use case."""

    reactor_path: Path | None = None
    projects: list[ProjectSummary] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "reactor": str(self.reactor_path),
            "total": len(self.projects),
            "projects": [p.to_dict() for p in self.projects],
        }


def list_reactor(config_path: Path | None = None, reactor_path: Path | None = None) -> ReactorListing:
    """Load the reactor and summarise each project."""
    result = ReactorListing()

    try:
        if config_path is None:
            config_path = find_settings_file()
        settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.reactor_path = reactor_path or (settings_root(config_path) / settings.reactor)

    try:
        projects = load_reactor(result.reactor_path)
    except ReactorError as e:
        result.error = str(e)
        return result

    result.projects = [ProjectSummary.of(p) for p in projects]
    return result
