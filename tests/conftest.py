"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from snapguard.core.models import BuildConfiguration, Dependency, Plugin, Profile, Project


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging() calls made by CLI tests."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.WARNING)


def _split_gav(gav: str) -> tuple[str, str, str | None]:
    parts = gav.split(":")
    return parts[0], parts[1], parts[2] if len(parts) > 2 else None


@pytest.fixture
def make_plugin() -> Callable[..., Plugin]:
    """Build a Plugin from 'group:artifact:version' strings."""

    def _make(gav: str, *dependencies: str) -> Plugin:
        group_id, artifact_id, version = _split_gav(gav)
        deps = []
        for dep in dependencies:
            d_group, d_artifact, d_version = _split_gav(dep)
            deps.append(Dependency(group_id=d_group, artifact_id=d_artifact, version=d_version))
        return Plugin(group_id=group_id, artifact_id=artifact_id, version=version, dependencies=deps)

    return _make


@pytest.fixture
def make_project() -> Callable[..., Project]:
    """Build a Project with optional managed/direct plugins and profiles."""

    def _make(
        gav: str = "com.acme:app:1.0",
        managed: list[Plugin] | None = None,
        direct: list[Plugin] | None = None,
        profiles: list[Profile] | None = None,
        with_build: bool = True,
    ) -> Project:
        group_id, artifact_id, version = _split_gav(gav)
        build = BuildConfiguration(plugin_management=managed, plugins=direct) if with_build else None
        return Project(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            build=build,
            profiles=profiles or [],
        )

    return _make


@pytest.fixture
def write_pom() -> Callable[[Path, str], Path]:
    """Write a dedented pom.xml into a directory and return its path."""

    def _write(directory: Path, content: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "pom.xml"
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write
