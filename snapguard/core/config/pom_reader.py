"""
POM reader — parse one pom.xml into a raw, uninterpolated model.

Only the parts the check needs are read: coordinates, parent,
properties, modules, and the plugin sections of <build> and of every
<profile>. Property expressions are kept verbatim; the reactor loader
resolves them once inheritance is known.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from pydantic import BaseModel, Field

from snapguard.core.models.build import (
    DEFAULT_PLUGIN_GROUP,
    BuildConfiguration,
    Dependency,
    Plugin,
)
from snapguard.core.models.project import Profile

logger = logging.getLogger(__name__)


class PomError(Exception):
    """Raised when a pom.xml cannot be read or lacks required elements."""


class ParentRef(BaseModel):
    """The <parent> element of a POM."""

    group_id: str
    artifact_id: str
    version: str | None = None
    relative_path: str = "../pom.xml"


class PomModel(BaseModel):
    """A single pom.xml as declared, before inheritance."""

    path: str
    group_id: str | None = None
    artifact_id: str
    version: str | None = None
    packaging: str = "jar"
    parent: ParentRef | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    modules: list[str] = Field(default_factory=list)
    build: BuildConfiguration | None = None
    profiles: list[Profile] = Field(default_factory=list)

    @property
    def directory(self) -> Path:
        return Path(self.path).parent

    @property
    def declared_group_id(self) -> str | None:
        """groupId as written, falling back to the parent's."""
        if self.group_id:
            return self.group_id
        return self.parent.group_id if self.parent else None


def _strip_namespaces(root: ET.Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def _text(el: ET.Element | None, name: str) -> str | None:
    if el is None:
        return None
    child = el.find(name)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def _parse_dependency(el: ET.Element, pom_path: Path) -> Dependency:
    group_id = _text(el, "groupId")
    artifact_id = _text(el, "artifactId")
    if not group_id or not artifact_id:
        raise PomError(f"{pom_path}: plugin dependency without groupId/artifactId")
    return Dependency(
        group_id=group_id,
        artifact_id=artifact_id,
        version=_text(el, "version"),
        type=_text(el, "type") or "jar",
        classifier=_text(el, "classifier"),
        scope=_text(el, "scope"),
    )


def _parse_plugin(el: ET.Element, pom_path: Path) -> Plugin:
    artifact_id = _text(el, "artifactId")
    if not artifact_id:
        raise PomError(f"{pom_path}: <plugin> without artifactId")
    inherited = _text(el, "inherited")
    return Plugin(
        group_id=_text(el, "groupId") or DEFAULT_PLUGIN_GROUP,
        artifact_id=artifact_id,
        version=_text(el, "version"),
        inherited=(inherited or "true").lower() != "false",
        dependencies=[_parse_dependency(d, pom_path) for d in el.findall("dependencies/dependency")],
    )


def _parse_plugins(el: ET.Element | None, pom_path: Path) -> list[Plugin] | None:
    if el is None:
        return None
    return [_parse_plugin(p, pom_path) for p in el.findall("plugin")]


def _parse_build(el: ET.Element | None, pom_path: Path) -> BuildConfiguration | None:
    """Parse a <build> element; ``None`` when the project declares none."""
    if el is None:
        return None
    management = el.find("pluginManagement")
    return BuildConfiguration(
        plugin_management=(
            _parse_plugins(management.find("plugins"), pom_path) or []
            if management is not None
            else None
        ),
        plugins=_parse_plugins(el.find("plugins"), pom_path),
    )


def _parse_profile(el: ET.Element, pom_path: Path) -> Profile:
    profile_id = _text(el, "id") or "default"
    return Profile(id=profile_id, build=_parse_build(el.find("build"), pom_path))


def _parse_parent(el: ET.Element | None, pom_path: Path) -> ParentRef | None:
    if el is None:
        return None
    group_id = _text(el, "groupId")
    artifact_id = _text(el, "artifactId")
    if not group_id or not artifact_id:
        raise PomError(f"{pom_path}: <parent> without groupId/artifactId")
    relative_path = el.find("relativePath")
    return ParentRef(
        group_id=group_id,
        artifact_id=artifact_id,
        version=_text(el, "version"),
        # an empty <relativePath/> disables the filesystem lookup
        relative_path=(relative_path.text or "").strip() if relative_path is not None else "../pom.xml",
    )


def read_pom(path: Path) -> PomModel:
    """Parse a pom.xml file.

    Raises:
        PomError: If the file is missing, is not well-formed XML, or
            lacks an artifactId.
    """
    try:
        tree = ET.parse(path)
    except FileNotFoundError as e:
        raise PomError(f"POM not found: {path}") from e
    except ET.ParseError as e:
        raise PomError(f"Invalid XML in {path}: {e}") from e
    except OSError as e:
        raise PomError(f"Cannot read {path}: {e}") from e

    root = tree.getroot()
    _strip_namespaces(root)
    if root.tag != "project":
        raise PomError(f"{path}: root element is <{root.tag}>, expected <project>")

    artifact_id = _text(root, "artifactId")
    if not artifact_id:
        raise PomError(f"{path}: missing <artifactId>")

    properties: dict[str, str] = {}
    props_el = root.find("properties")
    if props_el is not None:
        for prop in props_el:
            if isinstance(prop.tag, str):
                properties[prop.tag] = (prop.text or "").strip()

    pom = PomModel(
        path=str(path),
        group_id=_text(root, "groupId"),
        artifact_id=artifact_id,
        version=_text(root, "version"),
        packaging=_text(root, "packaging") or "jar",
        parent=_parse_parent(root.find("parent"), path),
        properties=properties,
        modules=[m.text.strip() for m in root.findall("modules/module") if m.text and m.text.strip()],
        build=_parse_build(root.find("build"), path),
        profiles=[_parse_profile(p, path) for p in root.findall("profiles/profile")],
    )
    logger.debug(
        "Read %s: %s (%d modules, %d profiles)",
        path, artifact_id, len(pom.modules), len(pom.profiles),
    )
    return pom
