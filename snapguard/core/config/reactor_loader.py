"""
Reactor loader — build the list of projects a release covers.

Two sources are supported:

    pom.xml (or a directory holding one)
        The root POM and, depth-first, every module it aggregates.
        Each project is turned into its effective form: coordinates and
        properties inherited from a parent inside the reactor, parent
        plugins merged in, plugin management applied to direct plugins,
        and ${...} expressions interpolated.

    reactor.yml / reactor.json
        A pre-computed descriptor (``projects: [...]``) validated
        directly against the Project model, for pipelines that already
        hold an effective model.

Resolution follows Maven where it matters for plugin dependencies:

    groupId/version      child's value, else the <parent> element's
    properties           parent's (reactor parents only), child wins
    pluginManagement     parent list with child entries overriding by key
    plugins              inheritable parent plugins, child overrides by key
    plugin dependencies  merged by groupId:artifactId:type:classifier,
                         child wins
    profiles             never inherited
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from snapguard.core.config.pom_reader import PomError, PomModel, read_pom
from snapguard.core.models.build import BuildConfiguration, Dependency, Plugin
from snapguard.core.models.project import Profile, Project

logger = logging.getLogger(__name__)

POM_FILE = "pom.xml"
DESCRIPTOR_SUFFIXES = (".yml", ".yaml", ".json")

_EXPRESSION = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10


class ReactorError(Exception):
    """Raised when the reactor cannot be discovered or resolved."""


# ── Entry point ─────────────────────────────────────────────────────


def load_reactor(path: Path) -> list[Project]:
    """Load the reactor from a POM, a directory or a descriptor file.

    Raises:
        ReactorError: If the source is missing, unreadable or invalid.
    """
    if path.is_dir():
        path = path / POM_FILE
    if not path.is_file():
        raise ReactorError(f"Reactor not found: {path}")

    if path.suffix.lower() in DESCRIPTOR_SUFFIXES:
        projects = load_descriptor(path)
    else:
        projects = load_pom_reactor(path)

    logger.info("Loaded reactor with %d project(s) from %s", len(projects), path)
    return projects


def load_descriptor(path: Path) -> list[Project]:
    """Load projects from a YAML/JSON reactor descriptor."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ReactorError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ReactorError(f"Invalid reactor descriptor {path}: {e}") from e

    if isinstance(data, dict):
        if "projects" not in data:
            raise ReactorError(f"Reactor descriptor {path} has no 'projects' list")
        data = data["projects"]
    if data is None:
        data = []
    if not isinstance(data, list):
        raise ReactorError(f"Expected a list of projects in {path}, got {type(data).__name__}")

    try:
        return [Project.model_validate(item) for item in data]
    except ValidationError as e:
        raise ReactorError(f"Invalid project in {path}: {e}") from e


# ── Discovery ───────────────────────────────────────────────────────


def _module_pom(directory: Path, module: str) -> Path:
    candidate = (directory / module).resolve()
    if candidate.is_dir():
        candidate = candidate / POM_FILE
    return candidate


def discover_poms(root_pom: Path) -> list[PomModel]:
    """Read the root POM and every aggregated module, parent first.

    Modules declared only inside profiles are not followed.
    """
    poms: list[PomModel] = []
    seen: set[Path] = set()

    def visit(pom_path: Path, stack: tuple[Path, ...]) -> None:
        pom_path = pom_path.resolve()
        if pom_path in stack:
            chain = " -> ".join(str(p) for p in (*stack, pom_path))
            raise ReactorError(f"Module cycle detected: {chain}")
        if pom_path in seen:
            return
        seen.add(pom_path)

        try:
            pom = read_pom(pom_path)
        except PomError as e:
            raise ReactorError(str(e)) from e
        poms.append(pom)

        for module in pom.modules:
            module_pom = _module_pom(pom_path.parent, module)
            if not module_pom.is_file():
                raise ReactorError(f"{pom_path}: module '{module}' has no POM at {module_pom}")
            visit(module_pom, (*stack, pom_path))

    visit(root_pom, ())
    return poms


# ── Effective model ─────────────────────────────────────────────────


class _Resolved:
    """A POM after inheritance, before interpolation."""

    def __init__(self, pom: PomModel, group_id: str, version: str | None,
                 properties: dict[str, str], build: BuildConfiguration | None):
        self.pom = pom
        self.group_id = group_id
        self.version = version
        self.properties = properties
        self.build = build


def _merge_dependencies(parent: list[Dependency], child: list[Dependency]) -> list[Dependency]:
    merged = {d.management_key: d for d in parent}
    for dep in child:
        merged[dep.management_key] = dep
    return list(merged.values())


def _merge_plugin(base: Plugin, override: Plugin) -> Plugin:
    return override.model_copy(update={
        "version": override.version or base.version,
        "dependencies": _merge_dependencies(base.dependencies, override.dependencies),
    })


def _merge_plugins(parent: list[Plugin] | None, child: list[Plugin] | None) -> list[Plugin] | None:
    if parent is None and child is None:
        return None
    merged = {p.key: p for p in parent or []}
    for plugin in child or []:
        existing = merged.get(plugin.key)
        merged[plugin.key] = _merge_plugin(existing, plugin) if existing else plugin
    return list(merged.values())


def _inherit_build(parent: BuildConfiguration | None,
                   child: BuildConfiguration | None) -> BuildConfiguration | None:
    if parent is None:
        return child
    inherited_plugins = (
        [p for p in parent.plugins if p.inherited] if parent.plugins is not None else None
    )
    if child is None:
        if parent.plugin_management is None and not inherited_plugins:
            return None
        return BuildConfiguration(
            plugin_management=parent.plugin_management,
            plugins=inherited_plugins or None,
        )
    return BuildConfiguration(
        plugin_management=_merge_plugins(parent.plugin_management, child.plugin_management),
        plugins=_merge_plugins(inherited_plugins, child.plugins),
    )


def _apply_management(build: BuildConfiguration | None) -> BuildConfiguration | None:
    """Fill direct plugins from their managed declaration."""
    if build is None or not build.plugin_management or not build.plugins:
        return build
    managed = {p.key: p for p in build.plugin_management}
    plugins = [
        _merge_plugin(managed[p.key], p) if p.key in managed else p
        for p in build.plugins
    ]
    return build.model_copy(update={"plugins": plugins})


def _find_reactor_parent(pom: PomModel, poms: list[PomModel]) -> PomModel | None:
    parent = pom.parent
    if parent is None:
        return None

    if parent.relative_path:
        candidate = (pom.directory / parent.relative_path).resolve()
        if candidate.is_dir():
            candidate = candidate / POM_FILE
        for other in poms:
            if Path(other.path).resolve() == candidate and other.artifact_id == parent.artifact_id:
                return other

    for other in poms:
        if other.artifact_id == parent.artifact_id and other.declared_group_id == parent.group_id:
            return other
    return None


class _Resolver:
    def __init__(self, poms: list[PomModel]):
        self._poms = poms
        self._cache: dict[str, _Resolved] = {}
        self._in_progress: set[str] = set()

    def resolve(self, pom: PomModel) -> _Resolved:
        if pom.path in self._cache:
            return self._cache[pom.path]
        if pom.path in self._in_progress:
            raise ReactorError(f"Parent cycle detected at {pom.path}")
        self._in_progress.add(pom.path)

        parent_pom = _find_reactor_parent(pom, self._poms)
        parent = self.resolve(parent_pom) if parent_pom is not None else None

        group_id = pom.declared_group_id
        if not group_id:
            raise ReactorError(f"{pom.path}: missing <groupId> and no <parent> to inherit it from")
        version = pom.version or (pom.parent.version if pom.parent else None)

        properties = dict(parent.properties) if parent else {}
        properties.update(pom.properties)

        build = _inherit_build(parent.build if parent else None, pom.build)

        resolved = _Resolved(pom, group_id, version, properties, build)
        self._in_progress.discard(pom.path)
        self._cache[pom.path] = resolved
        return resolved


# ── Interpolation ───────────────────────────────────────────────────


def _interpolation_context(resolved: _Resolved) -> dict[str, str]:
    pom = resolved.pom
    context = dict(resolved.properties)
    builtins = {
        "groupId": resolved.group_id,
        "artifactId": pom.artifact_id,
        "version": resolved.version,
        "packaging": pom.packaging,
    }
    if pom.parent:
        builtins["parent.groupId"] = pom.parent.group_id
        builtins["parent.artifactId"] = pom.parent.artifact_id
        builtins["parent.version"] = pom.parent.version
    for key, value in builtins.items():
        if value is None:
            continue
        context[f"project.{key}"] = value
        context[f"pom.{key}"] = value
        context.setdefault(key, value)
    context.setdefault("project.basedir", str(pom.directory))
    context.setdefault("basedir", str(pom.directory))
    return context


def interpolate(value: str | None, context: dict[str, str]) -> str | None:
    """Replace ${...} expressions; unknown ones are left as written."""
    if value is None or "${" not in value:
        return value
    for _ in range(_MAX_INTERPOLATION_PASSES):
        expanded = _EXPRESSION.sub(lambda m: context.get(m.group(1), m.group(0)), value)
        if expanded == value:
            break
        value = expanded
    return value


def _interpolate_dependency(dep: Dependency, context: dict[str, str]) -> Dependency:
    return dep.model_copy(update={
        "group_id": interpolate(dep.group_id, context),
        "artifact_id": interpolate(dep.artifact_id, context),
        "version": interpolate(dep.version, context),
        "type": interpolate(dep.type, context),
        "classifier": interpolate(dep.classifier, context),
    })


def _interpolate_plugins(plugins: list[Plugin] | None, context: dict[str, str]) -> list[Plugin] | None:
    if plugins is None:
        return None
    return [
        p.model_copy(update={
            "group_id": interpolate(p.group_id, context),
            "artifact_id": interpolate(p.artifact_id, context),
            "version": interpolate(p.version, context),
            "dependencies": [_interpolate_dependency(d, context) for d in p.dependencies],
        })
        for p in plugins
    ]


def _interpolate_build(build: BuildConfiguration | None,
                       context: dict[str, str]) -> BuildConfiguration | None:
    if build is None:
        return None
    return BuildConfiguration(
        plugin_management=_interpolate_plugins(build.plugin_management, context),
        plugins=_interpolate_plugins(build.plugins, context),
    )


def effective_project(resolved: _Resolved) -> Project:
    """Interpolate a resolved POM into the Project the check scans."""
    context = _interpolation_context(resolved)
    pom = resolved.pom
    return Project(
        group_id=interpolate(resolved.group_id, context) or resolved.group_id,
        artifact_id=pom.artifact_id,
        version=interpolate(resolved.version, context),
        packaging=pom.packaging,
        build=_apply_management(_interpolate_build(resolved.build, context)),
        profiles=[
            Profile(id=profile.id, build=_interpolate_build(profile.build, context))
            for profile in pom.profiles
        ],
        path=pom.path,
    )


def load_pom_reactor(root_pom: Path) -> list[Project]:
    """Discover and resolve a POM-based reactor, in discovery order."""
    poms = discover_poms(root_pom)
    resolver = _Resolver(poms)
    return [effective_project(resolver.resolve(pom)) for pom in poms]
