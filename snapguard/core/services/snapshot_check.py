"""
Snapshot check — find plugin dependencies on SNAPSHOT artifacts.

Walks every plugin surface of every reactor project:

    project  <build><pluginManagement><plugins>
    project  <build><plugins>
    profile  <build><pluginManagement><plugins>   (each declared profile)
    profile  <build><plugins>

and groups the unstable dependencies it finds by plugin and by project.
Results are set-valued per plugin key, so a pair discovered on several
surfaces is reported once.

Pure logic — no side effects besides logging.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from snapguard.core.models.build import Plugin, PluginIdentity
from snapguard.core.models.project import PluginSurfaces, Project
from snapguard.core.services.versions import is_unstable

logger = logging.getLogger(__name__)

# plugin identity -> identities of its SNAPSHOT dependencies
ViolationMap = dict[str, set[str]]


def merge_violations(target: ViolationMap, source: ViolationMap) -> ViolationMap:
    """Union ``source`` into ``target`` per key and return ``target``."""
    for plugin, dependencies in source.items():
        target.setdefault(plugin, set()).update(dependencies)
    return target


def extract_surface(plugins: Iterable[Plugin] | None) -> ViolationMap:
    """Collect the SNAPSHOT dependencies of each plugin in one list.

    Plugins without any SNAPSHOT dependency get no key at all.
    """
    result: ViolationMap = {}
    if plugins is None:
        return result

    for plugin in plugins:
        snapshots = {str(d) for d in plugin.dependencies if is_unstable(d.version)}
        if snapshots:
            result.setdefault(str(plugin), set()).update(snapshots)
    return result


def _managed_plugins(owner: PluginSurfaces) -> list[Plugin] | None:
    build = owner.build
    return build.plugin_management if build is not None else None


def _direct_plugins(owner: PluginSurfaces) -> list[Plugin] | None:
    build = owner.build
    return build.plugins if build is not None else None


def scan_project(project: Project) -> ViolationMap:
    """Merge the violations of all plugin surfaces of one project."""
    violations: ViolationMap = {}

    logger.debug("\t\tChecking managed plugins")
    merge_violations(violations, extract_surface(_managed_plugins(project)))
    logger.debug("\t\tChecking direct plugin references")
    merge_violations(violations, extract_surface(_direct_plugins(project)))

    # Activation is not evaluated: every declared profile counts.
    for profile in project.profiles:
        logger.debug("\t\tChecking managed plugins of profile '%s'", profile.id)
        merge_violations(violations, extract_surface(_managed_plugins(profile)))
        logger.debug("\t\tChecking direct plugin references of profile '%s'", profile.id)
        merge_violations(violations, extract_surface(_direct_plugins(profile)))

    return violations


def filter_self(
    violations: ViolationMap,
    self_plugin: PluginIdentity | str | None,
    integration_test: bool,
) -> ViolationMap:
    """Drop the checker's own plugin from ``violations`` in integration-test mode.

    The whole key is removed, whatever dependencies it holds. Outside of
    integration-test mode the mapping is returned untouched.
    """
    if not integration_test or self_plugin is None:
        return violations

    own_key = str(self_plugin)
    if own_key in violations:
        logger.debug("\t\tIgnoring own plugin %s (integration test mode)", own_key)
    return {plugin: deps for plugin, deps in violations.items() if plugin != own_key}


@dataclass
class ReactorReport:
    """Violations of every scanned project, in reactor order.

    One entry per reactor project, even when two projects compare equal.
    """

    entries: list[tuple[Project, ViolationMap]] = field(default_factory=list)
    has_violations: bool = False

    @property
    def projects_scanned(self) -> int:
        return len(self.entries)

    @property
    def violating_projects(self) -> list[Project]:
        return [p for p, violations in self.entries if violations]

    @property
    def violation_count(self) -> int:
        """Number of distinct (project, plugin, dependency) triples."""
        return sum(
            len(deps)
            for _, violations in self.entries
            for deps in violations.values()
        )

    def to_dict(self) -> dict:
        # JSON is keyed by identity; entries sharing one are unioned.
        projects: dict[str, ViolationMap] = {}
        for project, violations in self.entries:
            if violations:
                merge_violations(projects.setdefault(project.identity, {}), violations)
        return {
            "has_violations": self.has_violations,
            "projects_scanned": self.projects_scanned,
            "violation_count": self.violation_count,
            "projects": {
                identity: {plugin: sorted(deps) for plugin, deps in sorted(violations.items())}
                for identity, violations in projects.items()
            },
        }


def check_reactor(
    projects: Iterable[Project],
    self_plugin: PluginIdentity | str | None = None,
    integration_test: bool = False,
) -> ReactorReport:
    """Scan every project; never stops at the first violation."""
    logger.info("Checking that none of the reactor project's plugins contain SNAPSHOT dependencies.")

    report = ReactorReport()
    for project in projects:
        logger.debug("\tChecking plugin dependencies of reactor project '%s':", project.identity)
        violations = filter_self(scan_project(project), self_plugin, integration_test)
        report.entries.append((project, violations))
        if violations:
            report.has_violations = True

    return report
