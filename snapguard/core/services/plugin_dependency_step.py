"""
Release step: check plugin dependency versions.

Wires the snapshot check and the verdict together as one step of a
release pipeline. The surrounding pipeline supplies the reactor, the
checker's own plugin coordinates and the integration-test flag.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from snapguard.core.models.build import PluginIdentity
from snapguard.core.models.project import Project
from snapguard.core.services.snapshot_check import ReactorReport, check_reactor
from snapguard.core.services.verdict import report_verdict


@dataclass(frozen=True)
class ProcessingStep:
    """Descriptor a release pipeline uses to schedule a step."""

    id: str
    description: str
    requires_online: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "requires_online": self.requires_online,
        }


CHECK_STEP = ProcessingStep(
    id="checkPluginDependencies",
    description=(
        "Checks that the plugins used by the projects do not reference SNAPSHOT "
        "dependencies to avoid unreproducible release artifacts."
    ),
    requires_online=False,
)


def run_plugin_dependency_check(
    projects: Iterable[Project],
    self_plugin: PluginIdentity | str | None = None,
    integration_test: bool = False,
) -> ReactorReport:
    """Run the check over the reactor and report the verdict.

    Returns the report when the release may proceed.

    Raises:
        ReleaseBlocked: If any plugin depends on a SNAPSHOT artifact.
    """
    report = check_reactor(projects, self_plugin=self_plugin, integration_test=integration_test)
    report_verdict(report)
    return report
