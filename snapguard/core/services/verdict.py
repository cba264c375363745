"""
Verdict — turn a reactor report into a pass or a blocked release.

A blocked release is logged at ERROR level as an indented tree::

    \t\t[PROJECT] com.acme:app:1.0-SNAPSHOT
    \t\t\t[PLUGIN] org.apache.maven.plugins:maven-foo-plugin:1.2
    \t\t\t\t[DEPENDENCY] com.acme:foo-ext:2.0-SNAPSHOT

followed by a ReleaseBlocked exception that callers must let through.
"""

from __future__ import annotations

import logging

from snapguard.core.services.snapshot_check import ReactorReport

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "The project cannot be released due to one or more SNAPSHOT plugin-dependencies!"

REPORT_HEADER = (
    "\tThere are plugins with SNAPSHOT dependencies! The following list contains "
    "all SNAPSHOT dependencies grouped by plugin and module:"
)


class ReleaseBlocked(Exception):
    """Raised when a plugin depends on a SNAPSHOT artifact.

    This is the expected outcome of finding a violation, not a bug. It
    carries the report that was logged so callers can render it again.
    """

    def __init__(self, report: ReactorReport, lines: list[str], message: str = BLOCKED_MESSAGE):
        super().__init__(message)
        self.report = report
        self.lines = lines


def render_report(report: ReactorReport) -> list[str]:
    """Render the violating projects as tab-indented report lines.

    Clean projects are left out. Plugins and dependencies are sorted.
    """
    lines: list[str] = []
    for project, violations in report.entries:
        if not violations:
            continue
        lines.append(f"\t\t[PROJECT] {project.identity}")
        for plugin in sorted(violations):
            lines.append(f"\t\t\t[PLUGIN] {plugin}")
            for dependency in sorted(violations[plugin]):
                lines.append(f"\t\t\t\t[DEPENDENCY] {dependency}")
    return lines


def report_verdict(report: ReactorReport) -> None:
    """Log the outcome and raise ReleaseBlocked if any violation exists.

    Raises:
        ReleaseBlocked: If ``report.has_violations`` is set.
    """
    if not report.has_violations:
        logger.info(
            "\tNo SNAPSHOT plugin dependencies found in %d reactor project(s).",
            report.projects_scanned,
        )
        return

    lines = render_report(report)
    logger.error(REPORT_HEADER)
    for line in lines:
        logger.error(line)
    raise ReleaseBlocked(report, lines)
