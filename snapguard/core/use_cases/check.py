"""
Check use case — load settings and reactor, run the release check.

Split in two so callers keep the result object when the release is
blocked:

    prepare_check()   settings + reactor, errors recorded on the result
    execute_check()   run the step, audit, and let ReleaseBlocked through
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from snapguard.core.config.loader import ConfigError, find_settings_file, load_settings, settings_root
from snapguard.core.config.reactor_loader import ReactorError, load_reactor
from snapguard.core.models.build import PluginIdentity
from snapguard.core.models.project import Project
from snapguard.core.models.settings import Settings
from snapguard.core.persistence.audit import AuditEntry, AuditWriter, generate_operation_id
from snapguard.core.services.plugin_dependency_step import CHECK_STEP, run_plugin_dependency_check
from snapguard.core.services.snapshot_check import ReactorReport
from snapguard.core.services.verdict import ReleaseBlocked, render_report

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of the check use case."""

    settings: Settings | None = None
    root: Path | None = None
    reactor_path: Path | None = None
    projects: list[Project] = field(default_factory=list)
    report: ReactorReport | None = None
    blocked: bool = False
    operation_id: str = ""
    audit_path: Path | None = None
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.report is not None and not self.blocked

    def to_dict(self) -> dict:
        result: dict = {"step": CHECK_STEP.to_dict()}
        if self.error:
            result["error"] = self.error
            return result

        result["operation_id"] = self.operation_id
        result["reactor"] = str(self.reactor_path) if self.reactor_path else None
        result["integration_test"] = self.settings.integration_test if self.settings else False
        result["status"] = "blocked" if self.blocked else "passed"
        if self.report:
            result.update(self.report.to_dict())
            result["report"] = render_report(self.report)
        return result


def prepare_check(
    config_path: Path | None = None,
    reactor_path: Path | None = None,
    integration_test: bool | None = None,
    self_plugin: str | None = None,
    audit: bool | None = None,
) -> CheckResult:
    """Resolve settings and load the reactor.

    Explicit arguments win over snapguard.yml and the environment.
    """
    result = CheckResult()

    try:
        if config_path is None:
            config_path = find_settings_file()
        settings = load_settings(config_path)

        update: dict = {}
        if integration_test is not None:
            update["integration_test"] = integration_test
        if self_plugin:
            update["self_plugin"] = PluginIdentity.parse(self_plugin)
        if audit is not None:
            update["audit"] = audit
        if update:
            settings = settings.model_copy(update=update)
    except ConfigError as e:
        result.error = str(e)
        return result
    except ValueError as e:
        result.error = f"Invalid --self-plugin: {e}"
        return result

    result.settings = settings
    result.root = settings_root(config_path)
    result.reactor_path = reactor_path or (result.root / settings.reactor)

    try:
        result.projects = load_reactor(result.reactor_path)
    except ReactorError as e:
        result.error = str(e)
        return result

    return result


def execute_check(result: CheckResult) -> CheckResult:
    """Run the plugin dependency check on a prepared result.

    The result is updated in place before anything is raised.

    Raises:
        ReleaseBlocked: If any plugin depends on a SNAPSHOT artifact.
    """
    settings = result.settings
    if result.error or settings is None:
        raise ValueError("execute_check() needs a successfully prepared CheckResult")

    result.operation_id = generate_operation_id()
    started = time.monotonic()
    try:
        result.report = run_plugin_dependency_check(
            result.projects,
            self_plugin=settings.self_plugin,
            integration_test=settings.integration_test,
        )
    except ReleaseBlocked as e:
        result.report = e.report
        result.blocked = True
        raise
    finally:
        if result.report is not None and settings.audit:
            _write_audit(result, int((time.monotonic() - started) * 1000))

    return result


def run_check(
    config_path: Path | None = None,
    reactor_path: Path | None = None,
    integration_test: bool | None = None,
    self_plugin: str | None = None,
    audit: bool | None = None,
) -> CheckResult:
    """Prepare and execute the check in one call.

    Configuration and reactor problems are returned on ``result.error``.

    Raises:
        ReleaseBlocked: If any plugin depends on a SNAPSHOT artifact.
    """
    result = prepare_check(
        config_path=config_path,
        reactor_path=reactor_path,
        integration_test=integration_test,
        self_plugin=self_plugin,
        audit=audit,
    )
    if result.error:
        return result
    return execute_check(result)


def _write_audit(result: CheckResult, duration_ms: int) -> None:
    report = result.report
    settings = result.settings
    assert report is not None and settings is not None

    writer = AuditWriter(project_root=result.root)
    writer.write(AuditEntry(
        operation_id=result.operation_id,
        operation_type=CHECK_STEP.id,
        reactor=str(result.reactor_path or ""),
        projects_scanned=report.projects_scanned,
        integration_test=settings.integration_test,
        status="blocked" if result.blocked else "passed",
        violations=report.violation_count,
        violating_projects=[p.identity for p in report.violating_projects],
        duration_ms=duration_ms,
        context={"self_plugin": str(settings.self_plugin) if settings.self_plugin else None},
    ))
    result.audit_path = writer.path
