"""
snapguard — CLI entrypoint.

Usage:
    python -m snapguard.main --help
    python -m snapguard.main check
    python -m snapguard.main reactor
    python -m snapguard.main config check

Exit status of ``check``: 0 release may proceed, 1 release blocked,
2 configuration or reactor error.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from snapguard import __version__
from snapguard.core.observability.logging_config import DEFAULT_LEVEL, quiet_console, setup_logging

EXIT_BLOCKED = 1
EXIT_ERROR = 2


@click.group()
@click.version_option(version=__version__, prog_name="snapguard")
@click.option("--verbose", "-v", is_flag=True, help="Narrate every surface being checked.")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to snapguard.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """snapguard — block releases whose plugins depend on SNAPSHOTs."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug or verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("SNAPGUARD_LOG_LEVEL", DEFAULT_LEVEL)

    setup_logging(
        level=level,
        log_file=os.environ.get("SNAPGUARD_LOG_FILE"),
        log_file_level=os.environ.get("SNAPGUARD_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option(
    "--reactor",
    "-r",
    "reactor_path",
    type=click.Path(exists=False),
    default=None,
    help="Root pom.xml, its directory, or a reactor descriptor (default: from snapguard.yml).",
)
@click.option(
    "--itest/--no-itest",
    "integration_test",
    default=None,
    help="Integration-test mode: exempt the checker's own plugin.",
)
@click.option("--self-plugin", default=None, help="Own plugin coordinates, group:artifact:version.")
@click.option("--no-audit", is_flag=True, help="Don't append the run to the audit ledger.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(
    ctx: click.Context,
    reactor_path: str | None,
    integration_test: bool | None,
    self_plugin: str | None,
    no_audit: bool,
    as_json: bool,
) -> None:
    """Check that no plugin in the reactor depends on a SNAPSHOT.

    Examples:

        snapguard check

        snapguard check --reactor path/to/pom.xml

        snapguard check --itest --self-plugin com.acme:release-plugin:1.0-SNAPSHOT
    """
    from snapguard.core.services.verdict import ReleaseBlocked
    from snapguard.core.use_cases.check import execute_check, prepare_check

    if as_json:
        quiet_console()

    result = prepare_check(
        config_path=ctx.obj.get("config_path"),
        reactor_path=Path(reactor_path) if reactor_path else None,
        integration_test=integration_test,
        self_plugin=self_plugin,
        audit=False if no_audit else None,
    )

    if result.error:
        if as_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            click.secho(f"❌ {result.error}", fg="red")
        sys.exit(EXIT_ERROR)

    blocked: ReleaseBlocked | None = None
    try:
        execute_check(result)
    except ReleaseBlocked as e:
        blocked = e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(EXIT_BLOCKED if blocked else 0)

    report = result.report
    assert report is not None

    if blocked is None:
        click.secho(
            f"✅ No SNAPSHOT plugin dependencies in {report.projects_scanned} project(s)",
            fg="green",
            bold=True,
        )
        return

    click.secho(f"❌ {blocked}", fg="red", bold=True)
    if not ctx.obj.get("quiet"):
        click.echo(
            f"   Projects: {len(report.violating_projects)}/{report.projects_scanned} affected | "
            f"Dependencies: {report.violation_count}"
        )
        for project in report.violating_projects:
            click.echo(f"     • {project.identity}")
    sys.exit(EXIT_BLOCKED)


@cli.command()
@click.option(
    "--reactor",
    "-r",
    "reactor_path",
    type=click.Path(exists=False),
    default=None,
    help="Root pom.xml, its directory, or a reactor descriptor.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def reactor(ctx: click.Context, reactor_path: str | None, as_json: bool) -> None:
    """List the reactor projects and their plugin surfaces."""
    from snapguard.core.use_cases.reactor import list_reactor

    if as_json:
        quiet_console()

    result = list_reactor(
        config_path=ctx.obj.get("config_path"),
        reactor_path=Path(reactor_path) if reactor_path else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(EXIT_ERROR if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(EXIT_ERROR)

    click.secho(f"\n📦 Reactor: {result.reactor_path}", fg="cyan", bold=True)
    click.echo(f"   Projects: {len(result.projects)}")
    click.echo()
    for summary in result.projects:
        click.echo(
            f"   • {summary.identity}  "
            f"(managed: {summary.managed_plugins}, direct: {summary.direct_plugins})"
        )
        if summary.profiles:
            click.echo(f"     profiles: {', '.join(summary.profiles)}")
    click.echo()


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate snapguard.yml."""
    from snapguard.core.use_cases.config_check import check_config

    if as_json:
        quiet_console()

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else EXIT_ERROR)

    if result.valid:
        assert result.settings is not None  # guaranteed when valid
        settings = result.settings
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Reactor: {settings.reactor}")
        click.echo(f"   Integration test: {'on' if settings.integration_test else 'off'}")
        click.echo(f"   Self plugin: {settings.self_plugin or '-'}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    cli()
