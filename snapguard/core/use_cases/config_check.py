"""
Config check use case — validate snapguard.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from snapguard.core.config.loader import ConfigError, find_settings_file, load_settings, settings_root
from snapguard.core.models.settings import Settings


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: Settings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "settings": self.settings.model_dump(mode="json") if self.settings else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate snapguard configuration and report issues.

    A missing snapguard.yml is valid (defaults apply) but produces a
    warning.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_settings_file()
        if config_path is None:
            result.warnings.append("No snapguard.yml found; using defaults.")
    result.config_path = config_path

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.settings = settings

    # Semantic checks
    reactor = settings_root(config_path) / settings.reactor
    if not reactor.exists():
        result.warnings.append(f"Reactor path does not exist: {settings.reactor}")

    if settings.integration_test and settings.self_plugin is None:
        result.warnings.append(
            "integration_test is enabled but self_plugin is not set; nothing will be exempted."
        )

    if settings.self_plugin is not None and not settings.self_plugin.version:
        result.warnings.append(
            f"self_plugin '{settings.self_plugin}' has no version; "
            "it only matches plugins declared without one."
        )

    result.valid = len(result.errors) == 0
    return result
