"""
Configuration loader — reads snapguard.yml into a Settings model.

The settings file is optional: without one, the check runs against
./pom.xml with integration-test mode off. Environment variables can
override the file, and CLI flags override both.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from snapguard.core.models.build import PluginIdentity
from snapguard.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
SETTINGS_FILE = "snapguard.yml"

# Environment overrides
ENV_ITEST = "SNAPGUARD_ITEST"
ENV_SELF_PLUGIN = "SNAPGUARD_SELF_PLUGIN"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when snapguard configuration is invalid or unreadable."""


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for snapguard.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to snapguard.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def is_truthy(value: str | None) -> bool:
    """Interpret an environment variable as a flag."""
    return value is not None and value.strip().lower() in _TRUTHY


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from snapguard.yml and apply environment overrides.

    Args:
        path: Explicit path to snapguard.yml. If None, searches upward;
            when nothing is found, defaults are used.
        env: Environment to read overrides from (default: os.environ).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            logger.debug("No %s found, using defaults", SETTINGS_FILE)
            return apply_env_overrides(Settings(), env)
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "snapguard" key or be flat
    if isinstance(data.get("snapguard"), dict):
        data = data["snapguard"]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid snapguard configuration in {path}: {e}") from e

    return apply_env_overrides(settings, env)


def apply_env_overrides(settings: Settings, env: Mapping[str, str] | None = None) -> Settings:
    """Return a copy of ``settings`` with SNAPGUARD_* variables applied."""
    if env is None:
        env = os.environ

    update: dict = {}
    if ENV_ITEST in env:
        update["integration_test"] = is_truthy(env[ENV_ITEST])
    if env.get(ENV_SELF_PLUGIN):
        try:
            update["self_plugin"] = PluginIdentity.parse(env[ENV_SELF_PLUGIN])
        except ValueError as e:
            raise ConfigError(f"Invalid {ENV_SELF_PLUGIN}: {e}") from e

    if not update:
        return settings
    logger.debug("Environment overrides: %s", sorted(update))
    return settings.model_copy(update=update)


def settings_root(settings_path: Path | None) -> Path:
    """Directory relative paths in the settings resolve against."""
    if settings_path is None:
        return Path.cwd()
    return settings_path.parent.resolve()
