"""
Settings loading for Oops.

Priority (later wins):
1. Defaults
2. Settings file ($XDG_CONFIG_HOME/oops/settings.yaml)
3. Environment variables (THEFUCK_* for compatibility, then OOPS_*)
4. CLI overrides
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from oops.config.constants import ENV_PREFIXES
from oops.config.models import Settings
from oops.core.exceptions import InvalidConfigError

SETTINGS_FILE_NAME = "settings.yaml"

SETTINGS_FILE_HEADER = """\
# Oops settings file
#
# See the project README for the list of available settings.
# Any value set here can be overridden with OOPS_* environment variables.
"""


def get_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the configuration directory, honoring XDG_CONFIG_HOME."""
    environ = os.environ if environ is None else environ
    xdg = environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "oops"


def get_settings_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the settings file path."""
    return get_config_dir(environ) / SETTINGS_FILE_NAME


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(":") if item.strip()]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_priority(value: str) -> Dict[str, int]:
    """Parse 'rule=num:rule=num' pairs, skipping malformed entries."""
    priority: Dict[str, int] = {}
    for part in _parse_list(value):
        name, sep, number = part.partition("=")
        if not sep or not name.strip():
            logger.warning(f"Ignoring malformed priority entry: {part!r}")
            continue
        try:
            priority[name.strip()] = int(number)
        except ValueError:
            logger.warning(f"Ignoring non-numeric priority for '{name.strip()}': {number!r}")
    return priority


def _parse_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "none"):
        return None
    return int(value)


# Environment suffix -> (settings field, parser)
_ENV_FIELDS: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "RULES": ("rules", _parse_list),
    "EXCLUDE_RULES": ("exclude_rules", _parse_list),
    "PRIORITY": ("priority", _parse_priority),
    "REQUIRE_CONFIRMATION": ("require_confirmation", _parse_bool),
    "WAIT_COMMAND": ("wait_command", float),
    "WAIT_SLOW_COMMAND": ("wait_slow_command", float),
    "NO_COLORS": ("no_colors", _parse_bool),
    "HISTORY_LIMIT": ("history_limit", _parse_optional_int),
    "ALTER_HISTORY": ("alter_history", _parse_bool),
    "SLOW_COMMANDS": ("slow_commands", _parse_list),
    "NUM_CLOSE_MATCHES": ("num_close_matches", int),
    "EXCLUDED_SEARCH_PATH_PREFIXES": ("excluded_search_path_prefixes", _parse_list),
    "DEBUG": ("debug", _parse_bool),
}


def load_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Read settings from environment variables.

    Invalid values are logged and skipped.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Dict of settings fields found in the environment
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    for prefix in ENV_PREFIXES:
        for suffix, (field_name, parser) in _ENV_FIELDS.items():
            raw = environ.get(prefix + suffix)
            if raw is None:
                continue
            try:
                values[field_name] = parser(raw)
            except ValueError:
                logger.warning(f"Invalid {prefix}{suffix} value: {raw!r}")
                continue
            logger.debug(f"{prefix}{suffix}: {values[field_name]!r}")

    return values


def load_from_file(path: Path) -> Dict[str, Any]:
    """
    Read settings from a YAML file.

    A missing, unreadable or malformed file yields no settings.

    Args:
        path: Settings file path

    Returns:
        Dict of settings fields found in the file
    """
    if not path.exists():
        logger.debug(f"Settings file not found at: {path}")
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Failed to load settings file {path}: {e}")
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings file {path}: expected a mapping")
        return {}
    return data


def build_settings(values: Mapping[str, Any]) -> Settings:
    """
    Validate raw values into a Settings snapshot.

    Raises:
        InvalidConfigError: If a value fails validation
    """
    try:
        return Settings(**values)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"]) or "settings"
        raise InvalidConfigError(key, error.get("input"), error["msg"]) from e


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    settings_path: Optional[Path] = None,
) -> Settings:
    """
    Load the settings snapshot for this run.

    Args:
        environ: Environment mapping (defaults to os.environ)
        overrides: Values from CLI flags, applied last
        settings_path: Settings file override (for testing)

    Returns:
        Frozen Settings
    """
    path = settings_path or get_settings_path(environ)
    values: Dict[str, Any] = {}
    values.update(load_from_file(path))
    values.update(load_from_env(environ))
    if overrides:
        values.update(overrides)
    return build_settings(values)


def ensure_settings_file(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Create a settings file with the defaults if none exists.

    Returns:
        Path of the settings file
    """
    path = get_settings_path(environ)
    if path.exists():
        return path

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        defaults = Settings().model_dump(mode="json")
        with open(path, "w") as f:
            f.write(SETTINGS_FILE_HEADER)
            f.write("\n")
            yaml.safe_dump(defaults, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        logger.warning(f"Could not create settings file {path}: {e}")
    return path
