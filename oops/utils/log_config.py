"""
Logging configuration for Oops.

Provides:
- Log directory management
- Log rotation and retention
- Verbosity levels
"""
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional


class LogLevel(str, Enum):
    """Log verbosity levels."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Parse log level from string (case-insensitive)."""
        level = level.upper()
        try:
            return cls(level)
        except ValueError:
            aliases = {
                "WARN": cls.WARNING,
                "ERR": cls.ERROR,
                "FATAL": cls.CRITICAL,
            }
            if level in aliases:
                return aliases[level]
            raise ValueError(f"Unknown log level: {level}") from None


def default_log_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """Logs live next to the settings file."""
    environ = os.environ if environ is None else environ
    xdg = environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return str(base / "oops" / "logs")


@dataclass
class LogConfig:
    """
    Configuration for Oops logging.

    Attributes:
        log_dir: Directory for log files (default: ~/.config/oops/logs)
        app_log_name: Log filename
        console_level: Log level for stderr output in debug mode
        file_level: Log level for file output
        rotation_size: Max size before rotation (e.g., "1 MB")
        retention: How long to keep old logs (e.g., "1 week")
        compression: Compress rotated files (zip, gz, or None)
        file_enabled: Write the log file at all
    """
    log_dir: str = ""
    app_log_name: str = "oops.log"

    console_level: str = "DEBUG"
    file_level: str = "WARNING"

    rotation_size: str = "1 MB"
    retention: str = "1 week"
    compression: Optional[str] = "gz"

    file_enabled: bool = True

    _VALID_COMPRESSION: ClassVar[frozenset] = frozenset({"zip", "gz", None})

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.log_dir:
            self.log_dir = default_log_dir()

        try:
            LogLevel.from_string(self.console_level)
        except ValueError as e:
            raise ValueError(f"Invalid console_level: {e}") from e

        try:
            LogLevel.from_string(self.file_level)
        except ValueError as e:
            raise ValueError(f"Invalid file_level: {e}") from e

        if self.compression not in self._VALID_COMPRESSION:
            raise ValueError(
                f"compression must be one of {set(self._VALID_COMPRESSION)}, "
                f"got: {self.compression!r}"
            )

        self._validate_size_format(self.rotation_size)

    def _validate_size_format(self, size_str: str) -> None:
        """Validate size format like '10 MB' or '100 KB'."""
        parts = size_str.strip().split()
        if len(parts) != 2:
            raise ValueError(f"Invalid size format: {size_str!r} (expected: '10 MB')")

        try:
            value = float(parts[0])
        except ValueError as e:
            raise ValueError(f"Invalid size value: {parts[0]!r}") from e
        if value <= 0:
            raise ValueError(f"Size must be positive: {size_str!r}")

        valid_units = {"B", "KB", "MB", "GB"}
        if parts[1].upper() not in valid_units:
            raise ValueError(f"Invalid size unit: {parts[1]!r} (valid: {valid_units})")

    @property
    def log_path(self) -> Path:
        """Get the full path to the log file."""
        return Path(self.log_dir) / self.app_log_name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Create from dictionary, ignoring unknown keys."""
        known_fields = {
            "log_dir", "app_log_name", "console_level", "file_level",
            "rotation_size", "retention", "compression", "file_enabled",
        }
        return cls(**{k: v for k, v in data.items() if k in known_fields})


_ENV_MAPPINGS = {
    "OOPS_LOG_DIR": "log_dir",
    "OOPS_LOG_LEVEL": "console_level",
    "OOPS_LOG_FILE_LEVEL": "file_level",
    "OOPS_LOG_ROTATION_SIZE": "rotation_size",
    "OOPS_LOG_RETENTION": "retention",
    "OOPS_LOG_COMPRESSION": "compression",
    "OOPS_LOG_FILE": "file_enabled",
}


def load_log_config(environ: Optional[Mapping[str, str]] = None) -> LogConfig:
    """
    Load logging configuration from OOPS_LOG_* environment variables.

    Unset variables keep their defaults.
    """
    environ = os.environ if environ is None else environ
    config_data: Dict[str, Any] = {}

    for env_var, config_key in _ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if value is None:
            continue
        if config_key == "file_enabled":
            config_data[config_key] = value.lower() in ("1", "true", "yes", "on")
        elif config_key == "compression":
            config_data[config_key] = value if value.lower() not in ("none", "") else None
        else:
            config_data[config_key] = value

    if "log_dir" not in config_data:
        config_data["log_dir"] = default_log_dir(environ)

    return LogConfig.from_dict(config_data)
