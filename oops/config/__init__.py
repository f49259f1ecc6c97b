"""
Oops Config - Configuration management.
"""

from oops.config.loader import (
    ensure_settings_file,
    get_config_dir,
    get_settings_path,
    load_settings,
)
from oops.config.models import ALL_RULES, Settings

__all__ = [
    "ALL_RULES",
    "Settings",
    "ensure_settings_file",
    "get_config_dir",
    "get_settings_path",
    "load_settings",
]
