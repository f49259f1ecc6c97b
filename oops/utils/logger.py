"""
Centralized logging for Oops.

stdout is reserved for the corrected command that the shell alias
evaluates, so nothing is ever logged there:
- FILE: warnings and errors go to ~/.config/oops/logs/oops.log (rotated).
- CONSOLE: with --debug, everything is logged to stderr.

Configuration is read from OOPS_LOG_* environment variables.
See log_config.py for details.
"""
import os
import sys
from typing import Optional

from loguru import logger

from oops.utils.log_config import LogConfig, load_log_config
from oops.utils.security import redact_sensitive_info


def use_emoji_logs() -> bool:
    """
    Check if emoji prefixes should be used in log messages.

    Returns True unless USE_EMOJI_LOGS environment variable is set to "0" or "false".
    """
    value = os.environ.get("USE_EMOJI_LOGS", "1").lower()
    return value not in ("0", "false", "no", "off")


# Mapping of emoji prefixes to ASCII alternatives
_EMOJI_TO_ASCII = {
    "⚠️": "[WARN]",
    "⏱️": "[TIMEOUT]",
    "✅": "[OK]",
    "❌": "[ERROR]",
    "🐚": "[SHELL]",
    "📁": "[FILE]",
    "🔍": "[SEARCH]",
    "📜": "[HISTORY]",
}


def log_prefix(emoji: str) -> str:
    """
    Return the appropriate log prefix based on USE_EMOJI_LOGS setting.

    Args:
        emoji: The emoji to use when emoji logs are enabled.

    Returns:
        The emoji if USE_EMOJI_LOGS is enabled, otherwise the ASCII equivalent
        (or empty string if no mapping exists).
    """
    if use_emoji_logs():
        return emoji
    return _EMOJI_TO_ASCII.get(emoji, "")


def setup_logger(debug: bool = False, config: Optional[LogConfig] = None) -> None:
    """
    Configure loguru sinks for one run.

    Args:
        debug: Log DEBUG+ to stderr
        config: Optional LogConfig override (for testing)
    """
    logger.remove()

    if config is None:
        config = load_log_config()

    if config.file_enabled:
        try:
            config.log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # A read-only home must not stop us from fixing the command
            print(f"oops: cannot create log directory {config.log_dir}: {e}", file=sys.stderr)
        else:
            logger.add(
                config.log_path,
                rotation=config.rotation_size,
                retention=config.retention,
                level=config.file_level,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
                compression=config.compression,
            )

    if debug:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            ),
            level=config.console_level,
            colorize=True,
        )

    def redaction_filter(record):
        """Redact sensitive info from all logs."""
        record["message"] = redact_sensitive_info(record["message"])

    logger.configure(patcher=redaction_filter)
