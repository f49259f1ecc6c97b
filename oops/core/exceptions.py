"""
Core Exceptions - Unified error hierarchy for Oops.

Capture errors propagate to the caller, rule errors stay inside the
Corrector, history and side-effect errors are reported and ignored.
"""


class OopsError(Exception):
    """Base exception for all Oops errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | {self.details}"
        return self.message


# =============================================================================
# Execution Errors
# =============================================================================

class ExecutionError(OopsError):
    """Re-running the failed command did not produce a captured command."""
    pass


class CaptureSpawnError(ExecutionError):
    """The shell could not start the command."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"Failed to execute command: {reason}",
            {"command": command, "reason": reason}
        )
        self.command = command
        self.reason = reason


class CaptureTimeoutError(ExecutionError):
    """Command did not exit within its timeout tier and was killed."""

    def __init__(self, command: str, timeout_seconds: float):
        super().__init__(
            f"Command timed out after {timeout_seconds:g}s",
            {"command": command, "timeout": timeout_seconds}
        )
        self.command = command
        self.timeout_seconds = timeout_seconds


class EmptyCommandError(OopsError):
    """There is no command to correct."""

    def __init__(self):
        super().__init__("Empty command, nothing to fix")


# =============================================================================
# Rule Errors
# =============================================================================

class RuleEvaluationError(OopsError):
    """A rule raised while matching or generating candidates.

    Never escapes the Corrector: the rule is treated as not matching.
    """

    def __init__(self, rule_name: str, stage: str, original_error: Exception):
        super().__init__(
            f"Rule '{rule_name}' failed during {stage}: {original_error}",
            {
                "rule": rule_name,
                "stage": stage,
                "original_error_type": type(original_error).__name__,
            }
        )
        self.rule_name = rule_name
        self.stage = stage
        self.original_error = original_error


class SideEffectError(OopsError):
    """A rule side effect failed after the user picked its candidate."""

    def __init__(self, rule_name: str, original_error: Exception):
        super().__init__(
            f"Side effect of rule '{rule_name}' failed: {original_error}",
            {"rule": rule_name, "original_error_type": type(original_error).__name__}
        )
        self.rule_name = rule_name
        self.original_error = original_error


# =============================================================================
# Shell Errors
# =============================================================================

class HistoryWriteError(OopsError):
    """Appending to the shell history store failed."""

    def __init__(self, shell: str, history_file: str | None, reason: str):
        super().__init__(
            f"Could not write {shell} history: {reason}",
            {"shell": shell, "history_file": history_file}
        )
        self.shell = shell
        self.history_file = history_file


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(OopsError):
    """Configuration error."""
    pass


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    def __init__(self, key: str, value: object, reason: str):
        super().__init__(
            f"Invalid value for '{key}': {reason}",
            {"key": key, "value": repr(value)}
        )
        self.key = key
        self.value = value
