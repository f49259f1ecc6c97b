"""
Oops Executors - Re-running failed commands.
"""

from oops.executors.capture import capture, is_slow_command, timeout_for

__all__ = ["capture", "is_slow_command", "timeout_for"]
