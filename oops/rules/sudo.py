"""
Oops Rules - Retry with sudo on permission errors.
"""

from __future__ import annotations

from oops.core.rule import Rule, program_name
from oops.core.types import CapturedCommand

PERMISSION_PATTERNS = (
    "permission denied",
    "eacces",
    "operation not permitted",
    "you cannot perform this operation unless you are root",
    "must be root",
    "need to be root",
    "needs to be run as root",
    "requires superuser privileges",
    "requires root",
    "access denied",
    "must have root privileges",
    "this operation requires root",
    "unable to write",
    "read-only file system",
    "only root can",
    "must be superuser",
    "you need root privileges",
    "insufficient permissions",
    "are you root?",
    "please run as root",
    "not allowed to perform this operation",
)

# Already privileged or a privilege tool of its own
EXCLUDED_PROGRAMS = frozenset({"sudo", "su", "pkexec", "doas", "runas"})


class SudoRule(Rule):
    """Prefix the command with sudo when it failed for lack of privileges."""

    name = "sudo"
    priority = 50

    def is_match(self, command: CapturedCommand) -> bool:
        parts = command.script_parts
        if parts and program_name(parts[0]).lower() in EXCLUDED_PROGRAMS:
            return False
        if parts and parts[0] in self.context.shell.builtin_commands():
            return False
        output = command.output.lower()
        return any(pattern in output for pattern in PERMISSION_PATTERNS)

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        # Keep the caller's environment when the command expands variables
        if "$" in command.script:
            return [f"sudo -E {command.script}"]
        if "&&" in command.script:
            return [f"sudo sh -c {self.context.shell.quote(command.script)}"]
        return [f"sudo {command.script}"]
