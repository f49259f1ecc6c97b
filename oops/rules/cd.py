"""
Oops Rules - cd mistakes.
"""

from __future__ import annotations

import re

from oops.core.rule import Rule
from oops.core.types import CapturedCommand

MISSING_DIRECTORY_MARKERS = (
    "no such file or directory",
    "not a directory",
    "does not exist",
    "cannot find path",
    "the system cannot find the path",
)

_CD_DOTS = re.compile(r"^cd(\.+.*)$")


class CdParentRule(Rule):
    """`cd..` is `cd ..` without the space."""

    name = "cd_parent"
    priority = 100
    requires_output = False

    def is_match(self, command: CapturedCommand) -> bool:
        return bool(_CD_DOTS.match(command.script.strip()))

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        match = _CD_DOTS.match(command.script.strip())
        return [f"cd {match.group(1)}"]


class CdMkdirRule(Rule):
    """Create a missing directory, then enter it."""

    name = "cd_mkdir"
    priority = 200

    def is_match(self, command: CapturedCommand) -> bool:
        parts = command.script_parts
        if len(parts) < 2 or parts[0] != "cd":
            return False
        output = command.output.lower()
        return any(marker in output for marker in MISSING_DIRECTORY_MARKERS)

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        shell = self.context.shell
        directory = shell.quote(" ".join(command.script_parts[1:]))
        return [shell.and_(f"mkdir -p {directory}", f"cd {directory}")]
