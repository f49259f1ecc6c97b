"""
Oops Rules - Unknown program names.

Suggests executables on PATH and programs from recent history that look
like the one the shell could not find.
"""

from __future__ import annotations

import re

from loguru import logger

from oops.config.constants import OWN_EXECUTABLES
from oops.core.rule import Rule
from oops.core.types import CapturedCommand
from oops.utils.fuzzy import get_close_matches

NOT_FOUND_MARKERS = (
    "command not found",
    "not found",
    "is not recognized as an internal or external command",
    "is not recognized as the name of a cmdlet",
    "unknown command",
)

# Program name as reported by the shell, when it differs from the first word
_REPORTED_PROGRAM = (
    re.compile(r"^(?:\S+: )?([^:\s]+): command not found", re.MULTILINE),
    re.compile(r"command not found: (\S+)"),
    re.compile(r"The term '([^']+)' is not recognized"),
    re.compile(r"'([^']+)' is not recognized"),
)

_SHELL_NAMES = frozenset({"bash", "zsh", "fish", "sh", "tcsh", "powershell", "pwsh", "cmd"})


def _reported_program(output: str) -> str | None:
    for pattern in _REPORTED_PROGRAM:
        match = pattern.search(output)
        if match and match.group(1) not in _SHELL_NAMES:
            return match.group(1)
    return None


class NoCommandRule(Rule):
    """Fix the program name of a command the shell could not find."""

    name = "no_command"
    priority = 500

    def is_match(self, command: CapturedCommand) -> bool:
        parts = command.script_parts
        if not parts:
            return False
        output = command.output.lower()
        if not any(marker in output for marker in NOT_FOUND_MARKERS):
            return False
        return not self.context.executables.exists(parts[0])

    def _history_programs(self) -> list[str]:
        alias = self.context.shell.environ.get("TF_ALIAS", "")
        programs: list[str] = []
        for line in reversed(self.context.shell.get_history(self.settings.history_limit)):
            program = line.split(maxsplit=1)[0] if line.strip() else ""
            if program and program not in OWN_EXECUTABLES and program != alias:
                programs.append(program)
        return programs

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        misspelled = command.script_parts[0]
        target = _reported_program(command.output) or misspelled

        # Recent history first so ties favour what the user actually runs
        pool = self._history_programs() + sorted(self.context.executables.all_executables())
        matches = get_close_matches(target, pool, n=self.settings.num_close_matches)
        logger.debug(f"Close matches for {target!r}: {matches}")

        script = command.script.strip()
        return [script.replace(misspelled, match, 1) for match in matches if match != misspelled]
