"""
Oops Core - Captured and corrected command values.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property

from loguru import logger

from oops.core.exceptions import SideEffectError

DEFAULT_PRIORITY = 1000

SideEffect = Callable[["CapturedCommand", str], None]


@dataclass(frozen=True)
class CapturedCommand:
    """
    A failed command and the output it produced.

    Attributes:
        script: The command exactly as the user typed it.
        output: Combined stderr and stdout, possibly empty.
        exit_code: Exit status of the re-executed process, None when the
            output was supplied rather than captured.
    """

    script: str
    output: str = ""
    exit_code: int | None = None

    @cached_property
    def script_parts(self) -> list[str]:
        """Script split with shell lexing rules, whitespace split on bad quoting."""
        try:
            return shlex.split(self.script)
        except ValueError:
            logger.debug(f"Can't split command script {self.script!r}, using whitespace")
            return self.script.split()

    def with_script(self, script: str) -> CapturedCommand:
        """Return a copy with another script and the same output."""
        return CapturedCommand(script=script, output=self.output, exit_code=self.exit_code)


@dataclass(frozen=True)
class CorrectedCommand:
    """A candidate replacement for a failed command."""

    script: str
    priority: int = DEFAULT_PRIORITY
    side_effect: SideEffect | None = field(default=None, compare=False, repr=False)
    rule_name: str = field(default="", compare=False)

    def run_side_effect(self, old_command: CapturedCommand) -> None:
        """
        Run the originating rule's side effect, if any.

        Args:
            old_command: The original failed command.

        Raises:
            SideEffectError: If the side effect raised.
        """
        if self.side_effect is None:
            return
        logger.debug(f"Running side effect of '{self.rule_name}' for {self.script!r}")
        try:
            self.side_effect(old_command, self.script)
        except Exception as e:
            raise SideEffectError(self.rule_name, e) from e
