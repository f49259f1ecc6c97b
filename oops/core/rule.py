"""
Oops Core - Rule interface.

A rule is a stateless unit of correction logic: a match predicate, a
candidate generator and some ranking metadata. Rules only ever read the
captured command and the shared RuleContext.
"""

from __future__ import annotations

import ntpath
import posixpath
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, ClassVar

from oops.core.types import DEFAULT_PRIORITY, CapturedCommand

if TYPE_CHECKING:
    from oops.config.models import Settings
    from oops.shells.base import Shell
    from oops.utils.executables import ExecutableCache


@dataclass(frozen=True)
class RuleContext:
    """Read-only collaborators shared by every rule of one process run."""

    settings: Settings
    executables: ExecutableCache
    shell: Shell

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        executables: ExecutableCache | None = None,
        shell: Shell | None = None,
    ) -> RuleContext:
        """Build a context, filling missing parts with defaults."""
        from oops.config.models import Settings
        from oops.shells import get_shell_by_name
        from oops.utils.executables import ExecutableCache

        settings = settings or Settings()
        return cls(
            settings=settings,
            executables=executables or ExecutableCache(
                excluded_prefixes=settings.excluded_search_path_prefixes
            ),
            shell=shell or get_shell_by_name("bash"),
        )


class Rule(ABC):
    """
    Base class for correction rules.

    Subclasses set the class attributes and implement is_match and
    get_new_command. Override side_effect when the rule must act on the
    environment after the user picked one of its candidates.

    Example:
        >>> class SudoRule(Rule):
        ...     name = "sudo"
        ...     priority = 50
        ...
        ...     def is_match(self, command):
        ...         return "Permission denied" in command.output
        ...
        ...     def get_new_command(self, command):
        ...         return [f"sudo {command.script}"]
    """

    name: ClassVar[str] = ""
    priority: ClassVar[int] = DEFAULT_PRIORITY
    enabled_by_default: ClassVar[bool] = True
    requires_output: ClassVar[bool] = True

    def __init__(self, context: RuleContext | None = None) -> None:
        self.context = context or RuleContext.create()

    @property
    def settings(self) -> Settings:
        return self.context.settings

    @abstractmethod
    def is_match(self, command: CapturedCommand) -> bool:
        """Return True if this rule can correct the command."""

    @abstractmethod
    def get_new_command(self, command: CapturedCommand) -> list[str]:
        """Return candidate scripts, best first. Only called after a match."""

    def side_effect(self, old_command: CapturedCommand, new_script: str) -> None:
        """Act on the environment once new_script was chosen. No-op by default."""

    @property
    def has_side_effect(self) -> bool:
        return type(self).side_effect is not Rule.side_effect

    def __repr__(self) -> str:
        return f"<Rule {self.name} priority={self.priority}>"


def program_name(first_part: str) -> str:
    """Bare program name: no directory, no .exe suffix."""
    name = ntpath.basename(posixpath.basename(first_part))
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name


def is_app(command: CapturedCommand, *app_names: str, at_least: int = 0) -> bool:
    """
    Check whether the command invokes one of the given programs.

    Paths such as /usr/bin/git and git.exe count as git.

    Args:
        command: Captured command.
        *app_names: Accepted program names.
        at_least: Minimum number of arguments after the program.
    """
    parts = command.script_parts
    if len(parts) <= at_least:
        return False
    return program_name(parts[0]) in app_names


def for_app(*app_names: str, at_least: int = 0):
    """
    Decorator restricting a rule's is_match to the given programs.

    Usage:
        class GitPush(Rule):
            @for_app("git")
            def is_match(self, command):
                ...
    """
    def decorator(is_match: Callable[[Rule, CapturedCommand], bool]):
        @wraps(is_match)
        def wrapper(self: Rule, command: CapturedCommand) -> bool:
            if not is_app(command, *app_names, at_least=at_least):
                return False
            return is_match(self, command)
        return wrapper
    return decorator
