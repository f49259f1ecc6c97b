"""
Oops Shells - Base shell interface.

A Shell knows how to install the oops alias, read recent history and
aliases, chain commands and record the chosen correction.
"""

from __future__ import annotations

import os
import shlex
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import ClassVar

from loguru import logger

from oops.core.exceptions import HistoryWriteError
from oops.utils.logger import log_prefix

POSIX_BUILTINS = frozenset({
    "alias", "bg", "bind", "break", "builtin", "case", "cd", "command", "compgen",
    "complete", "continue", "declare", "dirs", "disown", "echo", "enable", "eval", "exec",
    "exit", "export", "fc", "fg", "getopts", "hash", "help", "history", "if", "jobs",
    "kill", "let", "local", "logout", "popd", "printf", "pushd", "pwd", "read", "readonly",
    "return", "set", "shift", "shopt", "source", "suspend", "test", "times", "trap",
    "type", "typeset", "ulimit", "umask", "unalias", "unset", "until", "wait", "while",
})


class Shell(ABC):
    """
    Base class for supported shells.

    Args:
        environ: Process environment to read shell signals from
            (TF_HISTORY, TF_SHELL_ALIASES, HISTFILE...). Defaults to
            os.environ.
    """

    name: ClassVar[str] = ""
    builtins: ClassVar[frozenset[str]] = POSIX_BUILTINS

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    @abstractmethod
    def app_alias(self, alias_name: str) -> str:
        """Shell source defining the alias function that invokes oops."""

    # =========================================================================
    # History
    # =========================================================================

    def get_history(self, limit: int | None = None) -> list[str]:
        """
        Recent commands, oldest first.

        TF_HISTORY exported by the alias is preferred over the history
        file, which may lag behind the in-memory history.

        Args:
            limit: Keep only the most recent entries.
        """
        history = self._history_from_env()
        if not history:
            history = self._history_from_file()
        if limit is not None:
            history = history[-limit:] if limit > 0 else []
        return history

    def _history_from_env(self) -> list[str]:
        raw = self.environ.get("TF_HISTORY", "")
        return [line.strip() for line in raw.splitlines() if line.strip()]

    def _history_from_file(self) -> list[str]:
        file_name = self.get_history_file_name()
        if not file_name:
            return []
        path = Path(file_name).expanduser()
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.debug(f"Cannot read history file {path}: {e}")
            return []
        return [
            script
            for script in (self._script_from_history(line) for line in lines)
            if script
        ]

    def _script_from_history(self, line: str) -> str:
        """Extract the command from one history file line ('' to skip)."""
        return line.strip()

    def get_history_file_name(self) -> str | None:
        """Path of the on-disk history, if the shell has one."""
        return None

    def put_to_history(self, command: str) -> None:
        """
        Record a command in the shell's history.

        Shells whose alias already records the command do nothing here.

        Raises:
            HistoryWriteError: If the history file cannot be written.
        """

    def _append_to_history_file(self, entry: str) -> None:
        file_name = self.get_history_file_name()
        if not file_name:
            return
        path = Path(file_name).expanduser()
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(entry)
        except OSError as e:
            raise HistoryWriteError(self.name, str(path), str(e)) from e
        logger.debug(f"{log_prefix('📜')} Appended to {path}")

    # =========================================================================
    # Aliases
    # =========================================================================

    def get_aliases(self) -> dict[str, str]:
        """Alias name to expansion, from TF_SHELL_ALIASES."""
        raw = self.environ.get("TF_SHELL_ALIASES", "")
        aliases: dict[str, str] = {}
        for line in raw.splitlines():
            parsed = self._parse_alias(line)
            if parsed:
                aliases[parsed[0]] = parsed[1]
        return aliases

    def _parse_alias(self, line: str) -> tuple[str, str] | None:
        """Parse `alias name='value'` or `name=value`."""
        line = line.strip()
        if line.startswith("alias "):
            line = line[len("alias "):]
        name, sep, value = line.partition("=")
        name = name.strip()
        if not sep or not name or " " in name:
            return None
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        return name, value

    def from_shell(self, command_script: str) -> str:
        """Expand a leading alias so the command can run outside the shell."""
        binary, _, rest = command_script.partition(" ")
        expansion = self.get_aliases().get(binary)
        if not expansion or expansion == binary:
            return command_script
        logger.debug(f"Expanded alias {binary!r} to {expansion!r}")
        return f"{expansion} {rest}" if rest else expansion

    # =========================================================================
    # Command composition
    # =========================================================================

    def and_(self, *commands: str) -> str:
        """Run each command only if the previous one succeeded."""
        return " && ".join(commands)

    def or_(self, *commands: str) -> str:
        """Run each command only if the previous one failed."""
        return " || ".join(commands)

    def quote(self, value: str) -> str:
        return shlex.quote(value)

    def split_command(self, command: str) -> list[str]:
        try:
            return shlex.split(command)
        except ValueError:
            return command.split()

    def builtin_commands(self) -> frozenset[str]:
        """Commands built into the shell, never found on PATH."""
        return self.builtins

    def __repr__(self) -> str:
        return f"<Shell {self.name}>"
