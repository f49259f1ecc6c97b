"""
Oops Shells - Fish.

Fish keeps functions and aliases out of the environment, so they are
listed by asking an interactive fish.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping

from loguru import logger

from oops.config.constants import ARGUMENT_PLACEHOLDER
from oops.shells.base import Shell

# Fish wraps these in functions of the same name, expanding them is noise
DEFAULT_OVERRIDDEN_ALIASES = ("cd", "grep", "ls", "man", "open")

_FISH_QUERY_TIMEOUT = 2.0


class Fish(Shell):
    """Friendly interactive shell."""

    name = "fish"
    builtins = frozenset({
        "abbr", "and", "begin", "bg", "bind", "block", "break", "builtin", "case",
        "cd", "command", "commandline", "complete", "contains", "continue", "count",
        "echo", "else", "emit", "end", "eval", "exec", "exit", "fg", "for",
        "function", "functions", "history", "if", "jobs", "math", "not", "or",
        "printf", "pwd", "random", "read", "return", "set", "source", "status",
        "string", "switch", "test", "type", "ulimit", "wait", "while",
    })

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        super().__init__(environ)
        self._aliases: dict[str, str] | None = None

    def app_alias(self, alias_name: str) -> str:
        return f"""function {alias_name} -d "Correct your previous console command"
    set -l fucked_up_command $history[1]
    env TF_SHELL=fish TF_ALIAS={alias_name} PYTHONIOENCODING=utf-8 oops $fucked_up_command {ARGUMENT_PLACEHOLDER} $argv | read -l unfucked_command
    if [ "$unfucked_command" != "" ]
        eval $unfucked_command
        builtin history delete --exact --case-sensitive -- $fucked_up_command
        builtin history merge
    end
end
"""

    def get_overridden_aliases(self) -> list[str]:
        """Aliases never expanded: the defaults plus TF_OVERRIDDEN_ALIASES."""
        raw = (
            self.environ.get("THEFUCK_OVERRIDDEN_ALIASES")
            or self.environ.get("TF_OVERRIDDEN_ALIASES")
            or ""
        )
        overridden = set(DEFAULT_OVERRIDDEN_ALIASES)
        overridden.update(alias.strip() for alias in raw.split(",") if alias.strip())
        return sorted(overridden)

    def get_aliases(self) -> dict[str, str]:
        """Fish functions and aliases, minus the overridden ones. Cached."""
        if self._aliases is None:
            overridden = set(self.get_overridden_aliases())
            aliases = {
                name: name
                for name in self._run_fish("functions").splitlines()
                if name.strip() and name.strip() not in overridden
            }
            aliases.update(
                (name, value)
                for name, value in self._parse_fish_aliases(self._run_fish("alias"))
                if name not in overridden
            )
            self._aliases = aliases
        return self._aliases

    def _run_fish(self, command: str) -> str:
        try:
            result = subprocess.run(
                ["fish", "-ic", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                encoding="utf-8",
                errors="replace",
                timeout=_FISH_QUERY_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Cannot query fish {command}: {e}")
            return ""
        return result.stdout.strip()

    @staticmethod
    def _parse_fish_aliases(output: str) -> list[tuple[str, str]]:
        parsed = []
        for line in output.splitlines():
            line = line.strip()
            if line.startswith("alias "):
                line = line[len("alias "):]
            for separator in (" ", "="):
                name, sep, value = line.partition(separator)
                if sep:
                    value = value.strip()
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                        value = value[1:-1]
                    parsed.append((name, value))
                    break
        return parsed

    def from_shell(self, command_script: str) -> str:
        binary = command_script.partition(" ")[0]
        # A function wrapping a real program is run through fish
        if self.get_aliases().get(binary) == binary:
            return f"fish -ic {self.quote(command_script)}"
        return super().from_shell(command_script)

    def get_history_file_name(self) -> str:
        data_home = self.environ.get("XDG_DATA_HOME") or "~/.local/share"
        return f"{data_home}/fish/fish_history"

    def _script_from_history(self, line: str) -> str:
        # YAML-ish records: "- cmd: git status" followed by "  when: 1700000000"
        if line.startswith("- cmd: "):
            return line[len("- cmd: "):].strip()
        return ""

    def put_to_history(self, command: str) -> None:
        self._append_to_history_file(f"- cmd: {command}\n  when: {int(time.time())}\n")

    def and_(self, *commands: str) -> str:
        return "; and ".join(commands)

    def or_(self, *commands: str) -> str:
        return "; or ".join(commands)
