"""
Oops Shells - Tcsh (and csh).
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping

from loguru import logger

from oops.shells.base import Shell

_TCSH_QUERY_TIMEOUT = 2.0


class Tcsh(Shell):
    """TENEX C shell. Aliases are listed with `tcsh -ic alias`."""

    name = "tcsh"
    builtins = frozenset({
        "alias", "bg", "bindkey", "break", "cd", "chdir", "continue", "dirs",
        "echo", "eval", "exec", "exit", "fg", "foreach", "history", "jobs",
        "kill", "limit", "logout", "popd", "pushd", "rehash", "repeat", "set",
        "setenv", "source", "switch", "umask", "unalias", "unset", "unsetenv",
        "where", "which", "while",
    })

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        super().__init__(environ)
        self._aliases: dict[str, str] | None = None

    def app_alias(self, alias_name: str) -> str:
        return (
            f"alias {alias_name} 'setenv TF_SHELL tcsh && setenv TF_ALIAS {alias_name} && "
            "set fucked_cmd=`history -h 2 | head -n 1` && "
            "eval `oops ${fucked_cmd}`'\n"
        )

    def get_aliases(self) -> dict[str, str]:
        if self._aliases is None:
            try:
                result = subprocess.run(
                    ["tcsh", "-ic", "alias"],
                    stdout=subprocess.PIPE,
                    stderr=subprocess.DEVNULL,
                    encoding="utf-8",
                    errors="replace",
                    timeout=_TCSH_QUERY_TIMEOUT,
                )
                output = result.stdout
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.debug(f"Cannot query tcsh aliases: {e}")
                output = ""
            self._aliases = dict(
                parsed
                for parsed in (self._parse_alias(line) for line in output.splitlines())
                if parsed
            )
        return self._aliases

    def _parse_alias(self, line: str) -> tuple[str, str] | None:
        # "ll\t(ls -la)", multi-word values are parenthesized
        name, sep, value = line.partition("\t")
        if not sep or not name:
            return None
        value = value.strip()
        if value.startswith("(") and value.endswith(")"):
            value = value[1:-1]
        return name.strip(), value

    def get_history_file_name(self) -> str:
        return self.environ.get("HISTFILE") or "~/.history"

    def _script_from_history(self, line: str) -> str:
        # Timestamp lines: "#+1700000000"
        if line.startswith("#+"):
            return ""
        return line.strip()

    def put_to_history(self, command: str) -> None:
        self._append_to_history_file(f"#+{int(time.time())}\n{command}\n")
