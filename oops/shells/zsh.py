"""
Oops Shells - Zsh.
"""

from __future__ import annotations

from oops.config.constants import ARGUMENT_PLACEHOLDER
from oops.shells.base import POSIX_BUILTINS, Shell


class Zsh(Shell):
    """Z shell. The alias records the correction with `print -s`."""

    name = "zsh"
    builtins = POSIX_BUILTINS | frozenset({
        "autoload", "bindkey", "emulate", "print", "rehash", "setopt",
        "unsetopt", "whence", "where", "zle", "zmodload", "zstyle",
    })

    def app_alias(self, alias_name: str) -> str:
        return f"""{alias_name} () {{
    TF_PYTHONIOENCODING=$PYTHONIOENCODING;
    export TF_SHELL=zsh;
    export TF_ALIAS={alias_name};
    TF_SHELL_ALIASES=$(alias);
    export TF_SHELL_ALIASES;
    TF_HISTORY="$(fc -ln -10)";
    export TF_HISTORY;
    export PYTHONIOENCODING=utf-8;
    TF_CMD=$(
        oops {ARGUMENT_PLACEHOLDER} $@
    ) && eval $TF_CMD;
    unset TF_HISTORY;
    export PYTHONIOENCODING=$TF_PYTHONIOENCODING;
    test -n "$TF_CMD" && print -s $TF_CMD;
}}
"""

    def get_history_file_name(self) -> str:
        return self.environ.get("HISTFILE") or "~/.zsh_history"

    def _script_from_history(self, line: str) -> str:
        # Extended history: ": 1700000000:0;git status"
        if line.startswith(": ") and ";" in line:
            return line.split(";", 1)[1].strip()
        return line.strip()
