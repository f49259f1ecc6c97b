"""
Oops Shells - Bash.
"""

from __future__ import annotations

from oops.config.constants import ARGUMENT_PLACEHOLDER
from oops.shells.base import Shell


class Bash(Shell):
    """GNU Bash. The alias records the correction with `history -s`."""

    name = "bash"

    def app_alias(self, alias_name: str) -> str:
        return f"""function {alias_name} () {{
    TF_PYTHONIOENCODING=$PYTHONIOENCODING;
    export TF_SHELL=bash;
    export TF_ALIAS={alias_name};
    export TF_SHELL_ALIASES=$(alias);
    export TF_HISTORY=$(fc -ln -10);
    export PYTHONIOENCODING=utf-8;
    TF_CMD=$(
        oops {ARGUMENT_PLACEHOLDER} "$@"
    ) && eval "$TF_CMD";
    unset TF_HISTORY;
    export PYTHONIOENCODING=$TF_PYTHONIOENCODING;
    history -s $TF_CMD;
}}
"""

    def get_history_file_name(self) -> str:
        return self.environ.get("HISTFILE") or "~/.bash_history"
