"""
Oops Rules - Common program name typos.
"""

from __future__ import annotations

from oops.core.rule import Rule, for_app
from oops.core.types import CapturedCommand

NOT_FOUND_MARKERS = ("command not found", "not recognized", "not found", "no such file or directory")

# program -> replacements, in preference order
PYTHON_ALTERNATIVES = {
    "python": ("python3", "python2"),
    "python2": ("python3", "python"),
    "python3": ("python",),
    "pip": ("pip3", "pip2"),
    "pip2": ("pip3", "pip"),
    "pip3": ("pip",),
}


class SlLsRule(Rule):
    """`sl` is almost always a mistyped `ls`."""

    name = "sl_ls"
    priority = 100
    requires_output = False

    def is_match(self, command: CapturedCommand) -> bool:
        parts = command.script_parts
        return bool(parts) and parts[0] == "sl"

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        script = command.script.strip()
        return ["ls" + script[len("sl"):]]


class PythonCommandRule(Rule):
    """Switch between python/python3 and pip/pip3 when one is missing."""

    name = "python_command"
    priority = 150

    @for_app(*PYTHON_ALTERNATIVES)
    def is_match(self, command: CapturedCommand) -> bool:
        output = command.output.lower()
        return any(marker in output for marker in NOT_FOUND_MARKERS)

    def get_new_command(self, command: CapturedCommand) -> list[str]:
        program = command.script_parts[0]
        script = command.script.strip()
        return [
            script.replace(program, alternative, 1)
            for alternative in PYTHON_ALTERNATIVES.get(program, ())
            if self.context.executables.exists(alternative)
        ]
