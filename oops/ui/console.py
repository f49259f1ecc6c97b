"""
Oops UI - Console implementation.

Rich console bound to stderr: stdout carries only the chosen command,
which the shell alias evaluates.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.theme import Theme

from oops.core.types import CorrectedCommand

OOPS_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red bold",
        "success": "green",
        "muted": "dim",
        "command": "bold",
        "side_effect": "magenta",
    }
)

QUIT_CHOICE = "q"


class ConsoleUI:
    """
    Console user interface.

    Args:
        no_colors: Disable styling (settings.no_colors)
        console: Console override (for testing)
    """

    def __init__(self, no_colors: bool = False, console: Console | None = None) -> None:
        self.console = console or Console(
            stderr=True, theme=OOPS_THEME, no_color=no_colors, highlight=False
        )

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console."""
        self.console.print(*args, **kwargs)

    def error(self, message: str) -> None:
        self.console.print(f"[error]{escape(message)}[/error]")

    def warning(self, message: str) -> None:
        self.console.print(f"[warning]{escape(message)}[/warning]")

    def muted(self, message: str) -> None:
        self.console.print(f"[muted]{escape(message)}[/muted]")

    def format_command(self, command: CorrectedCommand) -> str:
        """Render a candidate, flagging those that change the environment."""
        text = f"[command]{escape(command.script)}[/command]"
        if command.side_effect is not None:
            text += " [side_effect]\\[+side effect][/side_effect]"
        return text

    def show_command(self, command: CorrectedCommand) -> None:
        """Echo the command about to run."""
        self.console.print(self.format_command(command))

    def select_command(self, commands: list[CorrectedCommand]) -> CorrectedCommand | None:
        """
        Let the user pick a correction.

        Args:
            commands: Ranked candidates, best first

        Returns:
            The chosen command, or None if the user quit
        """
        if not commands:
            return None

        for index, command in enumerate(commands, start=1):
            self.console.print(f"  [info]{index}[/info]. {self.format_command(command)}")

        choices = [str(index) for index in range(1, len(commands) + 1)] + [QUIT_CHOICE]
        try:
            choice = Prompt.ask(
                "Run which command?",
                choices=choices,
                default="1",
                console=self.console,
                show_choices=False,
            )
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            self.muted("Aborted")
            return None

        if choice == QUIT_CHOICE:
            self.muted("Aborted")
            return None
        return commands[int(choice) - 1]
