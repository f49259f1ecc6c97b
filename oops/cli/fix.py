"""
Oops CLI - Fixing the previous command.

Pipeline: pick the failed command, re-run it, correct it, let the user
choose, run the side effect and hand the script back to the shell.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from oops.config.constants import DIFF_WITH_ALIAS
from oops.config.models import Settings
from oops.core.corrector import Corrector
from oops.core.exceptions import (
    EmptyCommandError,
    ExecutionError,
    HistoryWriteError,
    SideEffectError,
)
from oops.core.rule import RuleContext
from oops.core.types import CapturedCommand, CorrectedCommand
from oops.executors.capture import capture, timeout_for
from oops.rules import build_rule_catalog
from oops.shells.base import Shell
from oops.ui.console import ConsoleUI
from oops.utils.executables import ExecutableCache
from oops.utils.fuzzy import similarity
from oops.utils.logger import log_prefix
from oops.utils.security import redact_sensitive_info


@dataclass
class FixOptions:
    """Per-invocation flags."""

    alias: str
    yes: bool = False
    repeat: bool = False
    force_command: str | None = None


def get_raw_command(
    command_words: list[str] | tuple[str, ...],
    shell: Shell,
    executables: ExecutableCache,
    options: FixOptions,
    history_limit: int | None = None,
) -> str:
    """
    Find the command to fix.

    An explicit command wins. Otherwise the most recent history line that
    is not a call to our own alias is used.

    Raises:
        EmptyCommandError: If there is no command to fix
    """
    if options.force_command:
        return options.force_command
    if command_words:
        return " ".join(command_words)

    for line in reversed(shell.get_history(history_limit)):
        first_word = line.split(maxsplit=1)[0]
        if similarity(line, options.alias) < DIFF_WITH_ALIAS or (
            first_word != options.alias and executables.exists(first_word)
        ):
            return line

    raise EmptyCommandError()


def choose_command(
    corrections: list[CorrectedCommand],
    settings: Settings,
    ui: ConsoleUI,
    options: FixOptions,
) -> CorrectedCommand | None:
    """Take the best correction, or ask the user when confirmation is on."""
    if not options.yes and settings.require_confirmation:
        return ui.select_command(corrections)
    chosen = corrections[0]
    ui.show_command(chosen)
    return chosen


def apply_command(
    chosen: CorrectedCommand,
    command: CapturedCommand,
    shell: Shell,
    settings: Settings,
    ui: ConsoleUI,
    options: FixOptions,
) -> str:
    """
    Run the side effect, record history and build the script to print.

    Side effect and history failures are reported, the script is still
    returned.
    """
    try:
        chosen.run_side_effect(command)
    except SideEffectError as e:
        logger.opt(exception=e.__cause__).error(f"{log_prefix('❌')} {e}")
        ui.error(f"oops: {e.message}")

    if settings.alter_history:
        try:
            shell.put_to_history(chosen.script)
        except HistoryWriteError as e:
            logger.warning(f"{log_prefix('⚠️')} {e}")

    script = chosen.script
    if options.repeat:
        script = shell.or_(script, f"{options.alias} --repeat --yes")
    return script


def fix_command(
    command_words: list[str] | tuple[str, ...],
    settings: Settings,
    shell: Shell,
    ui: ConsoleUI,
    options: FixOptions,
    executables: ExecutableCache | None = None,
) -> str | None:
    """
    Correct the previous command.

    Args:
        command_words: Command given on the command line, may be empty
        settings: Settings snapshot
        shell: Active shell
        ui: Console bound to stderr
        options: Per-invocation flags
        executables: Shared executable cache

    Returns:
        The script for the shell to run, or None when there is nothing to run
    """
    executables = executables or ExecutableCache(
        excluded_prefixes=settings.excluded_search_path_prefixes
    )

    try:
        raw_script = get_raw_command(
            command_words, shell, executables, options, settings.history_limit
        )
    except EmptyCommandError as e:
        ui.muted(f"oops: {e.message}")
        return None

    script = shell.from_shell(raw_script)
    logger.debug(f"Fixing {redact_sensitive_info(script)!r} in {shell.name}")

    try:
        command = capture(
            script,
            timeout_for(script, settings),
            env=settings.env,
            shell_name=shell.name,
        )
    except (ExecutionError, EmptyCommandError) as e:
        ui.error(f"oops: {e.message}")
        return None

    context = RuleContext(settings=settings, executables=executables, shell=shell)
    corrections = Corrector(build_rule_catalog(context), settings).correct(command)
    if not corrections:
        ui.muted("No fix found for this command")
        return None

    chosen = choose_command(corrections, settings, ui, options)
    if chosen is None:
        return None

    return apply_command(chosen, command, shell, settings, ui, options)
