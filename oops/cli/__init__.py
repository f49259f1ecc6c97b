"""
Oops CLI - Command line interface.

Main entry point: `eval "$(oops --alias)"` installs the shell function,
which then calls `oops` with the failed command.
"""

from __future__ import annotations

import os
import sys

import click
from loguru import logger

from oops import __version__
from oops.cli.arguments import prepare_arguments
from oops.cli.fix import FixOptions, fix_command
from oops.config.constants import DEFAULT_ALIAS
from oops.config.loader import ensure_settings_file, load_settings
from oops.core.exceptions import ConfigurationError
from oops.shells import detect_shell
from oops.ui.console import ConsoleUI
from oops.utils.logger import setup_logger

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="oops")
@click.option(
    "--alias", "alias_name", is_flag=False, flag_value="", default=None,
    metavar="[NAME]", help="Print the shell function to install (default name: oops)",
)
@click.option("-y", "--yes", "--yeah", is_flag=True, help="Run the first correction without asking")
@click.option("-r", "--repeat", is_flag=True, help="Retry with the next correction if it fails")
@click.option("-d", "--debug", is_flag=True, help="Log debug output to stderr")
@click.option("--force-command", default=None, help="Fix this command instead of the last one")
@click.argument("command", nargs=-1)
def cli(alias_name, yes, repeat, debug, force_command, command):
    """
    Oops - Fix the previous console command.

    Without COMMAND, the last command from the shell history is fixed.
    """
    setup_logger(debug=debug)

    if alias_name is not None:
        name = alias_name or os.environ.get("TF_ALIAS") or DEFAULT_ALIAS
        click.echo(detect_shell().app_alias(name), nl=False)
        return

    try:
        settings = load_settings(overrides={"debug": True} if debug else None)
    except ConfigurationError as e:
        ConsoleUI().error(f"oops: {e}")
        sys.exit(2)

    if settings.debug and not debug:
        setup_logger(debug=True)
    ensure_settings_file()

    shell = detect_shell()
    ui = ConsoleUI(no_colors=settings.no_colors)
    options = FixOptions(
        alias=os.environ.get("TF_ALIAS") or DEFAULT_ALIAS,
        yes=yes,
        repeat=repeat,
        force_command=force_command,
    )

    script = fix_command(list(command), settings, shell, ui, options)
    if script is None:
        sys.exit(1)
    click.echo(script)


def main() -> None:
    """Main entry point for the oops console script."""
    try:
        cli.main(args=prepare_arguments(sys.argv[1:]), prog_name="oops")
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
