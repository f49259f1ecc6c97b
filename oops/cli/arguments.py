"""
Oops CLI - Argument preparation.

Shell aliases pass the failed command and the user's own flags in one
argv, separated by a placeholder. Options go first and the command
words after `--`, so click never mistakes `ls -la` for our flags.
"""

from __future__ import annotations

from oops.config.constants import ARGUMENT_PLACEHOLDER


def prepare_arguments(argv: list[str]) -> list[str]:
    """
    Rearrange raw argv for click.

    Examples:
        >>> prepare_arguments(["THEFUCK_ARGUMENT_PLACEHOLDER", "-y"])
        ['-y', '--']
        >>> prepare_arguments(["git", "psuh", "THEFUCK_ARGUMENT_PLACEHOLDER"])
        ['--', 'git', 'psuh']
        >>> prepare_arguments(["git", "psuh"])
        ['--', 'git', 'psuh']
    """
    if ARGUMENT_PLACEHOLDER in argv:
        index = argv.index(ARGUMENT_PLACEHOLDER)
        return argv[index + 1:] + ["--"] + argv[:index]
    if argv and not argv[0].startswith("-") and argv[0] != "--":
        return ["--"] + argv
    return argv
