"""
Oops Rules - git.

git often names the command it thinks you meant, so these rules prefer
git's own suggestions over fuzzy guesses.
"""

from __future__ import annotations

import re
from functools import wraps

from oops.core.rule import Rule, is_app
from oops.core.types import CapturedCommand
from oops.utils.executables import replace_argument
from oops.utils.fuzzy import get_close_matches

COMMON_GIT_COMMANDS = (
    "add", "bisect", "branch", "checkout", "cherry-pick", "clone", "commit",
    "config", "diff", "fetch", "grep", "init", "log", "merge", "mv", "pull",
    "push", "rebase", "remote", "reset", "restore", "revert", "rm", "show",
    "stash", "status", "switch", "tag", "worktree",
)

SUGGESTION_HEADERS = ("The most similar command", "Did you mean")

_NOT_A_GIT_COMMAND = re.compile(r"git: '([^']*)' is not a git command")
_INLINE_SUGGESTION = re.compile(r"Did you mean '([^']+)'\?")
_ALIAS_EXPANSION = re.compile(r"trace: alias expansion: ([^ ]*) => ([^\n]*)")


def expand_git_alias(command: CapturedCommand) -> CapturedCommand:
    """Replace a git alias by its expansion when GIT_TRACE output shows it."""
    match = _ALIAS_EXPANSION.search(command.output)
    if not match:
        return command
    alias, expansion = match.groups()
    expansion = " ".join(part.strip("'") for part in expansion.split())
    script = re.sub(rf"\b{re.escape(alias)}\b", lambda _: expansion, command.script, count=1)
    return command.with_script(script)


def git_support(method):
    """Restrict a rule method to git/hub and apply git alias expansion."""
    @wraps(method)
    def wrapper(self, command: CapturedCommand):
        if not is_app(command, "git", "hub"):
            return False if method.__name__ == "is_match" else []
        return method(self, expand_git_alias(command))
    return wrapper


def get_all_matched_commands(output: str, separators=SUGGESTION_HEADERS) -> list[str]:
    """
    Commands suggested by git.

    Handles both the inline form ("Did you mean 'push'?") and the list
    form, where suggestions follow the header on their own lines.
    """
    matched: list[str] = []
    collecting = False
    for line in output.splitlines():
        if any(separator in line for separator in separators):
            inline = _INLINE_SUGGESTION.findall(line)
            matched.extend(inline)
            collecting = not inline
        elif collecting and line.strip():
            matched.append(line.strip())
    return matched


def replace_command(script: str, broken: str, matched: list[str]) -> list[str]:
    """Scripts with the broken subcommand replaced by each close match."""
    return [
        replace_argument(script, broken, new.strip())
        for new in get_close_matches(broken, matched, cutoff=0.1)
    ]


class GitNotCommandRule(Rule):
    """Use the subcommand git itself suggests."""

    name = "git_not_command"

    @git_support
    def is_match(self, command: CapturedCommand) -> bool:
        return (
            " is not a git command" in command.output
            and any(header in command.output for header in SUGGESTION_HEADERS)
        )

    @git_support
    def get_new_command(self, command: CapturedCommand) -> list[str]:
        match = _NOT_A_GIT_COMMAND.search(command.output)
        if not match or not match.group(1):
            return []
        broken = match.group(1)
        return replace_command(command.script, broken, get_all_matched_commands(command.output))


class GitCommandTypoRule(Rule):
    """Guess the subcommand when git has no suggestion of its own."""

    name = "git_command_typo"
    priority = 1100

    @git_support
    def is_match(self, command: CapturedCommand) -> bool:
        return (
            " is not a git command" in command.output
            and not any(header in command.output for header in SUGGESTION_HEADERS)
        )

    @git_support
    def get_new_command(self, command: CapturedCommand) -> list[str]:
        match = _NOT_A_GIT_COMMAND.search(command.output)
        if not match or not match.group(1):
            return []
        broken = match.group(1)
        return [
            replace_argument(command.script, broken, candidate)
            for candidate in get_close_matches(
                broken, COMMON_GIT_COMMANDS, n=self.settings.num_close_matches
            )
        ]


def _push_rejected(output: str) -> bool:
    return "! [rejected]" in output and "failed to push some refs to" in output


class GitPushPullRule(Rule):
    """Pull first when the remote has commits we do not."""

    name = "git_push_pull"

    @git_support
    def is_match(self, command: CapturedCommand) -> bool:
        return (
            "push" in command.script_parts
            and _push_rejected(command.output)
            and (
                "Updates were rejected because the tip of your current branch is behind"
                in command.output
                or "Updates were rejected because the remote contains work that you do"
                in command.output
            )
        )

    @git_support
    def get_new_command(self, command: CapturedCommand) -> list[str]:
        pull = replace_argument(command.script, "push", "pull")
        return [self.context.shell.and_(pull, command.script)]


class GitPushForceRule(Rule):
    """Overwrite the remote branch. Off unless listed in rules."""

    name = "git_push_force"
    priority = 1200
    enabled_by_default = False

    @git_support
    def is_match(self, command: CapturedCommand) -> bool:
        return (
            "push" in command.script_parts
            and "! [rejected]" in command.output
            and "Updates were rejected" in command.output
        )

    @git_support
    def get_new_command(self, command: CapturedCommand) -> list[str]:
        return [replace_argument(command.script, "push", "push --force-with-lease")]
