"""
Oops Core - Corrector.

Runs every enabled rule against a captured command and returns the
candidates ranked by priority with duplicate scripts collapsed.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from operator import attrgetter
from typing import TYPE_CHECKING

from loguru import logger

from oops.config.models import ALL_RULES
from oops.core.exceptions import RuleEvaluationError
from oops.core.types import CapturedCommand, CorrectedCommand
from oops.utils.logger import log_prefix
from oops.utils.security import redact_sensitive_info

if TYPE_CHECKING:
    from oops.config.models import Settings
    from oops.core.rule import Rule


def is_rule_enabled(rule: Rule, settings: Settings) -> bool:
    """
    Check a rule against the enabled and excluded rule lists.

    A rule that is not enabled by default is only used when its name is
    listed explicitly; the ALL sentinel does not cover it.
    """
    if rule.name in settings.exclude_rules:
        return False
    if rule.name in settings.rules:
        return True
    return ALL_RULES in settings.rules and rule.enabled_by_default


def organize_commands(candidates: Iterable[CorrectedCommand]) -> list[CorrectedCommand]:
    """Stable-sort by priority and keep the first occurrence of each script."""
    seen: set[str] = set()
    organized: list[CorrectedCommand] = []
    for candidate in sorted(candidates, key=attrgetter("priority")):
        if candidate.script in seen:
            continue
        seen.add(candidate.script)
        organized.append(candidate)
    return organized


class Corrector:
    """
    Evaluates a fixed, ordered rule catalog against captured commands.

    Args:
        rules: The rule catalog in registration order.
        settings: Settings snapshot providing enabled/excluded rules and
            priority overrides.
        max_workers: Evaluate rules on a thread pool when greater than 1.
            The result order does not depend on completion order.
    """

    def __init__(self, rules: Iterable[Rule], settings: Settings, max_workers: int = 1) -> None:
        self.rules = list(rules)
        self.settings = settings
        self.max_workers = max(1, max_workers)

    def enabled_rules(self) -> list[Rule]:
        """Rules selected by the settings, in catalog order."""
        return [rule for rule in self.rules if is_rule_enabled(rule, self.settings)]

    def correct(self, command: CapturedCommand) -> list[CorrectedCommand]:
        """
        Generate ranked corrections for a command.

        Args:
            command: The failed command. Its script must not be empty.

        Returns:
            Candidates ordered by ascending priority; empty when no rule
            matched.
        """
        rules = self.enabled_rules()
        logger.debug(
            f"Matching {len(rules)} rules against {redact_sensitive_info(command.script)!r}"
        )

        if self.max_workers > 1 and len(rules) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                batches = list(pool.map(lambda rule: self._evaluate(rule, command), rules))
        else:
            batches = [self._evaluate(rule, command) for rule in rules]

        corrections = organize_commands(c for batch in batches for c in batch)
        logger.debug(f"Generated {len(corrections)} corrections")
        return corrections

    def _evaluate(self, rule: Rule, command: CapturedCommand) -> list[CorrectedCommand]:
        if rule.requires_output and not command.output:
            logger.trace(f"Rule '{rule.name}' requires output, skipping")
            return []

        stage = "is_match"
        try:
            if not rule.is_match(command):
                return []
            stage = "get_new_command"
            scripts = rule.get_new_command(command)
        except Exception as e:
            error = RuleEvaluationError(rule.name, stage, e)
            logger.opt(exception=e).warning(f"{log_prefix('⚠️')} {error}")
            return []

        if isinstance(scripts, str):
            scripts = [scripts]

        priority = self.settings.priority.get(rule.name, rule.priority)
        side_effect = rule.side_effect if rule.has_side_effect else None
        logger.debug(f"Rule '{rule.name}' matched with {len(scripts)} candidates")
        return [
            CorrectedCommand(
                script=script,
                priority=priority,
                side_effect=side_effect,
                rule_name=rule.name,
            )
            for script in scripts
            if script
        ]


def get_corrected_commands(
    command: CapturedCommand,
    rules: Iterable[Rule],
    settings: Settings,
) -> list[CorrectedCommand]:
    """Convenience wrapper around Corrector.correct."""
    return Corrector(rules, settings).correct(command)
