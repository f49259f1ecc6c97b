"""
Oops Rules - The built-in rule catalog.

Catalog order is the tie-breaker between candidates of equal priority,
so new rules are appended rather than inserted.
"""

from __future__ import annotations

from loguru import logger

from oops.core.rule import Rule, RuleContext
from oops.rules.cd import CdMkdirRule, CdParentRule
from oops.rules.git import (
    GitCommandTypoRule,
    GitNotCommandRule,
    GitPushForceRule,
    GitPushPullRule,
)
from oops.rules.no_command import NoCommandRule
from oops.rules.ssh import SshKnownHostsRule
from oops.rules.sudo import SudoRule
from oops.rules.typo import PythonCommandRule, SlLsRule

RULE_CLASSES: tuple[type[Rule], ...] = (
    SudoRule,
    SlLsRule,
    CdParentRule,
    CdMkdirRule,
    PythonCommandRule,
    NoCommandRule,
    GitNotCommandRule,
    GitCommandTypoRule,
    GitPushPullRule,
    SshKnownHostsRule,
    GitPushForceRule,
)


def build_rule_catalog(context: RuleContext | None = None) -> list[Rule]:
    """
    Instantiate every built-in rule, in catalog order.

    Args:
        context: Shared settings, executable cache and shell
    """
    context = context or RuleContext.create()
    rules = [rule_cls(context) for rule_cls in RULE_CLASSES]
    logger.debug(f"Loaded {len(rules)} rules")
    return rules


def rule_names() -> list[str]:
    return [rule_cls.name for rule_cls in RULE_CLASSES]


__all__ = ["RULE_CLASSES", "build_rule_catalog", "rule_names"]
