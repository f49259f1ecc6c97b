"""
Oops Core - Commands, rules and the corrector.
"""

from oops.core.corrector import Corrector, get_corrected_commands, is_rule_enabled
from oops.core.rule import Rule, RuleContext, for_app, is_app
from oops.core.types import DEFAULT_PRIORITY, CapturedCommand, CorrectedCommand

__all__ = [
    "CapturedCommand",
    "CorrectedCommand",
    "Corrector",
    "DEFAULT_PRIORITY",
    "Rule",
    "RuleContext",
    "for_app",
    "get_corrected_commands",
    "is_app",
    "is_rule_enabled",
]
