"""
SmartModel Validation Module

Rule parsing, the rule engine and its message collection.
"""

from .messages import MessageBag, ValidationResult
from .presence import PresenceVerifier
from .rules import Rule, RuleSet, normalize_rules, parse_rule_list
from .validator import DEFAULT_MESSAGES, ValidationFactory, Validator

__all__ = [
    "MessageBag",
    "ValidationResult",
    "PresenceVerifier",
    "Rule",
    "RuleSet",
    "normalize_rules",
    "parse_rule_list",
    "DEFAULT_MESSAGES",
    "ValidationFactory",
    "Validator",
]
