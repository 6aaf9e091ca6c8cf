"""
Rewrites ``unique`` rules so a persisted model does not conflict with its own row.
"""

from typing import Any, Mapping, Optional

from ..validation.rules import Rule, RuleSet, normalize_rules

UNIQUE_RULE = "unique"


def build_unique_exclusion_rules(rules: Optional[Mapping[str, Any]], table: str,
                                 key_name: str, key: Any) -> RuleSet:
    """
    Return a new rule set whose ``unique`` rules exclude the row ``key_name == key``.

    ``unique`` on field ``email`` of table ``users`` with key 7 becomes
    ``unique:users,email,7,id``. Table and column already given on the rule
    are kept; extra where-clause parameters after the fourth are preserved.
    """
    rewritten: RuleSet = {}
    for field, field_rules in normalize_rules(rules).items():
        rewritten[field] = [
            _exclude_own_row(rule, field, table, key_name, key) if rule.name == UNIQUE_RULE else rule
            for rule in field_rules
        ]
    return rewritten


def _exclude_own_row(rule: Rule, field: str, table: str, key_name: str, key: Any) -> Rule:
    parameters = list(rule.parameters)
    rule_table = parameters[0] if len(parameters) > 0 and parameters[0] else table
    column = parameters[1] if len(parameters) > 1 and parameters[1] else field
    exclude = "NULL" if key is None else key
    return rule.with_parameters(rule_table, column, exclude, key_name, *parameters[4:])
