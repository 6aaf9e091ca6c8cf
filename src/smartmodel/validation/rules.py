"""
Structured validation rules.

Rule sets arrive either as pipe-delimited strings (``"required|min:3"``) or
as sequences of rule strings / ``Rule`` objects. ``normalize_rules`` turns
both into ``{field: [Rule, ...]}`` so nothing downstream branches on the
encoding.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

RuleSpec = Union[str, "Rule", Tuple[Any, ...]]
RuleSet = Dict[str, List["Rule"]]

_UNSPLIT_PARAMETER_RULES = ("regex", "not_regex")


@dataclass(frozen=True)
class Rule:
    """A rule name plus its ordered parameters, e.g. ``Rule("unique", ("users", "email"))``."""

    name: str
    parameters: Tuple[Any, ...] = ()

    @classmethod
    def parse(cls, spec: RuleSpec) -> "Rule":
        if isinstance(spec, Rule):
            return spec
        if isinstance(spec, (tuple, list)):
            name, *parameters = spec
            return cls(str(name).strip(), tuple(parameters))

        name, _, raw = str(spec).strip().partition(":")
        name = name.strip()
        if not raw:
            return cls(name)
        if name in _UNSPLIT_PARAMETER_RULES:
            return cls(name, (raw,))
        return cls(name, tuple(part.strip() for part in raw.split(",")))

    def with_parameters(self, *parameters: Any) -> "Rule":
        return replace(self, parameters=tuple(parameters))

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}:{','.join(str(p) for p in self.parameters)}"


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def parse_rule_list(spec: Any) -> List[Rule]:
    if spec is None:
        return []
    if isinstance(spec, Rule):
        return [spec]
    if isinstance(spec, str):
        return [Rule.parse(part) for part in spec.split("|") if part.strip()]
    rules = []
    for item in spec:
        if isinstance(item, str) and not item.strip():
            continue
        rules.append(Rule.parse(item))
    return rules


def normalize_rules(rules: Optional[Mapping[str, Any]]) -> RuleSet:
    """Return a new ``{field: [Rule]}`` mapping; the input is never modified."""
    return {field: parse_rule_list(spec) for field, spec in (rules or {}).items()}
