"""
Rule engine

✅ Field rule evaluation:
Evaluates ``{field: [Rule]}`` rule sets against a data mapping and collects
human readable messages in a ``MessageBag``. Type-shaped rules delegate to
pydantic ``TypeAdapter`` so coercion matches the rest of the stack.
"""

import datetime
import logging
import re
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence

from pydantic import AnyUrl, IPvAnyAddress, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .messages import MessageBag, ValidationResult
from .presence import PresenceVerifier
from .rules import Rule, is_empty, normalize_rules

logger = logging.getLogger(__name__)

_INT = TypeAdapter(int)
_FLOAT = TypeAdapter(float)
_DATE = TypeAdapter(datetime.date)
_DATETIME = TypeAdapter(datetime.datetime)
_URL = TypeAdapter(AnyUrl)
_IP = TypeAdapter(IPvAnyAddress)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ALPHA_DASH = re.compile(r"^[\w-]+$")
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE, "u": 0}

DEFAULT_MESSAGES: Dict[str, Any] = {
    "accepted": "The :attribute must be accepted.",
    "alpha": "The :attribute may only contain letters.",
    "alpha_dash": "The :attribute may only contain letters, numbers, and dashes.",
    "alpha_num": "The :attribute may only contain letters and numbers.",
    "array": "The :attribute must be an array.",
    "between": {
        "numeric": "The :attribute must be between :min and :max.",
        "string": "The :attribute must be between :min and :max characters.",
        "array": "The :attribute must have between :min and :max items.",
    },
    "boolean": "The :attribute field must be true or false.",
    "confirmed": "The :attribute confirmation does not match.",
    "date": "The :attribute is not a valid date.",
    "different": "The :attribute and :other must be different.",
    "digits": "The :attribute must be :digits digits.",
    "email": "The :attribute format is invalid.",
    "exists": "The selected :attribute is invalid.",
    "in": "The selected :attribute is invalid.",
    "integer": "The :attribute must be an integer.",
    "ip": "The :attribute must be a valid IP address.",
    "max": {
        "numeric": "The :attribute may not be greater than :max.",
        "string": "The :attribute may not be greater than :max characters.",
        "array": "The :attribute may not have more than :max items.",
    },
    "min": {
        "numeric": "The :attribute must be at least :min.",
        "string": "The :attribute must be at least :min characters.",
        "array": "The :attribute must have at least :min items.",
    },
    "not_in": "The selected :attribute is invalid.",
    "numeric": "The :attribute must be a number.",
    "regex": "The :attribute format is invalid.",
    "required": "The :attribute field is required.",
    "required_with": "The :attribute field is required when :values is present.",
    "required_without": "The :attribute field is required when :values is not present.",
    "same": "The :attribute and :other must match.",
    "size": {
        "numeric": "The :attribute must be :size.",
        "string": "The :attribute must be :size characters.",
        "array": "The :attribute must contain :size items.",
    },
    "string": "The :attribute must be a string.",
    "unique": "The :attribute has already been taken.",
    "url": "The :attribute format is invalid.",
}


def _conforms(adapter: TypeAdapter, value: Any) -> bool:
    try:
        adapter.validate_python(value)
        return True
    except PydanticValidationError:
        return False


class Validator:
    """
    Evaluates a rule set against a data mapping.

    Rules other than the implicit ones (``required*``, ``accepted``) are
    skipped when the value is empty, so ``"email"`` alone allows a blank
    field while ``"required|email"`` does not.
    """

    implicit_rules: ClassVar[frozenset] = frozenset({"required", "required_with", "required_without", "accepted"})
    numeric_rules: ClassVar[frozenset] = frozenset({"numeric", "integer"})

    _extensions: ClassVar[Dict[str, Callable]] = {}
    _extension_messages: ClassVar[Dict[str, str]] = {}

    def __init__(self, data: Mapping[str, Any], rules: Mapping[str, Any],
                 messages: Optional[Mapping[str, str]] = None,
                 presence_verifier: Optional[PresenceVerifier] = None):
        self.data = dict(data)
        self.rules = normalize_rules(rules)
        self.custom_messages = dict(messages or {})
        self.presence_verifier = presence_verifier
        self._messages: Optional[MessageBag] = None

    @classmethod
    def extend(cls, name: str, callback: Callable[[str, Any, Sequence[Any], "Validator"], bool],
               message: Optional[str] = None) -> None:
        """Register a custom rule; the callback gets (attribute, value, parameters, validator)."""
        cls._extensions[name] = callback
        if message:
            cls._extension_messages[name] = message

    def passes(self) -> bool:
        bag = MessageBag()
        for attribute, rules in self.rules.items():
            value = self.data.get(attribute)
            for rule in rules:
                if not self._validate(attribute, value, rule):
                    bag.add(attribute, self._make_message(attribute, value, rule))
        self._messages = bag
        return bag.is_empty()

    def fails(self) -> bool:
        return not self.passes()

    def messages(self) -> MessageBag:
        if self._messages is None:
            self.passes()
        return self._messages

    errors = messages

    def evaluate(self) -> ValidationResult:
        passed = self.passes()
        return ValidationResult(passed=passed, messages=self._messages)

    def _validate(self, attribute: str, value: Any, rule: Rule) -> bool:
        if rule.name not in self.implicit_rules and is_empty(value):
            return True

        extension = self._extensions.get(rule.name)
        if extension is not None:
            return bool(extension(attribute, value, rule.parameters, self))

        method = getattr(self, f"validate_{rule.name}", None)
        if method is None:
            raise ValueError(f"Method [validate_{rule.name}] does not exist.")
        return method(attribute, value, rule.parameters)

    # Rules

    def validate_required(self, attribute, value, parameters) -> bool:
        return not is_empty(value)

    def validate_required_with(self, attribute, value, parameters) -> bool:
        if any(not is_empty(self.data.get(other)) for other in parameters):
            return self.validate_required(attribute, value, parameters)
        return True

    def validate_required_without(self, attribute, value, parameters) -> bool:
        if any(is_empty(self.data.get(other)) for other in parameters):
            return self.validate_required(attribute, value, parameters)
        return True

    def validate_accepted(self, attribute, value, parameters) -> bool:
        return self.validate_required(attribute, value, parameters) and value in ("yes", "on", "1", 1, True, "true")

    def validate_alpha(self, attribute, value, parameters) -> bool:
        return isinstance(value, str) and value.isalpha()

    def validate_alpha_num(self, attribute, value, parameters) -> bool:
        return isinstance(value, str) and value.isalnum()

    def validate_alpha_dash(self, attribute, value, parameters) -> bool:
        return isinstance(value, str) and _ALPHA_DASH.match(value) is not None

    def validate_array(self, attribute, value, parameters) -> bool:
        return isinstance(value, (list, tuple, dict))

    def validate_boolean(self, attribute, value, parameters) -> bool:
        return value in (True, False, 0, 1, "0", "1")

    def validate_confirmed(self, attribute, value, parameters) -> bool:
        return self.validate_same(attribute, value, (f"{attribute}_confirmation",))

    def validate_same(self, attribute, value, parameters) -> bool:
        return value == self.data.get(parameters[0])

    def validate_different(self, attribute, value, parameters) -> bool:
        return value != self.data.get(parameters[0])

    def validate_date(self, attribute, value, parameters) -> bool:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return False
        return _conforms(_DATETIME, value) or _conforms(_DATE, value)

    def validate_digits(self, attribute, value, parameters) -> bool:
        text = str(value)
        return text.isdigit() and len(text) == int(parameters[0])

    def validate_email(self, attribute, value, parameters) -> bool:
        return isinstance(value, str) and _EMAIL.match(value) is not None

    def validate_in(self, attribute, value, parameters) -> bool:
        return str(value) in [str(p) for p in parameters]

    def validate_not_in(self, attribute, value, parameters) -> bool:
        return not self.validate_in(attribute, value, parameters)

    def validate_integer(self, attribute, value, parameters) -> bool:
        return not isinstance(value, bool) and _conforms(_INT, value)

    def validate_numeric(self, attribute, value, parameters) -> bool:
        return not isinstance(value, bool) and _conforms(_FLOAT, value)

    def validate_ip(self, attribute, value, parameters) -> bool:
        return _conforms(_IP, value)

    def validate_url(self, attribute, value, parameters) -> bool:
        return isinstance(value, str) and _conforms(_URL, value)

    def validate_string(self, attribute, value, parameters) -> bool:
        return isinstance(value, str)

    def validate_regex(self, attribute, value, parameters) -> bool:
        return self._compile_pattern(parameters[0]).search(str(value)) is not None

    def validate_size(self, attribute, value, parameters) -> bool:
        return self._get_size(attribute, value) == float(parameters[0])

    def validate_between(self, attribute, value, parameters) -> bool:
        size = self._get_size(attribute, value)
        return float(parameters[0]) <= size <= float(parameters[1])

    def validate_min(self, attribute, value, parameters) -> bool:
        return self._get_size(attribute, value) >= float(parameters[0])

    def validate_max(self, attribute, value, parameters) -> bool:
        return self._get_size(attribute, value) <= float(parameters[0])

    def validate_unique(self, attribute, value, parameters) -> bool:
        if not parameters or not parameters[0]:
            raise ValueError(
                f"Rule [unique] on '{attribute}' needs a table; write 'unique:<table>' or save with update_uniques()."
            )
        table = parameters[0]
        column = parameters[1] if len(parameters) > 1 and parameters[1] else attribute
        exclude_id = parameters[2] if len(parameters) > 2 else None
        id_column = parameters[3] if len(parameters) > 3 and parameters[3] else None
        extra = self._extra_conditions(parameters[4:])
        return self._verifier().get_count(table, column, value, exclude_id, id_column, extra) == 0

    def validate_exists(self, attribute, value, parameters) -> bool:
        if not parameters or not parameters[0]:
            raise ValueError(f"Rule [exists] on '{attribute}' needs a table; write 'exists:<table>'.")
        table = parameters[0]
        column = parameters[1] if len(parameters) > 1 and parameters[1] else attribute
        extra = self._extra_conditions(parameters[2:])
        verifier = self._verifier()
        if isinstance(value, (list, tuple, set)):
            return verifier.get_multi_count(table, column, value, extra) >= len(set(value))
        return verifier.get_count(table, column, value, extra=extra) > 0

    # Helpers

    def _verifier(self) -> PresenceVerifier:
        if self.presence_verifier is None:
            self.presence_verifier = PresenceVerifier()
        return self.presence_verifier

    @staticmethod
    def _extra_conditions(parameters: Sequence[Any]) -> Dict[str, Any]:
        pairs = list(parameters)
        return {
            pairs[i]: (None if pairs[i + 1] == "NULL" else pairs[i + 1])
            for i in range(0, len(pairs) - 1, 2)
        }

    @staticmethod
    def _compile_pattern(pattern: str) -> "re.Pattern":
        if len(pattern) > 1 and pattern[0] == "/" and "/" in pattern[1:]:
            end = pattern.rindex("/")
            flags = 0
            for letter in pattern[end + 1:]:
                flags |= _REGEX_FLAGS.get(letter, 0)
            return re.compile(pattern[1:end], flags)
        return re.compile(pattern)

    def _has_numeric_rule(self, attribute: str) -> bool:
        return any(rule.name in self.numeric_rules for rule in self.rules.get(attribute, []))

    def _get_size(self, attribute: str, value: Any) -> float:
        if self._has_numeric_rule(attribute) and not isinstance(value, (list, tuple, dict)):
            try:
                return float(value)
            except (TypeError, ValueError):
                pass
        if isinstance(value, (list, tuple, dict, set)):
            return len(value)
        return len(str(value))

    def _get_attribute_type(self, attribute: str, value: Any) -> str:
        if isinstance(value, (list, tuple, dict, set)):
            return "array"
        if self._has_numeric_rule(attribute):
            return "numeric"
        return "string"

    def _make_message(self, attribute: str, value: Any, rule: Rule) -> str:
        template = (
            self.custom_messages.get(f"{attribute}.{rule.name}")
            or self.custom_messages.get(rule.name)
            or self._extension_messages.get(rule.name)
            or DEFAULT_MESSAGES.get(rule.name)
            or f"The :attribute is invalid ({rule.name})."
        )
        if isinstance(template, dict):
            template = template[self._get_attribute_type(attribute, value)]
        return self._replace_placeholders(template, attribute, rule)

    def _replace_placeholders(self, message: str, attribute: str, rule: Rule) -> str:
        parameters: List[str] = [str(p) for p in rule.parameters]
        replacements = {":attribute": attribute.replace("_", " ")}
        if rule.name in ("min", "max", "size", "digits") and parameters:
            replacements[f":{rule.name}"] = parameters[0]
        elif rule.name == "between" and len(parameters) >= 2:
            replacements[":min"], replacements[":max"] = parameters[0], parameters[1]
        elif rule.name in ("in", "not_in", "required_with", "required_without"):
            replacements[":values"] = ", ".join(p.replace("_", " ") if rule.name.startswith("required") else p
                                                for p in parameters)
        elif rule.name in ("same", "different") and parameters:
            replacements[":other"] = parameters[0].replace("_", " ")
        for placeholder, replacement in replacements.items():
            message = message.replace(placeholder, replacement)
        return message


class ValidationFactory:
    """Builds validators that share a presence verifier and message overrides."""

    def __init__(self, presence_verifier: Optional[PresenceVerifier] = None,
                 custom_messages: Optional[Mapping[str, str]] = None):
        self.presence_verifier = presence_verifier
        self.custom_messages = dict(custom_messages or {})

    def make(self, data: Mapping[str, Any], rules: Mapping[str, Any],
             messages: Optional[Mapping[str, str]] = None) -> Validator:
        merged = {**self.custom_messages, **dict(messages or {})}
        return Validator(data, rules, merged, presence_verifier=self.presence_verifier)

    def extend(self, name: str, callback: Callable, message: Optional[str] = None) -> None:
        Validator.extend(name, callback, message)
