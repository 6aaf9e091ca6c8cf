"""String case helpers and the UTC clock used for timestamps."""

import re
from datetime import datetime, timezone

_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_WORD_SEPARATORS = re.compile(r"[\s_\-]+")


def snake_case(value: str, delimiter: str = "_") -> str:
    """Convert ``OrderItem`` / ``orderItem`` to ``order_item``."""
    if value.islower():
        return value
    return _SNAKE_BOUNDARY.sub(delimiter, value).replace("-", delimiter).lower()


def studly_case(value: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in _WORD_SEPARATORS.split(value) if part)


def camel_case(value: str) -> str:
    studly = studly_case(value)
    return studly[:1].lower() + studly[1:]


def pluralize(word: str) -> str:
    if not word:
        return word
    if word.endswith("y") and word[-2:-1] not in ("a", "e", "i", "o", "u"):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
