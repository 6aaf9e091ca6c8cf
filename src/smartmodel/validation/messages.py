from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union


class MessageBag:
    """Ordered collection of error messages keyed by field name."""

    def __init__(self, messages: Optional[Mapping[str, Union[str, Iterable[str]]]] = None):
        self._messages: Dict[str, List[str]] = {}
        for key, value in (messages or {}).items():
            for message in ([value] if isinstance(value, str) else value):
                self.add(key, message)

    def add(self, key: str, message: str) -> "MessageBag":
        bucket = self._messages.setdefault(key, [])
        if message not in bucket:
            bucket.append(message)
        return self

    def merge(self, other: Union["MessageBag", Mapping[str, Iterable[str]]]) -> "MessageBag":
        items = other.to_dict() if isinstance(other, MessageBag) else other
        for key, messages in items.items():
            for message in messages:
                self.add(key, message)
        return self

    def has(self, key: Optional[str] = None) -> bool:
        if key is None:
            return self.any()
        return bool(self._messages.get(key))

    def first(self, key: Optional[str] = None, default: Optional[str] = None) -> Optional[str]:
        messages = self.all() if key is None else self.get(key)
        return messages[0] if messages else default

    def get(self, key: str) -> List[str]:
        return list(self._messages.get(key, []))

    def all(self) -> List[str]:
        return [message for messages in self._messages.values() for message in messages]

    def keys(self) -> List[str]:
        return list(self._messages)

    def count(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def any(self) -> bool:
        return self.count() > 0

    def is_empty(self) -> bool:
        return not self.any()

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: list(messages) for key, messages in self._messages.items()}

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __eq__(self, other) -> bool:
        if isinstance(other, MessageBag):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == {k: list(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"MessageBag({self._messages!r})"


@dataclass
class ValidationResult:
    """Outcome of one rule-engine run."""
    passed: bool
    messages: MessageBag = field(default_factory=MessageBag)
