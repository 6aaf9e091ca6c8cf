"""
Ambient input sources.

Validation may hydrate a model from "the current input" and flash that input
back to the session when it fails. The current source is request-scoped
through a ``ContextVar``; outside a request it is an empty ``ArrayInput``.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional

OLD_INPUT_KEY = "_old_input"


class InputSource(ABC):
    """Abstract source of user input."""

    @abstractmethod
    def all(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def has_session(self) -> bool:
        pass

    @abstractmethod
    def flash(self) -> None:
        """Stash the current input in the session for redisplay."""
        pass

    def get(self, key: str, default: Any = None) -> Any:
        return self.all().get(key, default)


class ArrayInput(InputSource):
    """Input backed by a plain mapping, with an optional session mapping."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None,
                 session: Optional[MutableMapping[str, Any]] = None):
        self.data = dict(data or {})
        self.session = session

    def all(self) -> Dict[str, Any]:
        return dict(self.data)

    def has_session(self) -> bool:
        return self.session is not None

    def flash(self) -> None:
        if self.session is not None:
            self.session[OLD_INPUT_KEY] = self.all()


current_input: ContextVar[Optional[InputSource]] = ContextVar("current_input", default=None)


def get_current_input() -> InputSource:
    source = current_input.get()
    return source if source is not None else ArrayInput()


@contextmanager
def use_input(source: InputSource) -> Iterator[InputSource]:
    """Bind ``source`` as the current input for the duration of the block."""
    token = current_input.set(source)
    try:
        yield source
    finally:
        current_input.reset(token)
