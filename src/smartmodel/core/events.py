"""
Model lifecycle events.

Listeners are registered per model class. Events named with an ``-ing``
suffix (``saving``, ``validating`` ...) can be vetoed by a listener that
returns ``False``; the ``-ed`` events are notifications only.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]

HOOK_EVENTS = {
    "save": ("saving", "saved"),
    "validate": ("validating", "validated"),
    "create": ("creating", "created"),
    "update": ("updating", "updated"),
    "delete": ("deleting", "deleted"),
}


@dataclass
class _Registration:
    callback: Listener
    once: bool = False


class ModelEventDispatcher:
    """Process-wide listener registry keyed by (model class, event name)."""

    def __init__(self):
        self._listeners: DefaultDict[Tuple[type, str], List[_Registration]] = defaultdict(list)

    def listen(self, model_class: type, event: str, callback: Listener, once: bool = False) -> None:
        self._listeners[(model_class, event)].append(_Registration(callback, once))

    def fire(self, model: Any, event: str, halt: bool = True) -> Optional[bool]:
        """
        Call the listeners of ``type(model)`` for ``event``.

        Returns:
            False when ``halt`` is set and a listener returned False, else True
        """
        key = (type(model), event)
        registrations = self._listeners.get(key)
        if not registrations:
            return True

        for registration in list(registrations):
            if registration.once:
                registrations.remove(registration)
            result = registration.callback(model)
            if halt and result is False:
                logger.debug(f"{type(model).__name__} '{event}' halted by {registration.callback!r}")
                return False
        return True

    def forget(self, model_class: type, event: Optional[str] = None) -> None:
        for key in list(self._listeners):
            if key[0] is model_class and (event is None or key[1] == event):
                del self._listeners[key]

    def has_listeners(self, model_class: type, event: str) -> bool:
        return bool(self._listeners.get((model_class, event)))


dispatcher = ModelEventDispatcher()


@dataclass
class SaveHooks:
    """Callbacks scoped to a single save call; never registered on the dispatcher."""

    before: List[Listener] = field(default_factory=list)
    after: List[Listener] = field(default_factory=list)

    @classmethod
    def of(cls, before: Optional[Listener] = None, after: Optional[Listener] = None) -> "SaveHooks":
        return cls(before=[before] if before else [], after=[after] if after else [])

    def run_before(self, model: Any) -> bool:
        return all(callback(model) is not False for callback in self.before)

    def run_after(self, model: Any) -> None:
        for callback in self.after:
            callback(model)


def hook_methods() -> Iterable[Tuple[str, str]]:
    """Yield (method name, event name) pairs such as ("before_save", "saving")."""
    for radical, (before_event, after_event) in HOOK_EVENTS.items():
        yield f"before_{radical}", before_event
        yield f"after_{radical}", after_event
