"""
Starlette adapter

Exposes a Starlette ``Request`` as an ``InputSource``. Form bodies are
read asynchronously by Starlette, so callers pass an already parsed payload
(``await request.form()``) when they want it merged in.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

from starlette.requests import Request

from .input import OLD_INPUT_KEY, InputSource, use_input


class RequestInput(InputSource):

    def __init__(self, request: Request, payload: Optional[Mapping[str, Any]] = None):
        self.request = request
        self.payload = dict(payload or {})

    def all(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.request.query_params)
        data.update(self.request.path_params)
        data.update(self.payload)
        return data

    def has_session(self) -> bool:
        return "session" in self.request.scope

    def flash(self) -> None:
        if self.has_session():
            self.request.session[OLD_INPUT_KEY] = self.all()

    def old(self, key: Optional[str] = None, default: Any = None) -> Any:
        if not self.has_session():
            return default
        old_input = self.request.session.get(OLD_INPUT_KEY, {})
        return old_input if key is None else old_input.get(key, default)


@contextmanager
def bind_request(request: Request, payload: Optional[Mapping[str, Any]] = None) -> Iterator[RequestInput]:
    """Make ``request`` the current input source inside the block."""
    with use_input(RequestInput(request, payload)) as source:
        yield source
