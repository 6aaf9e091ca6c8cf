from typing import Any, Iterable, Mapping, Optional

from ..persistence.base import PersistenceBackend

NO_EXCLUSION = (None, "", "NULL")


class PresenceVerifier:
    """Answers ``unique`` / ``exists`` questions against a persistence backend."""

    def __init__(self, backend: Optional[PersistenceBackend] = None):
        self._backend = backend

    @property
    def backend(self) -> PersistenceBackend:
        if self._backend is not None:
            return self._backend
        from ..app.configurator import get_backend
        return get_backend()

    def get_count(self, table: str, column: str, value: Any, exclude_id: Any = None,
                  id_column: Optional[str] = None, extra: Optional[Mapping[str, Any]] = None) -> int:
        where = {column: value, **dict(extra or {})}
        exclude = None
        if exclude_id not in NO_EXCLUSION:
            exclude = {id_column or "id": exclude_id}
        return self.backend.count(table, where, exclude)

    def get_multi_count(self, table: str, column: str, values: Iterable[Any],
                        extra: Optional[Mapping[str, Any]] = None) -> int:
        return self.backend.count(table, {column: list(values), **dict(extra or {})})
