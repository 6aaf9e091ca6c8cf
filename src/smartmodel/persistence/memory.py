"""
SmartModel Persistence Layer - Memory Backend

In-memory table store for development and testing.
Data is lost when the process exits.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from .base import MULTI_VALUE_TYPES, PersistenceBackend, Row

logger = logging.getLogger(__name__)


def _matches(row: Mapping[str, Any], where: Optional[Mapping[str, Any]]) -> bool:
    if not where:
        return True
    for column, expected in where.items():
        value = row.get(column)
        if isinstance(expected, MULTI_VALUE_TYPES):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def _excluded(row: Mapping[str, Any], exclude: Optional[Mapping[str, Any]]) -> bool:
    if not exclude:
        return False
    # Exclusion values usually come from rule strings, so compare as text
    return all(str(row.get(column)) == str(value) for column, value in exclude.items())


class MemoryRepo(PersistenceBackend):
    """
    In-memory persistence implementation.

    Tables are created on first write. Integer keys are generated per table
    when an insert does not carry its own key.
    """

    def __init__(self):
        self._tables: Dict[str, List[Row]] = {}
        self._sequences: Dict[str, int] = {}

    def select(self, table: str, where: Optional[Mapping[str, Any]] = None,
               limit: Optional[int] = None) -> List[Row]:
        rows = [copy.deepcopy(row) for row in self._tables.get(table, []) if _matches(row, where)]
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table: str, values: Mapping[str, Any], key_name: Optional[str] = None) -> Any:
        row = copy.deepcopy(dict(values))
        key = None
        if key_name:
            key = row.get(key_name)
            if key is None:
                key = self._sequences.get(table, 0) + 1
                row[key_name] = key
            if isinstance(key, int):
                self._sequences[table] = max(self._sequences.get(table, 0), key)
        self._tables.setdefault(table, []).append(row)
        logger.debug(f"Inserted row into {table} with key {key!r}")
        return key

    def update(self, table: str, where: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        touched = 0
        for row in self._tables.get(table, []):
            if _matches(row, where):
                row.update(copy.deepcopy(dict(values)))
                touched += 1
        return touched

    def delete(self, table: str, where: Mapping[str, Any]) -> int:
        rows = self._tables.get(table, [])
        kept = [row for row in rows if not _matches(row, where)]
        self._tables[table] = kept
        return len(rows) - len(kept)

    def count(self, table: str, where: Optional[Mapping[str, Any]] = None,
              exclude: Optional[Mapping[str, Any]] = None) -> int:
        return sum(
            1 for row in self._tables.get(table, [])
            if _matches(row, where) and not _excluded(row, exclude)
        )

    def truncate(self, table: Optional[str] = None) -> None:
        """Drop all rows of one table, or of every table."""
        if table is None:
            self._tables.clear()
            self._sequences.clear()
        else:
            self._tables.pop(table, None)
            self._sequences.pop(table, None)

    def tables(self) -> List[str]:
        return list(self._tables)


_default_memory_repo: Optional[MemoryRepo] = None


def get_memory_persistence() -> MemoryRepo:
    """Get the shared process-wide memory store."""
    global _default_memory_repo
    if _default_memory_repo is None:
        _default_memory_repo = MemoryRepo()
    return _default_memory_repo
