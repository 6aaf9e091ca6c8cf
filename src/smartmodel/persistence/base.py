"""
SmartModel Persistence Layer - Base Classes

This module provides the abstract interface every row store implements.
Models talk to a backend in terms of table names and plain dict rows, so the
same model code runs against the in-memory store and a SQL database.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

Row = Dict[str, Any]

MULTI_VALUE_TYPES = (list, tuple, set, frozenset)


class PersistenceBackend(ABC):
    """
    Abstract base class for table-oriented persistence backends.

    ``where`` mappings are equality filters joined with AND. A list, tuple or
    set value turns that filter into an IN clause. ``exclude`` mappings drop
    rows whose column equals the given value.
    """

    @abstractmethod
    def select(self, table: str, where: Optional[Mapping[str, Any]] = None,
               limit: Optional[int] = None) -> List[Row]:
        """
        Fetch rows from a table.

        Args:
            table: Table name
            where: Optional equality / IN filters
            limit: Optional maximum number of rows

        Returns:
            List of rows as dictionaries
        """
        pass

    @abstractmethod
    def insert(self, table: str, values: Mapping[str, Any], key_name: Optional[str] = None) -> Any:
        """
        Insert a row.

        Args:
            table: Table name
            values: Column values
            key_name: Primary key column, generated when absent from ``values``

        Returns:
            The primary key of the new row, or None when no key column is given
        """
        pass

    @abstractmethod
    def update(self, table: str, where: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        """Update matching rows and return the number of rows touched."""
        pass

    @abstractmethod
    def delete(self, table: str, where: Mapping[str, Any]) -> int:
        """Delete matching rows and return the number of rows removed."""
        pass

    @abstractmethod
    def count(self, table: str, where: Optional[Mapping[str, Any]] = None,
              exclude: Optional[Mapping[str, Any]] = None) -> int:
        """Count matching rows, leaving out rows matched by ``exclude``."""
        pass
