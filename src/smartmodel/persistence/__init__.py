"""
SmartModel Persistence Module

Row stores models read from and write to.
"""

from .base import PersistenceBackend, Row
from .memory import MemoryRepo, get_memory_persistence
from .sql import SQLModelBackend

__all__ = [
    "PersistenceBackend",
    "Row",
    "MemoryRepo",
    "get_memory_persistence",
    "SQLModelBackend",
]
