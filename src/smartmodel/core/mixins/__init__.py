"""
SmartModel mixins.
"""

from .persistence import DEFAULT_PURGE_FILTERS, SmartPersistenceMixin
from .relations import RelationsMixin
from .validation import ValidationMixin

__all__ = ["DEFAULT_PURGE_FILTERS", "RelationsMixin", "SmartPersistenceMixin", "ValidationMixin"]
