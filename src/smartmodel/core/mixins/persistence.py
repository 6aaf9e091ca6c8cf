"""
SmartPersistenceMixin: validated saves with attribute purging and password hashing.
"""

import logging
from typing import Any, Callable, ClassVar, List, Mapping, Optional, Sequence, TYPE_CHECKING

from ...validation import RuleSet
from ..events import Listener, SaveHooks
from ..unique_rules import build_unique_exclusion_rules

if TYPE_CHECKING:
    from ...hashing import Hasher

logger = logging.getLogger(__name__)

PurgeFilter = Callable[[str], bool]


def _is_confirmation(key: str) -> bool:
    return key.endswith("_confirmation")


def _is_control_field(key: str) -> bool:
    return key in ("_method", "_token")


DEFAULT_PURGE_FILTERS: Sequence[PurgeFilter] = (_is_confirmation, _is_control_field)


class SmartPersistenceMixin:
    """
    Save lifecycle: validate, gate, purge, hash, persist.

    Class options:
        auto_purge_redundant_attributes: Drop attributes matched by a purge filter before saving
        purge_filters: Extra predicates; one returning True drops the attribute
        auto_hash_password_attributes: Hash changed ``password_attributes`` before saving
        password_attributes: Names of the attributes holding passwords
        hasher: Hasher to use instead of the configured one
        throw_on_find: Make ``find`` raise ``ModelNotFoundError`` like ``find_or_fail``
    """

    auto_purge_redundant_attributes: ClassVar[bool] = False
    purge_filters: ClassVar[List[PurgeFilter]] = []

    auto_hash_password_attributes: ClassVar[bool] = False
    password_attributes: ClassVar[Sequence[str]] = ("password",)
    hasher: ClassVar[Optional["Hasher"]] = None

    throw_on_find: ClassVar[bool] = False

    def save(self, rules: Optional[Mapping[str, Any]] = None, messages: Optional[Mapping[str, str]] = None,
             options: Optional[Mapping[str, Any]] = None, before_save: Optional[Listener] = None,
             after_save: Optional[Listener] = None, force: bool = False) -> bool:
        """
        Validate, then persist when validation passed or ``force`` is set.

        ``before_save`` / ``after_save`` run for this call only; ``before_save``
        returning False cancels the save.
        """
        valid = self.validate(rules, messages)
        if not (force or valid):
            logger.debug(f"{type(self).__name__} not saved: validation failed")
            return False

        return super().save(options, hooks=SaveHooks.of(before_save, after_save))

    def prepare_for_persist(self) -> None:
        super().prepare_for_persist()
        if self.auto_purge_redundant_attributes:
            self.purge_redundant_attributes()
        if self.auto_hash_password_attributes:
            self.hash_password_attributes()

    def force_save(self, rules: Optional[Mapping[str, Any]] = None, messages: Optional[Mapping[str, str]] = None,
                   options: Optional[Mapping[str, Any]] = None, before_save: Optional[Listener] = None,
                   after_save: Optional[Listener] = None) -> bool:
        """Save even when validation fails; errors are still recorded."""
        return self.save(rules, messages, options, before_save, after_save, force=True)

    def update_uniques(self, rules: Optional[Mapping[str, Any]] = None, messages: Optional[Mapping[str, str]] = None,
                       options: Optional[Mapping[str, Any]] = None, before_save: Optional[Listener] = None,
                       after_save: Optional[Listener] = None) -> bool:
        """Save with ``unique`` rules that ignore this model's own row."""
        rules = self.build_unique_exclusion_rules(rules)
        return self.save(rules, messages, options, before_save, after_save)

    def validate_uniques(self, rules: Optional[Mapping[str, Any]] = None,
                         messages: Optional[Mapping[str, str]] = None) -> bool:
        return self.validate(self.build_unique_exclusion_rules(rules), messages)

    def build_unique_exclusion_rules(self, rules: Optional[Mapping[str, Any]] = None) -> RuleSet:
        return build_unique_exclusion_rules(
            self.rules if rules is None else rules, self.get_table(), self.primary_key, self.get_key()
        )

    def add_purge_filter(self, predicate: PurgeFilter) -> None:
        self._purge_filters.append(predicate)

    def get_purge_filters(self) -> List[PurgeFilter]:
        return [*DEFAULT_PURGE_FILTERS, *self.purge_filters, *self._purge_filters]

    def purge_redundant_attributes(self) -> None:
        filters = self.get_purge_filters()
        attributes = self.get_attributes()
        kept = {key: value for key, value in attributes.items() if not any(purge(key) for purge in filters)}
        if len(kept) != len(attributes):
            logger.debug(f"Purged {sorted(set(attributes) - set(kept))} from {type(self).__name__}")
        self.set_raw_attributes(kept)

    def hash_password_attributes(self) -> None:
        """Hash password attributes whose value changed since the last save."""
        hasher = self.hasher
        if hasher is None:
            from ...app.configurator import get_hasher
            hasher = get_hasher()

        for key in self.password_attributes:
            value = self.get_raw_attribute(key)
            if value is None or value == self.get_original(key):
                continue
            self.set_attribute(key, hasher.make(value))
            logger.debug(f"Hashed '{key}' on {type(self).__name__}")

    @classmethod
    def find(cls, id: Any) -> Any:
        if cls.throw_on_find:
            return cls.find_or_fail(id)
        return super().find(id)
