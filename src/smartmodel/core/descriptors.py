"""
Relation descriptors.

A model declares its relations once, in the ``__relations__`` class attribute::

    class Order(SmartModel):
        __relations__ = {
            "items": has_many("Item", foreign_key="order_id"),
            "customer": belongs_to("Customer"),
        }

A descriptor records which fields were given; a field passed as ``None`` is
present, a field left out is absent.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union


class RelationKind(str, Enum):
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    BELONGS_TO_MANY = "belongs_to_many"
    MORPH_TO = "morph_to"
    MORPH_ONE = "morph_one"
    MORPH_MANY = "morph_many"

    @property
    def many(self) -> bool:
        return self in (RelationKind.HAS_MANY, RelationKind.BELONGS_TO_MANY, RelationKind.MORPH_MANY)

    @property
    def needs_target(self) -> bool:
        return self is not RelationKind.MORPH_TO


@dataclass(frozen=True)
class KindSignature:
    required: Tuple[str, ...] = ()
    optional: Mapping[str, Any] = field(default_factory=dict)


KIND_SIGNATURES: Dict[RelationKind, KindSignature] = {
    RelationKind.HAS_ONE: KindSignature(optional={"foreign_key": None}),
    RelationKind.HAS_MANY: KindSignature(optional={"foreign_key": None}),
    RelationKind.BELONGS_TO: KindSignature(optional={"foreign_key": None}),
    RelationKind.BELONGS_TO_MANY: KindSignature(
        required=("table", "foreign_key", "other_key"),
        optional={"pivot_keys": None, "timestamps": False},
    ),
    RelationKind.MORPH_TO: KindSignature(required=("name", "type", "id")),
    RelationKind.MORPH_ONE: KindSignature(required=("type", "id"), optional={"name": None}),
    RelationKind.MORPH_MANY: KindSignature(required=("type", "id"), optional={"name": None}),
}


@dataclass(frozen=True)
class RelationDescriptor:
    """Immutable declaration of one relation; ``kind`` is checked when resolved."""

    kind: Union[RelationKind, str]
    target: Optional[Union[type, str]] = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def coerce(cls, value: Any) -> "RelationDescriptor":
        """Accept a descriptor or a mapping with ``kind``/``target`` plus fields."""
        if isinstance(value, RelationDescriptor):
            return value
        if isinstance(value, Mapping):
            fields = dict(value)
            kind = fields.pop("kind", None)
            target = fields.pop("target", None)
            return cls(kind, target, fields)
        raise TypeError(f"Cannot build a relation descriptor from {value!r}")

    def has(self, name: str) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


def has_one(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.HAS_ONE, target, fields)


def has_many(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.HAS_MANY, target, fields)


def belongs_to(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.BELONGS_TO, target, fields)


def belongs_to_many(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.BELONGS_TO_MANY, target, fields)


def morph_to(**fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.MORPH_TO, None, fields)


def morph_one(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.MORPH_ONE, target, fields)


def morph_many(target: Union[type, str], **fields: Any) -> RelationDescriptor:
    return RelationDescriptor(RelationKind.MORPH_MANY, target, fields)
