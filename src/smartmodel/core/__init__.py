"""
SmartModel core: the base ORM, relations and the SmartModel class.
"""

from .collection import Collection
from .descriptors import (
    RelationDescriptor,
    RelationKind,
    belongs_to,
    belongs_to_many,
    has_many,
    has_one,
    morph_many,
    morph_one,
    morph_to,
)
from .events import ModelEventDispatcher, SaveHooks, dispatcher
from .exceptions import (
    InvalidModelError,
    InvalidRelationKindError,
    MissingRequiredFieldError,
    MissingTargetTypeError,
    ModelNotFoundError,
    RelationError,
    SmartModelError,
    UnexpectedArgumentError,
    UnknownModelError,
    UnknownRelationError,
    ValidationFailedError,
    ValidationVetoedError,
)
from .model import Model
from .relations import (
    BelongsTo,
    BelongsToMany,
    HasMany,
    HasOne,
    MorphMany,
    MorphOne,
    MorphTo,
    Relation,
)
from .resolver import RelationResolver, resolver
from .smart_model import SmartModel
from .unique_rules import build_unique_exclusion_rules

__all__ = [
    "Collection",
    "RelationDescriptor",
    "RelationKind",
    "belongs_to",
    "belongs_to_many",
    "has_many",
    "has_one",
    "morph_many",
    "morph_one",
    "morph_to",
    "ModelEventDispatcher",
    "SaveHooks",
    "dispatcher",
    "Model",
    "Relation",
    "BelongsTo",
    "BelongsToMany",
    "HasMany",
    "HasOne",
    "MorphMany",
    "MorphOne",
    "MorphTo",
    "RelationResolver",
    "resolver",
    "SmartModel",
    "build_unique_exclusion_rules",
    "SmartModelError",
    "RelationError",
    "UnknownRelationError",
    "InvalidRelationKindError",
    "MissingTargetTypeError",
    "UnexpectedArgumentError",
    "MissingRequiredFieldError",
    "UnknownModelError",
    "ModelNotFoundError",
    "InvalidModelError",
    "ValidationVetoedError",
    "ValidationFailedError",
]
