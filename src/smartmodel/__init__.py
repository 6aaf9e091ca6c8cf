"""
SmartModel - Self-validating ActiveRecord models

Models declare their validation rules and relations on the class; saving
validates first, optionally purges form-only attributes and hashes
passwords, and relations load lazily the first time they are read.
"""

from .core import (
    Collection,
    Model,
    ModelEventDispatcher,
    RelationDescriptor,
    RelationKind,
    RelationResolver,
    SaveHooks,
    SmartModel,
    belongs_to,
    belongs_to_many,
    build_unique_exclusion_rules,
    has_many,
    has_one,
    morph_many,
    morph_one,
    morph_to,
)
from .core.exceptions import (
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
from .persistence import MemoryRepo, PersistenceBackend, SQLModelBackend, get_memory_persistence
from .validation import MessageBag, Rule, ValidationFactory, ValidationResult, Validator
from .hashing import Hasher, Pbkdf2Hasher
from .adapters import ArrayInput, InputSource, RequestInput, bind_request, use_input
from .app import Environment, SmartModelConfig, configure_smartmodel, reset_smartmodel

__version__ = "0.1.0"

__all__ = [
    # Models
    'Model',
    'SmartModel',
    'Collection',
    'ModelEventDispatcher',
    'SaveHooks',

    # Relations
    'RelationDescriptor',
    'RelationKind',
    'RelationResolver',
    'has_one',
    'has_many',
    'belongs_to',
    'belongs_to_many',
    'morph_to',
    'morph_one',
    'morph_many',
    'build_unique_exclusion_rules',

    # Errors
    'SmartModelError',
    'RelationError',
    'UnknownRelationError',
    'InvalidRelationKindError',
    'MissingTargetTypeError',
    'UnexpectedArgumentError',
    'MissingRequiredFieldError',
    'UnknownModelError',
    'ModelNotFoundError',
    'InvalidModelError',
    'ValidationVetoedError',
    'ValidationFailedError',

    # Collaborators
    'PersistenceBackend',
    'MemoryRepo',
    'get_memory_persistence',
    'SQLModelBackend',
    'MessageBag',
    'Rule',
    'ValidationFactory',
    'ValidationResult',
    'Validator',
    'Hasher',
    'Pbkdf2Hasher',
    'ArrayInput',
    'InputSource',
    'RequestInput',
    'bind_request',
    'use_input',

    # Configuration
    'Environment',
    'SmartModelConfig',
    'configure_smartmodel',
    'reset_smartmodel',
]
