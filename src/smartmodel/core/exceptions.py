"""
SmartModel error taxonomy.

Descriptor errors (``RelationError`` subclasses) are programmer errors raised
the moment a badly declared relation is accessed. Validation errors are only
raised when a model opts into ``throw_on_validation``.
"""

from typing import Any, Iterable, Optional, Sequence


class SmartModelError(Exception):
    """Base class for every error raised by smartmodel."""


class RelationError(SmartModelError):
    """A relation declaration could not be turned into a relation handle."""

    def __init__(self, message: str, relation: Optional[str] = None, model: Optional[type] = None):
        super().__init__(message)
        self.relation = relation
        self.model = model


class UnknownRelationError(RelationError):
    pass


class InvalidRelationKindError(RelationError):
    pass


class MissingTargetTypeError(RelationError):
    pass


class UnexpectedArgumentError(RelationError):
    pass


class MissingRequiredFieldError(RelationError):
    """Raised with every missing descriptor field at once."""

    def __init__(self, message: str, missing_fields: Sequence[str],
                 relation: Optional[str] = None, model: Optional[type] = None):
        super().__init__(message, relation, model)
        self.missing_fields = tuple(missing_fields)


class UnknownModelError(SmartModelError, LookupError):
    """A model class name is not in the model registry."""


class ModelNotFoundError(SmartModelError):

    def __init__(self, model: type, ids: Iterable[Any] = ()):
        self.model = model
        self.ids = tuple(ids)
        ids_text = ", ".join(str(i) for i in self.ids)
        super().__init__(f"No query results for model [{model.__name__}] {ids_text}".rstrip())


class InvalidModelError(SmartModelError):
    """Base for validation errors; carries the model and its messages."""

    def __init__(self, model: Any, errors: Any = None, message: Optional[str] = None):
        self.model = model
        self.errors = errors
        super().__init__(message or f"Model {type(model).__name__} is invalid")


class ValidationVetoedError(InvalidModelError):

    def __init__(self, model: Any, errors: Any = None):
        super().__init__(model, errors, f"Validation of {type(model).__name__} was vetoed by a listener")


class ValidationFailedError(InvalidModelError):

    def __init__(self, model: Any, errors: Any = None):
        details = ""
        if errors is not None and hasattr(errors, "all"):
            details = ": " + "; ".join(errors.all())
        super().__init__(model, errors, f"Validation of {type(model).__name__} failed{details}")


__all__ = [
    "SmartModelError", "RelationError", "UnknownRelationError",
    "InvalidRelationKindError", "MissingTargetTypeError",
    "UnexpectedArgumentError", "MissingRequiredFieldError",
    "UnknownModelError", "ModelNotFoundError", "InvalidModelError",
    "ValidationVetoedError", "ValidationFailedError",
]
