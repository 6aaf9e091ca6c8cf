"""
Relation resolver: turns a declared ``RelationDescriptor`` into a live relation handle.
"""

import logging
from typing import Any, Dict, Mapping

from .descriptors import KIND_SIGNATURES, RelationDescriptor, RelationKind
from .exceptions import (
    InvalidRelationKindError,
    MissingRequiredFieldError,
    MissingTargetTypeError,
    UnexpectedArgumentError,
    UnknownRelationError,
)
from .relations import Relation

logger = logging.getLogger(__name__)


class RelationResolver:
    """
    Validates a descriptor against its kind's signature and calls the matching
    relation constructor on the model.

    The relation name is passed in explicitly; BelongsTo and MorphTo infer
    their keys from it when none are declared.
    """

    def resolve(self, model: Any, relation_name: str) -> Relation:
        model_class = type(model)
        where = f"Relation '{relation_name}' on model '{model_class.__name__}'"

        declared = model_class.get_relation_descriptors()
        if relation_name not in declared:
            raise UnknownRelationError(f"{where} is not declared", relation_name, model_class)

        descriptor = RelationDescriptor.coerce(declared[relation_name])
        kind = self._coerce_kind(descriptor.kind, where, relation_name, model_class)

        if kind is RelationKind.MORPH_TO and descriptor.target is not None:
            raise UnexpectedArgumentError(
                f"{where}: a morph_to relation takes no target type, got {descriptor.target!r}",
                relation_name, model_class,
            )
        if kind.needs_target and descriptor.target is None:
            raise MissingTargetTypeError(
                f"{where}: a {kind.value} relation needs a target type", relation_name, model_class
            )

        signature = KIND_SIGNATURES[kind]
        unexpected = [name for name in descriptor.fields
                      if name not in signature.required and name not in signature.optional]
        if unexpected:
            raise UnexpectedArgumentError(
                f"{where}: unexpected field(s) for {kind.value}: {', '.join(unexpected)}",
                relation_name, model_class,
            )

        missing = [name for name in signature.required if not descriptor.has(name)]
        if missing:
            raise MissingRequiredFieldError(
                f"{where}: missing required field(s) for {kind.value}: {', '.join(missing)}",
                missing, relation_name, model_class,
            )

        arguments: Dict[str, Any] = dict(signature.optional)
        arguments.update(descriptor.fields)
        target = None
        if descriptor.target is not None:
            target = model_class.resolve_model_class(descriptor.target)

        logger.debug(f"{where}: resolving {kind.value} -> {getattr(target, '__name__', None)}")
        return self._dispatch(model, kind, target, arguments, relation_name)

    @staticmethod
    def _coerce_kind(kind: Any, where: str, relation_name: str, model_class: type) -> RelationKind:
        if isinstance(kind, RelationKind):
            return kind
        try:
            return RelationKind(kind)
        except ValueError:
            raise InvalidRelationKindError(
                f"{where}: unknown relation kind {kind!r}", relation_name, model_class
            ) from None

    @staticmethod
    def _dispatch(model: Any, kind: RelationKind, target: Any,
                  arguments: Mapping[str, Any], relation_name: str) -> Relation:
        if kind is RelationKind.HAS_ONE:
            return model.has_one(target, arguments["foreign_key"])
        if kind is RelationKind.HAS_MANY:
            return model.has_many(target, arguments["foreign_key"])
        if kind is RelationKind.BELONGS_TO:
            return model.belongs_to(target, arguments["foreign_key"], relation=relation_name)

        if kind is RelationKind.BELONGS_TO_MANY:
            relation = model.belongs_to_many(
                target, arguments["table"], arguments["foreign_key"], arguments["other_key"],
                relation=relation_name,
            )
            if arguments["pivot_keys"]:
                relation.with_pivot(arguments["pivot_keys"])
            if arguments["timestamps"]:
                relation.with_timestamps()
            return relation

        if kind is RelationKind.MORPH_TO:
            return model.morph_to(arguments["name"], arguments["type"], arguments["id"],
                                  relation=relation_name)
        if kind is RelationKind.MORPH_ONE:
            return model.morph_one(target, arguments["name"], arguments["type"], arguments["id"])
        return model.morph_many(target, arguments["name"], arguments["type"], arguments["id"])


resolver = RelationResolver()
