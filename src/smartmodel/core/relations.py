"""
Relation handles.

A handle knows how to find the rows related to one parent model. Building a
handle runs no query; ``get()`` / ``first()`` / ``get_results()`` do.
"""

from typing import Any, ClassVar, Dict, List, Mapping, Optional, TYPE_CHECKING

from .collection import Collection
from .utils import utc_now

if TYPE_CHECKING:
    from .model import Model


class Relation:
    """Base class for all relation handles."""

    many: ClassVar[bool] = False

    def __init__(self, parent: "Model", related: Optional[type]):
        self.parent = parent
        self.related = related

    def get_constraints(self) -> Optional[Dict[str, Any]]:
        """Filters selecting the related rows, or None when nothing can match."""
        raise NotImplementedError

    def _select(self, limit: Optional[int] = None) -> Collection:
        constraints = self.get_constraints()
        if constraints is None or self.related is None:
            return Collection()
        rows = self.related.get_backend().select(self.related.get_table(), constraints, limit=limit)
        return self.related.hydrate(rows)

    def get(self) -> Collection:
        return self._select()

    def first(self) -> Optional["Model"]:
        return self._select(limit=1).first()

    def get_results(self) -> Any:
        """A Collection for "many" relations, a single model (or None) otherwise."""
        return self.get() if self.many else self.first()

    def count(self) -> int:
        constraints = self.get_constraints()
        if constraints is None or self.related is None:
            return 0
        return self.related.get_backend().count(self.related.get_table(), constraints)

    def __repr__(self) -> str:
        related = self.related.__name__ if self.related else None
        return f"<{type(self).__name__} {type(self.parent).__name__} -> {related}>"


class HasOneOrMany(Relation):

    def __init__(self, parent: "Model", related: type, foreign_key: str, local_key: str):
        super().__init__(parent, related)
        self.foreign_key = foreign_key
        self.local_key = local_key

    def get_parent_key(self) -> Any:
        return self.parent.get_raw_attribute(self.local_key)

    def get_constraints(self) -> Optional[Dict[str, Any]]:
        parent_key = self.get_parent_key()
        if parent_key is None:
            return None
        return {self.foreign_key: parent_key}

    def _link_attributes(self) -> Dict[str, Any]:
        return {self.foreign_key: self.get_parent_key()}

    def make(self, attributes: Optional[Mapping[str, Any]] = None) -> "Model":
        model = self.related(dict(attributes or {}))
        model.fill(self._link_attributes())
        return model

    def create(self, attributes: Optional[Mapping[str, Any]] = None) -> "Model":
        model = self.make(attributes)
        model.save()
        return model

    def save(self, model: "Model") -> "Model":
        model.fill(self._link_attributes())
        model.save()
        return model


class HasOne(HasOneOrMany):
    many = False


class HasMany(HasOneOrMany):
    many = True


class MorphOneOrMany(HasOneOrMany):
    """``foreign_key`` holds the parent id, ``morph_type`` the parent class name."""

    def __init__(self, parent: "Model", related: type, morph_type: str, foreign_key: str, local_key: str):
        super().__init__(parent, related, foreign_key, local_key)
        self.morph_type = morph_type
        self.morph_class = parent.get_morph_class()

    def get_constraints(self) -> Optional[Dict[str, Any]]:
        constraints = super().get_constraints()
        if constraints is not None:
            constraints[self.morph_type] = self.morph_class
        return constraints

    def _link_attributes(self) -> Dict[str, Any]:
        attributes = super()._link_attributes()
        attributes[self.morph_type] = self.morph_class
        return attributes


class MorphOne(MorphOneOrMany):
    many = False


class MorphMany(MorphOneOrMany):
    many = True


class BelongsTo(Relation):
    many = False

    def __init__(self, parent: "Model", related: Optional[type], foreign_key: str,
                 other_key: str, relation: Optional[str]):
        super().__init__(parent, related)
        self.foreign_key = foreign_key
        self.other_key = other_key
        self.relation = relation

    def get_constraints(self) -> Optional[Dict[str, Any]]:
        value = self.parent.get_raw_attribute(self.foreign_key)
        if value is None:
            return None
        return {self.other_key: value}

    def associate(self, model: "Model") -> "Model":
        self.parent.set_attribute(self.foreign_key, model.get_raw_attribute(self.other_key))
        if self.relation:
            self.parent.set_relation(self.relation, model)
        return self.parent

    def dissociate(self) -> "Model":
        self.parent.set_attribute(self.foreign_key, None)
        if self.relation:
            self.parent.set_relation(self.relation, None)
        return self.parent


class MorphTo(BelongsTo):
    """BelongsTo whose target class is read from the parent's ``morph_type`` column."""

    def __init__(self, parent: "Model", related: Optional[type], foreign_key: str,
                 other_key: str, morph_type: str, relation: Optional[str]):
        super().__init__(parent, related, foreign_key, other_key, relation)
        self.morph_type = morph_type

    def associate(self, model: "Model") -> "Model":
        self.parent.set_attribute(self.morph_type, model.get_morph_class())
        return super().associate(model)

    def dissociate(self) -> "Model":
        self.parent.set_attribute(self.morph_type, None)
        return super().dissociate()


class BelongsToMany(Relation):
    """Many-to-many through a pivot table holding ``foreign_key`` and ``other_key``."""

    many = True

    def __init__(self, parent: "Model", related: type, table: str, foreign_key: str,
                 other_key: str, relation: Optional[str] = None):
        super().__init__(parent, related)
        self.table = table
        self.foreign_key = foreign_key
        self.other_key = other_key
        self.relation = relation
        self.pivot_columns: List[str] = []
        self.pivot_timestamps = False

    def with_pivot(self, *columns: Any) -> "BelongsToMany":
        for column in columns:
            if isinstance(column, (list, tuple)):
                self.pivot_columns.extend(column)
            else:
                self.pivot_columns.append(column)
        return self

    def with_timestamps(self) -> "BelongsToMany":
        self.pivot_timestamps = True
        return self.with_pivot("created_at", "updated_at")

    def get_constraints(self) -> Optional[Dict[str, Any]]:
        parent_key = self.parent.get_key()
        if parent_key is None:
            return None
        return {self.foreign_key: parent_key}

    def _pivot_rows(self) -> List[Dict[str, Any]]:
        constraints = self.get_constraints()
        if constraints is None:
            return []
        return self.related.get_backend().select(self.table, constraints)

    def _select(self, limit: Optional[int] = None) -> Collection:
        pivots = {row[self.other_key]: row for row in self._pivot_rows()}
        if not pivots:
            return Collection()

        rows = self.related.get_backend().select(
            self.related.get_table(), {self.related.primary_key: list(pivots)}, limit=limit
        )
        models = self.related.hydrate(rows)
        pivot_keys = [self.foreign_key, self.other_key, *self.pivot_columns]
        for model in models:
            pivot = pivots.get(model.get_key(), {})
            model.set_relation("pivot", {key: pivot.get(key) for key in pivot_keys})
        return models

    def count(self) -> int:
        return len(self._pivot_rows())

    def attach(self, ids: Any, attributes: Optional[Mapping[str, Any]] = None) -> None:
        backend = self.related.get_backend()
        for related_id in self._ids(ids):
            row = {self.foreign_key: self.parent.get_key(), self.other_key: related_id}
            if self.pivot_timestamps:
                now = utc_now()
                row.update(created_at=now, updated_at=now)
            row.update(attributes or {})
            backend.insert(self.table, row)

    def detach(self, ids: Any = None) -> int:
        where: Dict[str, Any] = {self.foreign_key: self.parent.get_key()}
        if ids is not None:
            where[self.other_key] = self._ids(ids)
        return self.related.get_backend().delete(self.table, where)

    @staticmethod
    def _ids(ids: Any) -> List[Any]:
        if not isinstance(ids, (list, tuple, set, Collection)):
            ids = [ids]
        return [item.get_key() if hasattr(item, "get_key") else item for item in ids]
