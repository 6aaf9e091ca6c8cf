"""
Model: a small ActiveRecord base class.

A model is a bag of named attributes backed by one row of a table in the
configured ``PersistenceBackend``. It tracks the last persisted values so it
can tell which attributes changed, keeps a cache of loaded relations, and
fires lifecycle events around save and delete.
"""

import logging
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Union, TYPE_CHECKING

from .collection import Collection
from .events import Listener, ModelEventDispatcher, SaveHooks, dispatcher as default_dispatcher, hook_methods
from .exceptions import ModelNotFoundError, UnknownModelError
from .relations import BelongsTo, BelongsToMany, HasMany, HasOne, MorphMany, MorphOne, MorphTo
from .utils import pluralize, snake_case, utc_now

if TYPE_CHECKING:
    from ..persistence import PersistenceBackend

logger = logging.getLogger(__name__)


class Model:
    """
    ActiveRecord base model.

    Attributes are read and written with attribute or item syntax::

        user = User(name="ada")
        user.email = "ada@example.com"
        user["name"]  # "ada"
        user.save()

    Class options:
        table: Table name, defaults to the pluralised snake_case class name
        primary_key: Name of the identifier column
        incrementing: Whether the backend generates the identifier
        timestamps: Stamp ``created_at`` / ``updated_at`` on save
        persistence_backend: Backend for this model, defaults to the configured one
    """

    table: ClassVar[Optional[str]] = None
    primary_key: ClassVar[str] = "id"
    incrementing: ClassVar[bool] = True
    timestamps: ClassVar[bool] = False
    persistence_backend: ClassVar[Optional["PersistenceBackend"]] = None
    event_dispatcher: ClassVar[ModelEventDispatcher] = default_dispatcher

    CREATED_AT: ClassVar[str] = "created_at"
    UPDATED_AT: ClassVar[str] = "updated_at"

    _registry: ClassVar[Dict[str, type]] = {}

    exists: bool = False

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        Model._registry[cls.__name__] = cls
        cls.boot()

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        object.__setattr__(self, "_attributes", {})
        object.__setattr__(self, "_original", {})
        object.__setattr__(self, "_relations", {})
        self.fill(attributes, **kwargs)

    @classmethod
    def boot(cls) -> None:
        """Register ``before_save`` / ``after_save`` style methods as event listeners."""
        for method_name, event in hook_methods():
            method = getattr(cls, method_name, None)
            if callable(method):
                cls.on(event, method)

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        return self.get_attribute(key)

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith("_") or hasattr(type(self), key):
            object.__setattr__(self, key, value)
        else:
            self.set_attribute(key, value)

    def __getitem__(self, key: str) -> Any:
        return self.get_attribute(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set_attribute(key, value)

    def __delitem__(self, key: str) -> None:
        self._attributes.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._attributes or key in self._relations

    def fill(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Model":
        for key, value in {**(attributes or {}), **kwargs}.items():
            self.set_attribute(key, value)
        return self

    def get_attribute(self, key: str, default: Any = None) -> Any:
        if key in self._attributes:
            return self._attributes[key]
        if key in self._relations:
            return self._relations[key]
        return default

    def get_raw_attribute(self, key: str, default: Any = None) -> Any:
        """Read a stored attribute without consulting relations."""
        return self._attributes.get(key, default)

    def set_attribute(self, key: str, value: Any) -> "Model":
        self._attributes[key] = value
        return self

    def get_attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def set_raw_attributes(self, attributes: Mapping[str, Any], sync: bool = False) -> "Model":
        object.__setattr__(self, "_attributes", dict(attributes))
        if sync:
            self.sync_original()
        return self

    def get_original(self, key: Optional[str] = None, default: Any = None) -> Any:
        if key is None:
            return dict(self._original)
        return self._original.get(key, default)

    def sync_original(self) -> "Model":
        object.__setattr__(self, "_original", dict(self._attributes))
        return self

    def get_dirty(self) -> Dict[str, Any]:
        return {
            key: value for key, value in self._attributes.items()
            if key not in self._original or self._original[key] != value
        }

    def is_dirty(self, *keys: str) -> bool:
        dirty = self.get_dirty()
        if not keys:
            return bool(dirty)
        return any(key in dirty for key in keys)

    def get_key(self) -> Any:
        return self._attributes.get(self.primary_key)

    def to_dict(self) -> Dict[str, Any]:
        return self.get_attributes()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._attributes!r}>"

    # ------------------------------------------------------------------
    # Relation cache
    # ------------------------------------------------------------------

    def set_relation(self, name: str, value: Any) -> "Model":
        self._relations[name] = value
        return self

    def get_relation(self, name: str, default: Any = None) -> Any:
        return self._relations.get(name, default)

    def relation_loaded(self, name: str) -> bool:
        return name in self._relations

    def unset_relation(self, name: str) -> "Model":
        self._relations.pop(name, None)
        return self

    def get_relations(self) -> Dict[str, Any]:
        return dict(self._relations)

    def load(self, *names: str) -> "Model":
        """Re-fetch the named relations, replacing whatever is cached."""
        for name in names:
            self.unset_relation(name)
            self.get_attribute(name)
        return self

    # ------------------------------------------------------------------
    # Naming and registry
    # ------------------------------------------------------------------

    @classmethod
    def get_table(cls) -> str:
        return cls.table or pluralize(snake_case(cls.__name__))

    @classmethod
    def get_foreign_key(cls) -> str:
        return f"{snake_case(cls.__name__)}_{cls.primary_key}"

    @classmethod
    def get_morph_class(cls) -> str:
        return cls.__name__

    @classmethod
    def resolve_model_class(cls, target: Union[type, str]) -> type:
        if isinstance(target, type):
            return target
        try:
            return Model._registry[target]
        except KeyError:
            raise UnknownModelError(f"Unknown model class '{target}'") from None

    @classmethod
    def get_backend(cls) -> "PersistenceBackend":
        if cls.persistence_backend is not None:
            return cls.persistence_backend
        from ..app.configurator import get_backend
        return get_backend()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @classmethod
    def on(cls, event: str, callback: Listener, once: bool = False) -> None:
        cls.event_dispatcher.listen(cls, event, callback, once)

    @classmethod
    def flush_event_listeners(cls) -> None:
        cls.event_dispatcher.forget(cls)

    def fire_model_event(self, event: str, halt: bool = True) -> bool:
        return self.event_dispatcher.fire(self, event, halt)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def uses_timestamps(self, options: Mapping[str, Any]) -> bool:
        return bool(options.get("timestamps", self.timestamps))

    def save(self, options: Optional[Mapping[str, Any]] = None, *, hooks: Optional[SaveHooks] = None) -> bool:
        """
        Insert or update the row for this model.

        Args:
            options: ``{"timestamps": False}`` skips timestamp stamping for this call
            hooks: Callbacks run for this call only, after the ``saving`` listeners

        Attribute changes made by ``prepare_for_persist`` are undone when the
        ``creating`` or ``updating`` listeners veto the write.

        Returns:
            False when a listener or hook vetoed the save
        """
        options = dict(options or {})

        if self.fire_model_event("saving") is False:
            return False
        if hooks is not None and not hooks.run_before(self):
            logger.debug(f"{type(self).__name__} save vetoed by a before-save hook")
            return False

        attributes = dict(self._attributes)
        self.prepare_for_persist()

        saved = self._perform_update(options) if self.exists else self._perform_insert(options)
        if saved:
            self.fire_model_event("saved", halt=False)
            if hooks is not None:
                hooks.run_after(self)
            self.sync_original()
        else:
            self.set_raw_attributes(attributes)
        return saved

    def prepare_for_persist(self) -> None:
        """Adjust attributes once nothing before the write can cancel the save."""

    def _perform_insert(self, options: Mapping[str, Any]) -> bool:
        if self.fire_model_event("creating") is False:
            return False

        if self.uses_timestamps(options):
            now = utc_now()
            self._attributes[self.CREATED_AT] = now
            self._attributes[self.UPDATED_AT] = now

        attributes = dict(self._attributes)
        key_name = None
        if self.incrementing:
            key_name = self.primary_key
            if attributes.get(key_name) is None:
                attributes.pop(key_name, None)

        key = self.get_backend().insert(self.get_table(), attributes, key_name=key_name)
        if key_name and key is not None:
            self._attributes[key_name] = key

        self.exists = True
        logger.debug(f"Inserted {type(self).__name__} {self.get_key()!r}")
        self.fire_model_event("created", halt=False)
        return True

    def _perform_update(self, options: Mapping[str, Any]) -> bool:
        if not self.get_dirty():
            return True
        if self.fire_model_event("updating") is False:
            return False

        if self.uses_timestamps(options):
            self._attributes[self.UPDATED_AT] = utc_now()

        self.get_backend().update(self.get_table(), {self.primary_key: self.get_key()}, self.get_dirty())
        logger.debug(f"Updated {type(self).__name__} {self.get_key()!r}")
        self.fire_model_event("updated", halt=False)
        return True

    def delete(self) -> bool:
        if not self.exists:
            return False
        if self.fire_model_event("deleting") is False:
            return False

        self.get_backend().delete(self.get_table(), {self.primary_key: self.get_key()})
        self.exists = False
        self.fire_model_event("deleted", halt=False)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @classmethod
    def new_from_row(cls, row: Mapping[str, Any]) -> "Model":
        model = cls()
        model.set_raw_attributes(row, sync=True)
        model.exists = True
        return model

    @classmethod
    def hydrate(cls, rows: Iterable[Mapping[str, Any]]) -> Collection:
        return Collection(cls.new_from_row(row) for row in rows)

    @classmethod
    def _select(cls, where: Optional[Mapping[str, Any]] = None, limit: Optional[int] = None) -> Collection:
        return cls.hydrate(cls.get_backend().select(cls.get_table(), where, limit=limit))

    @classmethod
    def _find(cls, id: Any) -> Any:
        if isinstance(id, (list, tuple, set)):
            return cls.find_many(id)
        return cls._select({cls.primary_key: id}, limit=1).first()

    @classmethod
    def find(cls, id: Any) -> Any:
        """Find a model by primary key; a list of keys returns a Collection."""
        return cls._find(id)

    @classmethod
    def find_or_fail(cls, id: Any) -> Any:
        result = cls._find(id)
        if isinstance(id, (list, tuple, set)):
            if len(result) != len(set(id)):
                raise ModelNotFoundError(cls, id)
            return result
        if result is None:
            raise ModelNotFoundError(cls, [id])
        return result

    @classmethod
    def find_many(cls, ids: Iterable[Any]) -> Collection:
        ids = list(ids)
        if not ids:
            return Collection()
        return cls._select({cls.primary_key: ids})

    @classmethod
    def all(cls) -> Collection:
        return cls._select()

    @classmethod
    def where(cls, **filters: Any) -> Collection:
        return cls._select(filters)

    @classmethod
    def first_where(cls, **filters: Any) -> Optional["Model"]:
        return cls._select(filters, limit=1).first()

    @classmethod
    def create(cls, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Model":
        model = cls(attributes, **kwargs)
        model.save()
        return model

    @classmethod
    def destroy(cls, *ids: Any) -> int:
        deleted = 0
        for model in cls.find_many(ids):
            if model.delete():
                deleted += 1
        return deleted

    def fresh(self) -> Optional["Model"]:
        if not self.exists:
            return None
        return type(self)._find(self.get_key())

    # ------------------------------------------------------------------
    # Relation constructors
    # ------------------------------------------------------------------

    def has_one(self, related: Union[type, str], foreign_key: Optional[str] = None,
                local_key: Optional[str] = None) -> HasOne:
        related = self.resolve_model_class(related)
        return HasOne(self, related, foreign_key or self.get_foreign_key(), local_key or self.primary_key)

    def has_many(self, related: Union[type, str], foreign_key: Optional[str] = None,
                 local_key: Optional[str] = None) -> HasMany:
        related = self.resolve_model_class(related)
        return HasMany(self, related, foreign_key or self.get_foreign_key(), local_key or self.primary_key)

    def belongs_to(self, related: Union[type, str], foreign_key: Optional[str] = None,
                   other_key: Optional[str] = None, relation: Optional[str] = None) -> BelongsTo:
        related = self.resolve_model_class(related)
        if foreign_key is None:
            if relation is None:
                raise ValueError("belongs_to needs a relation name to infer its foreign key")
            foreign_key = f"{snake_case(relation)}_id"
        return BelongsTo(self, related, foreign_key, other_key or related.primary_key, relation)

    def belongs_to_many(self, related: Union[type, str], table: Optional[str] = None,
                        foreign_key: Optional[str] = None, other_key: Optional[str] = None,
                        relation: Optional[str] = None) -> BelongsToMany:
        related = self.resolve_model_class(related)
        if table is None:
            table = "_".join(sorted([snake_case(type(self).__name__), snake_case(related.__name__)]))
        return BelongsToMany(
            self, related, table,
            foreign_key or self.get_foreign_key(),
            other_key or related.get_foreign_key(),
            relation,
        )

    def morph_to(self, name: Optional[str] = None, type: Optional[str] = None,
                 id: Optional[str] = None, relation: Optional[str] = None) -> MorphTo:
        if name is None:
            if relation is None:
                raise ValueError("morph_to needs a name or a relation name")
            name = snake_case(relation)
        type = type or f"{name}_type"
        id = id or f"{name}_id"

        class_name = self.get_raw_attribute(type)
        related = self.resolve_model_class(class_name) if class_name else None
        other_key = related.primary_key if related else "id"
        return MorphTo(self, related, id, other_key, type, relation)

    def _morph_columns(self, name: Optional[str], type: Optional[str], id: Optional[str]):
        if name is None and (type is None or id is None):
            raise ValueError("morph relations need a name or both type and id columns")
        return type or f"{name}_type", id or f"{name}_id"

    def morph_one(self, related: Union[type, str], name: Optional[str] = None, type: Optional[str] = None,
                  id: Optional[str] = None, local_key: Optional[str] = None) -> MorphOne:
        related = self.resolve_model_class(related)
        type, id = self._morph_columns(name, type, id)
        return MorphOne(self, related, type, id, local_key or self.primary_key)

    def morph_many(self, related: Union[type, str], name: Optional[str] = None, type: Optional[str] = None,
                   id: Optional[str] = None, local_key: Optional[str] = None) -> MorphMany:
        related = self.resolve_model_class(related)
        type, id = self._morph_columns(name, type, id)
        return MorphMany(self, related, type, id, local_key or self.primary_key)
