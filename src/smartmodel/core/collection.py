"""
Model collections.

A ``Collection`` is a list of models with key-aware helpers. Relation
handles with "many" cardinality return one.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional


def _key_of(item: Any) -> Any:
    return item.get_key() if hasattr(item, "get_key") else item


class Collection(list):

    def find(self, key: Any, default: Any = None) -> Any:
        """Find a model by primary key (or return the model if one is given)."""
        if hasattr(key, "get_key"):
            key = key.get_key()
        for model in self:
            if model.get_key() == key:
                return model
        return default

    def load(self, *relations: str) -> "Collection":
        """Resolve the named relations on every model, refreshing their caches."""
        for model in self:
            model.load(*relations)
        return self

    def add(self, item: Any) -> "Collection":
        self.append(item)
        return self

    def contains(self, key: Any, value: Any = None) -> bool:
        if callable(key) and not hasattr(key, "get_key"):
            return any(key(model) for model in self)
        if value is not None:
            return any(model.get_attribute(key) == value for model in self)
        return self.find(key) is not None

    def fetch(self, key: str) -> List[Any]:
        return [model.get_attribute(key) for model in self]

    pluck = fetch

    def max(self, key: str) -> Any:
        values = [v for v in self.fetch(key) if v is not None]
        return max(values) if values else None

    def min(self, key: str) -> Any:
        values = [v for v in self.fetch(key) if v is not None]
        return min(values) if values else None

    def model_keys(self) -> List[Any]:
        return [model.get_key() for model in self]

    def merge(self, items: Iterable[Any]) -> "Collection":
        dictionary = self.get_dictionary()
        for item in items:
            dictionary[item.get_key()] = item
        return type(self)(dictionary.values())

    def diff(self, items: Iterable[Any]) -> "Collection":
        other = {_key_of(item) for item in items}
        return type(self)(model for model in self if model.get_key() not in other)

    def intersect(self, items: Iterable[Any]) -> "Collection":
        other = {_key_of(item) for item in items}
        return type(self)(model for model in self if model.get_key() in other)

    def unique(self) -> "Collection":
        return type(self)(self.get_dictionary().values())

    def filter(self, callback: Optional[Callable[[Any], bool]] = None) -> "Collection":
        return type(self)(model for model in self if (callback(model) if callback else model))

    def first(self, default: Any = None) -> Any:
        return self[0] if self else default

    def get_dictionary(self, items: Optional[Iterable[Any]] = None) -> Dict[Any, Any]:
        dictionary: Dict[Any, Any] = {}
        for model in (self if items is None else items):
            dictionary[model.get_key()] = model
        return dictionary

    def to_base(self) -> List[Any]:
        return list(self)

    def to_list(self) -> List[Dict[str, Any]]:
        return [model.to_dict() if hasattr(model, "to_dict") else model for model in self]

    def __repr__(self) -> str:
        return f"Collection({list.__repr__(self)})"
