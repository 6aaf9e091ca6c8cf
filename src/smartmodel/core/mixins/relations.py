"""
RelationsMixin: relations declared in ``__relations__`` and read like attributes.
"""

import logging
from typing import Any, ClassVar, Dict, Mapping, Optional

from ..relations import Relation
from ..resolver import RelationResolver, resolver
from ..utils import camel_case

logger = logging.getLogger(__name__)


class RelationsMixin:
    """
    Lazily resolves declared relations on attribute access.

    ``order.items`` returns the stored ``items`` attribute when it holds a
    value. Otherwise, if ``items`` (or its camelCase form) is a declared
    relation, the relation is resolved, its results are cached under the
    key that was read and returned. Later reads hit the cache until the
    relation is explicitly reloaded with ``load()``.
    """

    __relations__: ClassVar[Mapping[str, Any]] = {}
    relation_resolver: ClassVar[RelationResolver] = resolver

    @classmethod
    def get_relation_descriptors(cls) -> Dict[str, Any]:
        """Declared relations, including those inherited from base classes."""
        descriptors: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            descriptors.update(klass.__dict__.get("__relations__") or {})
        return descriptors

    @classmethod
    def relation_name_for(cls, key: str) -> Optional[str]:
        descriptors = cls.get_relation_descriptors()
        if key in descriptors:
            return key
        camel = camel_case(key)
        if camel in descriptors:
            return camel
        return None

    def get_attribute(self, key: str, default: Any = None) -> Any:
        # A stored None does not hide a relation of the same name
        if self._attributes.get(key) is not None:
            return self._attributes[key]

        if self.relation_loaded(key):
            return self.get_relation(key)

        relation_name = self.relation_name_for(key)
        if relation_name is None:
            return self._attributes.get(key, default)

        results = self.get_relation_value(relation_name)
        self.set_relation(key, results)
        return results

    def relation(self, name: str) -> Relation:
        """Return the relation handle for ``name`` without running it."""
        return self.relation_resolver.resolve(self, self.relation_name_for(name) or name)

    def get_relation_value(self, relation_name: str) -> Any:
        logger.debug(f"Loading relation '{relation_name}' for {type(self).__name__}")
        return self.relation_resolver.resolve(self, relation_name).get_results()
