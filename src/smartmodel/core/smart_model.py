"""
SmartModel: a self-validating ActiveRecord model.

Example:
    ```python
    class Order(SmartModel):
        rules = {"reference": "required|alpha_dash"}
        __relations__ = {
            "items": has_many("Item", foreign_key="order_id"),
            "customer": belongs_to("Customer"),
        }

    order = Order(reference="A-17")
    if order.save():
        order.items  # resolved once, then cached
    else:
        order.errors().all()
    ```
"""

from typing import Any, ClassVar, Mapping, Optional

from ..validation import MessageBag
from .descriptors import RelationKind
from .mixins import RelationsMixin, SmartPersistenceMixin, ValidationMixin
from .model import Model


class SmartModel(RelationsMixin, ValidationMixin, SmartPersistenceMixin, Model):

    HAS_ONE: ClassVar[RelationKind] = RelationKind.HAS_ONE
    HAS_MANY: ClassVar[RelationKind] = RelationKind.HAS_MANY
    BELONGS_TO: ClassVar[RelationKind] = RelationKind.BELONGS_TO
    BELONGS_TO_MANY: ClassVar[RelationKind] = RelationKind.BELONGS_TO_MANY
    MORPH_TO: ClassVar[RelationKind] = RelationKind.MORPH_TO
    MORPH_ONE: ClassVar[RelationKind] = RelationKind.MORPH_ONE
    MORPH_MANY: ClassVar[RelationKind] = RelationKind.MORPH_MANY

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        object.__setattr__(self, "_validation_errors", MessageBag())
        object.__setattr__(self, "_purge_filters", [])
        super().__init__(attributes, **kwargs)
