"""
SmartModel Relation Tests

🧪 Relation descriptors and resolution:
- descriptor errors for every relation kind
- key inference from the declared relation name
- lazy loading and caching through attribute access
"""

from unittest.mock import patch

import pytest

from smartmodel import (
    Collection,
    InvalidRelationKindError,
    MissingRequiredFieldError,
    MissingTargetTypeError,
    RelationDescriptor,
    SmartModel,
    UnexpectedArgumentError,
    UnknownRelationError,
    belongs_to,
    belongs_to_many,
    has_many,
    has_one,
    morph_many,
    morph_one,
    morph_to,
)
from smartmodel.core.relations import BelongsTo, BelongsToMany, HasMany, HasOne, MorphMany, MorphOne, MorphTo
from smartmodel.core.resolver import RelationResolver


class RelItem(SmartModel):
    table = "items"


class RelProfile(SmartModel):
    table = "profiles"


class RelCustomer(SmartModel):
    table = "customers"


class RelTag(SmartModel):
    table = "tags"


class RelComment(SmartModel):
    table = "comments"
    __relations__ = {
        "commentable": morph_to(name="commentable", type="commentable_type", id="commentable_id"),
    }


class RelOrder(SmartModel):
    table = "orders"
    __relations__ = {
        "items": has_many(RelItem, foreign_key="order_id"),
        "profile": has_one(RelProfile, foreign_key="order_id"),
        "relCustomer": belongs_to(RelCustomer),
        "tags": belongs_to_many(RelTag, table="order_tag", foreign_key="order_id", other_key="tag_id",
                                pivot_keys=["note"], timestamps=True),
        "comments": morph_many(RelComment, name="commentable", type="commentable_type", id="commentable_id"),
        "pinned": morph_one("RelComment", type="commentable_type", id="commentable_id"),
    }


def _model_with(relations):
    """Build a throwaway model class carrying the given relation table."""
    return type("BrokenModel", (SmartModel,), {"table": "broken", "__relations__": relations})


class TestDescriptorErrors:
    """Every malformed declaration fails at access time with a precise error"""

    @pytest.mark.parametrize("descriptor, missing", [
        (belongs_to_many(RelTag), ("table", "foreign_key", "other_key")),
        (belongs_to_many(RelTag, table="order_tag"), ("foreign_key", "other_key")),
        (morph_to(), ("name", "type", "id")),
        (morph_to(name="owner"), ("type", "id")),
        (morph_one(RelComment), ("type", "id")),
        (morph_many(RelComment, type="owner_type"), ("id",)),
    ])
    def test_missing_required_fields_are_all_named(self, descriptor, missing):
        model = _model_with({"broken": descriptor})()

        with pytest.raises(MissingRequiredFieldError) as info:
            model.broken

        assert info.value.missing_fields == missing
        assert info.value.relation == "broken"
        for field in missing:
            assert field in str(info.value)

    @pytest.mark.parametrize("helper", [has_one, has_many, belongs_to])
    def test_simple_kinds_have_no_required_fields(self, helper):
        model = _model_with({"broken": helper(RelItem)})(broken_id=None)

        relation = model.relation("broken")

        assert relation.related is RelItem

    def test_unknown_kind(self):
        model = _model_with({"broken": {"kind": "has_several", "target": RelItem}})()

        with pytest.raises(InvalidRelationKindError):
            model.broken

    def test_kind_given_as_plain_string(self):
        model = _model_with({"broken": {"kind": "has_many", "target": RelItem, "foreign_key": "x_id"}})(id=1)

        assert isinstance(model.relation("broken"), HasMany)

    def test_morph_to_rejects_a_target(self):
        descriptor = RelationDescriptor("morph_to", RelItem, {"name": "a", "type": "a_type", "id": "a_id"})
        model = _model_with({"broken": descriptor})()

        with pytest.raises(UnexpectedArgumentError):
            model.broken

    @pytest.mark.parametrize("kind", ["has_one", "has_many", "belongs_to", "morph_one", "morph_many"])
    def test_targeted_kinds_need_a_target(self, kind):
        descriptor = RelationDescriptor(kind, None, {"type": "a_type", "id": "a_id"} if "morph" in kind else {})
        model = _model_with({"broken": descriptor})()

        with pytest.raises(MissingTargetTypeError):
            model.broken

    def test_belongs_to_many_needs_a_target(self):
        descriptor = RelationDescriptor(
            "belongs_to_many", None, {"table": "t", "foreign_key": "a_id", "other_key": "b_id"}
        )
        model = _model_with({"broken": descriptor})()

        with pytest.raises(MissingTargetTypeError):
            model.broken

    def test_unknown_field_is_rejected(self):
        model = _model_with({"broken": has_many(RelItem, foreign_kye="order_id")})()

        with pytest.raises(UnexpectedArgumentError):
            model.broken

    def test_resolving_an_undeclared_relation(self):
        with pytest.raises(UnknownRelationError):
            RelationResolver().resolve(RelOrder(), "invoices")

    def test_descriptors_are_immutable(self):
        descriptor = has_many(RelItem, foreign_key="order_id")

        with pytest.raises(TypeError):
            descriptor.fields["foreign_key"] = "other_id"


class TestDispatch:
    """Descriptors become the matching relation handles"""

    def test_handle_types(self):
        order = RelOrder(id=1)

        assert isinstance(order.relation("items"), HasMany)
        assert isinstance(order.relation("profile"), HasOne)
        assert isinstance(order.relation("relCustomer"), BelongsTo)
        assert isinstance(order.relation("tags"), BelongsToMany)
        assert isinstance(order.relation("comments"), MorphMany)
        assert isinstance(order.relation("pinned"), MorphOne)
        assert isinstance(RelComment().relation("commentable"), MorphTo)

    def test_belongs_to_infers_key_from_relation_name(self):
        relation = RelOrder().relation("relCustomer")

        assert relation.foreign_key == "rel_customer_id"
        assert relation.other_key == "id"

    def test_belongs_to_many_pivot_options(self):
        relation = RelOrder(id=1).relation("tags")

        assert relation.table == "order_tag"
        assert relation.pivot_columns == ["note", "created_at", "updated_at"]
        assert relation.pivot_timestamps is True

    def test_morph_to_infers_columns_from_relation_name(self):
        model = _model_with({"owner": morph_to(name=None, type=None, id=None)})(
            owner_type="RelCustomer", owner_id=5
        )

        relation = model.relation("owner")

        assert relation.morph_type == "owner_type"
        assert relation.foreign_key == "owner_id"
        assert relation.related is RelCustomer

    def test_snake_case_key_finds_camel_case_relation(self):
        customer = RelCustomer.create(name="Ada")
        order = RelOrder(rel_customer_id=customer.id)

        assert order.rel_customer.name == "Ada"


class TestLazyLoading:
    """Attribute access resolves declared relations once and caches them"""

    def test_order_items_are_resolved_once(self):
        order = RelOrder.create(reference="A-1")
        RelItem.create(order_id=order.id, sku="x")
        RelItem.create(order_id=order.id, sku="y")
        RelItem.create(order_id=999, sku="other")

        with patch.object(RelationResolver, "resolve", autospec=True,
                          side_effect=RelationResolver.resolve) as resolve:
            first = order.items
            second = order.items

        assert isinstance(first, Collection)
        assert sorted(first.fetch("sku")) == ["x", "y"]
        assert second is first
        assert resolve.call_count == 1

    def test_load_refetches(self):
        order = RelOrder.create(reference="A-2")
        assert len(order.items) == 0

        RelItem.create(order_id=order.id, sku="late")

        assert len(order.items) == 0
        order.load("items")
        assert order.items.fetch("sku") == ["late"]

    def test_plain_attribute_wins_over_relation(self):
        order = RelOrder(items=["kept"])

        assert order.items == ["kept"]

    def test_stored_none_falls_through_to_relation(self):
        order = RelOrder.create(reference="A-3")
        RelItem.create(order_id=order.id, sku="z")
        order.set_attribute("items", None)

        assert order.items.fetch("sku") == ["z"]

    def test_unknown_attribute_returns_none(self):
        order = RelOrder()

        assert order.nothing_here is None
        assert order.get_attribute("nothing_here", "fallback") == "fallback"

    def test_single_relations(self):
        customer = RelCustomer.create(name="Grace")
        order = RelOrder.create(reference="A-4", rel_customer_id=customer.id)
        RelProfile.create(order_id=order.id, bio="hi")

        assert order.relCustomer.name == "Grace"
        assert order.profile.bio == "hi"
        assert RelOrder().relCustomer is None

    def test_cached_none_is_not_resolved_again(self):
        order = RelOrder()

        with patch.object(RelationResolver, "resolve", autospec=True,
                          side_effect=RelationResolver.resolve) as resolve:
            assert order.relCustomer is None
            assert order.relCustomer is None

        assert resolve.call_count == 1


class TestRelationHandles:
    """Relation handles read and write related rows"""

    def test_has_many_create_and_count(self):
        order = RelOrder.create(reference="B-1")

        item = order.relation("items").create({"sku": "made"})

        assert item.order_id == order.id
        assert order.relation("items").count() == 1

    def test_belongs_to_associate_and_dissociate(self):
        customer = RelCustomer.create(name="Linus")
        order = RelOrder()

        order.relation("relCustomer").associate(customer)
        assert order.rel_customer_id == customer.id
        assert order.relCustomer is customer

        order.relation("relCustomer").dissociate()
        assert order.rel_customer_id is None
        assert order.relCustomer is None

    def test_belongs_to_many_attach_detach_and_pivot(self):
        order = RelOrder.create(reference="C-1")
        red = RelTag.create(label="red")
        blue = RelTag.create(label="blue")
        tags = order.relation("tags")

        tags.attach([red, blue.id], {"note": "sale"})

        loaded = order.tags
        assert sorted(loaded.fetch("label")) == ["blue", "red"]
        pivot = loaded.find(red.id).pivot
        assert pivot["order_id"] == order.id
        assert pivot["tag_id"] == red.id
        assert pivot["note"] == "sale"
        assert pivot["created_at"] is not None

        assert tags.detach(red) == 1
        assert order.load("tags").tags.fetch("label") == ["blue"]

    def test_morph_relations(self):
        order = RelOrder.create(reference="D-1")
        customer = RelCustomer.create(name="Barbara")
        comment = order.relation("comments").create({"body": "first"})
        RelComment.create(body="elsewhere", commentable_type="RelCustomer", commentable_id=order.id)

        assert comment.commentable_type == "RelOrder"
        assert order.comments.fetch("body") == ["first"]
        assert order.pinned.body == "first"
        assert comment.commentable.reference == "D-1"

        other = RelComment.first_where(commentable_type="RelCustomer")
        assert other.commentable.get_key() == customer.get_key()

    def test_morph_to_without_type_is_empty(self):
        assert RelComment().commentable is None
