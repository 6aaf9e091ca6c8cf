"""
SmartModel Validation Tests

🧪 Validation orchestration on the model:
- rule resolution and empty rule sets
- error message lifecycle
- vetoes, hard-fail mode and input hydration
"""

from unittest.mock import Mock

import pytest

from smartmodel import (
    ArrayInput,
    MessageBag,
    SmartModel,
    ValidationFactory,
    ValidationFailedError,
    ValidationVetoedError,
    use_input,
)


class Account(SmartModel):
    rules = {
        "username": "required|alpha_dash|min:3",
        "email": ["required", "email"],
        "nickname": "",
    }
    custom_messages = {"username.required": "Pick a username."}


class StrictAccount(Account):
    throw_on_validation = True


class HydratedAccount(Account):
    auto_hydrate_entity_from_input = True


class ForcedAccount(Account):
    force_entity_hydration_from_input = True


class ApiAccount(Account):
    external_validator = True


@pytest.fixture
def clean_listeners():
    yield
    for model_class in (Account, StrictAccount):
        model_class.flush_event_listeners()


class TestRuleResolution:

    def test_empty_rule_set_always_passes(self):
        account = Account(username="")

        assert account.validate(rules={}) is True
        assert account.validate(rules={"username": "", "email": []}) is True
        assert account.errors().is_empty()

    def test_empty_rules_do_not_touch_the_engine(self):
        factory = Mock()

        class Unchecked(SmartModel):
            validation_factory = factory

        assert Unchecked(anything="goes").validate() is True
        factory.make.assert_not_called()

    def test_class_rules_are_the_default(self):
        account = Account(username="ab", email="nope")

        assert account.validate() is False
        assert account.errors().keys() == ["username", "email"]
        assert account.errors().first("username") == "The username must be at least 3 characters."

    def test_explicit_rules_win(self):
        account = Account(username="ab", email="nope")

        assert account.validate(rules={"username": "required"}) is True

    def test_custom_messages(self):
        assert Account(email="a@b.co").validate() is False

        account = Account(email="a@b.co")
        account.validate()
        assert account.errors().get("username") == ["Pick a username."]

        account.validate(messages={"required": "Needed."})
        assert account.errors().get("username") == ["Needed."]


class TestErrorLifecycle:

    def test_fail_then_fix_clears_messages(self):
        account = Account(username="x", email="a@b.co")
        assert account.validate() is False
        assert account.errors().has("username")

        account.username = "xavier"

        assert account.validate() is True
        assert account.errors() == MessageBag()

    def test_each_run_replaces_messages(self):
        account = Account(username="x", email="bad")
        account.validate()
        assert account.errors().has("email")

        account.email = "a@b.co"
        account.validate()

        assert not account.errors().has("email")
        assert account.errors().has("username")


class TestVetoAndHardFail:

    def test_validating_veto_returns_false(self, clean_listeners):
        Account.on("validating", lambda model: False)
        account = Account(username="valid_name", email="a@b.co")

        assert account.validate() is False
        assert account.errors().is_empty()

    def test_validating_veto_raises_in_hard_fail_mode(self, clean_listeners):
        StrictAccount.on("validating", lambda model: False)

        with pytest.raises(ValidationVetoedError):
            StrictAccount(username="valid_name", email="a@b.co").validate()

    def test_hard_fail_carries_model_and_messages(self):
        account = StrictAccount(username="x", email="a@b.co")

        with pytest.raises(ValidationFailedError) as info:
            account.validate()

        assert info.value.model is account
        assert info.value.errors.has("username")
        assert "username" in str(info.value)

    def test_validated_fires_on_pass_and_fail(self, clean_listeners):
        outcomes = []
        Account.on("validated", lambda model: outcomes.append(model.errors().is_empty()))

        Account(username="x", email="a@b.co").validate()
        Account(username="xavier", email="a@b.co").validate()

        assert outcomes == [False, True]


class TestInputHydration:

    def test_empty_model_hydrates_from_input(self):
        with use_input(ArrayInput({"username": "from_form", "email": "f@orm.io"})):
            account = HydratedAccount()
            assert account.validate() is True

        assert account.username == "from_form"

    def test_populated_model_is_not_hydrated(self):
        with use_input(ArrayInput({"username": "from_form", "email": "f@orm.io"})):
            account = HydratedAccount(username="mine", email="m@e.io")
            account.validate()

        assert account.username == "mine"

    def test_forced_hydration_overwrites(self):
        with use_input(ArrayInput({"username": "from_form"})):
            account = ForcedAccount(username="mine", email="m@e.io")
            account.validate()

        assert account.username == "from_form"
        assert account.email == "m@e.io"

    def test_failure_flashes_input_to_session(self):
        session = {}
        with use_input(ArrayInput({"username": "x"}, session=session)):
            Account(username="x").validate()

        assert session["_old_input"] == {"username": "x"}

    def test_external_validator_never_flashes(self):
        session = {}
        with use_input(ArrayInput({"username": "x"}, session=session)):
            ApiAccount(username="x").validate()

        assert session == {}


class TestValidatorSeam:

    def test_model_specific_factory(self):
        factory = ValidationFactory(custom_messages={"email": "Bad email."})

        class Subscriber(SmartModel):
            rules = {"email": "email"}
            validation_factory = factory

        subscriber = Subscriber(email="nope")

        assert subscriber.validate() is False
        assert subscriber.errors().first() == "Bad email."
