"""
SmartModel Save Lifecycle Tests

🧪 validate -> gate -> purge -> hash -> persist:
- force saves and the validation gate
- purge filters
- password hashing
- per-call save hooks
"""

from unittest.mock import patch

import pytest

from smartmodel import ModelNotFoundError, Pbkdf2Hasher, SmartModel
from smartmodel.app.configurator import get_hasher
from smartmodel.core.model import Model


class Member(SmartModel):
    rules = {"email": "required|email"}


class SignupForm(SmartModel):
    table = "members"
    auto_purge_redundant_attributes = True
    purge_filters = [lambda key: key.startswith("tmp_")]


class Credential(SmartModel):
    auto_hash_password_attributes = True
    password_attributes = ("password", "pin")
    hasher = Pbkdf2Hasher(rounds=1000)


class StrictMember(Member):
    table = "members"
    throw_on_find = True


class TestGate:

    def test_failing_validation_skips_persistence(self, memory_backend):
        member = Member(email="not-an-email")

        with patch.object(Model, "save", autospec=True) as persist:
            assert member.save() is False

        persist.assert_not_called()
        assert memory_backend.select("members") == []

    def test_force_save_persists_invalid_model(self, memory_backend):
        member = Member(email="not-an-email")

        assert member.save(force=True) is True
        assert member.errors().has("email")
        assert memory_backend.count("members") == 1

    def test_force_save_shortcut(self, memory_backend):
        assert Member().force_save() is True
        assert memory_backend.count("members") == 1

    def test_valid_model_is_saved(self, memory_backend):
        member = Member(email="ok@example.com")

        assert member.save() is True
        assert member.exists
        assert member.errors().is_empty()

    def test_explicit_rules_and_options(self):
        member = Member(email="whatever")

        assert member.save(rules={"email": "required"}, options={"timestamps": True}) is True
        assert member.created_at is not None

    def test_create_goes_through_validation(self, memory_backend):
        member = Member.create(email="nope")

        assert not member.exists
        assert memory_backend.count("members") == 0


class TestPurge:

    def test_default_and_class_filters(self, memory_backend):
        form = SignupForm(
            email="a@b.co",
            password="secret",
            password_confirmation="secret",
            _token="csrf",
            _method="PUT",
            tmp_step=2,
            payment_method="card",
        )

        assert form.save() is True
        assert memory_backend.select("members") == [
            {"email": "a@b.co", "password": "secret", "payment_method": "card", "id": 1}
        ]

    def test_instance_filter(self, memory_backend):
        form = SignupForm(email="a@b.co", remember_me=True)
        form.add_purge_filter(lambda key: key == "remember_me")

        form.save()

        assert "remember_me" not in memory_backend.select("members")[0]

    def test_purge_is_off_by_default(self, memory_backend):
        Member(email="a@b.co", email_confirmation="a@b.co").save()

        assert memory_backend.select("members")[0]["email_confirmation"] == "a@b.co"

    def test_invalid_save_does_not_purge(self):
        class StrictForm(SignupForm):
            rules = {"email": "required"}

        form = StrictForm(email_confirmation="x")

        assert form.save() is False
        assert form.email_confirmation == "x"

    def test_cancelled_save_keeps_purged_attributes(self, memory_backend):
        form = SignupForm(email="a@b.co", email_confirmation="a@b.co")

        assert form.save(before_save=lambda m: False) is False
        assert form.email_confirmation == "a@b.co"

        assert form.save() is True
        assert "email_confirmation" not in memory_backend.select("members")[0]


class TestPasswordHashing:

    def test_changed_password_is_hashed(self, memory_backend):
        credential = Credential(password="hunter2")

        credential.save()

        stored = memory_backend.select("credentials")[0]["password"]
        assert stored != "hunter2"
        assert Credential.hasher.check("hunter2", stored)

    def test_unchanged_password_is_left_alone(self):
        credential = Credential(password="hunter2")
        credential.save()
        hashed = credential.password

        credential.label = "renamed"
        credential.save()

        assert credential.password == hashed

    def test_reloaded_model_keeps_its_hash(self):
        credential = Credential.create(password="hunter2")
        loaded = Credential.find(credential.id)

        loaded.save()

        assert loaded.password == credential.password

    def test_new_password_is_rehashed(self):
        credential = Credential.create(password="hunter2")

        credential.password = "correct horse"
        credential.save()

        assert Credential.hasher.check("correct horse", credential.password)

    def test_none_is_not_hashed(self):
        credential = Credential(password=None, pin="1234")
        credential.save()

        assert credential.password is None
        assert credential.pin != "1234"

    def test_cancelled_save_leaves_password_unhashed(self, memory_backend):
        credential = Credential(password="hunter2")

        assert credential.save(before_save=lambda m: False) is False
        assert credential.password == "hunter2"

        assert credential.save() is True
        assert Credential.hasher.check("hunter2", credential.password)
        assert Credential.hasher.check("hunter2", memory_backend.select("credentials")[0]["password"])

    def test_vetoed_insert_restores_attributes(self, memory_backend):
        class GuardedCredential(Credential):
            table = "credentials"

        GuardedCredential.on("creating", lambda model: False, once=True)
        credential = GuardedCredential(password="hunter2")

        assert credential.save() is False
        assert credential.password == "hunter2"
        assert memory_backend.count("credentials") == 0

        assert credential.save() is True
        assert Credential.hasher.check("hunter2", credential.password)

    def test_configured_hasher_is_the_default(self):
        class Login(SmartModel):
            auto_hash_password_attributes = True

        login = Login.create(password="pw")

        assert get_hasher().check("pw", login.password)


class TestSaveHooks:

    def test_hooks_run_for_one_call_only(self):
        calls = []
        member = Member(email="a@b.co")

        member.save(before_save=lambda m: calls.append("before"), after_save=lambda m: calls.append("after"))
        member.email = "b@b.co"
        member.save()

        assert calls == ["before", "after"]

    def test_before_hook_can_cancel(self, memory_backend):
        member = Member(email="a@b.co")

        assert member.save(before_save=lambda m: False) is False
        assert memory_backend.count("members") == 0

    def test_hooks_are_skipped_when_validation_fails(self):
        calls = []

        Member(email="bad").save(before_save=calls.append)

        assert calls == []

    def test_hooks_do_not_leak_to_other_instances(self):
        calls = []
        Member(email="a@b.co").save(after_save=calls.append)
        Member(email="c@d.co").save()

        assert len(calls) == 1


class TestUniqueSaves:

    def test_update_uniques_ignores_own_row(self):
        class Handle(SmartModel):
            rules = {"name": "required|unique"}

        handle = Handle(name="ada")
        assert handle.save(rules={"name": "required|unique:handles"}) is True

        handle.bio = "hi"
        assert handle.save(rules={"name": "required|unique:handles"}) is False
        assert handle.update_uniques() is True
        assert handle.validate_uniques() is True

        other = Handle(name="ada")
        assert other.update_uniques() is False

    def test_bare_unique_rule_needs_a_table(self):
        class Nickname(SmartModel):
            rules = {"name": "required|unique"}

        with pytest.raises(ValueError, match="update_uniques"):
            Nickname(name="ada").save()


class TestFind:

    def test_throw_on_find(self):
        with pytest.raises(ModelNotFoundError):
            StrictMember.find(1)

        assert Member.find(1) is None
