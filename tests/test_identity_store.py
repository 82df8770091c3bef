import json
from dataclasses import replace

import pytest

from task_tracker.context import build_context
from task_tracker.identity import IdentityStore
from task_tracker.results import ErrorKind


class TestCreateUser:
    def test_returns_opaque_hex_id(self, identity):
        result = identity.create_user("alice", "alice@example.com", "secret1")
        assert result.success
        assert len(result.value) == 32
        int(result.value, 16)

    def test_duplicate_username_conflicts(self, identity, context):
        assert identity.create_user("alice", "alice@example.com", "secret1").success
        result = identity.create_user("alice", "other@example.com", "secret1")
        assert not result.success
        assert result.error is ErrorKind.CONFLICT
        assert len(context.users.read()) == 1

    def test_duplicate_email_conflicts(self, identity, context):
        assert identity.create_user("alice", "alice@example.com", "secret1").success
        result = identity.create_user("bob", "alice@example.com", "secret1")
        assert result.error is ErrorKind.CONFLICT
        assert len(context.users.read()) == 1

    def test_uniqueness_is_case_sensitive(self, identity):
        assert identity.create_user("alice", "alice@example.com", "secret1").success
        assert identity.create_user("Alice", "Alice@example.com", "secret1").success

    def test_no_two_records_share_identity_fields(self, identity, context):
        attempts = [
            ("alice", "a@example.com"),
            ("bob", "b@example.com"),
            ("alice", "c@example.com"),
            ("carol", "b@example.com"),
            ("dave", "d@example.com"),
        ]
        for username, email in attempts:
            identity.create_user(username, email, "secret1")
        users = context.users.read()
        assert len({u["username"] for u in users}) == len(users) == 3
        assert len({u["email"] for u in users}) == len(users)

    def test_plaintext_password_never_stored(self, identity, settings):
        identity.create_user("alice", "alice@example.com", "hunter22")
        with open(settings.users_file, encoding="utf-8") as f:
            raw = f.read()
        assert "hunter22" not in raw
        record = json.loads(raw)[0]
        assert record["password_hash"] != "hunter22"

    def test_inputs_are_sanitized(self, identity, context):
        identity.create_user("  <alice>  ", "alice@example.com", "secret1")
        assert context.users.read()[0]["username"] == "alice"

    def test_validation_errors(self, identity, context):
        cases = [
            ("", "alice@example.com", "secret1"),
            ("alice", "", "secret1"),
            ("alice", "alice@example.com", ""),
            ("alice", "not-an-email", "secret1"),
            ("alice", "alice@example.com", "short"),
            ("<>", "alice@example.com", "secret1"),
            ("al\ud800ice", "alice@example.com", "secret1"),
            ("alice", "alice@example.com", "secret\udfff"),
            (42, "alice@example.com", "secret1"),
        ]
        for username, email, password in cases:
            result = identity.create_user(username, email, password)
            assert result.error is ErrorKind.VALIDATION_ERROR, (username, email, password)
        assert context.users.read() == []


class TestAuthenticate:
    def test_by_username_and_email(self, identity, user_id):
        by_name = identity.authenticate("alice", "secret1")
        by_email = identity.authenticate("alice@example.com", "secret1")
        assert by_name.success and by_email.success
        assert by_name.value["id"] == by_email.value["id"] == user_id

    def test_view_is_redacted(self, identity, user_id):
        view = identity.authenticate("alice", "secret1").value
        assert set(view) == {"id", "username", "email", "created_at"}

    def test_wrong_password_is_unauthorized(self, identity, user_id):
        result = identity.authenticate("alice", "wrong-password")
        assert not result.success
        assert result.error is ErrorKind.UNAUTHORIZED

    def test_unknown_user_is_unauthorized(self, identity):
        assert identity.authenticate("nobody", "secret1").error is ErrorKind.UNAUTHORIZED

    def test_empty_credentials(self, identity):
        assert identity.authenticate("", "secret1").error is ErrorKind.VALIDATION_ERROR
        assert identity.authenticate("alice", "").error is ErrorKind.VALIDATION_ERROR

    def test_unencodable_credentials(self, identity, user_id):
        assert identity.authenticate("al\ud800ice", "secret1").error is ErrorKind.VALIDATION_ERROR
        assert identity.authenticate("alice", "secret\ud800").error is ErrorKind.VALIDATION_ERROR

    def test_unencodable_registration_on_sqlite(self, settings):
        identity = IdentityStore(build_context(replace(settings, persistence_backend="sqlite")))
        result = identity.create_user("bob", "bob@example.com", "pass\ud800word")
        assert result.error is ErrorKind.VALIDATION_ERROR

    @pytest.mark.parametrize(
        "stored",
        ["pbkdf2_sha256$99999999999999999999999$aa$bb", "pbkdf2_sha256$0$aa$bb", None, 12345],
    )
    def test_corrupt_stored_digest_is_unauthorized(self, settings, user_id, stored):
        with open(settings.users_file, encoding="utf-8") as f:
            users = json.load(f)
        users[0]["password_hash"] = stored
        with open(settings.users_file, "w", encoding="utf-8") as f:
            json.dump(users, f)

        upgraded = IdentityStore(build_context(replace(settings, password_scheme="pbkdf2_sha256")))
        assert upgraded.authenticate("alice", "secret1").error is ErrorKind.UNAUTHORIZED

    def test_salted_scheme_still_accepts_legacy_digests(self, settings, user_id):
        upgraded = IdentityStore(build_context(replace(settings, password_scheme="pbkdf2_sha256")))
        assert upgraded.authenticate("alice", "secret1").success
        assert upgraded.create_user("bob", "bob@example.com", "secret2").success
        assert upgraded.authenticate("bob", "secret2").success
        assert not upgraded.authenticate("bob", "secret1").success


class TestGetById:
    def test_found(self, identity, user_id):
        view = identity.get_by_id(user_id)
        assert view["username"] == "alice"
        assert "password_hash" not in view

    def test_not_found(self, identity, user_id):
        assert identity.get_by_id("0" * 32) is None
        assert identity.get_by_id("") is None
