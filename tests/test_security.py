from task_tracker.security import (
    Pbkdf2PasswordHasher,
    Sha256PasswordHasher,
    generate_id,
    get_password_hasher,
    is_storable_text,
    sanitize_input,
    validate_email,
)
from task_tracker.sessions import SessionRegistry


class TestSanitizeInput:
    def test_strips_brackets_and_whitespace(self):
        assert sanitize_input("  <script>hi</script> ") == "scripthi/script"
        assert sanitize_input(" < > ") == ""

    def test_non_strings_pass_through(self):
        assert sanitize_input(None) is None
        assert sanitize_input(5) == 5


def test_storable_text():
    assert is_storable_text("plain")
    assert is_storable_text("")
    assert is_storable_text("café ✓")
    assert not is_storable_text("x\ud800")
    assert not is_storable_text(123)
    assert not is_storable_text(None)


class TestValidateEmail:
    def test_valid(self):
        assert validate_email("alice@example.com")

    def test_invalid(self):
        for value in ("", "alice", "alice@example", "a b@example.com", "@example.com"):
            assert not validate_email(value), value


def test_generate_id_is_unique_hex():
    ids = {generate_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(i) == 32 and int(i, 16) >= 0 for i in ids)


class TestHashers:
    def test_sha256_is_deterministic(self):
        hasher = Sha256PasswordHasher()
        digest = hasher.hash("secret1")
        assert digest == hasher.hash("secret1")
        assert digest == "5b11618c2e44027877d0cd0921ed166b9f176f50587fc91e7534dd2946db77d6"
        assert hasher.verify("secret1", digest)
        assert not hasher.verify("secret2", digest)
        assert not hasher.verify("secret1", "")
        assert not hasher.verify("secret1", "pbkdf2_sha256$99999999999999999999999$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$0$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$-5$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$1000$aa$caf\u00e9")

    def test_non_ascii_stored_digest_is_a_mismatch(self):
        assert not Sha256PasswordHasher().verify("secret1", "\u00e9" * 64)

    def test_pbkdf2_is_salted(self):
        hasher = Pbkdf2PasswordHasher(iterations=1000)
        first, second = hasher.hash("secret1"), hasher.hash("secret1")
        assert first != second
        assert first.startswith("pbkdf2_sha256$1000$")
        assert hasher.verify("secret1", first) and hasher.verify("secret1", second)
        assert not hasher.verify("nope", first)

    def test_pbkdf2_rejects_malformed_digests(self):
        hasher = Pbkdf2PasswordHasher(iterations=1000)
        assert not hasher.verify("secret1", "pbkdf2_sha256$abc")
        assert not hasher.verify("secret1", "pbkdf2_sha256$x$salt$hash")
        assert not hasher.verify("secret1", "")
        assert not hasher.verify("secret1", "pbkdf2_sha256$99999999999999999999999$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$0$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$-5$aa$bb")
        assert not hasher.verify("secret1", "pbkdf2_sha256$1000$aa$café")

    def test_non_ascii_stored_digest_is_a_mismatch(self):
        assert not Sha256PasswordHasher().verify("secret1", "é" * 64)

    def test_selection(self):
        assert isinstance(get_password_hasher("sha256"), Sha256PasswordHasher)
        assert isinstance(get_password_hasher("pbkdf2_sha256"), Pbkdf2PasswordHasher)
        assert isinstance(get_password_hasher("md5"), Sha256PasswordHasher)


class TestSessionRegistry:
    def test_open_resolve_close(self):
        sessions = SessionRegistry()
        token = sessions.open("user-1")
        assert sessions.resolve(token) == "user-1"
        assert sessions.close(token)
        assert sessions.resolve(token) is None
        assert not sessions.close(token)

    def test_unknown_tokens(self):
        sessions = SessionRegistry()
        assert sessions.resolve(None) is None
        assert sessions.resolve("") is None
        assert sessions.resolve("made-up") is None

    def test_expiry(self):
        now = [1000.0]
        sessions = SessionRegistry(ttl_seconds=60, clock=lambda: now[0])
        token = sessions.open("user-1")
        now[0] += 59
        assert sessions.resolve(token) == "user-1"
        now[0] += 1
        assert sessions.resolve(token) is None

    def test_open_sweeps_expired_sessions(self):
        now = [0.0]
        sessions = SessionRegistry(ttl_seconds=10, clock=lambda: now[0])
        for i in range(100):
            sessions.open(f"user-{i}")
        now[0] = 1000.0
        live = sessions.open("user-live")
        assert list(sessions._sessions) == [live]
        assert sessions.resolve(live) == "user-live"
