"""Input sanitization, identifiers and password digests."""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from abc import ABC, abstractmethod
from typing import Any

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
MAX_PBKDF2_ITERATIONS = 10_000_000


def sanitize_input(value: Any) -> Any:
    """Strip angle brackets and surrounding whitespace from strings; pass anything else through."""
    if not isinstance(value, str):
        return value
    return _ANGLE_BRACKETS_RE.sub("", value).strip()


def is_storable_text(value: Any) -> bool:
    """True for strings that encode as UTF-8 (no lone surrogates)."""
    if not isinstance(value, str):
        return False
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def validate_email(email: str) -> bool:
    """Validate email format."""
    return bool(_EMAIL_RE.match(email or ""))


def generate_id() -> str:
    """Return an opaque 32-char hex identifier built from 16 random bytes."""
    return secrets.token_hex(16)


def _digests_match(computed: str, stored: str) -> bool:
    # compare_digest refuses non-ASCII str, so compare encoded bytes
    return hmac.compare_digest(computed.encode("utf-8"), stored.encode("utf-8", "surrogatepass"))


# PUBLIC_INTERFACE
class PasswordHasher(ABC):
    """Digest scheme used by the identity store. Swap implementations without touching callers."""

    scheme: str = ""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return the digest to store for ``password``."""

    @abstractmethod
    def verify(self, password: str, digest: str) -> bool:
        """Return True when ``password`` produces ``digest``."""


class Sha256PasswordHasher(PasswordHasher):
    """
    Unsalted hex SHA-256. Deterministic: the same plaintext always yields the
    same digest. Kept as the default for compatibility with existing user files;
    prefer Pbkdf2PasswordHasher for new deployments.
    """

    scheme = "sha256"

    def hash(self, password: str) -> str:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def verify(self, password: str, digest: str) -> bool:
        return _digests_match(self.hash(password), digest or "")


class Pbkdf2PasswordHasher(PasswordHasher):
    """
    Salted PBKDF2-HMAC-SHA256 stored as ``pbkdf2_sha256$<iterations>$<salt>$<hash>``.

    Digests without the prefix are treated as legacy SHA-256 so users created
    before the scheme change can still log in.
    """

    scheme = "pbkdf2_sha256"

    def __init__(self, iterations: int = 260_000) -> None:
        self._iterations = iterations
        self._legacy = Sha256PasswordHasher()

    def _derive(self, password: str, salt: str, iterations: int) -> str:
        raw = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), iterations)
        return raw.hex()

    def hash(self, password: str) -> str:
        salt = secrets.token_hex(16)
        return f"{self.scheme}${self._iterations}${salt}${self._derive(password, salt, self._iterations)}"

    def verify(self, password: str, digest: str) -> bool:
        if not digest:
            return False
        if not digest.startswith(f"{self.scheme}$"):
            return self._legacy.verify(password, digest)
        try:
            _, iterations, salt, expected = digest.split("$", 3)
            rounds = int(iterations)
            if not 1 <= rounds <= MAX_PBKDF2_ITERATIONS:
                return False
            computed = self._derive(password, salt, rounds)
        except (ValueError, OverflowError):
            return False
        return _digests_match(computed, expected)


def get_password_hasher(scheme: str) -> PasswordHasher:
    """Return the hasher for a configured scheme name; unknown names fall back to sha256."""
    if scheme == Pbkdf2PasswordHasher.scheme:
        return Pbkdf2PasswordHasher()
    return Sha256PasswordHasher()
