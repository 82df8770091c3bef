from __future__ import annotations

from typing import List, Optional

from loguru import logger

from .context import StoreContext
from .models import UserRecord, UserView, redact_user
from .results import ErrorKind, PersistenceError, StoreResult
from .security import generate_id, is_storable_text, sanitize_input, validate_email


# PUBLIC_INTERFACE
class IdentityStore:
    """
    Owns the users collection: registration, credential checks and lookup.
    Credential digests never leave this class; callers only see UserView.
    """

    def __init__(self, context: StoreContext) -> None:
        self._ctx = context
        self._users = context.users

    def _validate_registration(self, username: str, email: str, password: str) -> Optional[str]:
        if not username or not email or not password:
            return "Username, email and password are required"
        if not all(is_storable_text(v) for v in (username, email, password)):
            return "Username, email and password must be valid text"
        if not validate_email(email):
            return "Invalid email address"
        min_length = self._ctx.settings.password_min_length
        if len(password) < min_length:
            return f"Password must be at least {min_length} characters long"
        return None

    def create_user(self, username: str, email: str, password: str) -> StoreResult[str]:
        """
        Register a user and return its new id.

        Fails with VALIDATION_ERROR on missing/invalid input, CONFLICT when the
        username or email is taken, PERSISTENCE_FAILURE when the write fails.
        """
        username = sanitize_input(username or "")
        email = sanitize_input(email or "")
        password = password or ""

        problem = self._validate_registration(username, email, password)
        if problem:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, problem)

        # Digest is computed before taking the lock.
        record: UserRecord = {
            "id": generate_id(),
            "username": username,
            "email": email,
            "password_hash": self._ctx.hasher.hash(password),
            "created_at": self._ctx.now_iso(),
        }

        with self._users.locked():
            users: List[UserRecord] = self._users.read()  # type: ignore[assignment]
            if any(u.get("username") == username or u.get("email") == email for u in users):
                return StoreResult.fail(ErrorKind.CONFLICT, "Username or email already exists")
            users.append(record)
            try:
                self._users.write(users)  # type: ignore[arg-type]
            except PersistenceError:
                return StoreResult.fail(ErrorKind.PERSISTENCE_FAILURE, "Could not create user")

        logger.info("Created user {} ({})", record["id"], username)
        return StoreResult.ok(record["id"])

    def authenticate(self, identifier: str, password: str) -> StoreResult[UserView]:
        """Verify credentials; ``identifier`` may be either the username or the email."""
        identifier = sanitize_input(identifier or "")
        if not identifier or not password:
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, "Identifier and password are required")
        if not is_storable_text(identifier) or not is_storable_text(password):
            return StoreResult.fail(ErrorKind.VALIDATION_ERROR, "Identifier and password must be valid text")

        for user in self._users.read():
            if identifier not in (user.get("username"), user.get("email")):
                continue
            digest = user.get("password_hash")
            if isinstance(digest, str) and self._ctx.hasher.verify(password, digest):
                return StoreResult.ok(redact_user(user))  # type: ignore[arg-type]

        logger.debug("Rejected credentials for {}", identifier)
        return StoreResult.fail(ErrorKind.UNAUTHORIZED, "Invalid username or password")

    def get_by_id(self, user_id: str) -> Optional[UserView]:
        if not user_id:
            return None
        for user in self._users.read():
            if user.get("id") == user_id:
                return redact_user(user)  # type: ignore[arg-type]
        return None
