from __future__ import annotations

from typing import Tuple, TypedDict

PRIORITIES: Tuple[str, ...] = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"


# PUBLIC_INTERFACE
class UserRecord(TypedDict):
    """
    A user as stored in the users collection.

    Fields:
    - id: 32-char hex random token, immutable
    - username: unique, compared case-sensitively
    - email: unique, compared case-sensitively
    - password_hash: digest produced by the configured PasswordHasher
    - created_at: ISO-8601 UTC creation timestamp
    """

    id: str
    username: str
    email: str
    password_hash: str
    created_at: str


# PUBLIC_INTERFACE
class UserView(TypedDict):
    """A user projection without credential material."""

    id: str
    username: str
    email: str
    created_at: str


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task as stored in the tasks collection.

    Fields:
    - id: 32-char hex random token, immutable
    - user_id: id of the owning user, immutable
    - title: non-empty after sanitization
    - description: free text, '' when not given
    - priority: one of PRIORITIES
    - completed: completion flag
    - created_at / updated_at: ISO-8601 UTC timestamps; updated_at moves on every mutation
    """

    id: str
    user_id: str
    title: str
    description: str
    priority: str
    completed: bool
    created_at: str
    updated_at: str


class PriorityBreakdown(TypedDict):
    high: int
    medium: int
    low: int


# PUBLIC_INTERFACE
class TaskStats(TypedDict):
    """Aggregate counts for one user. by_priority only counts incomplete tasks."""

    total: int
    completed: int
    pending: int
    by_priority: PriorityBreakdown


def redact_user(record: UserRecord) -> UserView:
    return {
        "id": record["id"],
        "username": record["username"],
        "email": record["email"],
        "created_at": record["created_at"],
    }
