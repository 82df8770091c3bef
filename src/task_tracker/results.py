from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories a store operation can report."""

    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"
    VALIDATION_ERROR = "ValidationError"
    NOT_FOUND = "NotFound"
    PERSISTENCE_FAILURE = "PersistenceFailure"


class PersistenceError(Exception):
    """Raised by collection backends when a collection cannot be loaded or saved."""


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of a store operation.

    Stores never raise across their boundary; callers branch on ``success`` and
    read either ``value`` or ``error``/``message``.
    """

    success: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None, message: Optional[str] = None) -> "StoreResult[T]":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "StoreResult[T]":
        return cls(success=False, error=error, message=message)
