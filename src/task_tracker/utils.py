from __future__ import annotations

from typing import Dict, TypeVar

from fastapi import HTTPException, status

from .results import ErrorKind, StoreResult

T = TypeVar("T")

_STATUS_BY_ERROR: Dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# PUBLIC_INTERFACE
def unwrap(result: StoreResult[T]) -> T:
    """
    Return the value of a successful store result, or raise the HTTPException
    matching its error kind with the store's message as detail.
    """
    if result.success:
        return result.value  # type: ignore[return-value]
    code = _STATUS_BY_ERROR.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)  # type: ignore[arg-type]
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(status_code=code, detail=result.message, headers=headers)
