from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .identity import IdentityStore
from .models import UserView
from .sessions import SessionRegistry
from .task_store import TaskStore

_security = HTTPBearer(auto_error=False)


def get_identity_store(request: Request) -> IdentityStore:
    return request.app.state.identity_store


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_token(creds: Optional[HTTPAuthorizationCredentials] = Depends(_security)) -> Optional[str]:
    return creds.credentials if creds is not None else None


# PUBLIC_INTERFACE
def get_current_user(
    token: Optional[str] = Depends(get_token),
    sessions: SessionRegistry = Depends(get_sessions),
    identity: IdentityStore = Depends(get_identity_store),
) -> UserView:
    """
    Resolve the bearer token of the request to the logged-in user.

    Behavior:
    - Missing, unknown or expired token: 401 with WWW-Authenticate: Bearer.
    - Token whose user no longer exists: 401, and the session is closed.
    - Otherwise: the redacted user, whose id scopes every task operation.

    Usage:
        @router.get("/", ...)
        def handler(user: UserView = Depends(get_current_user)) ...
    """
    user_id = sessions.resolve(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = identity.get_by_id(user_id)
    if user is None:
        sessions.close(token)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session user no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
