from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from ..auth import get_current_user, get_identity_store, get_sessions, get_token
from ..identity import IdentityStore
from ..models import UserView
from ..schemas import LoginOut, LoginRequest, RegisterOut, RegisterRequest, UserOut
from ..sessions import SessionRegistry
from ..utils import unwrap

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=RegisterOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a new account. Username and email must both be unused.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Missing or invalid fields"},
        409: {"description": "Username or email already exists"},
    },
)
def register(payload: RegisterRequest, identity: IdentityStore = Depends(get_identity_store)) -> RegisterOut:
    user_id = unwrap(identity.create_user(payload.username, payload.email, payload.password))
    return RegisterOut(id=user_id, message="Account created, please log in")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=LoginOut,
    summary="Log in",
    description="Verify credentials (username or email) and open a session.",
    responses={
        200: {"description": "Logged in"},
        401: {"description": "Invalid credentials"},
    },
)
def login(
    payload: LoginRequest,
    identity: IdentityStore = Depends(get_identity_store),
    sessions: SessionRegistry = Depends(get_sessions),
) -> LoginOut:
    user = unwrap(identity.authenticate(payload.identifier, payload.password))
    return LoginOut(token=sessions.open(user["id"]), user=UserOut(**user))


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
    description="Close the current session. Succeeds even if the token is unknown.",
)
def logout(
    token: Optional[str] = Depends(get_token),
    sessions: SessionRegistry = Depends(get_sessions),
) -> None:
    sessions.close(token)
    return None


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserOut, summary="Current user")
def me(user: UserView = Depends(get_current_user)) -> UserOut:
    return UserOut(**user)
