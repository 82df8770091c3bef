from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


# PUBLIC_INTERFACE
class RegisterRequest(BaseModel):
    """
    Schema for registering a new account.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "s3cret!",
                "confirm_password": "s3cret!",
            }
        }
    )

    username: str = Field(..., description="Unique login name")
    email: str = Field(..., description="Unique email address")
    password: str = Field(..., description="Plaintext password; only its digest is stored")
    confirm_password: str = Field(..., description="Must repeat password exactly")

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        """
        Reject registrations whose confirmation differs from the password.
        """
        password = info.data.get("password")
        if password is not None and v != password:
            raise ValueError("passwords do not match")
        return v


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """Schema for logging in with a username or an email."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"identifier": "alice", "password": "s3cret!"}}
    )

    identifier: str = Field(..., description="Username or email")
    password: str = Field(..., description="Plaintext password")


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """Redacted user returned by the API."""

    id: str = Field(..., description="Opaque user identifier")
    username: str
    email: str
    created_at: datetime = Field(..., description="Registration timestamp")


class RegisterOut(BaseModel):
    id: str = Field(..., description="Identifier of the new user")
    message: str


class LoginOut(BaseModel):
    token: str = Field(..., description="Bearer token to send as 'Authorization: Bearer <token>'")
    user: UserOut


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task. Content rules (non-empty title, known
    priority) are enforced by the task store after sanitization.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "priority": "high",
            }
        }
    )

    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default="", description="Optional detailed description")
    priority: Optional[str] = Field(default="medium", description="One of low, medium, high")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for editing an existing task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "priority": "medium",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Detailed description")
    priority: Optional[str] = Field(default=None, description="One of low, medium, high")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "9f86d081884c7d659a2feaa0c55ad015",
                "user_id": "a3c1f0d2b4e5f60718293a4b5c6d7e8f",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "priority": "high",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456+00:00",
                "updated_at": "2025-01-26T09:00:00.000001+00:00",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    user_id: str = Field(..., description="Identifier of the owning user")
    title: str
    description: str = ""
    priority: str
    completed: bool
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class PriorityBreakdownOut(BaseModel):
    high: int
    medium: int
    low: int


class StatsOut(BaseModel):
    total: int
    completed: int
    pending: int
    by_priority: PriorityBreakdownOut = Field(..., description="Incomplete tasks per priority")


class ToggleOut(BaseModel):
    completed: bool
    message: str


class DashboardOut(BaseModel):
    """Everything the dashboard page needs in one response."""

    user: UserOut
    tasks: List[TaskOut] = Field(..., description="Tasks matching the filter, most recent first")
    all_tasks: List[TaskOut] = Field(..., description="All tasks of the user")
    stats: StatsOut
    filter: str
