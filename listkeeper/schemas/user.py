"""Request/response schemas for user CRUD endpoints."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer

from listkeeper.models.user import ROLE_USER

Role = Literal["Admin", "User"]


class UserBase(BaseModel):
    """Fields a client may set on a user."""

    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: Role = ROLE_USER
    firstname: str | None = Field(default=None, max_length=255)
    lastname: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=255)


class UserCreate(UserBase):
    """Body for POST /users. Password is plaintext and hashed before storage."""

    password: str = Field(..., min_length=1, max_length=128)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "ValidPassword123!",
                "role": "User",
                "firstname": "Alice",
                "lastname": "Liddell",
            },
        },
    )


class UserUpdate(UserBase):
    """Body for PUT /users/{id}. A password field, if sent, is ignored."""


class UserView(BaseModel):
    """User as returned to clients; never carries the password hash."""

    id: int
    username: str
    email: str
    role: str
    firstname: str | None = None
    lastname: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    # Only populated by the authenticate endpoint.
    token: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", "deleted_at")
    def serialize_utc(self, value: datetime | None) -> datetime | None:
        # SQLite drops the offset; stored values are always UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserView]


class DeleteUserResponse(BaseModel):
    """Response for DELETE /users/{id}."""

    id: int
    result: str
