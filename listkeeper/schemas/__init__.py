"""Pydantic request/response schemas."""

from listkeeper.schemas.auth import CurrentUser, LoginRequest
from listkeeper.schemas.user import (
    DeleteUserResponse,
    UserCreate,
    UserUpdate,
    UsersListResponse,
    UserView,
)

__all__ = [
    "CurrentUser",
    "DeleteUserResponse",
    "LoginRequest",
    "UserCreate",
    "UserUpdate",
    "UserView",
    "UsersListResponse",
]
