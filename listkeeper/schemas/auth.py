"""Request/response schemas for auth endpoints and dependencies."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class CurrentUser(BaseModel):
    """Authenticated principal: the active user named by the bearer token."""

    id: int
    username: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)
