"""User endpoints: authenticate plus admin-only CRUD."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from listkeeper.api.auth import require_admin
from listkeeper.core.database import get_db
from listkeeper.core.errors import UserConflictError, UserNotFoundError
from listkeeper.core.security import PasswordHasher, get_password_hasher
from listkeeper.repositories.user_repository import UserRepository
from listkeeper.schemas.auth import CurrentUser, LoginRequest
from listkeeper.schemas.user import (
    DeleteUserResponse,
    UserCreate,
    UserUpdate,
    UsersListResponse,
    UserView,
)
from listkeeper.services import users as user_service
from listkeeper.services.auth import authenticate_user

router = APIRouter()


def get_user_repository(db: Annotated[Session, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)


Repo = Annotated[UserRepository, Depends(get_user_repository)]
Hasher = Annotated[PasswordHasher, Depends(get_password_hasher)]
Admin = Annotated[CurrentUser, Depends(require_admin)]


@router.post("/Authenticate", response_model=UserView)
def authenticate(body: LoginRequest, repo: Repo, hasher: Hasher) -> UserView:
    """
    Authenticate with username and password; returns the user view with a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = authenticate_user(repo, hasher, body.username, body.password)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )
    view = UserView.model_validate(result.user)
    view.token = result.token
    return view


@router.get("/", response_model=UsersListResponse)
def list_users(_admin: Admin, repo: Repo) -> UsersListResponse:
    """List all users, soft-deleted ones included (admin only)."""
    users = user_service.list_users(repo)
    return UsersListResponse(users=[UserView.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=UserView)
def get_user(user_id: int, _admin: Admin, repo: Repo) -> UserView:
    """Get one user by id. Soft-deleted users are still returned, with deleted_at set."""
    try:
        user = user_service.get_user(repo, user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return UserView.model_validate(user)


@router.post("/", response_model=UserView, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    request: Request,
    response: Response,
    admin: Admin,
    repo: Repo,
    hasher: Hasher,
) -> UserView:
    """Create a user; the plaintext password is hashed before storage."""
    try:
        user = user_service.create_user(repo, hasher, body, actor=admin.username)
    except UserConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    response.headers["Location"] = str(request.url_for("get_user", user_id=user.id))
    return UserView.model_validate(user)


@router.put("/{user_id}", response_model=UserView)
def update_user(user_id: int, body: UserUpdate, admin: Admin, repo: Repo) -> UserView:
    """Replace the editable fields of a user. The password is left unchanged."""
    try:
        user = user_service.update_user(repo, user_id, body, actor=admin.username)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except UserConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return UserView.model_validate(user)


@router.delete("/{user_id}", response_model=DeleteUserResponse)
def delete_user(user_id: int, admin: Admin, repo: Repo) -> DeleteUserResponse:
    """Soft-delete a user. Deleting an already deleted user returns 404."""
    try:
        user_service.delete_user(repo, user_id, actor=admin.username)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return DeleteUserResponse(id=user_id, result=f"user: {user_id} deleted")
