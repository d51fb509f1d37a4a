"""API routes."""

from fastapi import APIRouter

from listkeeper.api import users

router = APIRouter()
router.include_router(users.router, prefix="/users", tags=["users"])
