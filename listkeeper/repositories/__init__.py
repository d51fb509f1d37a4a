"""Persistence repositories."""

from listkeeper.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
