"""Core app configuration, database, security and audit."""

from listkeeper.core.config import get_settings, settings
from listkeeper.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
