"""Database package for Taggable."""

from taggable.db.base import Base
from taggable.db.session import async_session_maker, engine, get_db

__all__ = [
    "Base",
    "async_session_maker",
    "engine",
    "get_db",
]
