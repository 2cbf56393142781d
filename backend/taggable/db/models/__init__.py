"""Database models for Taggable."""

from taggable.db.models.tag import Tag
from taggable.db.models.tagging import Tagging

__all__ = [
    "Tag",
    "Tagging",
]
