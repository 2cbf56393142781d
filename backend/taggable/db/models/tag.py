"""Tag model: a unique, named label."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taggable.db.base import Base

if TYPE_CHECKING:
    from taggable.db.models.tagging import Tagging


class Tag(Base):
    """A tag that can be applied to any taggable object.

    Names are unique with the database's default (case-sensitive) collation.
    Lookups through ``TagService.find_or_create_by_name`` are case-insensitive,
    so two tags differing only in case can coexist when created directly.
    """

    __tablename__ = "tags"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # Tag data
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # Relationships
    taggings: Mapped[list[Tagging]] = relationship(
        "Tagging",
        back_populates="tag",
        cascade="all, delete-orphan",
    )

    # Set by tag count queries, never persisted.
    tag_count = None

    @property
    def count(self) -> int:
        """Number of taggings counted by the query that loaded this tag."""
        return int(self.tag_count or 0)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Tag):
            return NotImplemented
        if self.id is not None and self.id == other.id:
            return True
        return self.name == other.name

    def __hash__(self) -> int:
        # Equal names must hash equal, so renaming a tag held in a set or
        # used as a dict key leaves it in the wrong bucket.
        return hash(self.name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<Tag id={self.id!r} name={self.name!r}>"
