"""Tagging model: one application of a tag to a taggable object."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taggable.db.base import Base
from taggable.db.types import UtcDateTime

if TYPE_CHECKING:
    from taggable.db.models.tag import Tag


class Tagging(Base):
    """Association between a tag and a tagged object."""

    __tablename__ = "taggings"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    # Polymorphic reference to the tagged object
    taggable_type: Mapped[str] = mapped_column(String(100), nullable=False)
    taggable_id: Mapped[str] = mapped_column(String(36), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UtcDateTime, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    tag: Mapped[Tag] = relationship("Tag", back_populates="taggings")

    # Indexes
    __table_args__ = (
        UniqueConstraint(
            "tag_id", "taggable_type", "taggable_id", name="uq_taggings_tag_taggable"
        ),
        Index("ix_taggings_tag_id", "tag_id"),
        Index("ix_taggings_taggable", "taggable_type", "taggable_id"),
        Index("ix_taggings_created_at", "created_at"),
    )
