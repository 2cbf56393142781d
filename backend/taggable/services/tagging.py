"""Tagging service for applying tags to taggable objects."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taggable.core.config import settings
from taggable.core.logging import get_logger
from taggable.db.models import Tag, Tagging

logger = get_logger(__name__)


class TaggingService:
    """Service for creating and removing taggings.

    When ``destroy_unused`` is set, removing the last tagging of a tag also
    deletes the tag.
    """

    def __init__(self, db: AsyncSession, destroy_unused: bool | None = None):
        """Initialize the tagging service.

        Args:
            db: The database session.
            destroy_unused: Delete tags left without taggings. Defaults to
                ``settings.destroy_unused_tags``.
        """
        self.db = db
        self.destroy_unused = (
            settings.destroy_unused_tags if destroy_unused is None else destroy_unused
        )

    async def tag(self, tag: Tag, taggable_type: str, taggable_id: str) -> Tagging:
        """Apply a tag to an object.

        Args:
            tag: The tag to apply.
            taggable_type: Type name of the tagged object.
            taggable_id: ID of the tagged object.

        Returns:
            The new Tagging, or the existing one if the tag is already applied.
        """
        result = await self.db.execute(
            select(Tagging).where(
                Tagging.tag_id == tag.id,
                Tagging.taggable_type == taggable_type,
                Tagging.taggable_id == taggable_id,
            )
        )
        tagging = result.scalar_one_or_none()
        if tagging:
            return tagging

        tagging = Tagging(tag_id=tag.id, taggable_type=taggable_type, taggable_id=taggable_id)
        self.db.add(tagging)
        await self.db.flush()

        logger.debug(
            "tag_applied",
            tag_id=tag.id,
            taggable_type=taggable_type,
            taggable_id=taggable_id,
        )

        return tagging

    async def untag(self, tagging: Tagging) -> None:
        """Remove a tagging.

        Args:
            tagging: The tagging to remove.
        """
        tag_id = tagging.tag_id

        await self.db.delete(tagging)
        await self.db.flush()

        logger.debug("tag_removed", tag_id=tag_id, tagging_id=tagging.id)

        if self.destroy_unused:
            await self._destroy_if_unused(tag_id)

    async def tags_for(self, taggable_type: str, taggable_id: str) -> list[Tag]:
        """Get the tags applied to an object, ordered by name."""
        result = await self.db.execute(
            select(Tag)
            .join(Tagging, Tag.id == Tagging.tag_id)
            .where(
                Tagging.taggable_type == taggable_type,
                Tagging.taggable_id == taggable_id,
            )
            .order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def _destroy_if_unused(self, tag_id: str) -> None:
        remaining = await self.db.scalar(
            select(func.count()).select_from(Tagging).where(Tagging.tag_id == tag_id)
        )
        if remaining:
            return

        tag = await self.db.get(Tag, tag_id)
        if tag is None:
            return

        # Drop any stale taggings collection before cascading the delete
        await self.db.refresh(tag, attribute_names=["taggings"])
        await self.db.delete(tag)
        await self.db.flush()

        logger.info("tag_destroyed_unused", tag_id=tag_id, name=tag.name)
