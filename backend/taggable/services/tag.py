"""Tag service: lookup-or-create, validation and tag counts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Row, Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached

from taggable.core.logging import get_logger
from taggable.db.models import Tag
from taggable.exceptions import TagValidationError
from taggable.services.tag_counts import TagCountOptions, build_tag_counts_query

logger = get_logger(__name__)


def _name_lookup(name: str) -> Select:
    return select(Tag).where(Tag.name.ilike(name)).order_by(Tag.name).limit(1)


def _resolve_options(
    options: TagCountOptions | Mapping[str, Any] | None,
    overrides: dict[str, Any],
) -> TagCountOptions:
    if isinstance(options, TagCountOptions):
        if not overrides:
            return options
        options = options.model_dump()
    return TagCountOptions.from_mapping({**(options or {}), **overrides})


class TagService:
    """Service for creating, finding and counting tags."""

    def __init__(self, db: AsyncSession):
        """Initialize the tag service.

        Args:
            db: The database session.
        """
        self.db = db

    async def find_by_name(self, name: str) -> Tag | None:
        """Find a tag by name, ignoring case.

        Matching uses ``ILIKE`` on PostgreSQL and ``lower() LIKE lower()``
        elsewhere. The name is not escaped, so ``%`` and ``_`` act as
        wildcards.

        Args:
            name: The tag name.

        Returns:
            The first matching tag, or None.
        """
        result = await self.db.execute(_name_lookup(name))
        return result.scalar_one_or_none()

    async def find_or_create_by_name(self, name: str) -> Tag:
        """Get an existing tag by case-insensitive name or create a new one.

        The check and the insert are separate statements, so two concurrent
        callers can both create the tag. The unique index on ``tags.name``
        only rejects exact duplicates.

        Args:
            name: The tag name.

        Returns:
            The existing or newly created Tag.

        Raises:
            TagValidationError: If the name is blank.
        """
        self._validate_presence(name)

        tag = await self.find_by_name(name)
        if tag:
            return tag

        return await self.create_tag(name)

    async def create_tag(self, name: str) -> Tag:
        """Create a new tag.

        Args:
            name: The tag name, stored as given.

        Returns:
            The created Tag.

        Raises:
            TagValidationError: If the name is blank or already taken.
        """
        await self._validate_name(name)

        tag = Tag(name=name)
        self.db.add(tag)
        await self.db.flush()

        logger.info("tag_created", tag_id=tag.id, name=name)

        return tag

    async def rename_tag(self, tag: Tag, name: str) -> Tag:
        """Rename a tag, applying the same validation as creation."""
        if name == tag.name:
            return tag

        await self._validate_name(name)

        old_name = tag.name
        tag.name = name
        await self.db.flush()

        logger.info("tag_renamed", tag_id=tag.id, old_name=old_name, name=name)

        return tag

    async def delete_tag(self, tag: Tag) -> None:
        """Delete a tag together with its taggings."""
        logger.info("tag_deleted", tag_id=tag.id, name=tag.name)

        await self.db.delete(tag)
        await self.db.flush()

    async def get_tag(self, tag_id: str) -> Tag | None:
        """Get a tag by ID."""
        return await self.db.get(Tag, tag_id)

    async def tag_counts(
        self,
        options: TagCountOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> list[Tag]:
        """Count taggings per tag.

        Options may be passed as a ``TagCountOptions``, a mapping, keyword
        arguments, or a combination (keywords win).

        Returns:
            Detached tags with ``count`` set, one per row and separate from
            any instance in the session. Tags with no matching taggings are
            never included.

        Raises:
            InvalidOptionError: If an option key is not recognized.
            TagValidationError: If an option value is invalid.
        """
        query = build_tag_counts_query(_resolve_options(options, kwargs))

        result = await self.db.execute(query.statement())

        tags = []
        for tag_id, name, count in result.all():
            tag = Tag(id=tag_id, name=name)
            make_transient_to_detached(tag)
            tag.tag_count = count
            tags.append(tag)

        logger.debug("tag_counts_computed", tags=len(tags))

        return tags

    async def tag_count_rows(
        self,
        options: TagCountOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> list[Row[Any]]:
        """Same as :meth:`tag_counts`, returning ``(id, name, count)`` rows."""
        query = build_tag_counts_query(_resolve_options(options, kwargs))

        result = await self.db.execute(query.statement())
        return list(result.all())

    async def _validate_name(self, name: str) -> None:
        self._validate_presence(name)

        result = await self.db.execute(select(Tag.id).where(Tag.name == name))
        if result.first() is not None:
            raise TagValidationError(f"Tag name has already been taken: {name}", field="name")

    @staticmethod
    def _validate_presence(name: str) -> None:
        if not name or not name.strip():
            raise TagValidationError("Tag name can't be blank", field="name")
