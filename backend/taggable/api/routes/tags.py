"""Tag API endpoints for tag lookup, tagging and tag counts."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taggable.core.logging import get_logger
from taggable.db import get_db
from taggable.db.models import Tag, Tagging
from taggable.exceptions import InvalidOptionError, TagValidationError
from taggable.schemas.tag import (
    TagCountListResponse,
    TagCountOrder,
    TagCountResponse,
    TagCreateRequest,
    TagResponse,
)
from taggable.services.tag import TagService
from taggable.services.tagging import TaggingService

logger = get_logger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])

_ORDERINGS = {
    TagCountOrder.COUNT_DESC: (func.count().desc(), Tag.name),
    TagCountOrder.COUNT_ASC: (func.count().asc(), Tag.name),
    TagCountOrder.NAME: (Tag.name,),
}


class TaggableTagsRequest(BaseModel):
    """Request to apply tags to a taggable object."""

    tags: list[str] = Field(..., min_length=1, max_length=50)


# =============================================================================
# Tag Endpoints
# =============================================================================


@router.get("/counts", response_model=TagCountListResponse)
async def list_tag_counts(
    start_at: datetime | None = Query(None, description="Count taggings created at or after"),
    end_at: datetime | None = Query(None, description="Count taggings created at or before"),
    at_least: int | None = Query(None, ge=1, description="Minimum count"),
    at_most: int | None = Query(None, ge=1, description="Maximum count"),
    order: TagCountOrder = Query(TagCountOrder.COUNT_DESC, description="Result ordering"),
    limit: int | None = Query(None, ge=1, le=1000, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> TagCountListResponse:
    """List tags with the number of times each was applied."""
    service = TagService(db)
    try:
        tags = await service.tag_counts(
            start_at=start_at,
            end_at=end_at,
            at_least=at_least,
            at_most=at_most,
            order=_ORDERINGS[order],
            limit=limit,
        )
    except InvalidOptionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except TagValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    return TagCountListResponse(
        items=[TagCountResponse.model_validate(tag) for tag in tags],
        total=len(tags),
    )


@router.post("", response_model=TagResponse)
async def find_or_create_tag(
    request: TagCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    """Return the tag matching the name, ignoring case, creating it if needed."""
    service = TagService(db)
    try:
        tag = await service.find_or_create_by_name(request.name)
    except TagValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    return TagResponse.model_validate(tag)


@router.get("/by-name/{name}", response_model=TagResponse)
async def get_tag_by_name(
    name: str,
    db: AsyncSession = Depends(get_db),
) -> TagResponse:
    """Look up a tag by name, ignoring case."""
    service = TagService(db)
    tag = await service.find_by_name(name)
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")

    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a tag and all of its taggings."""
    service = TagService(db)
    tag = await service.get_tag(tag_id)
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")

    await service.delete_tag(tag)


# =============================================================================
# Taggable Endpoints
# =============================================================================


@router.get("/taggable/{taggable_type}/{taggable_id}", response_model=list[TagResponse])
async def get_taggable_tags(
    taggable_type: str,
    taggable_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[TagResponse]:
    """Get all tags applied to an object."""
    service = TaggingService(db)
    tags = await service.tags_for(taggable_type, taggable_id)

    return [TagResponse.model_validate(tag) for tag in tags]


@router.post("/taggable/{taggable_type}/{taggable_id}", response_model=list[TagResponse])
async def add_taggable_tags(
    taggable_type: str,
    taggable_id: str,
    request: TaggableTagsRequest,
    db: AsyncSession = Depends(get_db),
) -> list[TagResponse]:
    """Apply tags to an object, creating missing tags."""
    tag_service = TagService(db)
    tagging_service = TaggingService(db)

    applied: list[Tag] = []
    for tag_name in request.tags:
        try:
            tag = await tag_service.find_or_create_by_name(tag_name)
        except TagValidationError as e:
            raise HTTPException(status_code=422, detail=e.message)
        await tagging_service.tag(tag, taggable_type, taggable_id)
        applied.append(tag)

    logger.info(
        "tags_applied",
        taggable_type=taggable_type,
        taggable_id=taggable_id,
        tags=[tag.name for tag in applied],
    )

    return [TagResponse.model_validate(tag) for tag in applied]


@router.delete(
    "/taggable/{taggable_type}/{taggable_id}/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_taggable_tag(
    taggable_type: str,
    taggable_id: str,
    tag_id: str,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove a tag from an object."""
    result = await db.execute(
        select(Tagging).where(
            Tagging.tag_id == tag_id,
            Tagging.taggable_type == taggable_type,
            Tagging.taggable_id == taggable_id,
        )
    )
    tagging = result.scalar_one_or_none()
    if not tagging:
        raise HTTPException(status_code=404, detail="Tag is not applied to this object")

    await TaggingService(db).untag(tagging)
