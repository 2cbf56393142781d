"""Pydantic schemas for tag API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TagCountOrder(str, Enum):
    """Orderings accepted by the counts endpoint."""

    COUNT_DESC = "count_desc"
    COUNT_ASC = "count_asc"
    NAME = "name"


class TagResponse(BaseModel):
    """Tag response schema."""

    model_config = {"from_attributes": True}

    id: str
    name: str


class TagCountResponse(BaseModel):
    """A tag with the number of taggings counted for it."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    count: int = Field(..., description="Number of matching taggings")


class TagCountListResponse(BaseModel):
    """List of tag counts response."""

    items: list[TagCountResponse]
    total: int


class TagCreateRequest(BaseModel):
    """Request to find or create a tag."""

    name: str = Field(..., min_length=1, max_length=255)
