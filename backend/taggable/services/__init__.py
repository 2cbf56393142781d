"""Business logic services for Taggable."""

from taggable.services.tag import TagService
from taggable.services.tag_counts import (
    TagCountOptions,
    TagCountsQuery,
    build_tag_counts_query,
)
from taggable.services.tagging import TaggingService

__all__ = [
    "TagCountOptions",
    "TagCountsQuery",
    "TagService",
    "TaggingService",
    "build_tag_counts_query",
]
