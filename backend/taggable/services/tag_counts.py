"""Tag counts query builder.

Builds the query that counts how many taggings reference each tag. The
statement is composed in a fixed order:

1. base filter: ``conditions``, then ``start_at``, then ``end_at``, ANDed
2. ``INNER JOIN taggings ON tags.id = taggings.tag_id``, then extra joins
3. ``GROUP BY tags.id, tags.name``
4. having: ``COUNT(*) > 0``, then ``at_least``, then ``at_most``
5. projection: ``tags.id, tags.name, COUNT(*) AS count``
6. ``order`` and ``limit``

Tags without a matching tagging never appear in the result.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from sqlalchemy import ColumnElement, Label, Select, TextClause, and_, func, select, text

from taggable.db.models import Tag, Tagging
from taggable.exceptions import InvalidOptionError, TagValidationError

VALID_OPTIONS = frozenset(
    {"start_at", "end_at", "conditions", "joins", "at_least", "at_most", "order", "limit"}
)

# camelCase spellings accepted wherever options are given by key
OPTION_ALIASES = {
    "startAt": "start_at",
    "endAt": "end_at",
    "atLeast": "at_least",
    "atMost": "at_most",
}


def _as_tuple(value: Any) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _as_clause(value: Any) -> Any:
    if isinstance(value, str):
        return text(value)
    return value


def _is_join_pair(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and not isinstance(value[0], tuple)
        and isinstance(value[1], (ColumnElement, TextClause))
    )


def _validation_error(exc: ValidationError) -> TagValidationError:
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error["loc"] else None
    return TagValidationError(f"Invalid value for {field}: {error['msg']}", field=field)


class TagCountOptions(BaseModel):
    """Options accepted by the tag counts query.

    Attributes:
        start_at: Only count taggings created at or after this time.
        end_at: Only count taggings created at or before this time.
        conditions: Extra predicate, SQL text or a SQLAlchemy expression.
        joins: Extra join targets. Each item is either a mapped entity /
            selectable or a ``(target, onclause)`` pair.
        at_least: Exclude tags counted fewer times than this.
        at_most: Exclude tags counted more times than this.
        order: SQL text such as ``"count desc"``, or expressions.
        limit: Maximum number of rows.

    Unknown keys raise ``InvalidOptionError`` and invalid values raise
    ``TagValidationError``, whether the options are built directly or
    through :meth:`from_mapping`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    start_at: datetime | None = None
    end_at: datetime | None = None
    conditions: Any = None
    joins: tuple[tuple[Any, Any], ...] = ()
    at_least: int | None = None
    at_most: int | None = None
    order: tuple[Any, ...] = ()
    limit: int | None = Field(default=None, ge=0)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise _validation_error(exc) from exc

    @model_validator(mode="before")
    @classmethod
    def _known_keys(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        unknown = [key for key in data if OPTION_ALIASES.get(key, key) not in VALID_OPTIONS]
        if unknown:
            raise InvalidOptionError(unknown, VALID_OPTIONS)

        return {OPTION_ALIASES.get(key, key): value for key, value in data.items()}

    @field_validator("start_at", "end_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        # Naive values are taken as UTC, matching Tagging.created_at
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    @field_validator("conditions", mode="before")
    @classmethod
    def _conditions_clause(cls, value: Any) -> Any:
        return _as_clause(value)

    @field_validator("joins", mode="before")
    @classmethod
    def _join_pairs(cls, value: Any) -> tuple[tuple[Any, Any], ...]:
        if _is_join_pair(value):
            value = (value,)

        pairs = []
        for join in _as_tuple(value):
            if not isinstance(join, tuple):
                pairs.append((join, None))
            elif len(join) == 2:
                pairs.append(join)
            else:
                raise ValueError("each join must be a target or a (target, onclause) pair")
        return tuple(pairs)

    @field_validator("order", mode="before")
    @classmethod
    def _order_clauses(cls, value: Any) -> tuple[Any, ...]:
        if isinstance(value, str):
            return (text(value),)
        return tuple(_as_clause(v) for v in _as_tuple(value))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> TagCountOptions:
        """Validate a plain mapping of options.

        Raises:
            InvalidOptionError: If any key is not a recognized option.
            TagValidationError: If a value cannot be bound to its option.
        """
        try:
            return cls.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise _validation_error(exc) from exc


@dataclass(frozen=True)
class TagCountsQuery:
    """Immutable description of a tag counts query."""

    predicates: tuple[Any, ...]
    joins: tuple[tuple[Any, Any], ...]
    group_by: tuple[ColumnElement[Any], ...]
    having: tuple[ColumnElement[bool], ...]
    count: Label[int]
    order_by: tuple[Any, ...] = ()
    limit: int | None = None

    @property
    def projection(self) -> tuple[Any, ...]:
        return (Tag.id, Tag.name, self.count)

    def statement(self) -> Select:
        """Select ``(id, name, count)`` rows."""
        stmt = select(*self.projection)

        if self.predicates:
            stmt = stmt.where(and_(*self.predicates))

        # Mandatory join, with the left side pinned to tags
        stmt = stmt.join_from(Tag, Tagging, Tag.id == Tagging.tag_id)
        for target, onclause in self.joins:
            stmt = stmt.join(target, onclause) if onclause is not None else stmt.join(target)

        stmt = stmt.group_by(*self.group_by)

        for clause in self.having:
            stmt = stmt.having(clause)

        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        return stmt


def build_tag_counts_query(
    options: TagCountOptions | Mapping[str, Any] | None = None,
) -> TagCountsQuery:
    """Translate counts options into a query description.

    Args:
        options: A ``TagCountOptions`` instance or a plain mapping of options.

    Returns:
        The query description. Nothing is executed.

    Raises:
        InvalidOptionError: If a mapping contains an unrecognized key.
        TagValidationError: If an option value is invalid.
    """
    if not isinstance(options, TagCountOptions):
        options = TagCountOptions.from_mapping(options)

    predicates = [
        options.conditions,
        Tagging.created_at >= options.start_at if options.start_at is not None else None,
        Tagging.created_at <= options.end_at if options.end_at is not None else None,
    ]

    having = [
        func.count() > 0,
        func.count() >= options.at_least if options.at_least is not None else None,
        func.count() <= options.at_most if options.at_most is not None else None,
    ]

    return TagCountsQuery(
        predicates=tuple(p for p in predicates if p is not None),
        joins=options.joins,
        group_by=(Tag.id, Tag.name),
        having=tuple(h for h in having if h is not None),
        count=func.count().label("count"),
        order_by=options.order,
        limit=options.limit,
    )
