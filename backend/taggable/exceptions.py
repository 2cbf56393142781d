"""Custom exceptions for tag operations."""

from __future__ import annotations

from collections.abc import Iterable


class TagError(Exception):
    """Base exception for tag-related errors."""

    def __init__(self, message: str, code: str = "TAG_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class TagValidationError(TagError):
    """Raised when a tag name or a counts option value is invalid."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, "VALIDATION_ERROR")


class InvalidOptionError(TagError):
    """Raised when tag counts options contain unrecognized keys."""

    def __init__(self, keys: Iterable[str], valid_keys: Iterable[str]):
        self.keys = sorted(keys)
        self.valid_keys = sorted(valid_keys)
        msg = (
            f"Unknown option(s): {', '.join(self.keys)}. "
            f"Valid options are: {', '.join(self.valid_keys)}"
        )
        super().__init__(msg, "INVALID_OPTION")
