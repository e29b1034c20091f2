"""
novelctx.core.errors -- Exception taxonomy.

Configuration problems fail fast at construction.  Storage problems
carry the location and the underlying cause and are raised to the
immediate caller; nothing in novelctx retries them.  The estimator
and truncator never raise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class NovelContextError(Exception):
    """Base exception for novelctx."""

    pass


class ConfigurationError(NovelContextError, ValueError):
    """Invalid budget, weights, or configuration value."""

    pass


class UnknownCategoryError(ConfigurationError, KeyError):
    """A category name has no registered content provider."""

    def __init__(self, category: str, known: Optional[list] = None) -> None:
        self.category = category
        self.known = sorted(known or [])
        message = f"Unknown content category {category!r}"
        if self.known:
            message += f"; expected one of {self.known}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class TokenLimitExceeded(NovelContextError):
    """Content for a category is larger than its allotted ceiling."""

    def __init__(self, category: str, tokens: int, ceiling: int) -> None:
        self.category = category
        self.tokens = tokens
        self.ceiling = ceiling
        super().__init__(
            f"Category {category!r}: token count {tokens} exceeds limit {ceiling}"
        )


class StorageError(NovelContextError):
    """A storage location could not be read or written."""

    operation = "access"

    def __init__(self, path: Path, cause: Optional[BaseException] = None) -> None:
        self.path = Path(path)
        self.cause = cause
        message = f"Failed to {self.operation} {self.path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class StorageReadError(StorageError):
    """The location exists but could not be read or decoded."""

    operation = "read"


class StorageWriteError(StorageError):
    """The location could not be written."""

    operation = "write"


class ContentFormatError(NovelContextError, ValueError):
    """Text handed to a structured provider is not a valid document."""

    pass
