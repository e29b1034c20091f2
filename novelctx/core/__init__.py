"""novelctx.core -- Errors, type definitions, and token utilities."""

from novelctx.core.errors import (
    ConfigurationError,
    ContentFormatError,
    NovelContextError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TokenLimitExceeded,
    UnknownCategoryError,
)
from novelctx.core.tokens import estimate_tokens, estimate_tokens_fast
from novelctx.core.types import AssembledContext, Chapter, ChapterSummary, PlanEntry

__all__ = [
    "ConfigurationError",
    "ContentFormatError",
    "NovelContextError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "TokenLimitExceeded",
    "UnknownCategoryError",
    "estimate_tokens",
    "estimate_tokens_fast",
    "AssembledContext",
    "Chapter",
    "ChapterSummary",
    "PlanEntry",
]
