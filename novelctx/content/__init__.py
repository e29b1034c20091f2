"""novelctx.content -- Cached, file-backed content providers per category."""

from novelctx.content.base import ContentRead, ContentRecord, FileContent
from novelctx.content.chapters import ChapterContent
from novelctx.content.index import IndexContent
from novelctx.content.planner import PlannerContent
from novelctx.content.store import ContentStore
from novelctx.content.text import TextContent

__all__ = [
    "ContentRead",
    "ContentRecord",
    "FileContent",
    "TextContent",
    "IndexContent",
    "PlannerContent",
    "ChapterContent",
    "ContentStore",
]
