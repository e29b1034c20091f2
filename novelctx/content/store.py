"""
novelctx.content.store -- Category name -> provider mapping.

A ``ContentStore`` is an ordinary object owned by whoever builds it;
there is no module-level registry.  ``for_directory`` wires the five
standard categories of a novel directory::

    <novel_dir>/
        worldview.md        worldview   (TextContent)
        character.md        character   (TextContent)
        planner.json        plan        (PlannerContent)
        index.json, title   index       (IndexContent)
        chapter_<N>.json    chapters    (ChapterContent)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

from novelctx.content.base import ContentRead, FileContent
from novelctx.content.chapters import ChapterContent
from novelctx.content.index import IndexContent
from novelctx.content.planner import PlannerContent
from novelctx.content.text import TextContent
from novelctx.core.errors import ConfigurationError, UnknownCategoryError
from novelctx.core.tokens import HEURISTIC, Estimator

log = logging.getLogger(__name__)

WORLDVIEW_FILE = "worldview.md"
CHARACTER_FILE = "character.md"
PLANNER_FILE = "planner.json"
INDEX_FILE = "index.json"
TITLE_FILE = "title"


class ContentStore:
    """Per-category content providers for one novel."""

    def __init__(self, providers: Optional[Mapping[str, FileContent]] = None) -> None:
        self._providers: Dict[str, FileContent] = {}
        for name, provider in (providers or {}).items():
            self.add(name, provider)

    @classmethod
    def for_directory(
        cls,
        novel_dir: Path,
        lock_timeout: float = 5.0,
        estimator: Estimator = HEURISTIC,
    ) -> "ContentStore":
        """Standard store for *novel_dir*.  Touches nothing on disk."""
        novel_dir = Path(novel_dir)
        common = {"lock_timeout": lock_timeout, "estimator": estimator}
        return cls(
            {
                "index": IndexContent(
                    novel_dir / INDEX_FILE, novel_dir / TITLE_FILE, name="index", **common
                ),
                "worldview": TextContent(novel_dir / WORLDVIEW_FILE, name="worldview", **common),
                "character": TextContent(novel_dir / CHARACTER_FILE, name="character", **common),
                "plan": PlannerContent(novel_dir / PLANNER_FILE, name="plan", **common),
                "chapters": ChapterContent(novel_dir, name="chapters", **common),
            }
        )

    # ── Registry ──────────────────────────────────────────────

    def add(self, name: str, provider: FileContent) -> None:
        """Register *provider* under *name*; names are unique per store."""
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(f"Invalid category name {name!r}")
        if name in self._providers:
            raise ConfigurationError(f"Category {name!r} is already registered")
        self._providers[name] = provider

    def provider(self, category: str) -> FileContent:
        try:
            return self._providers[category]
        except KeyError:
            raise UnknownCategoryError(category, list(self._providers)) from None

    def categories(self) -> Tuple[str, ...]:
        return tuple(self._providers)

    def missing(self, categories) -> Tuple[str, ...]:
        """Names from *categories* with no registered provider."""
        return tuple(name for name in categories if name not in self._providers)

    # ── Content ───────────────────────────────────────────────

    def get_current(self, category: str) -> str:
        return self.provider(category).get_current()

    def get_current_with_limit(self, category: str, ceiling: int) -> Tuple[str, int]:
        return self.provider(category).get_current_with_limit(ceiling)

    def update(self, category: str, text: str) -> None:
        self.provider(category).update(text)
        log.info("Updated content category %s", category)

    def fetch(self, category: str, ceiling: Optional[int] = None) -> ContentRead:
        """Non-raising read of *category*; unknown names still raise."""
        return self.provider(category).read(ceiling)

    def title(self) -> str:
        """Novel title from the index category, ``""`` when there is none."""
        index = self._providers.get("index")
        if not isinstance(index, IndexContent):
            return ""
        return index.get_title()

    def info(self) -> Dict[str, Dict]:
        return {name: provider.info() for name, provider in self._providers.items()}

    # ── Protocol ──────────────────────────────────────────────

    def __contains__(self, category: object) -> bool:
        return category in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ContentStore({', '.join(self._providers)})"
