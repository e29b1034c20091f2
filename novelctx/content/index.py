"""
novelctx.content.index -- Running chapter-summary index and novel title.

``index.json`` holds one ``ChapterSummary`` per written chapter; the
title lives in a sibling plain-text file named ``title``.  The index
renders for the prompt as ``"<chapter_id>: <summary>"`` blocks
separated by blank lines, oldest first.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from novelctx.content.structured import JsonContent
from novelctx.content.text import TextContent
from novelctx.core.tokens import HEURISTIC, Estimator
from novelctx.core.types import ChapterSummary, IndexDocument, now_iso

log = logging.getLogger(__name__)


def render_summaries(summaries: List[ChapterSummary]) -> str:
    return "\n\n".join(f"{s.chapter_id}: {s.summary}" for s in summaries)


class IndexContent(JsonContent):
    kind = "index"
    document_type = IndexDocument

    def __init__(
        self,
        path: Path,
        title_path: Optional[Path] = None,
        name: str = "index",
        lock_timeout: float = 5.0,
        estimator: Estimator = HEURISTIC,
    ) -> None:
        super().__init__(path, name=name, lock_timeout=lock_timeout, estimator=estimator)
        if title_path is None:
            title_path = Path(path).parent / "title"
        self._title = TextContent(
            title_path, name="title", lock_timeout=lock_timeout, estimator=estimator
        )

    def _render(self, data: IndexDocument) -> str:
        return render_summaries(data.summaries)

    # ── Title ─────────────────────────────────────────────────

    def get_title(self) -> str:
        return self._title.get_current().strip()

    def set_title(self, title: str) -> None:
        self._title.update(title.strip())

    def has_title(self) -> bool:
        return bool(self.get_title())

    # ── Summaries ─────────────────────────────────────────────

    def summaries(self) -> List[ChapterSummary]:
        return self.document().summaries

    def chapter_count(self) -> int:
        return self.document().total_chapters

    def upsert_summary(
        self,
        chapter_id: str,
        summary: str,
        title: str = "",
        word_count: int = 0,
    ) -> ChapterSummary:
        """Add or replace the summary for *chapter_id*.

        A replaced summary keeps its position in the index.
        """
        if not str(chapter_id).strip():
            raise ValueError("chapter_id must not be empty")

        entry = ChapterSummary(
            chapter_id=str(chapter_id),
            summary=summary,
            title=title,
            word_count=word_count,
        )
        with self._lock:
            doc = self.document()
            for i, existing in enumerate(doc.summaries):
                if existing.chapter_id == entry.chapter_id:
                    doc.summaries[i] = entry
                    break
            else:
                doc.summaries.append(entry)
            doc.last_update = now_iso()
            self._save(doc)

        log.info("Index summary stored for chapter %s", entry.chapter_id)
        return entry

    def recent_summaries(self, count: int) -> List[ChapterSummary]:
        """The last *count* summaries, oldest first."""
        if count <= 0:
            return []
        return self.summaries()[-count:]

    def recent_text(self, count: int) -> str:
        return render_summaries(self.recent_summaries(count))

    def latest_summary(self) -> Optional[ChapterSummary]:
        summaries = self.summaries()
        return summaries[-1] if summaries else None

    def info(self) -> Dict[str, Any]:
        data = super().info()
        data["title"] = self._title.info()
        return data
