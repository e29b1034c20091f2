"""
novelctx.content.chapters -- Written chapters (``chapter_<N>.json``).

Each chapter is its own JSON file in the novel directory, numbered from
1.  The category's current text is the *latest* chapter's paragraphs
joined by blank lines, so the provider's location moves whenever a new
chapter file appears; ``is_stale`` treats a change of latest file the
same as a newer modification time.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from novelctx.content.structured import JsonContent, decode_object, encode_object
from novelctx.core.errors import ContentFormatError, StorageReadError
from novelctx.core.tokens import HEURISTIC, Estimator
from novelctx.core.types import Chapter, Paragraph

log = logging.getLogger(__name__)

CHAPTER_FILE = re.compile(r"^chapter_(\d+)\.json$")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def chapter_filename(number: int) -> str:
    return f"chapter_{number}.json"


def split_paragraphs(text: str) -> List[Paragraph]:
    """Split *text* on blank lines into numbered, stripped paragraphs."""
    parts = [p.strip() for p in _PARAGRAPH_BREAK.split(text.strip())]
    parts = [p for p in parts if p]
    return [Paragraph(paragraph_id=i, text=p) for i, p in enumerate(parts, 1)]


class ChapterContent(JsonContent):
    kind = "chapters"
    document_type = Chapter

    def __init__(
        self,
        novel_dir: Path,
        name: str = "chapters",
        lock_timeout: float = 5.0,
        estimator: Estimator = HEURISTIC,
    ) -> None:
        self.novel_dir = Path(novel_dir)
        super().__init__(None, name=name, lock_timeout=lock_timeout, estimator=estimator)

    # ── Location ──────────────────────────────────────────────

    def chapter_files(self) -> List[Tuple[int, Path]]:
        """``(number, path)`` for every chapter file, ascending."""
        try:
            names = os.listdir(self.novel_dir)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageReadError(self.novel_dir, exc) from exc

        found = []
        for filename in names:
            match = CHAPTER_FILE.match(filename)
            if match:
                found.append((int(match.group(1)), self.novel_dir / filename))
        found.sort()
        return found

    def _locate(self) -> Optional[Path]:
        files = self.chapter_files()
        return files[-1][1] if files else None

    def _locate_for_write(self) -> Path:
        return self._locate() or self.novel_dir / chapter_filename(1)

    def _render(self, data: Chapter) -> str:
        return data.text

    # ── Queries ───────────────────────────────────────────────

    def chapter_count(self) -> int:
        return len(self.chapter_files())

    def has_chapters(self) -> bool:
        return bool(self.chapter_files())

    def read_chapters(self) -> List[Chapter]:
        """Every chapter, in order.  Bypasses the cache."""
        chapters = []
        for _, path in self.chapter_files():
            try:
                raw = path.read_bytes().decode("utf-8")
                chapters.append(Chapter.from_dict(decode_object(raw)))
            except (OSError, UnicodeDecodeError, ValueError, TypeError, AttributeError) as exc:
                raise StorageReadError(path, exc) from exc
        return chapters

    def latest_chapter(self) -> Optional[Chapter]:
        with self._lock:
            if self._locate() is None:
                return None
            return self.document()

    def all_text(self) -> str:
        """All chapters as ``"<title>\\n\\n<text>"`` blocks."""
        return "\n\n".join(f"{c.title}\n\n{c.text}" for c in self.read_chapters())

    # ── Writes ────────────────────────────────────────────────

    def write_chapter(self, text: str, title: str = "") -> Path:
        """Store *text* as a new chapter after the latest one.

        Returns the path of the new chapter file.
        """
        paragraphs = split_paragraphs(text)
        if not paragraphs:
            raise ContentFormatError("Chapter text has no paragraphs")

        with self._lock:
            files = self.chapter_files()
            number = files[-1][0] + 1 if files else 1
            chapter = Chapter(
                chapter_id=f"{number:03d}",
                title=title or f"Chapter {number}",
                content=paragraphs,
            )
            path = self.novel_dir / chapter_filename(number)
            self._write(encode_object(chapter.to_dict()), path)

        log.info("Wrote chapter %d (%d paragraphs) to %s", number, len(paragraphs), path)
        return path

    def update(self, text: str) -> None:
        """Replace the latest chapter's paragraphs with *text*.

        Writes chapter 1 when no chapter exists yet.  The chapter id and
        title of an existing chapter are kept.
        """
        with self._lock:
            path = self._locate_for_write()
            number = int(CHAPTER_FILE.match(path.name).group(1))
            try:
                current = self.latest_chapter()
            except StorageReadError as exc:
                log.warning("Overwriting unreadable chapter %s: %s", path, exc)
                current = None
            chapter = Chapter(
                chapter_id=(current and current.chapter_id) or f"{number:03d}",
                title=(current and current.title) or f"Chapter {number}",
                content=split_paragraphs(text),
            )
            self._write(encode_object(chapter.to_dict()), path)
