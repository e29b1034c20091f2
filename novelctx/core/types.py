"""
novelctx.core.types -- Data types shared across novelctx.

Every structure here is a plain dataclass serialisable to a dict/JSON
in one call.  The structured artifacts (index, planner, chapters) use
the same field names as their on-disk JSON documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from novelctx.core.errors import StorageError


def now_iso() -> str:
    """Current UTC timestamp in ISO-8601 with Z suffix."""
    return (
        datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    )


def _text(d: Dict, key: str, default: str = "") -> str:
    """String field *key* of *d*; ``TypeError`` when it holds anything else."""
    value = d.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Running summary index (index.json)
# ---------------------------------------------------------------------------


@dataclass
class ChapterSummary:
    """Summary of one written chapter, as kept in ``index.json``."""

    chapter_id: str
    summary: str
    title: str = ""
    word_count: int = 0
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict:
        return {
            "chapter_id": self.chapter_id,
            "title": self.title,
            "summary": self.summary,
            "word_count": self.word_count,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "ChapterSummary":
        return cls(
            chapter_id=str(d.get("chapter_id", "")),
            title=_text(d, "title"),
            summary=_text(d, "summary"),
            word_count=int(d.get("word_count", 0) or 0),
            timestamp=d.get("timestamp") or now_iso(),
        )


@dataclass
class IndexDocument:
    version: str = "1.0"
    last_update: str = field(default_factory=now_iso)
    summaries: List[ChapterSummary] = field(default_factory=list)

    @property
    def total_chapters(self) -> int:
        return len(self.summaries)

    def to_dict(self) -> Dict:
        return {
            "version": self.version,
            "last_update": self.last_update,
            "total_chapters": self.total_chapters,
            "summaries": [s.to_dict() for s in self.summaries],
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "IndexDocument":
        return cls(
            version=d.get("version", "1.0"),
            last_update=d.get("last_update") or now_iso(),
            summaries=[ChapterSummary.from_dict(s) for s in d.get("summaries") or []],
        )


# ---------------------------------------------------------------------------
# Planning notes (planner.json)
# ---------------------------------------------------------------------------


@dataclass
class PlanEntry:
    """One planning note.  Several plans may target the same chapter title."""

    chapter: str
    plan: str
    content: str = ""
    finished: bool = False

    def to_dict(self) -> Dict:
        return {
            "chapter": self.chapter,
            "plan": self.plan,
            "content": self.content,
            "finished": self.finished,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "PlanEntry":
        return cls(
            chapter=_text(d, "chapter"),
            plan=_text(d, "plan"),
            content=_text(d, "content"),
            finished=bool(d.get("finished", False)),
        )


@dataclass
class PlannerDocument:
    chapters: int = 0
    plans: List[PlanEntry] = field(default_factory=list)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict:
        return {
            "chapters": self.chapters,
            "plans": [p.to_dict() for p in self.plans],
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "PlannerDocument":
        return cls(
            chapters=int(d.get("chapters", 0) or 0),
            plans=[PlanEntry.from_dict(p) for p in d.get("plans") or []],
            updated_at=d.get("updated_at") or now_iso(),
        )


# ---------------------------------------------------------------------------
# Chapters (chapter_<N>.json)
# ---------------------------------------------------------------------------


@dataclass
class Paragraph:
    paragraph_id: int
    text: str

    def to_dict(self) -> Dict:
        return {"paragraph_id": self.paragraph_id, "text": self.text}


@dataclass
class Chapter:
    chapter_id: str
    title: str
    content: List[Paragraph] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Paragraph texts joined by blank lines."""
        return "\n\n".join(p.text for p in self.content)

    def to_dict(self) -> Dict:
        return {
            "chapter_id": self.chapter_id,
            "title": self.title,
            "content": [p.to_dict() for p in self.content],
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Chapter":
        return cls(
            chapter_id=str(d.get("chapter_id", "")),
            title=_text(d, "title"),
            content=[
                Paragraph(
                    paragraph_id=int(p.get("paragraph_id", i + 1)),
                    text=_text(p, "text"),
                )
                for i, p in enumerate(d.get("content") or [])
            ],
        )


# ---------------------------------------------------------------------------
# AssembledContext -- output of one assembly pass
# ---------------------------------------------------------------------------


@dataclass
class AssembledContext:
    """Context assembled for one model call.

    ``sections`` holds the truncated text per category (empty string
    when the category had nothing or failed to load); ``formatted``
    is the concatenation with placeholders substituted.  Built fresh
    on every call.
    """

    title: str = ""
    sections: Dict[str, str] = field(default_factory=dict)
    token_counts: Dict[str, int] = field(default_factory=dict)
    allocation: Dict[str, int] = field(default_factory=dict)
    errors: Dict[str, StorageError] = field(default_factory=dict)
    formatted: str = ""

    @property
    def total_tokens(self) -> int:
        return sum(self.token_counts.values())

    @property
    def ok(self) -> bool:
        return not self.errors

    def get(self, category: str, default: Optional[str] = None) -> Optional[str]:
        return self.sections.get(category, default)

    def as_map(self) -> Dict[str, str]:
        """Flat name -> text map for prompt templates, plus ``context``."""
        data = {"title": self.title}
        data.update(self.sections)
        data["context"] = self.formatted
        return data

    def to_dict(self) -> Dict:
        return {
            "title": self.title,
            "sections": dict(self.sections),
            "token_counts": dict(self.token_counts),
            "total_tokens": self.total_tokens,
            "allocation": dict(self.allocation),
            "errors": {name: str(err) for name, err in self.errors.items()},
            "formatted": self.formatted,
        }
