"""
novelctx.content.planner -- Chapter planning notes (``planner.json``).

Plans are keyed by their ``chapter`` label; upserting an existing label
replaces that entry in place.  The prompt rendering lists plans sorted
by label::

    Chapter: <label>
    Plan: <plan>
    Content: <content>        (only when non-empty)
    Status: finished | unfinished
"""

from __future__ import annotations

import logging
from typing import List, Optional

from novelctx.content.structured import JsonContent
from novelctx.core.types import PlanEntry, PlannerDocument, now_iso

log = logging.getLogger(__name__)


def render_plan(entry: PlanEntry) -> str:
    lines = [f"Chapter: {entry.chapter}", f"Plan: {entry.plan}"]
    if entry.content:
        lines.append(f"Content: {entry.content}")
    lines.append(f"Status: {'finished' if entry.finished else 'unfinished'}")
    return "\n".join(lines)


class PlannerContent(JsonContent):
    kind = "plan"
    document_type = PlannerDocument

    def _render(self, data: PlannerDocument) -> str:
        ordered = sorted(data.plans, key=lambda p: p.chapter)
        return "\n\n".join(render_plan(p) for p in ordered)

    def plans(self) -> List[PlanEntry]:
        """All plans, sorted by chapter label."""
        return sorted(self.document().plans, key=lambda p: p.chapter)

    def get_plan(self, chapter: str) -> Optional[PlanEntry]:
        for entry in self.document().plans:
            if entry.chapter == chapter:
                return entry
        return None

    def upsert_plan(
        self,
        chapter: str,
        plan: str,
        content: str = "",
        finished: bool = False,
    ) -> PlanEntry:
        if not chapter or not chapter.strip():
            raise ValueError("plan chapter must not be empty")

        entry = PlanEntry(chapter=chapter, plan=plan, content=content, finished=finished)
        with self._lock:
            doc = self.document()
            for i, existing in enumerate(doc.plans):
                if existing.chapter == chapter:
                    doc.plans[i] = entry
                    break
            else:
                doc.plans.append(entry)
            self._commit(doc)
        log.info("Plan stored for %s", chapter)
        return entry

    def delete_plan(self, chapter: str) -> bool:
        """Remove the plan for *chapter*; False when there was none."""
        with self._lock:
            doc = self.document()
            remaining = [p for p in doc.plans if p.chapter != chapter]
            if len(remaining) == len(doc.plans):
                return False
            doc.plans = remaining
            self._commit(doc)
        return True

    def set_finished(self, chapter: str, finished: bool = True) -> None:
        self._modify(chapter, finished=finished)

    def update_plan_content(self, chapter: str, content: str) -> None:
        self._modify(chapter, content=content)

    def unfinished_plans(self) -> List[PlanEntry]:
        return [p for p in self.plans() if not p.finished]

    def first_unfinished(self) -> Optional[PlanEntry]:
        pending = self.unfinished_plans()
        return pending[0] if pending else None

    def clear_plans(self) -> None:
        with self._lock:
            doc = self.document()
            doc.plans = []
            self._commit(doc)

    def summary_line(self) -> str:
        """One-line overview: ``label(status), label(status)``."""
        return ", ".join(
            f"{p.chapter}({'finished' if p.finished else 'unfinished'})"
            for p in self.plans()
        )

    def _modify(self, chapter: str, **changes) -> None:
        with self._lock:
            doc = self.document()
            for entry in doc.plans:
                if entry.chapter == chapter:
                    for key, value in changes.items():
                        setattr(entry, key, value)
                    break
            else:
                raise KeyError(f"No plan for chapter {chapter!r}")
            self._commit(doc)

    def _commit(self, doc: PlannerDocument) -> None:
        doc.updated_at = now_iso()
        self._save(doc)
