"""
novelctx.assembly.assembler -- Build the budgeted context for one model call.

``ContextAssembler.assemble(budget)`` resolves per-category ceilings,
pulls each category's truncated text from the ``ContentStore`` and
renders one prompt block with section headers in a fixed order::

    --- TITLE ---           novel title
    --- SUMMARY ---         index (chapter summaries)
    --- WORLDVIEW ---
    --- CHARACTERS ---
    --- PLAN ---
    --- LATEST CHAPTER ---
    --- <NAME> ---          any extra categories, in weight order

Every weighted category gets a section, so the output keeps the same
shape from call to call.  A zero-weight category is not read at all.
It renders its placeholder, as does an empty category or one whose
storage failed; a failure is logged and recorded in
``AssembledContext.errors`` without affecting the others.
Fetches may run on a thread pool, but sections are always reassembled
in the order above.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Tuple

from novelctx.budget.allocator import Budget
from novelctx.content.base import ContentRead
from novelctx.content.store import ContentStore
from novelctx.core.errors import ConfigurationError, StorageError, UnknownCategoryError
from novelctx.core.types import AssembledContext

log = logging.getLogger(__name__)

SECTION_ORDER = ("index", "worldview", "character", "plan", "chapters")

SECTION_HEADERS: Dict[str, str] = {
    "title": "TITLE",
    "index": "SUMMARY",
    "worldview": "WORLDVIEW",
    "character": "CHARACTERS",
    "plan": "PLAN",
    "chapters": "LATEST CHAPTER",
}

DEFAULT_PLACEHOLDERS: Dict[str, str] = {
    "title": "(untitled)",
    "index": "(no chapter summaries yet)",
    "worldview": "(no worldview yet)",
    "character": "(no characters yet)",
    "plan": "(no plan yet)",
    "chapters": "(no chapters yet)",
}


def section_order(names) -> List[str]:
    """Standard categories first in their fixed order, then the rest as given."""
    names = list(names)
    ordered = [name for name in SECTION_ORDER if name in names]
    ordered.extend(name for name in names if name not in SECTION_ORDER)
    return ordered


class ContextAssembler:
    """Assembles an ``AssembledContext`` from a ``ContentStore``.

    ``placeholders`` overrides entries of ``DEFAULT_PLACEHOLDERS``;
    categories without one render ``"(no <name> yet)"``.  With
    ``max_workers > 1`` category fetches run concurrently.
    """

    def __init__(
        self,
        store: ContentStore,
        placeholders: Optional[Mapping[str, str]] = None,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers!r}")
        self.store = store
        self.placeholders = dict(DEFAULT_PLACEHOLDERS)
        self.placeholders.update(placeholders or {})
        self.max_workers = max_workers

    def placeholder(self, category: str) -> str:
        return self.placeholders.get(category, f"(no {category} yet)")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def assemble(self, budget: Budget) -> AssembledContext:
        """Context for *budget*; each section fits its category's ceiling.

        Raises ``UnknownCategoryError`` before any I/O when a weighted
        category has no provider in the store.
        """
        missing = self.store.missing(budget.weights.names())
        if missing:
            raise UnknownCategoryError(missing[0], list(self.store.categories()))

        allocation = budget.allocate()
        names = section_order(budget.weights.names())
        requests = [(name, allocation[name]) for name in names]

        result = self._assemble(requests)
        result.allocation = allocation
        log.debug(
            "Assembled context: %d/%d tokens across %d categories",
            result.total_tokens,
            budget.total,
            len(names),
        )
        return result

    def assemble_full(self) -> AssembledContext:
        """Context with every registered category at full length."""
        names = section_order(self.store.categories())
        return self._assemble([(name, None) for name in names])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _assemble(self, requests: List[Tuple[str, Optional[int]]]) -> AssembledContext:
        result = AssembledContext()

        try:
            result.title = self.store.title()
        except StorageError as exc:
            self._record_failure(result, "title", exc)

        reads = self._fetch_all(requests)
        blocks = [self._block("title", result.title)]
        for name, _ in requests:
            read = reads[name]
            if read.error is not None:
                self._record_failure(result, name, read.error)
            result.sections[name] = read.text
            result.token_counts[name] = read.tokens
            blocks.append(self._block(name, read.text))

        result.formatted = "\n\n".join(blocks)
        return result

    def _fetch_all(self, requests: List[Tuple[str, Optional[int]]]) -> Dict[str, ContentRead]:
        # a zero ceiling can only ever yield ""
        reads = {name: ContentRead("", 0) for name, ceiling in requests if ceiling == 0}
        requests = [(name, ceiling) for name, ceiling in requests if ceiling != 0]

        if self.max_workers == 1 or len(requests) <= 1:
            reads.update((name, self.store.fetch(name, ceiling)) for name, ceiling in requests)
            return reads

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="novelctx-assemble"
        ) as pool:
            futures = {
                name: pool.submit(self.store.fetch, name, ceiling)
                for name, ceiling in requests
            }
            reads.update((name, future.result()) for name, future in futures.items())
            return reads

    def _block(self, name: str, text: str) -> str:
        header = SECTION_HEADERS.get(name, name.upper())
        body = text if text.strip() else self.placeholder(name)
        return f"--- {header} ---\n{body}"

    @staticmethod
    def _record_failure(result: AssembledContext, name: str, exc: StorageError) -> None:
        result.errors[name] = exc
        log.warning(
            "Category %s unavailable, using placeholder: %s",
            name,
            exc,
            extra={"category": name, "path": str(exc.path)},
        )
