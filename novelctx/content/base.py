"""
novelctx.content.base -- Cached, storage-backed content providers.

A provider owns one category's artifact on disk and a single cached
``ContentRecord`` for it.  The record moves through::

    Unloaded --get_current--> Loaded --(mtime advanced)--> Stale --reload--> Loaded

``get_current`` checks staleness, reloads if needed and returns the
text while holding the provider's lock, so a reader never sees text
from one load paired with the timestamp of another.  ``update`` holds
the same lock exclusively, writes through to disk first and only then
refreshes the record; a failed write leaves the record untouched.

An absent artifact is not an error: it reads as ``""``.  An artifact
that exists but cannot be read or decoded raises ``StorageReadError``.
``read()`` wraps both outcomes into a ``ContentRead`` so the assembler
can degrade without losing the failure.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Tuple

from novelctx.budget.truncator import truncate
from novelctx.core.errors import StorageError, StorageReadError, StorageWriteError
from novelctx.core.filelock import FileLock
from novelctx.core.tokens import HEURISTIC, Estimator

log = logging.getLogger(__name__)


@dataclass
class ContentRecord:
    """Cached state of one category's artifact."""

    path: Optional[Path] = None
    raw: str = ""
    data: Any = None
    mtime_ns: Optional[int] = None
    loaded: bool = False

    @property
    def exists(self) -> bool:
        return self.mtime_ns is not None


class ContentRead(NamedTuple):
    """Outcome of a non-raising read.

    ``error`` is None on success; ``text == ""`` with no error means the
    category is genuinely empty.
    """

    text: str
    tokens: int
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def empty(self) -> bool:
        return not self.text


class FileContent:
    """Base provider: a UTF-8 artifact at a fixed path.

    Subclasses customise three hooks:

    ``_parse(raw)``
        Decode the raw file text into the record's ``data``; raise
        ``ValueError`` on malformed content.
    ``_render(data)``
        Turn ``data`` into the text handed to the truncator.
    ``_encode(text)``
        Validate/convert caller text into the raw payload to write.

    ``_locate()`` / ``_locate_for_write()`` return the artifact path and
    may be overridden when the artifact moves (the latest chapter).
    """

    kind = "text"

    def __init__(
        self,
        path: Optional[Path],
        name: str = "",
        lock_timeout: float = 5.0,
        estimator: Estimator = HEURISTIC,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self.name = name or (self._path.stem if self._path is not None else self.kind)
        self.lock_timeout = lock_timeout
        self.estimator = estimator
        self.record = ContentRecord(path=self._path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Optional[Path]:
        return self._locate()

    # -- hooks ----------------------------------------------------------------

    def _locate(self) -> Optional[Path]:
        return self._path

    def _locate_for_write(self) -> Path:
        path = self._locate()
        if path is None:
            raise StorageWriteError(Path(self.name), ValueError("no storage location"))
        return path

    def _parse(self, raw: str) -> Any:
        return raw

    def _render(self, data: Any) -> str:
        return data or ""

    def _encode(self, text: str) -> str:
        return text

    def _empty(self) -> Any:
        return self._parse("")

    # -- staleness ------------------------------------------------------------

    def _stat(self, path: Optional[Path]) -> Optional[int]:
        if path is None:
            return None
        try:
            return os.stat(path).st_mtime_ns
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageReadError(path, exc) from exc

    def is_stale(self) -> bool:
        """True when the record must be (re)loaded before use."""
        with self._lock:
            if not self.record.loaded:
                return True
            path = self._locate()
            if path != self.record.path:
                return True
            mtime = self._stat(path)
            if mtime is None:
                return self.record.exists
            if self.record.mtime_ns is None:
                return True
            return mtime > self.record.mtime_ns

    def _refresh(self) -> None:
        if self.is_stale():
            self._load()

    def _load(self) -> None:
        path = self._locate()
        mtime = self._stat(path)
        if mtime is None:
            self._set(path, "", self._empty(), None)
            log.debug("Content %s absent at %s", self.name, path)
            return

        try:
            raw = path.read_bytes().decode("utf-8")
            data = self._parse(raw)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise StorageReadError(path, exc) from exc

        self._set(path, raw, data, mtime)
        log.debug("Loaded %s from %s (%d chars)", self.name, path, len(raw))

    def _set(self, path: Optional[Path], raw: str, data: Any, mtime: Optional[int]) -> None:
        self.record = ContentRecord(
            path=path, raw=raw, data=data, mtime_ns=mtime, loaded=True
        )

    # -- reads ----------------------------------------------------------------

    def get_current(self) -> str:
        """Current text of the category, reloading if storage changed."""
        with self._lock:
            self._refresh()
            return self._render(self.record.data)

    def get_current_with_limit(self, ceiling: int) -> Tuple[str, int]:
        """Current text truncated to *ceiling*; returns ``(text, tokens)``."""
        return truncate(self.get_current(), ceiling, self.estimator)

    def read(self, ceiling: Optional[int] = None) -> ContentRead:
        """Like ``get_current[_with_limit]`` but reports failure instead of raising."""
        try:
            if ceiling is None:
                text = self.get_current()
                return ContentRead(text, self.estimator(text))
            text, tokens = self.get_current_with_limit(ceiling)
            return ContentRead(text, tokens)
        except StorageError as exc:
            log.debug("Could not read %s: %s", self.name, exc)
            return ContentRead("", 0, exc)

    def has_content(self) -> bool:
        return bool(self.get_current().strip())

    # -- writes ---------------------------------------------------------------

    def update(self, text: str) -> None:
        """Write *text* through to storage, then refresh the cached record.

        Creates the artifact if missing, provided its parent directory
        exists.  Raises ``StorageWriteError`` on failure, leaving the
        cache as it was.
        """
        with self._lock:
            self._write(self._encode(text))

    def _write(self, payload: str, path: Optional[Path] = None) -> None:
        if path is None:
            path = self._locate_for_write()
        if not path.parent.is_dir():
            raise StorageWriteError(
                path, FileNotFoundError(f"directory does not exist: {path.parent}")
            )
        try:
            data = self._parse(payload)
        except ValueError as exc:
            raise StorageWriteError(path, exc) from exc

        try:
            with FileLock(path, timeout=self.lock_timeout):
                path.write_bytes(payload.encode("utf-8"))
            mtime = os.stat(path).st_mtime_ns
        except OSError as exc:
            # TimeoutError from the lock is an OSError too
            raise StorageWriteError(path, exc) from exc

        self._set(path, payload, data, mtime)
        log.debug("Wrote %s to %s (%d chars)", self.name, path, len(payload))

    # -- introspection --------------------------------------------------------

    def info(self) -> Dict[str, Any]:
        """Location and cache metadata, without forcing a reload."""
        with self._lock:
            path = self._locate()
            size = 0
            exists = False
            error = None
            if path is not None:
                try:
                    size = path.stat().st_size
                    exists = True
                except FileNotFoundError:
                    pass
                except OSError as exc:
                    error = str(exc)
            return {
                "name": self.name,
                "kind": self.kind,
                "path": str(path) if path is not None else None,
                "exists": exists,
                "size": size,
                "error": error,
                "loaded": self.record.loaded,
                "mtime_ns": self.record.mtime_ns,
                "tokens": self.estimator(self._render(self.record.data))
                if self.record.loaded
                else None,
            }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, path={self._locate()!s})"
