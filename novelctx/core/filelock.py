"""
novelctx.core.filelock -- Advisory sidecar lock for artifact writes.

Content providers serialise their in-process readers and writers with
a ``threading.RLock`` per category.  That does nothing for a second
process (a background summariser, an editor plugin) writing the same
artifact, so write-through additionally takes this lock.

The lock is a ``<artifact>.lock`` file created with ``O_CREAT | O_EXCL``,
which is atomic on every platform we run on.

Usage::

    with FileLock(path, timeout=2.0):
        path.write_text(text, encoding="utf-8")
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

log = logging.getLogger(__name__)


class FileLock:
    """Sidecar lock file guarding one artifact.

    Parameters
    ----------
    path : Path
        The artifact to protect.  The lock file is ``path.lock``.
    timeout : float
        Maximum seconds to wait before raising ``TimeoutError``.
    poll : float
        Seconds between attempts.
    """

    def __init__(self, path: Path, timeout: float = 5.0, poll: float = 0.02) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.timeout = timeout
        self.poll = poll
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> "FileLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.release()

    def acquire(self) -> None:
        """Wait for the lock; raise ``TimeoutError`` after *timeout* seconds.

        A lock file older than twice the timeout is treated as left
        behind by a crashed writer and removed.
        """
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                self._fd = os.open(
                    str(self.lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY
                )
                return
            except FileExistsError:
                if time.monotonic() < deadline:
                    time.sleep(self.poll)
                    continue
                if self._break_if_stale():
                    continue
                raise TimeoutError(
                    f"Could not lock {self.path} within {self.timeout}s"
                )

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            os.close(self._fd)
        finally:
            self._fd = None
            self._unlink()

    def _break_if_stale(self) -> bool:
        try:
            age = time.time() - os.path.getmtime(self.lock_path)
        except OSError:
            # vanished between attempts; just retry
            return True
        if age <= self.timeout * 2:
            return False
        log.warning("Breaking stale lock (%.1fs old): %s", age, self.lock_path)
        self._unlink()
        return True

    def _unlink(self) -> None:
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass
