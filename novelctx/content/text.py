"""
novelctx.content.text -- Plain-text categories (worldview, character).
"""

from __future__ import annotations

from novelctx.content.base import FileContent


class TextContent(FileContent):
    """A UTF-8 markdown/text blob stored verbatim."""

    kind = "text"

    def append(self, text: str) -> None:
        """Add *text* after the current content, separated by a blank line."""
        with self._lock:
            current = self.get_current().rstrip("\n")
            addition = text.strip("\n")
            if not addition:
                return
            self.update(f"{current}\n\n{addition}" if current else addition)

    def clear(self) -> None:
        """Truncate the blob to empty; the file itself is kept."""
        self.update("")
