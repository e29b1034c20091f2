"""
novelctx.content.structured -- JSON-document providers.

The artifact on disk is a JSON object decoded into a typed document
(``IndexDocument``, ``PlannerDocument``, ``Chapter``).  ``get_current``
returns the document rendered as prompt text; ``update`` accepts the
serialized JSON document and rejects anything that does not decode.
Domain methods on the subclasses edit the document under the
provider's lock and write it back through ``_save``.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Dict

from novelctx.content.base import FileContent
from novelctx.core.errors import ContentFormatError


def decode_object(raw: str) -> Dict:
    """Parse *raw* as a JSON object; ``{}`` for blank input.

    Raises ``ValueError`` (``json.JSONDecodeError`` included) otherwise.
    """
    if not raw.strip():
        return {}
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def encode_object(data: Dict) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


class JsonContent(FileContent):
    """Provider whose artifact is one JSON document of ``document_type``."""

    kind = "json"
    document_type: Any = None

    def _parse(self, raw: str) -> Any:
        data = decode_object(raw)
        try:
            return self.document_type.from_dict(data)
        except (TypeError, AttributeError, KeyError) as exc:
            raise ValueError(f"malformed {self.kind} document: {exc}") from exc

    def _encode(self, text: str) -> str:
        try:
            self._parse(text)
        except ValueError as exc:
            raise ContentFormatError(f"Invalid {self.kind} document: {exc}") from exc
        return text

    def document(self) -> Any:
        """A private copy of the current document."""
        with self._lock:
            self._refresh()
            return copy.deepcopy(self.record.data)

    def _save(self, document: Any) -> None:
        self._write(encode_object(document.to_dict()))
