"""
novelctx.core.logging -- Structured logging support.

Every novelctx module logs through ``logging.getLogger(__name__)``.
``configure_logging(structured=True)`` switches the ``novelctx`` logger
tree to single-line JSON records; extra attributes passed through
``extra={...}`` (category, path, ceiling, tokens) are carried into the
JSON object.

When ``structured=False`` (default) only the level is set and the
host application's handlers apply.
"""

from __future__ import annotations

import json
import logging

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Fields emitted: ``ts``, ``level``, ``logger``, ``msg``, ``module``,
    ``func``, ``line``, any ``extra`` attributes, and ``exception``
    when the record carries exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S")
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                entry[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(
    structured: bool = False,
    level: str = "INFO",
    logger_name: str = "novelctx",
) -> logging.Logger:
    """Configure the novelctx logger tree and return its root logger."""
    root = logging.getLogger(logger_name)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if structured:
        root.handlers.clear()
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
        root.addHandler(handler)
        # avoid duplicate lines through the application's root handler
        root.propagate = False

    return root
