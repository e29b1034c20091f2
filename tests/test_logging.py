"""Tests for novelctx.core.logging."""

import json
import logging
import sys

from novelctx.core.logging import StructuredFormatter, configure_logging


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("novelctx.test", logging.WARNING, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_basic_fields(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "novelctx.test"
        assert entry["msg"] == "hello world"
        assert entry["line"] == 10
        assert entry["ts"].endswith("Z")

    def test_extra_attributes(self):
        entry = json.loads(
            StructuredFormatter().format(_record(category="plan", path="/tmp/planner.json"))
        )
        assert entry["category"] == "plan"
        assert entry["path"] == "/tmp/planner.json"

    def test_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "novelctx.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]

    def test_non_ascii(self):
        entry = json.loads(StructuredFormatter().format(_record("%s", ("山海经",))))
        assert entry["msg"] == "山海经"


class TestConfigureLogging:
    def test_plain_sets_level_only(self):
        logger = configure_logging(level="debug")
        assert logger.name == "novelctx"
        assert logger.level == logging.DEBUG
        assert not any(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers)

    def test_structured_installs_handler(self):
        logger = configure_logging(structured=True, level="WARNING")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        assert logger.propagate is False

    def test_unknown_level_defaults_to_info(self):
        assert configure_logging(level="chatty").level == logging.INFO

    def test_from_config(self, config):
        config.structured_logging = True
        logger = config.configure_logging()
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
