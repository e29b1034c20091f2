"""Shared fixtures for novelctx tests."""

import os
import logging

import pytest

from novelctx.content.store import ContentStore
from novelctx.core.config import Config


@pytest.fixture
def novel_dir(tmp_path):
    """An existing, empty novel directory."""
    d = tmp_path / "novel"
    d.mkdir()
    return d


@pytest.fixture
def config(novel_dir):
    """Provide a Config pointing at the temp novel directory."""
    return Config.from_data_dir(novel_dir, lock_timeout=1.0)


@pytest.fixture
def store(novel_dir):
    """A standard five-category store over the temp novel directory."""
    return ContentStore.for_directory(novel_dir, lock_timeout=1.0)


@pytest.fixture
def advance_mtime():
    """Push a file's modification time forward so staleness is detectable.

    Filesystem timestamp granularity can hide two writes made in quick
    succession; tests simulate "written later" explicitly instead.
    """

    def _advance(path, seconds=10):
        st = os.stat(path)
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))

    return _advance


@pytest.fixture(autouse=True)
def _reset_novelctx_logger():
    """Undo any configure_logging() side effects between tests."""
    logger = logging.getLogger("novelctx")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
