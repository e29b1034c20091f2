"""Tests for novelctx.content.base and novelctx.content.text."""

import os
import threading

import pytest

from novelctx.content.text import TextContent
from novelctx.core.errors import StorageReadError, StorageWriteError
from novelctx.core.filelock import FileLock
from novelctx.core.tokens import estimate_tokens


@pytest.fixture
def worldview(novel_dir):
    return TextContent(novel_dir / "worldview.md", name="worldview", lock_timeout=0.2)


# ── Reading ──────────────────────────────────────────────────────


class TestRead:
    def test_absent_is_empty(self, worldview):
        assert worldview.get_current() == ""
        assert worldview.record.loaded
        assert not worldview.record.exists

    def test_reads_existing_file(self, novel_dir, worldview):
        (novel_dir / "worldview.md").write_text("Magic is rare.", encoding="utf-8")
        assert worldview.get_current() == "Magic is rare."

    def test_undecodable_raises(self, novel_dir, worldview):
        path = novel_dir / "worldview.md"
        path.write_bytes(b"\xff\xfe\xfa not utf-8")
        with pytest.raises(StorageReadError) as excinfo:
            worldview.get_current()
        assert excinfo.value.path == path
        assert isinstance(excinfo.value.cause, UnicodeDecodeError)

    def test_read_distinguishes_empty_from_failed(self, novel_dir, worldview):
        empty = worldview.read()
        assert empty.ok and empty.empty and empty.tokens == 0

        (novel_dir / "worldview.md").write_bytes(b"\xff\xfe")
        failed = worldview.read()
        assert not failed.ok
        assert failed.text == ""
        assert failed.tokens == 0
        assert isinstance(failed.error, StorageReadError)

    def test_read_with_ceiling(self, novel_dir, worldview):
        (novel_dir / "worldview.md").write_text("word " * 100, encoding="utf-8")
        result = worldview.read(10)
        assert result.ok
        assert result.tokens <= 10
        assert result.tokens == estimate_tokens(result.text)

    def test_get_current_with_limit(self, novel_dir, worldview):
        (novel_dir / "worldview.md").write_text("one two three four five six", encoding="utf-8")
        assert worldview.get_current_with_limit(2) == ("one two three", 2)


# ── Staleness ────────────────────────────────────────────────────


class TestStaleness:
    def test_unloaded_is_stale(self, worldview):
        assert worldview.is_stale()

    def test_fresh_after_load(self, novel_dir, worldview):
        (novel_dir / "worldview.md").write_text("v1", encoding="utf-8")
        worldview.get_current()
        assert not worldview.is_stale()

    def test_external_write_detected(self, novel_dir, worldview, advance_mtime):
        path = novel_dir / "worldview.md"
        path.write_text("v1", encoding="utf-8")
        assert worldview.get_current() == "v1"

        path.write_text("v2", encoding="utf-8")
        advance_mtime(path)
        assert worldview.is_stale()
        assert worldview.get_current() == "v2"

    def test_same_mtime_serves_cache(self, novel_dir, worldview):
        path = novel_dir / "worldview.md"
        path.write_text("v1", encoding="utf-8")
        worldview.get_current()
        # change behind the cache's back without moving the timestamp
        stat = path.stat()
        path.write_text("v2", encoding="utf-8")
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns))
        assert worldview.get_current() == "v1"

    def test_file_appears(self, novel_dir, worldview):
        assert worldview.get_current() == ""
        (novel_dir / "worldview.md").write_text("late arrival", encoding="utf-8")
        assert worldview.get_current() == "late arrival"

    def test_file_deleted(self, novel_dir, worldview):
        path = novel_dir / "worldview.md"
        path.write_text("gone soon", encoding="utf-8")
        assert worldview.get_current() == "gone soon"
        path.unlink()
        assert worldview.is_stale()
        assert worldview.get_current() == ""


# ── Writing ──────────────────────────────────────────────────────


class TestUpdate:
    def test_cache_fresh_after_update(self, worldview):
        text = "  Dragons sleep under the mountains.\n\nThey dream in 中文.  "
        worldview.update(text)
        assert worldview.get_current() == text

    def test_writes_through(self, novel_dir, worldview):
        worldview.update("persisted")
        assert (novel_dir / "worldview.md").read_text(encoding="utf-8") == "persisted"

    def test_preserves_newlines_exactly(self, novel_dir, worldview):
        worldview.update("a\r\nb\n")
        assert (novel_dir / "worldview.md").read_bytes() == b"a\r\nb\n"

    def test_missing_directory(self, tmp_path):
        provider = TextContent(tmp_path / "nowhere" / "worldview.md")
        with pytest.raises(StorageWriteError):
            provider.update("text")
        assert not (tmp_path / "nowhere").exists()

    def test_failed_write_leaves_cache(self, novel_dir, worldview):
        worldview.update("before")
        with FileLock(novel_dir / "worldview.md"):
            with pytest.raises(StorageWriteError) as excinfo:
                worldview.update("after")
        assert isinstance(excinfo.value.cause, TimeoutError)
        assert worldview.get_current() == "before"
        assert (novel_dir / "worldview.md").read_text(encoding="utf-8") == "before"

    def test_no_lock_file_left_behind(self, novel_dir, worldview):
        worldview.update("x")
        assert not (novel_dir / "worldview.md.lock").exists()


class TestTextHelpers:
    def test_append_to_empty(self, worldview):
        worldview.append("First fact.")
        assert worldview.get_current() == "First fact."

    def test_append_separates_with_blank_line(self, worldview):
        worldview.update("First fact.\n")
        worldview.append("Second fact.")
        assert worldview.get_current() == "First fact.\n\nSecond fact."

    def test_append_blank_is_noop(self, worldview):
        worldview.update("Only fact.")
        worldview.append("\n\n")
        assert worldview.get_current() == "Only fact."

    def test_clear(self, novel_dir, worldview):
        worldview.update("something")
        worldview.clear()
        assert worldview.get_current() == ""
        assert (novel_dir / "worldview.md").exists()

    def test_has_content(self, worldview):
        assert not worldview.has_content()
        worldview.update("  \n")
        assert not worldview.has_content()
        worldview.update("x")
        assert worldview.has_content()


class TestInfo:
    def test_before_load(self, novel_dir, worldview):
        info = worldview.info()
        assert info["name"] == "worldview"
        assert info["path"] == str(novel_dir / "worldview.md")
        assert info["exists"] is False
        assert info["loaded"] is False
        assert info["tokens"] is None
        assert info["error"] is None

    def test_after_update(self, worldview):
        worldview.update("hello world")
        info = worldview.info()
        assert info["exists"] is True
        assert info["size"] == len("hello world")
        assert info["loaded"] is True
        assert info["tokens"] == 1

    def test_unreadable_location_reported(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        content = TextContent(blocker / "worldview.md", name="worldview")
        info = content.info()
        assert info["exists"] is False
        assert info["error"]


class TestConcurrency:
    def test_readers_see_whole_versions(self, worldview):
        versions = [f"version {i} " * 50 for i in range(20)]
        worldview.update(versions[0])
        seen = []
        errors = []

        def reader():
            try:
                for _ in range(50):
                    seen.append(worldview.get_current())
            except Exception as exc:
                errors.append(exc)

        def writer():
            for text in versions[1:]:
                worldview.update(text)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert set(seen) <= set(versions)
        assert worldview.get_current() == versions[-1]
