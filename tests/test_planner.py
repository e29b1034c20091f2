"""Tests for novelctx.content.planner."""

import json

import pytest

from novelctx.content.planner import PlannerContent, render_plan
from novelctx.core.errors import ContentFormatError, StorageReadError
from novelctx.core.types import PlanEntry


@pytest.fixture
def planner(novel_dir):
    return PlannerContent(novel_dir / "planner.json", name="plan")


class TestRender:
    def test_minimal_entry(self):
        entry = PlanEntry(chapter="Chapter 1", plan="Meet the mentor")
        assert render_plan(entry) == "Chapter: Chapter 1\nPlan: Meet the mentor\nStatus: unfinished"

    def test_content_and_finished(self):
        entry = PlanEntry(chapter="C2", plan="Fight", content="Swords drawn.", finished=True)
        assert render_plan(entry) == "Chapter: C2\nPlan: Fight\nContent: Swords drawn.\nStatus: finished"

    def test_current_text_sorted_by_chapter(self, planner):
        planner.upsert_plan("B", "second")
        planner.upsert_plan("A", "first")
        assert planner.get_current() == (
            "Chapter: A\nPlan: first\nStatus: unfinished\n\n"
            "Chapter: B\nPlan: second\nStatus: unfinished"
        )


class TestPlans:
    def test_absent(self, planner):
        assert planner.get_current() == ""
        assert planner.plans() == []
        assert planner.get_plan("A") is None

    def test_upsert_replaces(self, planner):
        planner.upsert_plan("A", "draft")
        planner.upsert_plan("A", "final", content="text", finished=True)
        plans = planner.plans()
        assert len(plans) == 1
        assert plans[0] == PlanEntry("A", "final", "text", True)

    def test_rejects_empty_chapter(self, planner):
        with pytest.raises(ValueError):
            planner.upsert_plan(" ", "nothing")

    def test_delete(self, planner):
        planner.upsert_plan("A", "a")
        assert planner.delete_plan("A") is True
        assert planner.delete_plan("A") is False
        assert planner.plans() == []

    def test_set_finished(self, planner):
        planner.upsert_plan("A", "a")
        planner.set_finished("A")
        assert planner.get_plan("A").finished is True
        planner.set_finished("A", False)
        assert planner.get_plan("A").finished is False

    def test_update_plan_content(self, planner):
        planner.upsert_plan("A", "a")
        planner.update_plan_content("A", "It begins.")
        assert planner.get_plan("A").content == "It begins."

    def test_modify_missing_raises(self, planner):
        with pytest.raises(KeyError):
            planner.set_finished("nope")

    def test_unfinished(self, planner):
        planner.upsert_plan("C", "c")
        planner.upsert_plan("A", "a", finished=True)
        planner.upsert_plan("B", "b")
        assert [p.chapter for p in planner.unfinished_plans()] == ["B", "C"]
        assert planner.first_unfinished().chapter == "B"

    def test_clear(self, planner):
        planner.upsert_plan("A", "a")
        planner.clear_plans()
        assert planner.plans() == []

    def test_summary_line(self, planner):
        planner.upsert_plan("A", "a", finished=True)
        planner.upsert_plan("B", "b")
        assert planner.summary_line() == "A(finished), B(unfinished)"

    def test_on_disk_document(self, novel_dir, planner):
        planner.upsert_plan("A", "a")
        data = json.loads((novel_dir / "planner.json").read_text(encoding="utf-8"))
        assert data["plans"] == [
            {"chapter": "A", "plan": "a", "content": "", "finished": False}
        ]
        assert "updated_at" in data

    def test_external_edit_seen(self, novel_dir, planner, advance_mtime):
        planner.upsert_plan("A", "a")
        path = novel_dir / "planner.json"
        path.write_text(
            json.dumps({"chapters": 0, "plans": [{"chapter": "Z", "plan": "z"}]}),
            encoding="utf-8",
        )
        advance_mtime(path)
        assert [p.chapter for p in planner.plans()] == ["Z"]

    def test_mixed_label_types_fail_to_load(self, novel_dir, planner, advance_mtime):
        planner.upsert_plan("A", "a")
        path = novel_dir / "planner.json"
        plans = [{"chapter": 2, "plan": "x"}, {"chapter": "a", "plan": "y"}]
        path.write_text(json.dumps({"plans": plans}), encoding="utf-8")
        advance_mtime(path)
        with pytest.raises(StorageReadError):
            planner.get_current()

    def test_update_rejects_mixed_label_types(self, planner):
        plans = [{"chapter": 2, "plan": "x"}, {"chapter": "a", "plan": "y"}]
        with pytest.raises(ContentFormatError):
            planner.update(json.dumps({"plans": plans}))
