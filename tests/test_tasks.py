"""Tests for the task model."""

from datetime import datetime, timedelta, timezone

import pytest

from tasklens.core.tasks import (
    InvalidTaskError,
    Priority,
    Snapshot,
    Task,
    TaskStatus,
    parse_export_date,
)


class TestPredicates:
    def test_active_requires_start_and_pending(self, make_task, now):
        assert make_task(start=now).is_active() is True
        assert make_task(start=None).is_active() is False
        assert make_task(start=now, status=TaskStatus.COMPLETED).is_active() is False
        assert make_task(start=now, status=TaskStatus.WAITING).is_active() is False

    def test_overdue_requires_past_due(self, make_task, now):
        assert make_task(due=now - timedelta(minutes=1)).is_overdue(now) is True
        assert make_task(due=now + timedelta(minutes=1)).is_overdue(now) is False
        assert make_task(due=None).is_overdue(now) is False

    def test_overdue_requires_pending(self, make_task, now):
        past = now - timedelta(days=2)
        for status in TaskStatus:
            task = make_task(due=past, status=status)
            assert task.is_overdue(now) is (status == TaskStatus.PENDING)

    def test_due_exactly_now_is_not_overdue(self, make_task, now):
        assert make_task(due=now).is_overdue(now) is False

    def test_blocked(self, make_task):
        assert make_task(depends=("other",)).is_blocked() is True
        assert make_task().is_blocked() is False

    def test_tasks_are_immutable(self, make_task):
        task = make_task()
        with pytest.raises(AttributeError):
            task.description = "changed"


class TestParseExportDate:
    def test_compact_format(self):
        assert parse_export_date("20251007T192937Z") == datetime(2025, 10, 7, 19, 29, 37, tzinfo=timezone.utc)

    def test_iso_format(self):
        assert parse_export_date("2025-10-07T19:29:37Z") == datetime(2025, 10, 7, 19, 29, 37, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        assert parse_export_date("2025-10-07T08:00:00").tzinfo == timezone.utc

    def test_garbage_and_empty(self):
        assert parse_export_date("next tuesday") is None
        assert parse_export_date("") is None
        assert parse_export_date(None) is None
        assert parse_export_date(20250101) is None


class TestFromExport:
    def test_full_record(self):
        task = Task.from_export(
            {
                "id": 3,
                "uuid": "abc",
                "status": "pending",
                "description": "Write report",
                "project": "work",
                "tags": ["writing", "q1"],
                "priority": "H",
                "entry": "20250110T090000Z",
                "due": "20250120T170000Z",
                "start": "20250114T080000Z",
                "depends": ["def"],
                "annotations": [{"entry": "20250111T100000Z", "description": "draft done"}],
                "urgency": 14.2,
            }
        )

        assert task.id == 3
        assert task.uuid == "abc"
        assert task.status == TaskStatus.PENDING
        assert task.project == "work"
        assert task.tags == ("writing", "q1")
        assert task.priority == Priority.HIGH
        assert task.entry == datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)
        assert task.due == datetime(2025, 1, 20, 17, 0, tzinfo=timezone.utc)
        assert task.is_active() is True
        assert task.is_blocked() is True
        assert task.annotations[0].description == "draft done"
        assert task.urgency == 14.2

    def test_missing_uuid_rejected(self):
        with pytest.raises(InvalidTaskError, match="UUID"):
            Task.from_export({"description": "No id"})

    def test_missing_description_rejected(self):
        with pytest.raises(InvalidTaskError, match="description"):
            Task.from_export({"uuid": "abc"})

    def test_invalid_task_error_is_value_error(self):
        with pytest.raises(ValueError):
            Task.from_export({})

    def test_defaults(self):
        task = Task.from_export({"uuid": "abc", "description": "Minimal", "entry": "20250110T090000Z"})
        assert task.status == TaskStatus.PENDING
        assert task.id is None
        assert task.project is None
        assert task.tags == ()
        assert task.priority is None
        assert task.urgency == 0.0

    def test_unknown_status_and_priority(self):
        task = Task.from_export({"uuid": "a", "description": "d", "status": "bogus", "priority": "X"})
        assert task.status == TaskStatus.PENDING
        assert task.priority is None

    def test_zero_id_means_no_id(self):
        task = Task.from_export({"uuid": "a", "description": "d", "id": 0, "status": "completed"})
        assert task.id is None

    def test_comma_separated_depends(self):
        task = Task.from_export({"uuid": "a", "description": "d", "depends": "x,y"})
        assert task.depends == ("x", "y")

    def test_reads_known_fields(self):
        record = {
            "uuid": "abc",
            "description": "Write report",
            "status": "waiting",
            "entry": "20250110T090000Z",
            "project": "work",
            "tags": ["a"],
            "priority": "L",
            "wait": "20250201T000000Z",
            "urgency": 2.5,
        }
        task = Task.from_export(record)
        assert task.status == TaskStatus.WAITING
        assert task.project == "work"
        assert task.tags == ("a",)
        assert task.priority == Priority.LOW
        assert task.wait == datetime(2025, 2, 1, tzinfo=timezone.utc)
        assert task.urgency == 2.5

    def test_scalar_tag_is_one_tag(self):
        task = Task.from_export({"uuid": "a", "description": "d", "tags": "work"})
        assert task.tags == ("work",)

    def test_non_string_list_items_dropped(self):
        task = Task.from_export(
            {"uuid": "a", "description": "d", "tags": ["ok", 3, None], "depends": [7, "x"]}
        )
        assert task.tags == ("ok",)
        assert task.depends == ("x",)

    def test_wrong_typed_optional_fields_ignored(self):
        task = Task.from_export(
            {
                "uuid": "a",
                "description": "d",
                "id": "abc",
                "entry": 20250101,
                "due": ["tomorrow"],
                "project": 12,
                "status": 5,
                "priority": 1,
                "urgency": "high",
                "annotations": ["note", {"entry": "20250110T090000Z", "description": "kept"}],
            }
        )
        assert task.id is None
        assert task.due is None
        assert task.project is None
        assert task.status == TaskStatus.PENDING
        assert task.priority is None
        assert task.urgency == 0.0
        assert [a.description for a in task.annotations] == ["kept"]

    def test_non_string_description_rejected(self):
        with pytest.raises(InvalidTaskError, match="description"):
            Task.from_export({"uuid": "a", "description": 42})



class TestSnapshot:
    def test_find_by_uuid(self, make_task):
        a = make_task(uuid="a")
        b = make_task(uuid="b")
        snapshot = Snapshot(tasks=(a, b), version=4)
        assert snapshot.find("b") is b
        assert snapshot.find("zzz") is None
        assert len(snapshot) == 2
