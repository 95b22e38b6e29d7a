"""Tests for the click CLI."""

import json
from datetime import date, datetime, timedelta, timezone

import pytest
from click.testing import CliRunner

from tasklens.cli import _parse_date, main
from tasklens.config import Config
from tasklens.core.tasks import EXPORT_DATE_FORMAT


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    monkeypatch.setattr("tasklens.cli.load_config", lambda: Config())


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def export_file(tmp_path):
    real_now = datetime.now(timezone.utc)

    def stamp(delta: timedelta) -> str:
        return (real_now + delta).strftime(EXPORT_DATE_FORMAT)

    records = [
        {
            "id": 1,
            "uuid": "bug",
            "description": "Fix login bug",
            "project": "work",
            "tags": ["code"],
            "priority": "H",
            "status": "pending",
            "entry": stamp(timedelta(hours=-5)),
            "due": stamp(timedelta(days=-1)),
        },
        {
            "id": 2,
            "uuid": "rent",
            "description": "Pay rent",
            "project": "home",
            "tags": ["bills"],
            "status": "pending",
            "entry": stamp(timedelta(days=-2)),
        },
        {
            "uuid": "done",
            "description": "Ship release",
            "project": "work",
            "status": "completed",
            "entry": stamp(timedelta(days=-20)),
            "end": stamp(timedelta(hours=-2)),
        },
    ]
    path = tmp_path / "export.json"
    path.write_text(json.dumps(records))
    return path


def invoke(runner, export_file, *args):
    return runner.invoke(main, ["--snapshot", str(export_file), *args])


class TestList:
    def test_lists_all_newest_first(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [t["uuid"] for t in data] == ["bug", "rent", "done"]

    def test_urgency_and_flags(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "list", "--json").output)
        bug = data[0]
        # 1 base + 6 high + 1 project + 1 tag + 12 overdue
        assert bug["urgency"] == 21.0
        assert bug["overdue"] is True
        assert bug["active"] is False

    def test_filters(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--project", "work", "--status", "pending", "--json")
        assert [t["uuid"] for t in json.loads(result.output)] == ["bug"]

    def test_overdue_toggle(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--overdue", "--json")
        assert [t["uuid"] for t in json.loads(result.output)] == ["bug"]

    def test_priority_any_of(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--priority", "h", "--json")
        assert [t["uuid"] for t in json.loads(result.output)] == ["bug"]

    def test_priority_none(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--priority", "N", "--json")
        assert [t["uuid"] for t in json.loads(result.output)] == ["rent", "done"]

    def test_blocked_flags(self, runner, export_file):
        assert len(json.loads(invoke(runner, export_file, "list", "--unblocked", "--json").output)) == 3
        assert "No matching tasks." in invoke(runner, export_file, "list", "--blocked").output

    def test_due_range(self, runner, export_file):
        before = invoke(runner, export_file, "list", "--due-before", "2999-01-01", "--json")
        assert [t["uuid"] for t in json.loads(before.output)] == ["bug"]
        after = invoke(runner, export_file, "list", "--due-after", "2999-01-01", "--json")
        assert json.loads(after.output) == []

    def test_bad_due_date(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--due-before", "soon")
        assert result.exit_code != 0

    def test_search(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--search", "BILLS")
        assert "Pay rent" in result.output
        assert "Fix login bug" not in result.output

    def test_no_match_message(self, runner, export_file):
        result = invoke(runner, export_file, "list", "--tag", "nothing")
        assert "No matching tasks." in result.output

    def test_missing_snapshot_file(self, runner, tmp_path):
        result = runner.invoke(main, ["--snapshot", str(tmp_path / "missing.json"), "list"])
        assert result.exit_code == 1
        assert "Snapshot file not found" in result.output


class TestFacets:
    def test_only_open_work_contributes(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "facets", "--json").output)
        assert data == {"projects": ["home", "work"], "tags": ["bills", "code"]}


class TestReports:
    def test_summary_json(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "summary", "--json").output)
        assert data["version"] == 1
        assert data["total"] == 3
        assert data["by_status"]["pending"] == 2
        assert data["by_status"]["completed"] == 1
        assert data["overdue"] == 1
        assert data["completed_this_week"] == 1
        assert data["by_priority"] == {"H": 1, "M": 0, "L": 0, "none": 2}

    def test_summary_text(self, runner, export_file):
        result = invoke(runner, export_file, "summary")
        assert result.exit_code == 0, result.output
        assert "Total Tasks: 3" in result.output

    def test_projects_json(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "projects", "--json").output)
        work = data[0]
        assert work["project"] == "work"
        assert (work["pending"], work["completed"]) == (1, 1)
        assert work["completion_rate"] == 0.5

    def test_projects_text(self, runner, export_file):
        result = invoke(runner, export_file, "projects")
        assert "work" in result.output
        assert "50%" in result.output


class TestActivity:
    def test_completed_before_created(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "activity", "--json").output)
        assert [(e["uuid"], e["kind"]) for e in data] == [
            ("done", "completed"),
            ("bug", "created"),
            ("rent", "created"),
        ]
        assert data[0]["time_ago"] == "2h ago"

    def test_limit(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "activity", "--limit", "1", "--json").output)
        assert len(data) == 1


class TestCalendarCommands:
    def test_day_bad_date(self, runner, export_file):
        result = invoke(runner, export_file, "day", "not-a-date")
        assert result.exit_code != 0

    def test_day_json(self, runner, export_file):
        # Far from any task date, so nothing matches regardless of the clock
        result = invoke(runner, export_file, "day", "2000-01-01", "--json")
        data = json.loads(result.output)
        assert data == {"date": "2000-01-01", "due": 0, "completed": 0, "created": 0, "tasks": []}

    def test_month_navigation(self, runner, export_file):
        result = invoke(runner, export_file, "month", "--date", "2025-01-31", "--offset", "1")
        assert result.exit_code == 0, result.output
        assert "February 2025" in result.output

    def test_month_json_for_today(self, runner, export_file):
        data = json.loads(invoke(runner, export_file, "month", "--json").output)
        assert all(date.fromisoformat(day) for day in data)


class TestParseDate:
    def test_explicit_date(self):
        assert _parse_date("2025-03-04", timezone.utc) == date(2025, 3, 4)

    def test_today_follows_configured_timezone(self, monkeypatch):
        late_utc = datetime(2025, 1, 15, 23, 30, tzinfo=timezone.utc)
        monkeypatch.setattr("tasklens.cli.now_utc", lambda: late_utc)
        assert _parse_date(None, timezone.utc) == date(2025, 1, 15)
        assert _parse_date(None, timezone(timedelta(hours=9))) == date(2025, 1, 16)
