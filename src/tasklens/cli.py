"""tasklens CLI - filter, score and report on a task export."""

import json
import logging
import sys
from datetime import date, datetime, time, tzinfo

import click

from .adapters.json_export import SnapshotError
from .config import load_config
from .core.activity import priority_marker, truncate_text
from .core.calendar import day_counts, month_counts, month_weeks, navigate_month, tasks_on_day
from .core.filters import FilterCriteria
from .core.reports import StaleReportError, completions_per_day, format_due_in, sort_projects
from .core.tasks import Priority, Task, TaskStatus, now_utc
from .workflows import Dashboard, open_dashboard

STATUS_CHOICES = [s.value for s in TaskStatus]
# N selects tasks without a priority
PRIORITY_CHOICES = [p.value for p in Priority] + ["N"]


@click.group()
@click.version_option(package_name="tasklens")
@click.option("--snapshot", "snapshot_file", default=None, help="Export file to read ('-' for stdin)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, snapshot_file: str | None, debug: bool):
    """tasklens - filtering, urgency and reports for your task export."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.obj = {"snapshot_file": snapshot_file}


def _dashboard(ctx) -> Dashboard:
    """Load the snapshot once per invocation."""
    if "dashboard" not in ctx.obj:
        config = load_config()
        try:
            ctx.obj["dashboard"] = open_dashboard(config, ctx.obj.get("snapshot_file"))
        except SnapshotError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    return ctx.obj["dashboard"]


def _report(dashboard: Dashboard):
    try:
        return dashboard.report()
    except StaleReportError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _task_json(task: Task, dashboard: Dashboard, now: datetime) -> dict:
    return {
        "id": task.id,
        "uuid": task.uuid,
        "status": task.status.value,
        "description": task.description,
        "project": task.project,
        "tags": list(task.tags),
        "priority": task.priority.value if task.priority else None,
        "due": task.due.isoformat() if task.due else None,
        "entry": task.entry.isoformat(),
        "urgency": round(dashboard.urgency(task, now), 2),
        "active": task.is_active(),
        "overdue": task.is_overdue(now),
        "blocked": task.is_blocked(),
    }


def _task_line(task: Task, dashboard: Dashboard, now: datetime) -> str:
    task_id = str(task.id) if task.id is not None else "-"
    flags = ""
    if task.is_active():
        flags += "*"
    if task.is_overdue(now):
        flags += "!"
    if task.is_blocked():
        flags += "b"
    project = f" [{task.project}]" if task.project else ""
    tags = "".join(f" +{t}" for t in task.tags)
    return (
        f"{task_id:>4} {priority_marker(task.priority)} {dashboard.urgency(task, now):5.1f} "
        f"{flags:3} {truncate_text(task.description, 50)}{project}{tags}"
    )


def _parse_date(value: str | None, tz: tzinfo) -> date:
    """Parse YYYY-MM-DD, defaulting to today in the configured timezone."""
    if not value:
        return now_utc().astimezone(tz).date()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _day_start(value: str | None, tz: tzinfo) -> datetime | None:
    if not value:
        return None
    return datetime.combine(_parse_date(value, tz), time(), tzinfo=tz)


@main.command("list")
@click.option("--status", "statuses", multiple=True, type=click.Choice(STATUS_CHOICES), help="Status to include (repeatable)")
@click.option("--active", is_flag=True, help="Include started tasks")
@click.option("--overdue", is_flag=True, help="Include overdue tasks")
@click.option("--project", "projects", multiple=True, help="Exact project name (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Tag, any of (repeatable)")
@click.option("--priority", "priorities", multiple=True, type=click.Choice(PRIORITY_CHOICES, case_sensitive=False), help="Priority, any of (N for none, repeatable)")
@click.option("--blocked/--unblocked", default=None, help="Only tasks with (or without) dependencies")
@click.option("--due-after", default=None, help="Due after the start of this day (YYYY-MM-DD)")
@click.option("--due-before", default=None, help="Due before the start of this day (YYYY-MM-DD)")
@click.option("--search", default="", help="Text to search in description, project and tags")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_tasks(
    ctx, statuses, active, overdue, projects, tags, priorities, blocked, due_after, due_before, search, as_json: bool
):
    """List tasks matching a filter, newest first."""
    dashboard = _dashboard(ctx)
    tz = dashboard.config.tz
    now = now_utc()
    criteria = FilterCriteria(
        statuses=frozenset(TaskStatus(s) for s in statuses),
        is_active=active,
        is_overdue=overdue,
        projects=frozenset(projects),
        tags=frozenset(tags),
        text=search,
        priorities=frozenset(Priority.parse(p) for p in priorities),
        blocked=blocked,
        due_after=_day_start(due_after, tz),
        due_before=_day_start(due_before, tz),
    )

    tasks = dashboard.engine.set_criteria(criteria, now)

    if as_json:
        _echo_json([_task_json(t, dashboard, now) for t in tasks])
        return

    if not tasks:
        click.echo("No matching tasks.")
        return

    for task in tasks:
        click.echo(_task_line(task, dashboard, now))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def facets(ctx, as_json: bool):
    """Show projects and tags available for filtering."""
    engine = _dashboard(ctx).engine
    projects = engine.available_projects()
    tags = engine.available_tags()

    if as_json:
        _echo_json({"projects": projects, "tags": tags})
        return

    click.echo("Projects: " + (", ".join(projects) or "none"))
    click.echo("Tags: " + (", ".join(tags) or "none"))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def summary(ctx, as_json: bool):
    """Show task counts and averages."""
    dashboard = _dashboard(ctx)
    cache, _ = _report(dashboard)

    if as_json:
        _echo_json(
            {
                "version": cache.version,
                "total": cache.total,
                "by_status": {s.value: n for s, n in cache.by_status.items()},
                "by_priority": {(p.value if p else "none"): n for p, n in cache.by_priority.items()},
                "active": cache.active,
                "overdue": cache.overdue,
                "avg_urgency": round(cache.avg_urgency, 2),
                "recent_tasks": cache.recent_tasks,
                "completed_this_week": cache.completed_this_week,
            }
        )
        return

    click.echo(f"Total Tasks: {cache.total}")
    click.echo()
    for status in TaskStatus:
        count = cache.count(status)
        click.echo(f"{status.value.capitalize() + ':':11} {count:3} ({cache.share(count) * 100:4.1f}%)")
    click.echo()
    click.echo(f"Active:    {cache.active}")
    click.echo(f"Overdue:   {cache.overdue}")
    priorities = ", ".join(
        f"{p.value if p else 'none'}={n}" for p, n in cache.by_priority.items()
    )
    click.echo(f"Priority:  {priorities}")
    click.echo(f"Avg urgency: {cache.avg_urgency:.1f}")
    click.echo(f"Created this week: {cache.recent_tasks}")
    click.echo(f"Completed this week: {cache.completed_this_week}")

    burndown = completions_per_day(dashboard.tasks, days=14)
    click.echo("Completed per day (14d): " + " ".join(str(n) for n in burndown))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def projects(ctx, as_json: bool):
    """Show per-project completion."""
    dashboard = _dashboard(ctx)
    _, stats = _report(dashboard)
    now = now_utc()
    rows = sort_projects(stats)

    if as_json:
        _echo_json(
            [
                {
                    "project": name,
                    "pending": s.pending,
                    "completed": s.completed,
                    "deleted": s.deleted,
                    "total": s.total,
                    "completion_rate": round(s.completion_rate, 4),
                    "avg_urgency": round(s.avg_urgency, 2),
                    "next_due": s.next_due.isoformat() if s.next_due else None,
                }
                for name, s in rows
            ]
        )
        return

    if not rows:
        click.echo("No projects.")
        return

    click.echo(f"{'Project':20} {'Pending':>7} {'Done':>5} {'%Done':>6} {'Urgency':>8} {'Next Due':>9}")
    for name, s in rows:
        click.echo(
            f"{truncate_text(name, 20):20} {s.pending:7} {s.completed:5} "
            f"{s.completion_rate * 100:5.0f}% {s.avg_urgency:8.1f} {format_due_in(s.next_due, now):>9}"
        )


@main.command()
@click.option("--limit", "-n", type=int, default=None, help="Maximum entries (defaults to ACTIVITY_LIMIT)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def activity(ctx, limit: int | None, as_json: bool):
    """Show recently completed and created tasks."""
    dashboard = _dashboard(ctx)
    entries = dashboard.activity(limit)

    if as_json:
        _echo_json(
            [
                {
                    "kind": e.kind.value,
                    "timestamp": e.timestamp.isoformat(),
                    "time_ago": e.time_ago,
                    "action": e.action,
                    "uuid": e.task.uuid,
                    "description": e.task.description,
                }
                for e in entries
            ]
        )
        return

    if not entries:
        click.echo("No recent activity")
        return

    for e in entries:
        click.echo(f"{e.time_ago:9} {e.action:30} {truncate_text(e.task.description, 45)}")


@main.command()
@click.argument("target_date", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def day(ctx, target_date: str | None, as_json: bool):
    """Show tasks due, completed or created on a day (YYYY-MM-DD)."""
    dashboard = _dashboard(ctx)
    target = _parse_date(target_date, dashboard.config.tz)
    tz = dashboard.config.tz
    tasks = tasks_on_day(target, dashboard.tasks, tz)
    counts = day_counts(target, dashboard.tasks, tz)
    now = now_utc()

    if as_json:
        _echo_json(
            {
                "date": target.isoformat(),
                "due": counts.due,
                "completed": counts.completed,
                "created": counts.created,
                "tasks": [_task_json(t, dashboard, now) for t in tasks],
            }
        )
        return

    click.echo(f"### {target.strftime('%A, %B %d')}")
    click.echo(f"Due: {counts.due}  Completed: {counts.completed}  Created: {counts.created}")
    for task in tasks:
        click.echo(_task_line(task, dashboard, now))


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Any day in the month (YYYY-MM-DD)")
@click.option("--offset", type=int, default=0, help="Months to move forward (negative for back)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def month(ctx, target_date: str | None, offset: int, as_json: bool):
    """Show a month of task activity."""
    dashboard = _dashboard(ctx)
    anchor = navigate_month(_parse_date(target_date, dashboard.config.tz), offset)
    counts = month_counts(anchor.year, anchor.month, dashboard.tasks, dashboard.config.tz)

    if as_json:
        _echo_json(
            {
                d.isoformat(): {"due": c.due, "completed": c.completed, "created": c.created}
                for d, c in sorted(counts.items())
            }
        )
        return

    click.echo(anchor.strftime("%B %Y").center(28))
    click.echo(" ".join(f"{name:>3}" for name in ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]))
    for week in month_weeks(anchor.year, anchor.month):
        cells = []
        for d in week:
            if d.month != anchor.month:
                cells.append("   ")
            elif d in counts:
                cells.append(f"{d.day:2}*")
            else:
                cells.append(f"{d.day:3}")
        click.echo(" ".join(cells))
