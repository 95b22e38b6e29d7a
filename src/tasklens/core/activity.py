"""Recent-activity feed - pure, no I/O."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .tasks import Priority, Task, TaskStatus, now_utc

COMPLETED_WINDOW = timedelta(days=7)
CREATED_WINDOW = timedelta(days=3)


class ActivityKind(Enum):
    COMPLETED = "completed"
    CREATED = "created"


@dataclass
class ActivityEntry:
    """One line of the activity feed."""

    kind: ActivityKind
    timestamp: datetime
    task: Task
    time_ago: str
    action: str


def format_time_ago(then: datetime, now: datetime | None = None) -> str:
    """Relative label: minutes under an hour, hours under a day, then days."""
    now = now or now_utc()
    elapsed = max(now - then, timedelta(0))
    minutes = int(elapsed.total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}min ago"
    if minutes < 24 * 60:
        return f"{minutes // 60}h ago"
    return f"{elapsed.days}d ago"


def completed_action(task: Task) -> str:
    if task.project:
        return f"Completed in [{task.project}]"
    return "Completed (no project)"


def created_action(task: Task) -> str:
    """e.g. "Task+tags+due added to [home] [H]"."""
    what = "Task"
    if task.tags:
        what += "+tags"
    if task.due is not None:
        what += "+due"
    where = f" to [{task.project}]" if task.project else ""
    suffix = f" [{task.priority.value}]" if task.priority else ""
    return f"{what} added{where}{suffix}"


def recent_completions(tasks, now: datetime | None = None) -> list[Task]:
    """Completed within the last week, most recent first."""
    now = now or now_utc()
    cutoff = now - COMPLETED_WINDOW
    done = [
        t for t in tasks
        if t.status == TaskStatus.COMPLETED and t.end is not None and t.end > cutoff
    ]
    return sorted(done, key=lambda t: t.end, reverse=True)


def recent_creations(tasks, now: datetime | None = None) -> list[Task]:
    """Created within the last three days, most recent first."""
    now = now or now_utc()
    cutoff = now - CREATED_WINDOW
    return sorted((t for t in tasks if t.entry > cutoff), key=lambda t: t.entry, reverse=True)


def recent_activity(tasks, max_items: int, now: datetime | None = None) -> list[ActivityEntry]:
    """
    Merge recent completions and creations into one feed, newest first.

    A task that was both created and completed recently shows up twice,
    once per event.
    """
    now = now or now_utc()
    entries = [
        ActivityEntry(
            kind=ActivityKind.COMPLETED,
            timestamp=t.end,
            task=t,
            time_ago=format_time_ago(t.end, now),
            action=completed_action(t),
        )
        for t in recent_completions(tasks, now)
    ]
    entries += [
        ActivityEntry(
            kind=ActivityKind.CREATED,
            timestamp=t.entry,
            task=t,
            time_ago=format_time_ago(t.entry, now),
            action=created_action(t),
        )
        for t in recent_creations(tasks, now)
    ]
    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries[: max(max_items, 0)]


def truncate_text(text: str, max_length: int) -> str:
    """Shorten text to max_length, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max(max_length - 3, 0)] + "..."


def priority_marker(priority: Priority | None) -> str:
    return priority.value if priority else " "
