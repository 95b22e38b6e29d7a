"""Calendar-day bucketing of tasks - pure, no I/O."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from .tasks import Task


def _day_of(value: datetime | None, tz: tzinfo | None = None) -> date | None:
    """Calendar date of an instant, optionally seen from another timezone."""
    if value is None:
        return None
    if tz is not None:
        value = value.astimezone(tz)
    return value.date()


def is_due_on(task: Task, day: date, tz: tzinfo | None = None) -> bool:
    return _day_of(task.due, tz) == day


def is_completed_on(task: Task, day: date, tz: tzinfo | None = None) -> bool:
    return _day_of(task.end, tz) == day


def is_created_on(task: Task, day: date, tz: tzinfo | None = None) -> bool:
    return _day_of(task.entry, tz) == day


def is_on_day(task: Task, day: date, tz: tzinfo | None = None) -> bool:
    """Due, completed or created on the given day."""
    return is_due_on(task, day, tz) or is_completed_on(task, day, tz) or is_created_on(task, day, tz)


def tasks_on_day(day: date, tasks, tz: tzinfo | None = None) -> list[Task]:
    """Tasks touching a day, each listed once however many reasons apply."""
    return [t for t in tasks if is_on_day(t, day, tz)]


@dataclass
class DayCounts:
    """Per-reason counts for one day. A task may count under several reasons."""

    due: int = 0
    completed: int = 0
    created: int = 0
    total: int = 0

    def __bool__(self) -> bool:
        return self.total > 0


def day_counts(day: date, tasks, tz: tzinfo | None = None) -> DayCounts:
    counts = DayCounts()
    for task in tasks:
        due = is_due_on(task, day, tz)
        done = is_completed_on(task, day, tz)
        created = is_created_on(task, day, tz)
        counts.due += due
        counts.completed += done
        counts.created += created
        if due or done or created:
            counts.total += 1
    return counts


def month_counts(year: int, month: int, tasks, tz: tzinfo | None = None) -> dict[date, DayCounts]:
    """DayCounts for every day of the month that has any activity."""
    result = {}
    for day_number in range(1, calendar.monthrange(year, month)[1] + 1):
        day = date(year, month, day_number)
        counts = day_counts(day, tasks, tz)
        if counts:
            result[day] = counts
    return result


def month_weeks(year: int, month: int, first_weekday: int = calendar.MONDAY) -> list[list[date]]:
    """Full weeks covering the month, padded with days of adjacent months."""
    return calendar.Calendar(first_weekday).monthdatescalendar(year, month)


def navigate_month(day: date, direction: int) -> date:
    """
    Move by whole calendar months, clamping the day to the target month.

    navigate_month(date(2025, 1, 31), 1) == date(2025, 2, 28)
    """
    months = day.year * 12 + (day.month - 1) + direction
    year, month = divmod(months, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
