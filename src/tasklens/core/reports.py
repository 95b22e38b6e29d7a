"""Aggregated, versioned task statistics - pure computation, no I/O."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .tasks import Priority, Task, TaskStatus, now_utc
from .urgency import UrgencyCalculator

logger = logging.getLogger(__name__)

NO_PROJECT = "(no project)"
RECENT_DAYS = 7


class StaleReportError(RuntimeError):
    """Cached statistics were computed for an older snapshot."""


@dataclass
class ProjectStats:
    """Per-project rollup. Waiting and recurring tasks count as pending."""

    pending: int = 0
    completed: int = 0
    deleted: int = 0
    urgency_total: float = 0.0
    next_due: datetime | None = None

    @property
    def total(self) -> int:
        return self.pending + self.completed + self.deleted

    @property
    def completion_rate(self) -> float:
        """Completed share of pending + completed; deleted tasks are left out."""
        denominator = self.pending + self.completed
        if denominator == 0:
            return 0.0
        return self.completed / denominator

    @property
    def avg_urgency(self) -> float:
        """Mean urgency of the pending tasks."""
        return self.urgency_total / max(self.pending, 1)


@dataclass
class SummaryCache:
    """Global rollup, valid only for the snapshot version it was stamped with."""

    version: int
    total: int = 0
    by_status: dict[TaskStatus, int] = field(default_factory=dict)
    by_priority: dict[Priority | None, int] = field(default_factory=dict)
    active: int = 0
    overdue: int = 0
    avg_urgency: float = 0.0
    recent_tasks: int = 0
    completed_this_week: int = 0

    def count(self, status: TaskStatus) -> int:
        return self.by_status.get(status, 0)

    @property
    def pending(self) -> int:
        return self.count(TaskStatus.PENDING)

    @property
    def completed(self) -> int:
        return self.count(TaskStatus.COMPLETED)

    @property
    def deleted(self) -> int:
        return self.count(TaskStatus.DELETED)

    @property
    def waiting(self) -> int:
        return self.count(TaskStatus.WAITING)

    @property
    def recurring(self) -> int:
        return self.count(TaskStatus.RECURRING)

    def share(self, count: int) -> float:
        """Fraction of all tasks, 0.0 on an empty collection."""
        if self.total == 0:
            return 0.0
        return count / self.total

    def is_valid(self, current_version: int) -> bool:
        return self.version == current_version


def compute_summary(
    tasks: list[Task] | tuple[Task, ...],
    version: int,
    now: datetime | None = None,
    calculator: UrgencyCalculator | None = None,
) -> SummaryCache:
    now = now or now_utc()
    calculator = calculator or UrgencyCalculator()
    week_ago = now - timedelta(days=RECENT_DAYS)

    summary = SummaryCache(
        version=version,
        total=len(tasks),
        by_status={status: 0 for status in TaskStatus},
        by_priority={p: 0 for p in [*Priority, None]},
    )
    urgency_sum = 0.0
    for task in tasks:
        summary.by_status[task.status] += 1
        summary.by_priority[task.priority] += 1
        if task.is_active():
            summary.active += 1
        if task.is_overdue(now):
            summary.overdue += 1
        if task.entry > week_ago:
            summary.recent_tasks += 1
        if task.status == TaskStatus.COMPLETED and task.end and task.end > week_ago:
            summary.completed_this_week += 1
        urgency_sum += calculator.score(task, now)

    if tasks:
        summary.avg_urgency = urgency_sum / len(tasks)
    return summary


def compute_project_stats(
    tasks: list[Task] | tuple[Task, ...],
    now: datetime | None = None,
    calculator: UrgencyCalculator | None = None,
) -> dict[str, ProjectStats]:
    now = now or now_utc()
    calculator = calculator or UrgencyCalculator()
    stats: dict[str, ProjectStats] = {}

    for task in tasks:
        project = stats.setdefault(task.project or NO_PROJECT, ProjectStats())
        if task.status == TaskStatus.COMPLETED:
            project.completed += 1
        elif task.status == TaskStatus.DELETED:
            project.deleted += 1
        else:
            project.pending += 1
            project.urgency_total += calculator.score(task, now)

        if task.status == TaskStatus.PENDING and task.due is not None:
            if project.next_due is None or task.due < project.next_due:
                project.next_due = task.due

    return stats


def sort_projects(stats: dict[str, ProjectStats]) -> list[tuple[str, ProjectStats]]:
    """Busiest projects first (pending + completed), then by name."""
    return sorted(stats.items(), key=lambda item: (-(item[1].pending + item[1].completed), item[0]))


class ReportAggregator:
    """
    Computes and caches statistics for one snapshot version at a time.

    The caller owns the version counter and bumps it on every snapshot
    replacement. Reads must present the current version; a mismatch raises
    instead of serving numbers for a collection that no longer exists.
    """

    def __init__(self, calculator: UrgencyCalculator | None = None):
        self.calculator = calculator or UrgencyCalculator()
        self.summary: SummaryCache | None = None
        self.projects: dict[str, ProjectStats] = {}

    def recompute(
        self,
        tasks: list[Task] | tuple[Task, ...],
        version: int,
        now: datetime | None = None,
    ) -> tuple[SummaryCache, dict[str, ProjectStats]]:
        now = now or now_utc()
        self.summary = compute_summary(tasks, version, now, self.calculator)
        self.projects = compute_project_stats(tasks, now, self.calculator)
        logger.debug(f"Recomputed reports for version {version}: {len(tasks)} tasks, {len(self.projects)} projects")
        return self.summary, self.projects

    def is_valid(self, current_version: int) -> bool:
        return self.summary is not None and self.summary.is_valid(current_version)

    def read(self, current_version: int) -> tuple[SummaryCache, dict[str, ProjectStats]]:
        """Return the cached reports, or raise StaleReportError if out of date."""
        if self.summary is None:
            raise StaleReportError("Reports have not been computed yet")
        if not self.summary.is_valid(current_version):
            raise StaleReportError(
                f"Reports were computed for version {self.summary.version}, current is {current_version}"
            )
        return self.summary, self.projects


def completions_per_day(
    tasks: list[Task] | tuple[Task, ...],
    days: int = 30,
    now: datetime | None = None,
) -> list[int]:
    """
    Completed-task counts per day for the last N days, oldest first.

    The last element is the current (partial) day.
    """
    now = now or now_utc()
    counts = [0] * days
    for task in tasks:
        if task.status != TaskStatus.COMPLETED or task.end is None:
            continue
        days_ago = (now - task.end).days
        if 0 <= days_ago < days:
            counts[days - 1 - days_ago] += 1
    return counts


def format_due_in(due: datetime | None, now: datetime | None = None) -> str:
    """Short label for a due date relative to now."""
    if due is None:
        return "-"
    now = now or now_utc()
    # Whole days, truncated toward zero
    days = int((due - now) / timedelta(days=1))
    if days < 0:
        return f"{-days}d ago"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    return f"{days}d"
