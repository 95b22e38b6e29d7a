"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskStatus, Priority, Annotation, Snapshot, InvalidTaskError
from .urgency import UrgencyCalculator, UrgencyWeights, urgency
from .filters import FilterCriteria, matches, apply_filter, sort_newest_first
from .engine import FilterEngine, FACET_STATUSES
from .reports import (
    ProjectStats,
    SummaryCache,
    ReportAggregator,
    StaleReportError,
    completions_per_day,
)
from .activity import ActivityEntry, ActivityKind, recent_activity, format_time_ago
from .calendar import (
    DayCounts,
    is_due_on,
    is_completed_on,
    is_created_on,
    tasks_on_day,
    day_counts,
    month_counts,
    navigate_month,
)

__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    "Priority",
    "Annotation",
    "Snapshot",
    "InvalidTaskError",
    # Urgency
    "UrgencyCalculator",
    "UrgencyWeights",
    "urgency",
    # Filters
    "FilterCriteria",
    "matches",
    "apply_filter",
    "sort_newest_first",
    "FilterEngine",
    "FACET_STATUSES",
    # Reports
    "ProjectStats",
    "SummaryCache",
    "ReportAggregator",
    "StaleReportError",
    "completions_per_day",
    # Activity
    "ActivityEntry",
    "ActivityKind",
    "recent_activity",
    "format_time_ago",
    # Calendar
    "DayCounts",
    "is_due_on",
    "is_completed_on",
    "is_created_on",
    "tasks_on_day",
    "day_counts",
    "month_counts",
    "navigate_month",
]
