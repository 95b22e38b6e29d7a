"""Task filter predicate - pure, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime

from .tasks import Priority, Task, TaskStatus, now_utc


@dataclass(frozen=True)
class FilterCriteria:
    """
    Active filter state.

    Empty fields place no constraint, so FilterCriteria() matches everything.
    The active/overdue toggles are computed states, ORed with `statuses`.
    `priorities` may hold None to select tasks without a priority.
    `blocked` is None for no constraint, otherwise the required is_blocked().
    """

    statuses: frozenset[TaskStatus] = field(default_factory=frozenset)
    is_active: bool = False
    is_overdue: bool = False
    projects: frozenset[str] = field(default_factory=frozenset)
    tags: frozenset[str] = field(default_factory=frozenset)
    text: str = ""
    priorities: frozenset[Priority | None] = field(default_factory=frozenset)
    blocked: bool | None = None
    due_before: datetime | None = None
    due_after: datetime | None = None

    def is_empty(self) -> bool:
        return not (
            self.statuses
            or self.is_active
            or self.is_overdue
            or self.projects
            or self.tags
            or self.text
            or self.priorities
            or self.blocked is not None
            or self.due_before
            or self.due_after
        )


def _matches_state(task: Task, criteria: FilterCriteria, now: datetime) -> bool:
    if not (criteria.statuses or criteria.is_active or criteria.is_overdue):
        return True
    return (
        task.status in criteria.statuses
        or (criteria.is_active and task.is_active())
        or (criteria.is_overdue and task.is_overdue(now))
    )


def _matches_due(task: Task, criteria: FilterCriteria) -> bool:
    # Both bounds are exclusive; a task without a due date never passes a bound
    if criteria.due_before is None and criteria.due_after is None:
        return True
    if task.due is None:
        return False
    if criteria.due_before is not None and task.due >= criteria.due_before:
        return False
    if criteria.due_after is not None and task.due <= criteria.due_after:
        return False
    return True


def _matches_text(task: Task, text: str) -> bool:
    needle = text.casefold()
    if needle in task.description.casefold():
        return True
    if task.project and needle in task.project.casefold():
        return True
    return any(needle in tag.casefold() for tag in task.tags)


def matches(task: Task, criteria: FilterCriteria, now: datetime | None = None) -> bool:
    """
    Check one task against the criteria.

    Clauses are ANDed: state, project (exact membership), tags (any of),
    priority (any of), blocked, due range, free text (case-insensitive
    substring over description, project, tags).
    """
    now = now or now_utc()
    if not _matches_state(task, criteria, now):
        return False
    if criteria.projects and task.project not in criteria.projects:
        return False
    if criteria.tags and criteria.tags.isdisjoint(task.tags):
        return False
    if criteria.priorities and task.priority not in criteria.priorities:
        return False
    if criteria.blocked is not None and task.is_blocked() != criteria.blocked:
        return False
    if not _matches_due(task, criteria):
        return False
    if criteria.text and not _matches_text(task, criteria.text):
        return False
    return True


def sort_newest_first(tasks: list[Task]) -> list[Task]:
    """Sort by entry descending. Stable, so equal entries keep input order."""
    return sorted(tasks, key=lambda t: t.entry, reverse=True)


def apply_filter(
    tasks: list[Task] | tuple[Task, ...],
    criteria: FilterCriteria,
    now: datetime | None = None,
) -> list[Task]:
    """Filter then sort newest first."""
    now = now or now_utc()
    return sort_newest_first([t for t in tasks if matches(t, criteria, now)])
