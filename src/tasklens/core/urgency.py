"""Weighted urgency scoring - pure, no I/O."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .tasks import Priority, Task, now_utc


@dataclass(frozen=True)
class UrgencyWeights:
    """Coefficients of the additive urgency model."""

    base: float = 1.0
    priority_high: float = 6.0
    priority_medium: float = 3.9
    priority_low: float = 1.8
    project: float = 1.0
    active: float = 4.0
    tag: float = 1.0
    overdue: float = 12.0
    due_week: float = 5.0
    due_month: float = 2.0

    def for_priority(self, priority: Priority | None) -> float:
        if priority is None:
            return 0.0
        return {
            Priority.HIGH: self.priority_high,
            Priority.MEDIUM: self.priority_medium,
            Priority.LOW: self.priority_low,
        }[priority]


class UrgencyCalculator:
    """Scores tasks from priority, project, activity, tags and due date."""

    def __init__(self, weights: UrgencyWeights | None = None):
        self.weights = weights or UrgencyWeights()

    def due_score(self, due: datetime | None, now: datetime) -> float:
        """Only the most specific due tier applies."""
        if due is None:
            return 0.0
        remaining = due - now
        if remaining < timedelta(0):
            return self.weights.overdue
        if remaining < timedelta(days=7):
            return self.weights.due_week
        if remaining < timedelta(days=30):
            return self.weights.due_month
        return 0.0

    def score(self, task: Task, now: datetime | None = None) -> float:
        now = now or now_utc()
        w = self.weights
        total = w.base
        total += w.for_priority(task.priority)
        if task.project:
            total += w.project
        if task.is_active():
            total += w.active
        total += w.tag * len(task.tags)
        total += self.due_score(task.due, now)
        return total


_default = UrgencyCalculator()


def urgency(task: Task, now: datetime | None = None) -> float:
    """Urgency with the default weights."""
    return _default.score(task, now)
