"""Stateful filter engine over the current snapshot - no I/O."""

from datetime import datetime

from .filters import FilterCriteria, apply_filter
from .tasks import Priority, Task, TaskStatus

# Completed and deleted work does not add facet options.
FACET_STATUSES = frozenset({TaskStatus.PENDING, TaskStatus.WAITING, TaskStatus.RECURRING})


class FilterEngine:
    """
    Holds the last snapshot, the user's filter selections and the selected task.

    Selection is tracked by uuid rather than list index, so it survives
    re-sorting, filter changes and snapshot replacement as long as the task
    is still visible.
    """

    def __init__(self, facet_statuses: frozenset[TaskStatus] = FACET_STATUSES):
        self.facet_statuses = frozenset(facet_statuses)
        self._tasks: tuple[Task, ...] = ()
        self._projects: list[str] = []
        self._tags: list[str] = []

        self._statuses: set[TaskStatus] = set()
        self._active = False
        self._overdue = False
        self._selected_projects: set[str] = set()
        self._selected_tags: set[str] = set()
        self._text = ""
        self._priorities: set[Priority | None] = set()
        self._blocked: bool | None = None
        self._due_before: datetime | None = None
        self._due_after: datetime | None = None

        self.visible: list[Task] = []
        self.selected_uuid: str | None = None

    # Snapshot

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    def replace_snapshot(self, tasks, now: datetime | None = None) -> list[Task]:
        """Swap in a full snapshot, rebuild facets and re-apply the filter."""
        self._tasks = tuple(tasks)
        self._rebuild_facets()
        return self.apply(now)

    def _rebuild_facets(self) -> None:
        facet_tasks = [t for t in self._tasks if t.status in self.facet_statuses]
        self._projects = sorted({t.project for t in facet_tasks if t.project})
        self._tags = sorted({tag for t in facet_tasks for tag in t.tags})

    def available_projects(self) -> list[str]:
        return list(self._projects)

    def available_tags(self) -> list[str]:
        return list(self._tags)

    # Filter state

    @property
    def criteria(self) -> FilterCriteria:
        return FilterCriteria(
            statuses=frozenset(self._statuses),
            is_active=self._active,
            is_overdue=self._overdue,
            projects=frozenset(self._selected_projects),
            tags=frozenset(self._selected_tags),
            text=self._text,
            priorities=frozenset(self._priorities),
            blocked=self._blocked,
            due_before=self._due_before,
            due_after=self._due_after,
        )

    def set_criteria(self, criteria: FilterCriteria, now: datetime | None = None) -> list[Task]:
        self._load_criteria(criteria)
        return self.apply(now)

    def _load_criteria(self, criteria: FilterCriteria) -> None:
        self._statuses = set(criteria.statuses)
        self._active = criteria.is_active
        self._overdue = criteria.is_overdue
        self._selected_projects = set(criteria.projects)
        self._selected_tags = set(criteria.tags)
        self._text = criteria.text
        self._priorities = set(criteria.priorities)
        self._blocked = criteria.blocked
        self._due_before = criteria.due_before
        self._due_after = criteria.due_after

    @staticmethod
    def _toggle(selection: set, value) -> None:
        if value in selection:
            selection.discard(value)
        else:
            selection.add(value)

    def toggle_status(self, status: TaskStatus, now: datetime | None = None) -> list[Task]:
        self._toggle(self._statuses, status)
        return self.apply(now)

    def toggle_active(self, now: datetime | None = None) -> list[Task]:
        self._active = not self._active
        return self.apply(now)

    def toggle_overdue(self, now: datetime | None = None) -> list[Task]:
        self._overdue = not self._overdue
        return self.apply(now)

    def toggle_project(self, project: str, now: datetime | None = None) -> list[Task]:
        self._toggle(self._selected_projects, project)
        return self.apply(now)

    def toggle_tag(self, tag: str, now: datetime | None = None) -> list[Task]:
        self._toggle(self._selected_tags, tag)
        return self.apply(now)

    def toggle_priority(self, priority: Priority | None, now: datetime | None = None) -> list[Task]:
        """Toggle one priority level. None stands for tasks without a priority."""
        self._toggle(self._priorities, priority)
        return self.apply(now)

    def set_blocked(self, blocked: bool | None, now: datetime | None = None) -> list[Task]:
        self._blocked = blocked
        return self.apply(now)

    def set_due_range(
        self,
        after: datetime | None = None,
        before: datetime | None = None,
        now: datetime | None = None,
    ) -> list[Task]:
        """Keep tasks due strictly between the bounds. None leaves a side open."""
        self._due_after = after
        self._due_before = before
        return self.apply(now)

    def set_text(self, text: str, now: datetime | None = None) -> list[Task]:
        self._text = text
        return self.apply(now)

    def clear_filters(self, now: datetime | None = None) -> list[Task]:
        return self.set_criteria(FilterCriteria(), now)

    # Output

    def filter(
        self,
        criteria: FilterCriteria | None = None,
        preserve_uuid: str | None = None,
        now: datetime | None = None,
    ) -> list[Task]:
        """
        Filtered view of the snapshot, newest first.

        Without a preserve hint this is a pure query and leaves the engine
        state alone. With one it is a re-apply: the criteria become the
        engine state, the result becomes the visible list, and the hinted
        task is selected if it is in the result (otherwise nothing is).
        """
        result = apply_filter(self._tasks, criteria or self.criteria, now)
        if preserve_uuid is not None:
            if criteria is not None:
                self._load_criteria(criteria)
            self.visible = result
            self.selected_uuid = self._preserved(result, preserve_uuid)
        return result

    def apply(self, now: datetime | None = None) -> list[Task]:
        """Recompute the visible list from the current selections."""
        self.visible = apply_filter(self._tasks, self.criteria, now)
        self.selected_uuid = self._preserved(self.visible, self.selected_uuid)
        return self.visible

    @staticmethod
    def _preserved(result: list[Task], uuid: str | None) -> str | None:
        if uuid is None:
            return None
        if any(t.uuid == uuid for t in result):
            return uuid
        return None

    # Selection

    def select(self, uuid: str | None) -> bool:
        """Select a visible task by uuid. Returns False if it is not visible."""
        if uuid is None:
            self.selected_uuid = None
            return True
        if any(t.uuid == uuid for t in self.visible):
            self.selected_uuid = uuid
            return True
        return False

    def select_index(self, index: int) -> Task | None:
        if 0 <= index < len(self.visible):
            self.selected_uuid = self.visible[index].uuid
            return self.visible[index]
        return None

    @property
    def selected_task(self) -> Task | None:
        if self.selected_uuid is None:
            return None
        return next((t for t in self.visible if t.uuid == self.selected_uuid), None)

    @property
    def selected_index(self) -> int | None:
        for i, t in enumerate(self.visible):
            if t.uuid == self.selected_uuid:
                return i
        return None
