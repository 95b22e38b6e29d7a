"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

EXPORT_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


class InvalidTaskError(ValueError):
    """An export record could not be turned into a Task."""


class TaskStatus(Enum):
    """Lifecycle state of a task, exactly one per task."""

    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"
    WAITING = "waiting"
    RECURRING = "recurring"

    @classmethod
    def parse(cls, value: str | None) -> "TaskStatus":
        """Unknown or missing status strings count as pending."""
        if not isinstance(value, str):
            return cls.PENDING
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.PENDING


class Priority(Enum):
    HIGH = "H"
    MEDIUM = "M"
    LOW = "L"

    @classmethod
    def parse(cls, value: str | None) -> "Priority | None":
        if not isinstance(value, str):
            return None
        try:
            return cls((value or "").upper())
        except ValueError:
            return None


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_export_date(value: str | None) -> datetime | None:
    """
    Parse a date from an export record.

    Accepts the compact form (20251007T192937Z) and ISO-8601.
    Naive values are taken as UTC. Returns None for anything else.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.strptime(value, EXPORT_DATE_FORMAT)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_list(value) -> tuple[str, ...]:
    """Tags and depends arrive as a list, or joined with commas in older exports."""
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return ()
    return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())


def _export_id(value) -> int | None:
    # The export reports id 0 for tasks that no longer have one
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def _export_urgency(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


@dataclass(frozen=True)
class Annotation:
    """A timestamped note attached to a task."""

    entry: datetime
    description: str


@dataclass(frozen=True)
class Task:
    """
    One unit of work, as handed over in a snapshot.

    Tasks are never edited in place: changes go to the external store and a
    fresh snapshot replaces the old one.
    """

    uuid: str
    description: str
    entry: datetime
    status: TaskStatus = TaskStatus.PENDING
    id: int | None = None
    project: str | None = None
    tags: tuple[str, ...] = ()
    priority: Priority | None = None
    modified: datetime | None = None
    start: datetime | None = None
    end: datetime | None = None
    wait: datetime | None = None
    scheduled: datetime | None = None
    until: datetime | None = None
    due: datetime | None = None
    depends: tuple[str, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    # As reported by the external tool; recompute with UrgencyCalculator.
    urgency: float = 0.0

    def is_active(self) -> bool:
        """Started and still pending."""
        return self.start is not None and self.status == TaskStatus.PENDING

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Pending with a due instant in the past."""
        if self.due is None or self.status != TaskStatus.PENDING:
            return False
        now = now or now_utc()
        return self.due < now

    def is_blocked(self) -> bool:
        """Depends on at least one other task. No cycle checking."""
        return bool(self.depends)

    @classmethod
    def from_export(cls, data: dict) -> "Task":
        """
        Create a Task from one record of a JSON export.

        Only uuid and description are required. Optional fields holding a
        value of the wrong type are dropped rather than failing the record.
        """
        uuid = data.get("uuid")
        if not uuid or not isinstance(uuid, str):
            raise InvalidTaskError("Task UUID is required")
        description = data.get("description")
        if not description or not isinstance(description, str):
            raise InvalidTaskError(f"Task description is required (uuid {uuid})")

        annotations = []
        notes = data.get("annotations")
        for item in notes if isinstance(notes, list) else ():
            if not isinstance(item, dict):
                continue
            entry = parse_export_date(item.get("entry"))
            note = item.get("description")
            if entry is None or not note or not isinstance(note, str):
                continue
            annotations.append(Annotation(entry=entry, description=note))

        project = data.get("project")
        return cls(
            uuid=uuid,
            description=description,
            entry=parse_export_date(data.get("entry")) or now_utc(),
            status=TaskStatus.parse(data.get("status")),
            id=_export_id(data.get("id")),
            project=project if project and isinstance(project, str) else None,
            tags=_string_list(data.get("tags")),
            priority=Priority.parse(data.get("priority")),
            modified=parse_export_date(data.get("modified")),
            start=parse_export_date(data.get("start")),
            end=parse_export_date(data.get("end")),
            wait=parse_export_date(data.get("wait")),
            scheduled=parse_export_date(data.get("scheduled")),
            until=parse_export_date(data.get("until")),
            due=parse_export_date(data.get("due")),
            depends=_string_list(data.get("depends")),
            annotations=tuple(annotations),
            urgency=_export_urgency(data.get("urgency")),
        )



@dataclass(frozen=True)
class Snapshot:
    """A complete, versioned replacement of the task collection."""

    tasks: tuple[Task, ...] = field(default_factory=tuple)
    version: int = 0

    def __len__(self) -> int:
        return len(self.tasks)

    def find(self, uuid: str) -> Task | None:
        return next((t for t in self.tasks if t.uuid == uuid), None)
