"""JSON export snapshot adapter."""

import json
import logging
import sys
from pathlib import Path

from tasklens.core.tasks import InvalidTaskError, Snapshot, Task

logger = logging.getLogger(__name__)


class SnapshotError(RuntimeError):
    """Raised when an export cannot be read as a task list."""


def parse_export(raw: str) -> list[Task]:
    """
    Build tasks from the text of a JSON export.

    Records that fail validation are logged and skipped.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Export is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise SnapshotError("Export must be a JSON array of tasks")

    tasks = []
    seen: set[str] = set()
    for i, record in enumerate(data):
        if not isinstance(record, dict):
            logger.warning(f"Skipping export record {i}: not an object")
            continue
        try:
            task = Task.from_export(record)
        except InvalidTaskError as e:
            logger.warning(f"Skipping export record {i}: {e}")
            continue
        if task.uuid in seen:
            logger.warning(f"Skipping duplicate task {task.uuid}")
            continue
        seen.add(task.uuid)
        tasks.append(task)
    return tasks


class JsonExportSource:
    """
    Reads snapshots from a JSON export file.

    Implements TaskSource protocol. Every load is a full replacement and
    bumps the version counter, whether or not the file changed.
    """

    def __init__(self, path: Path | str):
        self.path = path if path == "-" else Path(path).expanduser()
        self.version = 0

    def _read(self) -> str:
        if self.path == "-":
            return sys.stdin.read()
        if not self.path.exists():
            raise SnapshotError(f"Snapshot file not found: {self.path}")
        return self.path.read_text()

    def load(self) -> Snapshot:
        tasks = parse_export(self._read())
        self.version += 1
        logger.info(f"Loaded {len(tasks)} tasks from {self.path} (version {self.version})")
        return Snapshot(tasks=tuple(tasks), version=self.version)
