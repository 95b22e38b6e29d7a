"""Task source interface."""

from typing import Protocol

from tasklens.core.tasks import Snapshot


class TaskSource(Protocol):
    """Interface for anything that supplies full task snapshots."""

    def load(self) -> Snapshot:
        """Load a complete snapshot, stamped with a new version."""
        ...
