"""Shared workflow layer between the CLI and the engine.

The Dashboard owns the snapshot version counter: every full replacement bumps
it once, and the filter engine and report caches are rebuilt in the same call.
"""

import logging
from datetime import datetime

from .adapters.json_export import JsonExportSource
from .config import Config
from .core.activity import ActivityEntry, recent_activity
from .core.engine import FilterEngine
from .core.reports import ProjectStats, ReportAggregator, SummaryCache
from .core.tasks import Snapshot, Task, now_utc
from .core.urgency import UrgencyCalculator
from .ports.task_source import TaskSource

logger = logging.getLogger(__name__)


class Dashboard:
    """Current snapshot plus everything derived from it."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config()
        self.calculator = UrgencyCalculator(self.config.urgency)
        self.engine = FilterEngine(self.config.facet_statuses)
        self.reports = ReportAggregator(self.calculator)
        self.snapshot = Snapshot()

    @property
    def version(self) -> int:
        return self.snapshot.version

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.snapshot.tasks

    def replace_snapshot(self, tasks, now: datetime | None = None) -> Snapshot:
        """Replace every task at once and recompute derived state."""
        return self.install(Snapshot(tasks=tuple(tasks), version=self.version + 1), now)

    def install(self, snapshot: Snapshot, now: datetime | None = None) -> Snapshot:
        """Adopt a snapshot that already carries its own version."""
        if snapshot.version <= self.version:
            logger.warning(
                f"Snapshot version {snapshot.version} does not advance {self.version}, bumping"
            )
            snapshot = Snapshot(tasks=snapshot.tasks, version=self.version + 1)
        now = now or now_utc()
        self.snapshot = snapshot
        self.engine.replace_snapshot(snapshot.tasks, now)
        self.reports.recompute(snapshot.tasks, snapshot.version, now)
        return snapshot

    def load(self, source: TaskSource, now: datetime | None = None) -> Snapshot:
        return self.install(source.load(), now)

    def urgency(self, task: Task, now: datetime | None = None) -> float:
        return self.calculator.score(task, now)

    def report(self) -> tuple[SummaryCache, dict[str, ProjectStats]]:
        """Cached reports for the current version. Raises StaleReportError if stale."""
        return self.reports.read(self.version)

    def activity(self, max_items: int | None = None, now: datetime | None = None) -> list[ActivityEntry]:
        limit = self.config.activity_limit if max_items is None else max_items
        return recent_activity(self.tasks, limit, now)


def open_dashboard(config: Config, snapshot_file: str | None = None) -> Dashboard:
    """Build a Dashboard and load the configured export file into it."""
    dashboard = Dashboard(config)
    source = JsonExportSource(snapshot_file or config.snapshot_path)
    dashboard.load(source)
    return dashboard
