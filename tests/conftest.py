"""Shared fixtures."""

from datetime import datetime, timezone
from itertools import count

import pytest

from tasklens.core.tasks import Task


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_task(now):
    """Factory for tasks; entry defaults to `now`, uuids are sequential."""
    seq = count(1)

    def _make(description: str = "Task", **kwargs) -> Task:
        n = next(seq)
        kwargs.setdefault("uuid", f"uuid-{n}")
        kwargs.setdefault("entry", now)
        return Task(description=description, **kwargs)

    return _make
