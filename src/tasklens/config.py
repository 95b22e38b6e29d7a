"""Configuration management for tasklens."""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.engine import FACET_STATUSES
from .core.tasks import TaskStatus
from .core.urgency import UrgencyWeights

logger = logging.getLogger(__name__)

TASKLENS_HOME = Path(os.environ.get("TASKLENS_HOME", Path.home() / ".tasklens"))
CONFIG_FILE = TASKLENS_HOME / "config" / "tasklens.conf"
DEFAULT_SNAPSHOT = TASKLENS_HOME / "data" / "export.json"

URGENCY_PREFIX = "urgency_"


@dataclass
class Config:
    """tasklens configuration."""

    snapshot_file: str = ""
    timezone: str = "UTC"
    activity_limit: int = 10
    facet_statuses: frozenset[TaskStatus] = FACET_STATUSES
    urgency: UrgencyWeights = field(default_factory=UrgencyWeights)

    @property
    def snapshot_path(self) -> Path:
        if self.snapshot_file:
            return Path(self.snapshot_file).expanduser()
        return DEFAULT_SNAPSHOT

    @property
    def tz(self) -> tzinfo:
        if self.timezone.upper() == "UTC":
            return timezone.utc
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using UTC")
            return timezone.utc


def _unquote(value: str) -> str:
    """Strip quotes from a value, or an inline comment from an unquoted one."""
    if value.startswith(('"', "'")):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _parse_statuses(value: str) -> frozenset[TaskStatus] | None:
    statuses = set()
    for name in value.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            statuses.add(TaskStatus(name))
        except ValueError:
            logger.warning(f"Unknown status in FACET_STATUSES: {name}")
    return frozenset(statuses) or None


URGENCY_FIELDS = {f.name for f in fields(UrgencyWeights)}


def load_config(path: Path | None = None) -> Config:
    """Load configuration from tasklens.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    weights: dict[str, float] = {}

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "snapshot_file":
                config.snapshot_file = value
            case "timezone":
                config.timezone = value
            case "activity_limit":
                try:
                    config.activity_limit = int(value)
                except ValueError:
                    logger.warning(f"Invalid ACTIVITY_LIMIT: {value}")
            case "facet_statuses":
                statuses = _parse_statuses(value)
                if statuses:
                    config.facet_statuses = statuses
            case _ if key.startswith(URGENCY_PREFIX):
                name = key[len(URGENCY_PREFIX):]
                if name not in URGENCY_FIELDS:
                    logger.warning(f"Unknown urgency coefficient: {key.upper()}")
                    continue
                try:
                    weights[name] = float(value)
                except ValueError:
                    logger.warning(f"Invalid {key.upper()}: {value}")
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    if weights:
        config.urgency = replace(config.urgency, **weights)

    return config
