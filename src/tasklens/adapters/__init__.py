"""Adapters - I/O implementations of ports."""

from .json_export import JsonExportSource, SnapshotError, parse_export

__all__ = [
    "JsonExportSource",
    "SnapshotError",
    "parse_export",
]
