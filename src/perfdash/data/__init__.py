from __future__ import annotations

from .aggregate import build_metric_groups, to_payload
from .discovery import list_jobs, list_workloads
from .loaders import load_measurements, load_runs, load_summary


__all__ = [
    "build_metric_groups",
    "to_payload",
    "list_jobs",
    "list_workloads",
    "load_measurements",
    "load_runs",
    "load_summary",
]
