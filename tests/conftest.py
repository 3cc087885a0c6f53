from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest


def measurement(metric: str, quantile: str, ts: str, p99: float = 1.0, **extra: Any) -> Dict[str, Any]:
    rec = {
        "quantileName": quantile,
        "uuid": "0000-uuid",
        "P99": p99,
        "P95": p99 * 0.9,
        "P50": p99 * 0.5,
        "min": 0.0,
        "max": p99 * 1.1,
        "avg": p99 * 0.6,
        "timestamp": ts,
        "metricName": metric,
        "jobName": "density",
        "metadata": {"ocpVersion": "4.15"},
    }
    rec.update(extra)
    return rec


def write_run(
    run_dir: Path,
    summary_ts: str | None,
    measurements: List[Dict[str, Any]] | None,
    filename: str = "podLatencyQuantilesMeasurement-density.json",
) -> Path:
    run_dir.mkdir(parents=True, exist_ok=True)
    if summary_ts is not None:
        summary = {
            "timestamp": summary_ts,
            "uuid": f"uuid-{run_dir.name}",
            "metricName": "jobSummary",
            "elapsedTime": 42.5,
            "jobConfig": {"name": "density", "jobIterations": 10, "qps": 20},
        }
        (run_dir / "jobSummary.json").write_text(json.dumps([summary]), encoding="utf-8")
    if measurements is not None:
        (run_dir / filename).write_text(json.dumps(measurements), encoding="utf-8")
    return run_dir


@pytest.fixture
def results_root(tmp_path: Path) -> Path:
    root = tmp_path / "results"
    root.mkdir()
    return root


@pytest.fixture
def two_run_workload(results_root: Path) -> Path:
    """density/cluster-density with runs A (older) and B (newer)."""
    wl = results_root / "density" / "cluster-density"
    write_run(
        wl / "run-b",
        "2024-03-02T10:00:00Z",
        [measurement("pod", "Ready", "2024-03-02T10:00:00Z", p99=9)],
    )
    write_run(
        wl / "run-a",
        "2024-03-01T10:00:00Z",
        [measurement("pod", "Ready", "2024-03-01T10:00:00Z", p99=5)],
    )
    return wl
