from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from ..errors import MeasurementError, ResultsDirError, RunLoadError, SummaryError
from .model import OLDEST, Measurement, Run, Summary

logger = logging.getLogger(__name__)

SUMMARY_FILE = "jobSummary.json"
MEASUREMENT_GLOB = "*QuantilesMeasurement*.json"


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def load_measurements(run_path: str | Path) -> List[Measurement]:
    """Concatenate the records of every quantile measurement file of a run.

    Fails only when no file matches; corrupt files are skipped.
    """
    run_dir = Path(run_path)
    files = sorted(p for p in run_dir.glob(MEASUREMENT_GLOB) if p.is_file())
    if not files:
        raise MeasurementError(run_dir, f"no {MEASUREMENT_GLOB} files found")

    out: List[Measurement] = []
    for path in files:
        try:
            data = _read_json(path)
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            records = [Measurement.from_dict(rec) for rec in data]
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError
            logger.warning("Skipping measurement file %s: %s", path, exc)
            continue
        out.extend(records)
    return out


def load_summary(run_path: str | Path) -> Summary:
    run_dir = Path(run_path)
    path = run_dir / SUMMARY_FILE
    try:
        data = _read_json(path)
    except FileNotFoundError as exc:
        raise SummaryError(run_dir, f"{SUMMARY_FILE} not found") from exc
    except (OSError, ValueError) as exc:
        raise SummaryError(run_dir, f"cannot parse {SUMMARY_FILE}: {exc}") from exc

    if not isinstance(data, list):
        raise SummaryError(run_dir, f"{SUMMARY_FILE} is not a JSON array")
    if not data:
        raise SummaryError(run_dir, "no job summary found")
    try:
        return Summary.from_dict(data[0])
    except ValueError as exc:
        raise SummaryError(run_dir, str(exc)) from exc


def _load_run(run_dir: Path) -> Run:
    measurements = load_measurements(run_dir)
    summary = load_summary(run_dir)
    return Run(path=run_dir, summary=summary, measurements=measurements)


def load_runs(workload_path: str | Path) -> List[Run]:
    """Load every run of a workload, oldest summary first.

    Runs that fail to load are logged and left out.
    """
    workload_dir = Path(workload_path)
    try:
        entries = list(workload_dir.iterdir())
    except OSError as exc:
        raise ResultsDirError(workload_dir, exc.strerror or str(exc)) from exc

    run_dirs = sorted((p for p in entries if p.is_dir()), key=lambda p: p.name)
    logger.info("Loading %d runs from %s", len(run_dirs), workload_dir)
    runs: List[Run] = []
    for run_dir in run_dirs:
        try:
            runs.append(_load_run(run_dir))
        except RunLoadError as exc:
            logger.warning("Skipping run %s", exc)

    runs.sort(key=lambda r: r.summary.timestamp or OLDEST)
    return runs
