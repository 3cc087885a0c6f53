"""Records decoded from a results tree and the chart series derived from them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

# RFC 3339 allows nanosecond precision; datetime stops at microseconds.
_FRACTION = re.compile(r"(\.\d{6})\d+")

# Stands in for a missing timestamp, sorting before every real one.
OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime (UTC when naive)."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str) and value.strip():
        text = _FRACTION.sub(r"\1", value.strip())
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        ts = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _measurement_timestamp(value: Any) -> datetime:
    if value is None:
        return OLDEST
    return parse_timestamp(value)


def _float(rec: Dict[str, Any], key: str) -> float:
    value = rec.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field {key!r} is not a number: {value!r}")
    return float(value)


@dataclass(frozen=True)
class Measurement:
    metric_name: str
    quantile_name: str
    timestamp: datetime
    p99: float
    p95: float
    p50: float
    min: float
    max: float
    avg: float
    uuid: str = ""
    job_name: str = ""
    metadata: Any = None

    @staticmethod
    def from_dict(rec: Dict[str, Any]) -> "Measurement":
        if not isinstance(rec, dict):
            raise ValueError(f"Measurement must be an object, got {type(rec).__name__}")
        return Measurement(
            metric_name=str(rec.get("metricName") or ""),
            quantile_name=str(rec.get("quantileName") or ""),
            timestamp=_measurement_timestamp(rec.get("timestamp")),
            p99=_float(rec, "P99"),
            p95=_float(rec, "P95"),
            p50=_float(rec, "P50"),
            min=_float(rec, "min"),
            max=_float(rec, "max"),
            avg=_float(rec, "avg"),
            uuid=str(rec.get("uuid") or ""),
            job_name=str(rec.get("jobName") or ""),
            metadata=rec.get("metadata"),
        )


@dataclass(frozen=True)
class Summary:
    """Job summary of a run. `fields` is kept verbatim for display."""

    fields: Dict[str, Any]
    timestamp: Optional[datetime] = None

    @staticmethod
    def from_dict(rec: Dict[str, Any]) -> "Summary":
        if not isinstance(rec, dict):
            raise ValueError(f"Job summary must be an object, got {type(rec).__name__}")
        raw_ts = rec.get("timestamp")
        ts = parse_timestamp(raw_ts) if raw_ts not in (None, "") else None
        return Summary(fields=dict(rec), timestamp=ts)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


@dataclass(frozen=True)
class Run:
    path: Path
    summary: Summary
    measurements: List[Measurement]

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class Workload:
    name: str
    path: Path
    run_count: int


@dataclass
class Job:
    name: str
    path: Path
    workloads: List[Workload] = field(default_factory=list)


@dataclass(frozen=True)
class DataPoint:
    timestamp: datetime
    p99: float
    p95: float
    p50: float
    min: float
    max: float
    avg: float
    summary: Summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "P99": self.p99,
            "P95": self.p95,
            "P50": self.p50,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
            "jobSummary": self.summary.fields,
        }


@dataclass
class QuantileSeries:
    quantile_name: str
    datapoints: List[DataPoint] = field(default_factory=list)


@dataclass
class MetricGroup:
    metric_name: str
    quantiles: List[QuantileSeries] = field(default_factory=list)
