from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import Iterable, List, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .model import DataPoint, MetricGroup  # noqa: E402

STATISTICS = ("P99", "P95", "P50", "min", "max", "avg")

CSV_FIELDS = ["metricName", "quantileName", "timestamp", *STATISTICS, "run"]

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def check_stat(stat: str) -> str:
    for name in STATISTICS:
        if name.lower() == stat.lower():
            return name
    raise ValueError(f"Unknown statistic '{stat}', expected one of {', '.join(STATISTICS)}")


def _stat(point: DataPoint, stat: str) -> float:
    return getattr(point, check_stat(stat).lower())


def _run_label(point: DataPoint) -> str:
    # kube-burner summaries carry the run uuid; older ones only the job name
    uuid = point.summary.get("uuid")
    if uuid:
        return str(uuid)
    cfg = point.summary.get("jobConfig")
    if isinstance(cfg, dict) and cfg.get("name"):
        return str(cfg["name"])
    return ""


def safe_name(name: str) -> str:
    return _UNSAFE.sub("_", name).strip("_") or "unnamed"


def groups_to_csv(groups: Iterable[MetricGroup], out_path: str | Path) -> int:
    """Write one row per data point. Returns number of rows written."""
    dst = Path(out_path)
    dst.parent.mkdir(parents=True, exist_ok=True)
    rows = 0
    with dst.open("w", encoding="utf-8", newline="") as fp:
        writer = csv.DictWriter(fp, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for group in groups:
            for series in group.quantiles:
                for p in series.datapoints:
                    writer.writerow(
                        {
                            "metricName": group.metric_name,
                            "quantileName": series.quantile_name,
                            "timestamp": p.timestamp.isoformat(),
                            "P99": p.p99,
                            "P95": p.p95,
                            "P50": p.p50,
                            "min": p.min,
                            "max": p.max,
                            "avg": p.avg,
                            "run": _run_label(p),
                        }
                    )
                    rows += 1
    return rows


def render_group_png(
    group: MetricGroup,
    out_path: str | Path,
    stat: str = "P99",
    max_points: int = 100,
) -> Path:
    """Plot every quantile series of a metric group on one axis."""
    dst = Path(out_path)
    dst.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(10, 4))
    try:
        for series in group.quantiles:
            points = series.datapoints[-max_points:] if max_points > 0 else series.datapoints
            ax.plot(
                [p.timestamp for p in points],
                [_stat(p, stat) for p in points],
                marker="o",
                markersize=3,
                label=series.quantile_name,
            )
        ax.set_title(f"{group.metric_name} ({stat})")
        ax.set_ylabel("Latency (ms)")
        ax.set_ylim(bottom=0)
        ax.grid(True, which="both", linestyle=":")
        if group.quantiles:
            ax.legend(loc="upper left", fontsize="small")
        fig.autofmt_xdate()
        fig.tight_layout()
        fig.savefig(dst)
    finally:
        plt.close(fig)
    return dst


def export_workload(
    groups: Sequence[MetricGroup],
    out_dir: str | Path,
    basename: str,
    stat: str = "P99",
    png: bool = True,
    max_points: int = 100,
) -> List[Path]:
    """Write the CSV (and optionally one PNG per metric) for a workload."""
    stat = check_stat(stat)
    out = Path(out_dir)
    written: List[Path] = []
    csv_path = out / f"{safe_name(basename)}.csv"
    groups_to_csv(groups, csv_path)
    written.append(csv_path)
    if png:
        for group in groups:
            name = f"{safe_name(basename)}_{safe_name(group.metric_name)}.png"
            written.append(render_group_png(group, out / name, stat=stat, max_points=max_points))
    return written
