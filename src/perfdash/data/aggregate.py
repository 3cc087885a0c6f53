from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from .model import DataPoint, MetricGroup, QuantileSeries, Run


def build_metric_groups(runs: Iterable[Run]) -> List[MetricGroup]:
    """Group the measurements of `runs` into metric -> quantile series.

    Groups are sorted by metric name, series by quantile name, and points by
    timestamp. Points sharing a timestamp keep run order.
    """
    buckets: Dict[Tuple[str, str], List[DataPoint]] = {}
    for run in runs:
        for m in run.measurements:
            point = DataPoint(
                timestamp=m.timestamp,
                p99=m.p99,
                p95=m.p95,
                p50=m.p50,
                min=m.min,
                max=m.max,
                avg=m.avg,
                summary=run.summary,
            )
            buckets.setdefault((m.metric_name, m.quantile_name), []).append(point)

    groups: Dict[str, MetricGroup] = {}
    for (metric, quantile), points in sorted(buckets.items(), key=lambda kv: kv[0]):
        points.sort(key=lambda p: p.timestamp)
        group = groups.setdefault(metric, MetricGroup(metric_name=metric))
        group.quantiles.append(QuantileSeries(quantile_name=quantile, datapoints=points))
    return list(groups.values())


def to_payload(groups: Iterable[MetricGroup]) -> List[Dict[str, Any]]:
    """JSON-ready form of the groups, as consumed by charts.js."""
    return [
        {
            "metricName": g.metric_name,
            "quantiles": [
                {
                    "quantileName": q.quantile_name,
                    "datapoints": [p.to_dict() for p in q.datapoints],
                }
                for q in g.quantiles
            ],
        }
        for g in groups
    ]
