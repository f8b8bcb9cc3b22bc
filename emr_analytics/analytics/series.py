"""
Chart data feeds.

Each function returns a list of plain dict rows, ready for a chart component
or for rows_to_csv. Day keys use the same UTC convention as aggregate_by_day.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional

from emr_analytics.core.config import config
from emr_analytics.data.aggregation import day_key, record_memory_usage, record_runtime_hours
from emr_analytics.data.metrics import average, finite_or_zero, is_finite_number
from emr_analytics.data.schema import ClusterRecord

Row = Dict[str, Any]

MB_PER_GB = 1024


def _gigabytes(megabytes: float) -> float:
    """Non-negative GB; NaN and infinities count as 0."""
    return max(finite_or_zero(megabytes), 0.0) / MB_PER_GB


def _group_by_day(records: Iterable[ClusterRecord]) -> Dict[str, List[ClusterRecord]]:
    grouped: Dict[str, List[ClusterRecord]] = {}
    for record in records:
        if record.creation_time is None:
            continue
        grouped.setdefault(day_key(record.creation_time), []).append(record)
    return dict(sorted(grouped.items()))


def memory_usage_by_day(records: Iterable[ClusterRecord]) -> List[Row]:
    """Mean memory usage per creation day, with the first cluster for drill-down."""
    rows = []
    for date, day_records in _group_by_day(records).items():
        rows.append({
            "date": date,
            "memory_usage": average(record_memory_usage(r) for r in day_records),
            "cluster_count": len(day_records),
            "cluster_id": day_records[0].cluster_id,
            "cluster_name": ", ".join(r.cluster_name for r in day_records),
        })
    return rows


def yarn_memory_by_day(records: Iterable[ClusterRecord]) -> List[Row]:
    """Mean, min and max YARN memory available per creation day."""
    rows = []
    for date, day_records in _group_by_day(records).items():
        values = [
            r.yarn_available_percent
            for r in day_records
            if is_finite_number(r.yarn_available_percent)
        ]
        rows.append({
            "date": date,
            "yarn_memory_available": average(values),
            "min_yarn": min(values, default=0.0),
            "max_yarn": max(values, default=0.0),
            "cluster_id": day_records[0].cluster_id,
            "cluster_name": ", ".join(r.cluster_name for r in day_records),
        })
    return rows


def cluster_distribution(records: Iterable[ClusterRecord]) -> List[Row]:
    """Record count per cluster name, in first-seen order."""
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.cluster_name] = counts.get(record.cluster_name, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def runtime_by_cluster(records: Iterable[ClusterRecord]) -> List[Row]:
    """Total exact runtime hours per cluster name."""
    totals: Dict[str, float] = {}
    for record in records:
        hours = record_runtime_hours(record, fractional=True)
        totals[record.cluster_name] = totals.get(record.cluster_name, 0.0) + hours
    return [{"name": name, "total_runtime": total} for name, total in totals.items()]


def capacity_groups(
    records: Iterable[ClusterRecord],
    group_gb: Optional[int] = None,
) -> List[Row]:
    """
    Mean total and allocated memory (GB) per cluster name and size band.

    Records are keyed by name plus total memory rounded to the nearest
    group_gb (default 50GB), so similar-sized clusters share one point.
    """
    band = group_gb or config.analytics.capacity_group_gb
    groups: Dict[str, List[ClusterRecord]] = {}

    for record in records:
        total_gb = _gigabytes(record.total_memory_mb)
        rounded = int(math.floor(total_gb / band + 0.5)) * band
        groups.setdefault(f"{record.cluster_name}-{rounded}", []).append(record)

    rows = []
    for key, members in groups.items():
        rows.append({
            "group_key": key,
            "total_capacity_gb": average(_gigabytes(r.total_memory_mb) for r in members),
            "allocated_memory_gb": average(_gigabytes(r.allocated_memory_mb) for r in members),
            "cluster_count": len(members),
            "cluster_id": members[0].cluster_id,
            "cluster_name": members[0].cluster_name,
        })
    return rows
