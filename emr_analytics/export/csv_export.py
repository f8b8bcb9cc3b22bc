"""
CSV export of daily metrics, records and chart rows.

Column order is fixed per export shape. Every export returns "" for empty
input rather than a header-only document, and rows are joined with "\n"
without a trailing newline.
"""

import csv
import io
import logging
import math
from typing import Any, Dict, Iterable, List, Sequence

from emr_analytics.data.aggregation import record_memory_usage, record_runtime_hours
from emr_analytics.data.schema import ClusterRecord, DailyBucket

logger = logging.getLogger(__name__)

DAILY_HEADERS = [
    "Date",
    "Avg Memory Usage %",
    "Avg YARN Memory Available %",
    "Avg Runtime Hours",
    "Avg Remaining Capacity GB",
    "Avg Unhealthy Nodes",
    "Cluster Count",
    "Clusters",
]

RECORD_HEADERS = [
    "Cluster Name",
    "Cluster ID",
    "State",
    "Creation Date",
    "End Date",
    "Memory Usage %",
    "YARN Available %",
    "Runtime Hours",
    "Capacity Remaining GB",
]


def _two_decimals(value: float) -> str:
    return f"{value:.2f}"


def _raw_number(value: float) -> str:
    """Number as given: 45.0 -> "45", 45.5 -> "45.5". NaN and infinities are left empty."""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def daily_metrics_to_csv(daily_buckets: Sequence[DailyBucket]) -> str:
    """
    One row per daily bucket.

    Numeric columns are formatted to two decimals, the cluster count as an
    integer, and cluster names joined with ";".
    """
    if not daily_buckets:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(DAILY_HEADERS)
    for bucket in daily_buckets:
        writer.writerow([
            bucket.date,
            _two_decimals(bucket.avg_memory_usage_percent),
            _two_decimals(bucket.avg_yarn_memory_available_percent),
            _two_decimals(bucket.avg_runtime_hours),
            _two_decimals(bucket.avg_remaining_capacity_gb),
            _two_decimals(bucket.avg_unhealthy_nodes),
            bucket.cluster_count,
            ";".join(bucket.clusters),
        ])

    return buffer.getvalue().rstrip("\n")


def records_to_csv(records: Iterable[ClusterRecord]) -> str:
    """
    One row per cluster record.

    Text columns are always double-quoted. Memory usage and runtime (exact
    hours) use two decimals; YARN available and remaining capacity are
    written as stored, with non-finite values left empty.
    """
    records = list(records)
    if not records:
        return ""

    lines = [",".join(RECORD_HEADERS)]
    for record in records:
        creation = record.creation_time.isoformat() if record.creation_time else ""
        end = record.end_time.isoformat() if record.end_time else ""
        lines.append(",".join([
            _quoted(record.cluster_name),
            _quoted(record.cluster_id),
            _quoted(record.state),
            _quoted(creation),
            _quoted(end),
            _two_decimals(record_memory_usage(record)),
            _raw_number(record.yarn_available_percent),
            _two_decimals(record_runtime_hours(record, fractional=True)),
            _raw_number(record.remaining_capacity_gb),
        ]))

    logger.debug(f"Exported {len(records)} records to CSV")
    return "\n".join(lines)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        if any(c in value for c in (",", '"', "\n")):
            return _quoted(value)
        return value
    return str(value)


def rows_to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    """
    Generic export for chart rows.

    The header comes from the first row's keys; string values containing a
    comma are quoted.
    """
    if not rows:
        return ""

    headers: List[str] = list(rows[0].keys())
    lines = [",".join(_cell(h) for h in headers)]
    for row in rows:
        lines.append(",".join(_cell(row.get(h)) for h in headers))
    return "\n".join(lines)
