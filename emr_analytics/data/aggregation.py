"""
Time-bucket aggregation for cluster records.

Groups records into UTC calendar days and reduces each day to mean
statistics. Weekly views are derived from the day buckets under two separate
policies:

- weekly_kpis: trailing 7-bucket windows counted back from the most recent
  day (current week vs previous week KPI cards)
- calendar_weekly_kpi_metrics: Sunday-to-Saturday calendar weeks covering the
  whole history (weekly time-series charts)

Design:
- The reference zone for day keys is UTC, applied everywhere
- Every mean goes through metrics.average
- Cluster counts over several days are unions of names, never sums
- Inputs are never mutated; sorting works on copies
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from emr_analytics.core.config import config
from emr_analytics.core.diagnostics import (
    ALLOCATED_EXCEEDS_TOTAL,
    END_BEFORE_CREATION,
    NEGATIVE_CAPACITY,
    UNPARSEABLE_TIMESTAMP,
    Diagnostics,
    report,
)
from emr_analytics.data.metrics import average, memory_usage_percent, runtime_hours
from emr_analytics.data.schema import ClusterRecord, DailyBucket, WeeklyBucket, WeeklyKPIs

logger = logging.getLogger(__name__)

KPI_FIELDS = (
    "avg_memory_usage_percent",
    "avg_yarn_memory_available_percent",
    "avg_runtime_hours",
    "avg_remaining_capacity_gb",
    "avg_unhealthy_nodes",
)


def day_key(ts: datetime) -> str:
    """
    Calendar day of a timestamp in UTC, as YYYY-MM-DD.

    Naive datetimes are taken to be UTC already.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.date().isoformat()


def parse_day_key(key: str) -> date:
    return date.fromisoformat(key)


def _ordered_union(name_lists: Iterable[Sequence[str]]) -> List[str]:
    seen: Dict[str, None] = {}
    for names in name_lists:
        for name in names:
            seen.setdefault(name, None)
    return list(seen)


def record_memory_usage(
    record: ClusterRecord,
    diagnostics: Optional[Diagnostics] = None,
) -> float:
    """Memory usage for a record, flagging allocated > total."""
    if record.total_memory_mb > 0 and record.allocated_memory_mb > record.total_memory_mb:
        report(
            diagnostics,
            ALLOCATED_EXCEEDS_TOTAL,
            f"Allocated memory ({record.allocated_memory_mb}MB) exceeds total memory "
            f"({record.total_memory_mb}MB) for cluster {record.cluster_id}",
            record_id=record.id,
            cluster_id=record.cluster_id,
        )
    return memory_usage_percent(record.allocated_memory_mb, record.total_memory_mb)


def record_runtime_hours(
    record: ClusterRecord,
    diagnostics: Optional[Diagnostics] = None,
    fractional: bool = False,
) -> float:
    """Runtime for a record, flagging an end time before creation."""
    try:
        reversed_range = (
            record.creation_time is not None
            and record.end_time is not None
            and record.end_time < record.creation_time
        )
    except TypeError:
        # naive vs aware; runtime_hours resolves this to 0
        reversed_range = False

    if reversed_range:
        report(
            diagnostics,
            END_BEFORE_CREATION,
            f"Invalid date range for cluster {record.cluster_id}: "
            f"{record.creation_time.isoformat()} to {record.end_time.isoformat()}",
            record_id=record.id,
            cluster_id=record.cluster_id,
        )
    return runtime_hours(record.creation_time, record.end_time, fractional=fractional)


def record_remaining_capacity(
    record: ClusterRecord,
    diagnostics: Optional[Diagnostics] = None,
) -> float:
    """Remaining capacity for a record, with negative values read as 0."""
    if record.remaining_capacity_gb < 0:
        report(
            diagnostics,
            NEGATIVE_CAPACITY,
            f"Negative remaining capacity ({record.remaining_capacity_gb}GB) "
            f"for cluster {record.cluster_id}",
            record_id=record.id,
            cluster_id=record.cluster_id,
        )
        return 0.0
    return record.remaining_capacity_gb


def aggregate_by_day(
    records: Iterable[ClusterRecord],
    diagnostics: Optional[Diagnostics] = None,
) -> List[DailyBucket]:
    """
    Group records by UTC creation day and compute per-day means.

    Args:
        records: Cluster records (any iterable, including a ClusterStore)
        diagnostics: Collector for recoverable problems

    Returns:
        DailyBucket list sorted ascending by date

    Notes:
        - Records without a creation time are skipped with a warning
        - Empty input gives an empty list
    """
    grouped: Dict[str, List[ClusterRecord]] = {}

    for record in records:
        if record.creation_time is None:
            report(
                diagnostics,
                UNPARSEABLE_TIMESTAMP,
                f"Skipping cluster {record.cluster_id} from daily grouping: no creation time",
                record_id=record.id,
                cluster_id=record.cluster_id,
            )
            continue
        grouped.setdefault(day_key(record.creation_time), []).append(record)

    buckets = []
    for key, day_records in grouped.items():
        clusters = _ordered_union([[r.cluster_name] for r in day_records])
        buckets.append(
            DailyBucket(
                date=key,
                avg_memory_usage_percent=average(
                    record_memory_usage(r, diagnostics) for r in day_records
                ),
                avg_yarn_memory_available_percent=average(
                    r.yarn_available_percent for r in day_records
                ),
                avg_runtime_hours=average(
                    record_runtime_hours(r, diagnostics) for r in day_records
                ),
                avg_remaining_capacity_gb=average(
                    record_remaining_capacity(r, diagnostics) for r in day_records
                ),
                avg_unhealthy_nodes=average(r.unhealthy_node_count for r in day_records),
                cluster_count=len(clusters),
                clusters=tuple(clusters),
            )
        )

    buckets.sort(key=lambda b: b.date)
    logger.debug(f"Aggregated records into {len(buckets)} daily buckets")
    return buckets


def _reduce_buckets(buckets: Sequence[DailyBucket]) -> Dict[str, float]:
    return {field: average(getattr(b, field) for b in buckets) for field in KPI_FIELDS}


def weekly_kpis(
    daily_buckets: Sequence[DailyBucket],
    offset: int = 0,
    window_days: Optional[int] = None,
) -> WeeklyKPIs:
    """
    KPI means over a trailing window of daily buckets.

    Buckets are ordered newest first and the slice
    [offset * window, offset * window + window) is reduced. offset 0 is the
    current week, offset 1 the week before it.

    Args:
        daily_buckets: Output of aggregate_by_day
        offset: Number of whole windows to step back
        window_days: Window size in buckets (default from config, 7)

    Returns:
        WeeklyKPIs, all zero when the slice is empty
    """
    window = window_days or config.analytics.trailing_window_days
    if offset < 0:
        offset = 0

    newest_first = sorted(daily_buckets, key=lambda b: b.date, reverse=True)
    window_buckets = newest_first[offset * window:offset * window + window]
    if not window_buckets:
        return WeeklyKPIs()

    clusters = _ordered_union(b.clusters for b in window_buckets)
    return WeeklyKPIs(
        **_reduce_buckets(window_buckets),
        cluster_count=len(clusters),
    )


def previous_weekly_kpis(daily_buckets: Sequence[DailyBucket]) -> WeeklyKPIs:
    """KPIs for the window just before the current one (days 8-14 back)."""
    return weekly_kpis(daily_buckets, offset=1)


def week_start(day: date) -> date:
    """
    Sunday on or before the given day.

    The first week of the calendar (before 0001-01-07) starts at date.min.
    """
    # date.weekday(): Monday=0 ... Sunday=6
    offset = timedelta(days=(day.weekday() + 1) % 7)
    if day - date.min < offset:
        return date.min
    return day - offset


def week_end(start: date) -> date:
    """Saturday closing the week that starts on start, capped at date.max."""
    if date.max - start < timedelta(days=6):
        return date.max
    return start + timedelta(days=6)


def calendar_weekly_kpi_metrics(daily_buckets: Sequence[DailyBucket]) -> List[WeeklyBucket]:
    """
    Group daily buckets into Sunday-to-Saturday calendar weeks.

    Args:
        daily_buckets: Output of aggregate_by_day

    Returns:
        WeeklyBucket list sorted ascending by week_start. Means are
        unweighted averages of the daily means; cluster_count is the union
        of names over the week.
    """
    weeks: Dict[date, List[DailyBucket]] = {}
    for bucket in sorted(daily_buckets, key=lambda b: b.date):
        start = week_start(parse_day_key(bucket.date))
        weeks.setdefault(start, []).append(bucket)

    result = []
    for start in sorted(weeks):
        buckets = weeks[start]
        clusters = _ordered_union(b.clusters for b in buckets)
        result.append(
            WeeklyBucket(
                week_start=start.isoformat(),
                week_end=week_end(start).isoformat(),
                day_count=len(buckets),
                **_reduce_buckets(buckets),
                cluster_count=len(clusters),
                clusters=tuple(clusters),
            )
        )

    return result
