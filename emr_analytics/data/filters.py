"""
Record filtering and date-range selection.

All criteria are ANDed. A record matches a date interval if either its
creation time or its end time falls inside [start of start day, end of end
day], so clusters that straddle a boundary are kept.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Tuple, Union

from emr_analytics.core.config import config
from emr_analytics.core.diagnostics import Diagnostics
from emr_analytics.core.exceptions import ConfigurationError
from emr_analytics.data.aggregation import aggregate_by_day, calendar_weekly_kpi_metrics
from emr_analytics.data.schema import (
    ClusterRecord,
    DailyBucket,
    DateFilterOptions,
    FilterOptions,
    WeeklyBucket,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def start_of_day(value: DateLike) -> datetime:
    """00:00:00 UTC on the day of value."""
    return datetime.combine(_as_date(value), time.min, tzinfo=timezone.utc)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999999 UTC on the day of value."""
    return datetime.combine(_as_date(value), time.max, tzinfo=timezone.utc)


def _in_interval(
    ts: Optional[datetime],
    start: Optional[datetime],
    end: Optional[datetime],
) -> bool:
    if ts is None:
        return False
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    if start is not None and ts < start:
        return False
    if end is not None and ts > end:
        return False
    return True


def filter_records(
    records: Iterable[ClusterRecord],
    options: Optional[FilterOptions] = None,
    **criteria,
) -> List[ClusterRecord]:
    """
    Narrow a record set.

    Args:
        records: Cluster records (any iterable, including a ClusterStore)
        options: FilterOptions; keyword criteria are accepted instead
            (cluster_name, state, search_term, start_date, end_date)

    Returns:
        Matching records in their original order

    Notes:
        - cluster_name and state are exact matches
        - search_term is a case-insensitive substring of name or id
        - With only one date bound the interval is open on the other side
    """
    if options is None:
        options = FilterOptions(**criteria)
    elif criteria:
        options = options.model_copy(update=criteria)

    search = options.search_term.lower() if options.search_term else None
    start = start_of_day(options.start_date) if options.start_date else None
    end = end_of_day(options.end_date) if options.end_date else None
    has_range = start is not None or end is not None

    matched = []
    for record in records:
        if options.cluster_name and record.cluster_name != options.cluster_name:
            continue
        if options.state and record.state != options.state:
            continue
        if search and not (
            search in record.cluster_name.lower() or search in record.cluster_id.lower()
        ):
            continue
        if has_range and not (
            _in_interval(record.creation_time, start, end)
            or _in_interval(record.end_time, start, end)
        ):
            continue
        matched.append(record)

    return matched


def unique_cluster_names(records: Iterable[ClusterRecord]) -> List[str]:
    """Sorted distinct cluster names."""
    return sorted({r.cluster_name for r in records})


def get_date_range(records: Iterable[ClusterRecord]) -> Optional[Tuple[datetime, datetime]]:
    """
    Earliest and latest timestamp over creation and end times.

    Returns:
        (start, end), or None when no record has a usable timestamp
    """
    stamps = []
    for record in records:
        for ts in (record.creation_time, record.end_time):
            if ts is None:
                continue
            stamps.append(ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc))

    if not stamps:
        return None
    return min(stamps), max(stamps)


def resolve_date_filter(
    filter_type: str,
    data_range: Optional[Tuple[datetime, datetime]] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    today: Optional[DateLike] = None,
) -> DateFilterOptions:
    """
    Build the date range for a dashboard date filter.

    Args:
        filter_type: "daily", "weekly" or "custom"
        data_range: (start, end) of the loaded data; presets are anchored to
            its end and never start before its start
        start: Custom range start
        end: Custom range end
        today: Anchor when no data range is known (defaults to now)

    Returns:
        DateFilterOptions with whole-day bounds

    Raises:
        ConfigurationError: Unknown type, or custom without both bounds
    """
    if filter_type == "custom":
        if start is None or end is None:
            raise ConfigurationError("Custom date filter needs both start and end")
        if _as_date(start) > _as_date(end):
            start, end = end, start
        return DateFilterOptions(
            type="custom",
            start_date=start_of_day(start),
            end_date=end_of_day(end),
        )

    if filter_type == "daily":
        span = timedelta(days=config.views.daily_view_days)
    elif filter_type == "weekly":
        span = timedelta(weeks=config.views.weekly_view_weeks)
    else:
        raise ConfigurationError(f"Unknown date filter type: {filter_type}")

    if data_range is not None:
        data_start, data_end = data_range
        # data_end - span can underflow near datetime.min
        preset_start = data_start if data_end - data_start <= span else data_end - span
    else:
        anchor = today or datetime.now(timezone.utc)
        data_end = end_of_day(anchor)
        preset_start = data_end - span

    return DateFilterOptions(
        type=filter_type,
        start_date=start_of_day(preset_start),
        end_date=end_of_day(data_end),
    )


def filtered_kpi_metrics(
    records: Iterable[ClusterRecord],
    date_filter: DateFilterOptions,
    diagnostics: Optional[Diagnostics] = None,
) -> Union[List[DailyBucket], List[WeeklyBucket]]:
    """
    KPI time series for a date filter.

    Records are narrowed to the filter's range, then bucketed by day
    (daily, custom) or by calendar week (weekly).
    """
    in_range = filter_records(
        records,
        start_date=date_filter.start_date,
        end_date=date_filter.end_date,
    )
    daily = aggregate_by_day(in_range, diagnostics=diagnostics)
    if date_filter.type == "weekly":
        return calendar_weekly_kpi_metrics(daily)
    return daily
