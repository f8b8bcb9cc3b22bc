"""
Per-record metric functions.

All functions here are total: they never raise and return 0 for input they
cannot make sense of. average() is the single averaging routine for the whole
package so that partially invalid data is treated the same everywhere.
"""

import math
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from emr_analytics.data.normalizers import NormalizationError, parse_timestamp

TimestampLike = Union[datetime, str, int, float, None]


def is_finite_number(value: Any) -> bool:
    """True for real, finite ints and floats (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def finite_or_zero(value: Any) -> float:
    """value as a float if it is a finite number, else 0."""
    return float(value) if is_finite_number(value) else 0.0


def memory_usage_percent(allocated_mb: Any, total_mb: Any) -> float:
    """
    Allocated memory as a percentage of total, clamped to [0, 100].

    Args:
        allocated_mb: Memory allocated in MB
        total_mb: Total memory in MB

    Returns:
        Usage percentage

    Notes:
        - total <= 0 or non-finite input gives 0
        - allocated > total gives exactly 100
    """
    if not is_finite_number(allocated_mb) or not is_finite_number(total_mb):
        return 0.0
    if total_mb <= 0:
        return 0.0
    if allocated_mb > total_mb:
        return 100.0

    usage = (allocated_mb / total_mb) * 100
    return min(max(usage, 0.0), 100.0)


def _coerce_timestamp(value: TimestampLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return parse_timestamp(value)
    except NormalizationError:
        return None


def runtime_hours(
    creation: TimestampLike,
    end: TimestampLike,
    fractional: bool = False,
) -> float:
    """
    Hours between creation and end, never negative.

    Args:
        creation: Creation time (datetime or timestamp string)
        end: End time; None means still running / unknown
        fractional: Return exact hours instead of whole hours

    Returns:
        Runtime in hours. Whole hours are truncated, so a 59-minute
        cluster has runtime 0.

    Notes:
        Missing or unparseable timestamps and end < creation all give 0.
    """
    start_ts = _coerce_timestamp(creation)
    end_ts = _coerce_timestamp(end)
    if start_ts is None or end_ts is None:
        return 0.0

    try:
        seconds = (end_ts - start_ts).total_seconds()
    except TypeError:
        # naive vs aware
        return 0.0

    if seconds < 0:
        return 0.0

    hours = seconds / 3600
    if fractional:
        return hours
    return float(math.floor(hours))


def average(values: Iterable[Any]) -> float:
    """
    Mean of the finite numbers in values.

    None, NaN, infinities and non-numbers are dropped first. Returns 0 when
    nothing is left.
    """
    finite = [float(v) for v in values if is_finite_number(v)]
    if not finite:
        return 0.0
    return math.fsum(finite) / len(finite)
