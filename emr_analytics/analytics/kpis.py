"""
Week-over-week KPI trends.
"""

from __future__ import annotations

from typing import Sequence

from emr_analytics.data.aggregation import KPI_FIELDS, previous_weekly_kpis, weekly_kpis
from emr_analytics.data.schema import DailyBucket, WeeklyKPIs

from .schema import KPITrends

DELTA_FIELDS = KPI_FIELDS + ("cluster_count",)


def percent_change(current: float, previous: float) -> float:
    """
    Relative change in percent.

    A zero previous value has no defined ratio: the change is 0 when the
    current value is also 0 and 100 otherwise.
    """
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return (current - previous) / abs(previous) * 100


def delta(current: WeeklyKPIs, previous: WeeklyKPIs) -> WeeklyKPIs:
    """Apply percent_change to every KPI field."""
    return WeeklyKPIs(
        **{
            field: percent_change(getattr(current, field), getattr(previous, field))
            for field in DELTA_FIELDS
        }
    )


def compute_kpi_trends(daily_buckets: Sequence[DailyBucket]) -> KPITrends:
    current = weekly_kpis(daily_buckets)
    previous = previous_weekly_kpis(daily_buckets)
    return KPITrends(
        current_week=current,
        previous_week=previous,
        delta=delta(current, previous),
    )
