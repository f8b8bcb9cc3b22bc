"""
Linear memory-usage forecast.

Fits usage% = a + b * day_index by ordinary least squares over the
chronological daily buckets (index starting at 1) and extends the line past
the last day.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from emr_analytics.core.config import config
from emr_analytics.core.diagnostics import DATE_OUT_OF_RANGE, Diagnostics, report
from emr_analytics.data.aggregation import parse_day_key
from emr_analytics.data.metrics import average
from emr_analytics.data.schema import DailyBucket

from .schema import ForecastPoint


def fit_linear_trend(ys: Sequence[float]) -> Tuple[float, float]:
    """
    Least-squares (intercept, slope) for ys against x = 1..n.

    With fewer than two points, or a zero denominator, the line is flat at
    the mean of ys.
    """
    n = len(ys)
    if n < 2:
        return average(ys), 0.0

    xs = range(1, n + 1)
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_xx = sum(x * x for x in xs)

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        return average(ys), 0.0

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return intercept, slope


def forecast_memory_usage(
    daily_buckets: Sequence[DailyBucket],
    horizon_days: Optional[int] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> List[ForecastPoint]:
    """
    Predict average memory usage for the days after the last bucket.

    Args:
        daily_buckets: Output of aggregate_by_day
        horizon_days: Number of future days (default from config, 7)
        diagnostics: Collector for recoverable problems

    Returns:
        One ForecastPoint per future day, values clamped to [0, 100];
        empty when there are no buckets. The horizon stops early at the
        last representable date.
    """
    if horizon_days is None:
        horizon_days = config.analytics.forecast_horizon_days
    if not daily_buckets or horizon_days <= 0:
        return []

    data = sorted(daily_buckets, key=lambda b: b.date)
    ys = [b.avg_memory_usage_percent for b in data]
    intercept, slope = fit_linear_trend(ys)

    n = len(data)
    last_day = parse_day_key(data[-1].date)
    forecast = []
    for i in range(1, horizon_days + 1):
        if date.max - last_day < timedelta(days=i):
            report(
                diagnostics,
                DATE_OUT_OF_RANGE,
                f"Forecast stopped after {i - 1} of {horizon_days} days: "
                f"{last_day.isoformat()} is too close to the end of the calendar",
                last_date=last_day.isoformat(),
                horizon_days=horizon_days,
            )
            break
        predicted = intercept + slope * (n + i)
        forecast.append(
            ForecastPoint(
                date=(last_day + timedelta(days=i)).isoformat(),
                avg_memory_usage_percent=min(max(predicted, 0.0), 100.0),
            )
        )

    return forecast
