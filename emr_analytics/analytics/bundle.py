"""
Analytics bundle: trends, health, anomalies and forecast in one call.
"""

from __future__ import annotations

from typing import Optional, Sequence

from emr_analytics.core.diagnostics import Diagnostics
from emr_analytics.data.schema import DailyBucket

from .anomalies import detect_anomalies
from .forecast import forecast_memory_usage
from .health import compute_health_summary
from .kpis import compute_kpi_trends
from .schema import AnalyticsBundle


def compute_analytics_bundle(
    daily_buckets: Sequence[DailyBucket],
    diagnostics: Optional[Diagnostics] = None,
) -> AnalyticsBundle:
    """
    Derive every dashboard analytic from one list of daily buckets.

    Empty input gives zero KPIs, an empty health series, no anomalies and
    no forecast.
    """
    buckets = list(daily_buckets)
    return AnalyticsBundle(
        trends=compute_kpi_trends(buckets),
        health=compute_health_summary(buckets),
        anomalies=detect_anomalies(buckets),
        forecast=forecast_memory_usage(buckets, diagnostics=diagnostics),
    )
