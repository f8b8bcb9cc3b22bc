"""
Daily health scoring.

Each day starts at 100 and loses points for crossing fixed thresholds:

    penalty = max(0, usage% - 80) * 1.2
            + max(0, 30 - yarn_available%) * 1.5
            + max(0, 200 - remaining_capacity_gb) * 0.1
            + avg_unhealthy_nodes * 2.0

The thresholds and weights are fixed so that scores stay comparable across
sessions; they are intentionally not part of Config.
"""

from __future__ import annotations

from typing import Sequence

from emr_analytics.core.config import config
from emr_analytics.data.metrics import average, finite_or_zero
from emr_analytics.data.schema import DailyBucket

from .schema import HealthScorePoint, HealthSummary

MEMORY_USAGE_THRESHOLD = 80.0
MEMORY_USAGE_WEIGHT = 1.2

YARN_AVAILABLE_THRESHOLD = 30.0
YARN_AVAILABLE_WEIGHT = 1.5

REMAINING_CAPACITY_THRESHOLD_GB = 200.0
REMAINING_CAPACITY_WEIGHT = 0.1

UNHEALTHY_NODE_WEIGHT = 2.0


def health_penalty(bucket: DailyBucket) -> float:
    usage = finite_or_zero(bucket.avg_memory_usage_percent)
    yarn = finite_or_zero(bucket.avg_yarn_memory_available_percent)
    capacity = finite_or_zero(bucket.avg_remaining_capacity_gb)
    unhealthy = max(finite_or_zero(bucket.avg_unhealthy_nodes), 0.0)

    return (
        max(0.0, usage - MEMORY_USAGE_THRESHOLD) * MEMORY_USAGE_WEIGHT
        + max(0.0, YARN_AVAILABLE_THRESHOLD - yarn) * YARN_AVAILABLE_WEIGHT
        + max(0.0, REMAINING_CAPACITY_THRESHOLD_GB - capacity) * REMAINING_CAPACITY_WEIGHT
        + unhealthy * UNHEALTHY_NODE_WEIGHT
    )


def health_score(bucket: DailyBucket) -> float:
    """Score in [0, 100] for one day; 100 means no threshold was crossed."""
    return min(max(100.0 - health_penalty(bucket), 0.0), 100.0)


def compute_health_summary(daily_buckets: Sequence[DailyBucket]) -> HealthSummary:
    """
    Score every day and average the latest trailing window.

    Returns:
        HealthSummary with daily points in input order and the unweighted
        mean of the newest seven scores (0 when there are none)
    """
    daily = [HealthScorePoint(date=b.date, score=health_score(b)) for b in daily_buckets]

    window = config.analytics.trailing_window_days
    latest = sorted(daily, key=lambda p: p.date, reverse=True)[:window]
    return HealthSummary(
        daily=daily,
        weekly_average=average(p.score for p in latest),
    )
