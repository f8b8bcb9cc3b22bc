"""
Z-score anomaly ranking over daily buckets.

For each tracked metric the population mean and standard deviation are taken
over all buckets. Every (day, metric) pair gets a z-score, the pairs from all
metrics are pooled, and the largest |z| values are returned.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from emr_analytics.core.config import config
from emr_analytics.data.metrics import average
from emr_analytics.data.schema import DailyBucket

from .schema import Anomaly, BaselineStats

TRACKED_METRICS = (
    "avg_memory_usage_percent",
    "avg_yarn_memory_available_percent",
    "avg_runtime_hours",
    "avg_remaining_capacity_gb",
)


def population_baseline(values: Sequence[float], std_floor: float) -> BaselineStats:
    """
    Mean and population std of values.

    std_floor replaces a std of exactly 0 (all values equal), so z-scores
    are always defined.
    """
    mean = average(values)
    variance = average([(v - mean) ** 2 for v in values])
    std = math.sqrt(variance)
    if std == 0:
        std = std_floor
    return BaselineStats(mean=mean, std=std, count=len(values))


@dataclass
class ZScoreDetector:
    """
    Z-score against a fixed baseline.
    """

    def compute(self, observed: float, baseline: BaselineStats) -> float:
        return (observed - baseline.mean) / baseline.std


def detect_anomalies(
    daily_buckets: Sequence[DailyBucket],
    top_n: Optional[int] = None,
) -> List[Anomaly]:
    """
    Rank (day, metric) pairs by |z-score|.

    Args:
        daily_buckets: Output of aggregate_by_day
        top_n: How many to return (default from config, 3)

    Returns:
        Up to top_n anomalies, largest |z| first. Ties keep metric order,
        then day order, since the sort is stable.
    """
    if top_n is None:
        top_n = config.analytics.anomaly_top_n
    if not daily_buckets or top_n <= 0:
        return []

    detector = ZScoreDetector()
    candidates: List[Anomaly] = []

    for metric in TRACKED_METRICS:
        values = [getattr(b, metric) for b in daily_buckets]
        baseline = population_baseline(values, config.analytics.zscore_std_floor)

        for bucket, value in zip(daily_buckets, values):
            candidates.append(
                Anomaly(
                    date=bucket.date,
                    metric=metric,
                    value=value,
                    z_score=detector.compute(value, baseline),
                )
            )

    candidates.sort(key=lambda a: abs(a.z_score), reverse=True)
    return candidates[:top_n]
