"""
Schema definitions for the analytics bundle.

All outputs are derived values, recomputed from daily buckets on every call.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from emr_analytics.data.schema import WeeklyKPIs

AnomalyMetric = Literal[
    "avg_memory_usage_percent",
    "avg_yarn_memory_available_percent",
    "avg_runtime_hours",
    "avg_remaining_capacity_gb",
]


class BaselineStats(BaseModel):
    """
    Population statistics for one metric across all daily buckets.

    Fields:
    - mean: central tendency
    - std: population standard deviation, floored when it is exactly 0
    - count: number of buckets used
    """

    model_config = ConfigDict(frozen=True)

    mean: float
    std: float
    count: int


class KPITrends(BaseModel):
    """Current and previous trailing week, plus percentage deltas."""

    model_config = ConfigDict(frozen=True)

    current_week: WeeklyKPIs
    previous_week: WeeklyKPIs
    delta: WeeklyKPIs


class HealthScorePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    score: float = Field(ge=0.0, le=100.0)


class HealthSummary(BaseModel):
    """Daily health scores and the mean of the latest seven."""

    model_config = ConfigDict(frozen=True)

    daily: List[HealthScorePoint]
    weekly_average: float = Field(ge=0.0, le=100.0)


class Anomaly(BaseModel):
    """
    One (day, metric) observation ranked by distance from the metric mean.

    Fields:
    - date: day key of the bucket
    - metric: bucket field the value comes from
    - value: observed daily mean
    - z_score: (value - mean) / std over all buckets
    """

    model_config = ConfigDict(frozen=True)

    date: str
    metric: AnomalyMetric
    value: float
    z_score: float


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    avg_memory_usage_percent: float = Field(ge=0.0, le=100.0)


class AnalyticsBundle(BaseModel):
    """Everything the trend, health, anomaly and forecast panels need."""

    model_config = ConfigDict(frozen=True)

    trends: KPITrends
    health: HealthSummary
    anomalies: List[Anomaly]
    forecast: List[ForecastPoint]


class SessionSummary(BaseModel):
    """
    Headline numbers for the whole loaded record set.

    Fields:
    - total_clusters: number of records
    - avg_memory_usage: mean usage over records with a positive total
    - total_runtime_hours: exact hours summed over valid creation/end pairs
    - total_remaining_capacity_gb: sum of non-negative remaining capacity
    - active_clusters: records whose state counts as active
    - clusters_by_state / clusters_by_name: record counts
    """

    model_config = ConfigDict(frozen=True)

    total_clusters: int = 0
    avg_memory_usage: float = 0.0
    total_runtime_hours: float = 0.0
    total_remaining_capacity_gb: float = 0.0
    active_clusters: int = 0
    clusters_by_state: Dict[str, int] = Field(default_factory=dict)
    clusters_by_name: Dict[str, int] = Field(default_factory=dict)
