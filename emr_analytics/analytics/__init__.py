"""
Analytics module: KPI trends, health scores, anomalies, forecasts and chart feeds.

Everything here is derived from daily buckets or records and recomputed on
every call.
"""

from .anomalies import ZScoreDetector, detect_anomalies, population_baseline
from .bundle import compute_analytics_bundle
from .forecast import fit_linear_trend, forecast_memory_usage
from .health import compute_health_summary, health_score
from .kpis import compute_kpi_trends, delta, percent_change
from .schema import (
    AnalyticsBundle,
    Anomaly,
    BaselineStats,
    ForecastPoint,
    HealthScorePoint,
    HealthSummary,
    KPITrends,
    SessionSummary,
)
from .series import (
    capacity_groups,
    cluster_distribution,
    memory_usage_by_day,
    runtime_by_cluster,
    yarn_memory_by_day,
)
from .summary import compute_session_summary

__all__ = [
	"compute_analytics_bundle",
	"compute_kpi_trends",
	"delta",
	"percent_change",
	"compute_health_summary",
	"health_score",
	"detect_anomalies",
	"population_baseline",
	"ZScoreDetector",
	"forecast_memory_usage",
	"fit_linear_trend",
	"compute_session_summary",
	"memory_usage_by_day",
	"yarn_memory_by_day",
	"cluster_distribution",
	"runtime_by_cluster",
	"capacity_groups",
	"AnalyticsBundle",
	"Anomaly",
	"BaselineStats",
	"ForecastPoint",
	"HealthScorePoint",
	"HealthSummary",
	"KPITrends",
	"SessionSummary",
]
