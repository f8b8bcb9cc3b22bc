"""
Analytics core for ephemeral compute cluster lifecycle records.

Upload a JSON document into a ClusterStore, then derive daily buckets, KPI
trends, health scores, anomalies, forecasts and CSV exports from it.
"""

from emr_analytics.store import ClusterStore, ImportResult

__version__ = "0.1.0"

__all__ = [
    "ClusterStore",
    "ImportResult",
    "__version__",
]
