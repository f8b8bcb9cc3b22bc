"""
Data module: Upload decoding, validation, metrics, aggregation, and filtering.

Responsible for converting an uploaded JSON document into clean cluster
records and daily/weekly buckets. Pipeline:

    Uploaded text (JSON object or array)
        ↓
    Decoding (emr_analytics/data/ingestion.py)
        ↓
    Validation + Normalization (emr_analytics/data/normalizers.py) → ClusterRecord
        ↓
    Filtering (emr_analytics/data/filters.py)
        ↓
    Aggregation (emr_analytics/data/aggregation.py) → DailyBucket, WeeklyKPIs, WeeklyBucket
        ↓
    Ready for analytics (emr_analytics/analytics) and export
"""

from emr_analytics.data.aggregation import (
    aggregate_by_day,
    calendar_weekly_kpi_metrics,
    day_key,
    previous_weekly_kpis,
    week_end,
    week_start,
    weekly_kpis,
)
from emr_analytics.data.filters import (
    end_of_day,
    filter_records,
    filtered_kpi_metrics,
    get_date_range,
    resolve_date_filter,
    start_of_day,
    unique_cluster_names,
)
from emr_analytics.data.ingestion import decode_upload, read_upload
from emr_analytics.data.metrics import average, memory_usage_percent, runtime_hours
from emr_analytics.data.normalizers import (
    NormalizationError,
    normalize_record,
    normalize_records,
    parse_timestamp,
    validate_raw_record,
)
from emr_analytics.data.schema import (
    ClusterRecord,
    DailyBucket,
    DateFilterOptions,
    FilterOptions,
    RawClusterRecord,
    WeeklyBucket,
    WeeklyKPIs,
)

__all__ = [
    # Schema
    "RawClusterRecord",
    "ClusterRecord",
    "DailyBucket",
    "WeeklyKPIs",
    "WeeklyBucket",
    "FilterOptions",
    "DateFilterOptions",
    
    # Ingestion
    "decode_upload",
    "read_upload",
    
    # Normalization
    "parse_timestamp",
    "validate_raw_record",
    "normalize_record",
    "normalize_records",
    "NormalizationError",
    
    # Metrics
    "memory_usage_percent",
    "runtime_hours",
    "average",
    
    # Aggregation
    "aggregate_by_day",
    "weekly_kpis",
    "previous_weekly_kpis",
    "calendar_weekly_kpi_metrics",
    "day_key",
    "week_start",
    "week_end",
    
    # Filters
    "filter_records",
    "filtered_kpi_metrics",
    "resolve_date_filter",
    "unique_cluster_names",
    "get_date_range",
    "start_of_day",
    "end_of_day",
]
