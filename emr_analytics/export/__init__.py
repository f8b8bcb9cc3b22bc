"""
Export module: CSV serialization with fixed column contracts.
"""

from .csv_export import (
    DAILY_HEADERS,
    RECORD_HEADERS,
    daily_metrics_to_csv,
    records_to_csv,
    rows_to_csv,
)

__all__ = [
    "DAILY_HEADERS",
    "RECORD_HEADERS",
    "daily_metrics_to_csv",
    "records_to_csv",
    "rows_to_csv",
]
