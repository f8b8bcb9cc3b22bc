"""
Record validation and normalization.

Converts decoded upload entries into canonical ClusterRecord objects.

Design:
- Shape check first (RawClusterRecord), canonical record second
- Identity fields are mandatory; any failure rejects the whole batch
- Timestamps are parsed to UTC; a bad creation time is kept as None and
  reported through Diagnostics instead of failing the upload
- Optional numeric fields default to 0
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from emr_analytics.core.diagnostics import (
    NON_FINITE_VALUE,
    UNPARSEABLE_TIMESTAMP,
    Diagnostics,
    report,
)
from emr_analytics.core.exceptions import DataValidationError, InvalidFormatError
from emr_analytics.data.schema import ClusterRecord, RawClusterRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("ClusterName", "ClusterId", "State")

# Digit-only strings of these lengths are dates, not epoch values
DATE_SHAPED_FORMATS = {4: "%Y", 8: "%Y%m%d"}

NUMERIC_FIELDS = {
    "MinCapacityRemainingGB": "min_capacity_remaining_gb",
    "MinYARNMemoryAvailablePercentage": "min_yarn_memory_available_percentage",
    "MaxMemoryAllocatedMB": "max_memory_allocated_mb",
    "MaxMemoryTotalMB": "max_memory_total_mb",
    "MaxMRUnhealthyNodes": "max_mr_unhealthy_nodes",
}


class NormalizationError(Exception):
    """Raised when a single value cannot be normalized."""
    pass


def parse_timestamp(value: Union[str, int, float]) -> datetime:
    """
    Parse a timestamp to a timezone-aware UTC datetime.

    Supports:
    - ISO 8601 with Z or offset: 2025-02-07T10:30:45Z, 2025-02-07T10:30:45+02:00
    - ISO 8601 without zone: 2025-02-07T10:30:45 (taken as UTC)
    - Fractional seconds: 2025-02-07T10:30:45.123Z
    - Space separator: 2025-02-07 10:30:45
    - Date only: 2025-02-07, basic format 20250207, bare year 2025
    - Epoch seconds / milliseconds (number or numeric string)

    Args:
        value: Timestamp string or epoch number

    Returns:
        Datetime in UTC

    Raises:
        NormalizationError: If the value is not a recognized timestamp
    """
    if value is None or isinstance(value, bool):
        raise NormalizationError(f"Not a timestamp: {value!r}")

    ts_str = str(value).strip()
    if not ts_str:
        raise NormalizationError("Empty timestamp")

    if isinstance(value, str) and ts_str.isascii() and ts_str.isdigit():
        date_format = DATE_SHAPED_FORMATS.get(len(ts_str))
        if date_format is not None:
            try:
                return _as_utc(datetime.strptime(ts_str, date_format))
            except ValueError as e:
                raise NormalizationError(f"Could not parse timestamp: {ts_str}") from e

    # Epoch seconds or millis
    try:
        ts_float = float(ts_str)
    except ValueError:
        ts_float = None

    if ts_float is not None:
        try:
            # Timestamps before year 3000 are seconds
            if abs(ts_float) < 32503680000:
                return datetime.fromtimestamp(ts_float, tz=timezone.utc)
            return datetime.fromtimestamp(ts_float / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise NormalizationError(f"Epoch value out of range: {ts_str}") from e

    iso_str = ts_str[:-1] + "+00:00" if ts_str.endswith(("Z", "z")) else ts_str
    try:
        return _as_utc(datetime.fromisoformat(iso_str))
    except (ValueError, OverflowError):
        pass

    fallback_formats = [
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%dT%H:%M:%S.%f%z",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%d %H:%M:%S.%f",
    ]

    for fmt in fallback_formats:
        try:
            return _as_utc(datetime.strptime(ts_str, fmt))
        except (ValueError, OverflowError):
            continue

    raise NormalizationError(f"Could not parse timestamp: {ts_str}")


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def validate_raw_record(raw: Any, index: int) -> RawClusterRecord:
    """
    Shape-check one uploaded entry.

    Args:
        raw: Decoded JSON value for this entry
        index: Position of the entry in the upload

    Returns:
        RawClusterRecord

    Raises:
        DataValidationError: If the entry is not an object, an identity field
            is missing/null/empty, or a field has the wrong type
    """
    if not isinstance(raw, dict):
        raise DataValidationError(
            f"Cluster data at index {index} is not an object",
            index=index,
        )

    try:
        return RawClusterRecord.model_validate(raw)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        missing = [f for f in fields if f in REQUIRED_FIELDS]
        if missing:
            message = (
                f"Missing required fields in cluster data at index {index}: "
                f"{', '.join(missing)}"
            )
        else:
            message = (
                f"Invalid fields in cluster data at index {index}: "
                f"{', '.join(fields)}"
            )
        raise DataValidationError(message, index=index, fields=fields) from e


def _number(value: Optional[float]) -> float:
    return 0.0 if value is None else float(value)


def _report_non_finite(
    validated: RawClusterRecord,
    diagnostics: Optional[Diagnostics],
) -> None:
    """NaN and infinities are kept on the record and dropped from every mean."""
    for field, attr in NUMERIC_FIELDS.items():
        value = getattr(validated, attr)
        if value is not None and not math.isfinite(value):
            report(
                diagnostics,
                NON_FINITE_VALUE,
                f"{field} for cluster {validated.cluster_id} is {value}; "
                f"it is left out of averages",
                cluster_id=validated.cluster_id,
                field=field,
                value=str(value),
            )


def _optional_timestamp(
    value: Any,
    field: str,
    validated: RawClusterRecord,
    diagnostics: Optional[Diagnostics],
    warn_if_missing: bool,
) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        if warn_if_missing:
            report(
                diagnostics,
                UNPARSEABLE_TIMESTAMP,
                f"{field} missing for cluster {validated.cluster_id}",
                cluster_id=validated.cluster_id,
                field=field,
                value=value,
            )
        return None

    try:
        return parse_timestamp(value)
    except NormalizationError as e:
        report(
            diagnostics,
            UNPARSEABLE_TIMESTAMP,
            f"{field} for cluster {validated.cluster_id}: {e}",
            cluster_id=validated.cluster_id,
            field=field,
            value=value,
        )
        return None


def normalize_record(
    raw: Dict[str, Any],
    index: int,
    ingested_at: Optional[datetime] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> ClusterRecord:
    """
    Convert one uploaded entry to a ClusterRecord.

    Args:
        raw: Decoded JSON object
        index: Position in the upload (part of the synthetic id)
        ingested_at: Import time (part of the synthetic id), defaults to now
        diagnostics: Collector for recoverable problems

    Returns:
        ClusterRecord

    Raises:
        DataValidationError: If the entry fails the shape check
    """
    validated = validate_raw_record(raw, index)
    ingested_at = ingested_at or datetime.now(timezone.utc)

    creation_time = _optional_timestamp(
        validated.creation_date_time, "CreationDateTime", validated, diagnostics, True
    )
    end_time = _optional_timestamp(
        validated.end_date_time, "EndDateTime", validated, diagnostics, False
    )
    _report_non_finite(validated, diagnostics)

    return ClusterRecord(
        id=f"cluster-{index}-{int(ingested_at.timestamp() * 1000)}",
        cluster_name=validated.cluster_name,
        cluster_id=validated.cluster_id,
        state=validated.state,
        creation_time=creation_time,
        end_time=end_time,
        remaining_capacity_gb=_number(validated.min_capacity_remaining_gb),
        yarn_available_percent=_number(validated.min_yarn_memory_available_percentage),
        allocated_memory_mb=_number(validated.max_memory_allocated_mb),
        total_memory_mb=_number(validated.max_memory_total_mb),
        unhealthy_node_count=_number(validated.max_mr_unhealthy_nodes),
        raw=dict(raw),
        uploaded_at=ingested_at,
    )


def normalize_records(
    payload: Union[Dict[str, Any], List[Any]],
    diagnostics: Optional[Diagnostics] = None,
    ingested_at: Optional[datetime] = None,
) -> List[ClusterRecord]:
    """
    Convert a decoded upload (one object or an array) into records.

    Args:
        payload: Decoded JSON document
        diagnostics: Collector for recoverable problems
        ingested_at: Import time shared by the whole batch

    Returns:
        List of ClusterRecord in upload order

    Raises:
        InvalidFormatError: If payload is neither an object nor an array
        DataValidationError: If the array is empty or any entry fails
            validation. Nothing is returned for a failed batch.
    """
    if isinstance(payload, dict):
        entries = [payload]
    elif isinstance(payload, list):
        entries = payload
    else:
        raise InvalidFormatError("Invalid JSON format")

    if not entries:
        raise DataValidationError("No cluster data found in file")

    ingested_at = ingested_at or datetime.now(timezone.utc)
    records = [
        normalize_record(raw, index, ingested_at=ingested_at, diagnostics=diagnostics)
        for index, raw in enumerate(entries)
    ]

    logger.info(f"Normalized {len(records)} cluster records")
    return records
