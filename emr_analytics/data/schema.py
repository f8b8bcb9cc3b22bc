"""
Canonical cluster record schema and aggregation outputs.

Uploaded entries are first shape-checked as RawClusterRecord (exact upload
casing), then converted into ClusterRecord. Everything downstream works on
ClusterRecord only.

Design rationale:
- Identity fields (name, id, state) are required; all metrics default to 0
- Timestamps are timezone-aware UTC; an unparseable creation time is kept as
  None rather than rejected
- Buckets and KPI objects are frozen: they are rebuilt on every call
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawClusterRecord(BaseModel):
    """
    Shape check for a single uploaded JSON entry.

    Field names follow the upload format exactly (ClusterName, ClusterId, ...).
    Unknown keys such as earliest_time / latest_time are ignored.

    Notes:
        - ClusterName, ClusterId and State must be non-empty strings;
          numbers are accepted and kept as their text form
        - Numeric fields may be absent or null; they become 0 on conversion
        - Timestamp fields are kept as given and parsed by the normalizer
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cluster_name: str = Field(..., alias="ClusterName")
    cluster_id: str = Field(..., alias="ClusterId")
    state: str = Field(..., alias="State")

    creation_date_time: Optional[Union[str, int, float]] = Field(
        default=None, alias="CreationDateTime"
    )
    end_date_time: Optional[Union[str, int, float]] = Field(
        default=None, alias="EndDateTime"
    )

    min_capacity_remaining_gb: Optional[float] = Field(
        default=None, alias="MinCapacityRemainingGB"
    )
    min_yarn_memory_available_percentage: Optional[float] = Field(
        default=None, alias="MinYARNMemoryAvailablePercentage"
    )
    max_memory_allocated_mb: Optional[float] = Field(
        default=None, alias="MaxMemoryAllocatedMB"
    )
    max_memory_total_mb: Optional[float] = Field(
        default=None, alias="MaxMemoryTotalMB"
    )
    max_mr_unhealthy_nodes: Optional[float] = Field(
        default=None, alias="MaxMRUnhealthyNodes"
    )

    @field_validator("cluster_name", "cluster_id", "state", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        # numeric ids such as 12345 are valid identifiers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("cluster_name", "cluster_id", "state")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ClusterRecord(BaseModel):
    """
    Canonical representation of one cluster observation.

    Attributes:
        id: Synthetic identity assigned at import (ingestion order + time)
        cluster_name: Grouping key, not unique
        cluster_id: Instance identifier from the data (duplicates tolerated)
        state: Free-text status token, e.g. RUNNING or TERMINATED
        creation_time: UTC creation time, None if it could not be parsed
        end_time: UTC termination time, None if still running or unknown
        remaining_capacity_gb: Minimum remaining storage capacity
        yarn_available_percent: Minimum YARN memory available, nominally 0-100
        allocated_memory_mb: Maximum memory allocated
        total_memory_mb: Maximum memory total
        unhealthy_node_count: Maximum unhealthy node count
        raw: The uploaded entry as received
        uploaded_at: When the record was imported
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    cluster_name: str = Field(..., min_length=1)
    cluster_id: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)

    creation_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    remaining_capacity_gb: float = 0.0
    yarn_available_percent: float = 0.0
    allocated_memory_mb: float = 0.0
    total_memory_mb: float = 0.0
    unhealthy_node_count: float = 0.0

    raw: Dict[str, Any] = Field(default_factory=dict)
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DailyBucket(BaseModel):
    """
    Mean statistics for all records created on one UTC calendar day.

    Attributes:
        date: Day key, ISO format YYYY-MM-DD
        avg_memory_usage_percent: Mean clamped memory usage
        avg_yarn_memory_available_percent: Mean YARN memory available
        avg_runtime_hours: Mean runtime in whole hours
        avg_remaining_capacity_gb: Mean remaining capacity (negatives as 0)
        avg_unhealthy_nodes: Mean unhealthy node count
        cluster_count: Distinct cluster names seen that day
        clusters: Those names, in first-seen order
    """

    model_config = ConfigDict(frozen=True)

    date: str
    avg_memory_usage_percent: float = 0.0
    avg_yarn_memory_available_percent: float = 0.0
    avg_runtime_hours: float = 0.0
    avg_remaining_capacity_gb: float = 0.0
    avg_unhealthy_nodes: float = 0.0
    cluster_count: int = Field(0, ge=0)
    clusters: Tuple[str, ...] = ()


class WeeklyKPIs(BaseModel):
    """
    KPI means over a trailing window of daily buckets.

    cluster_count is the size of the union of cluster names over the window,
    not a sum of the daily counts. When used as a delta, every field holds a
    percentage change instead.
    """

    model_config = ConfigDict(frozen=True)

    avg_memory_usage_percent: float = 0.0
    avg_yarn_memory_available_percent: float = 0.0
    avg_runtime_hours: float = 0.0
    avg_remaining_capacity_gb: float = 0.0
    avg_unhealthy_nodes: float = 0.0
    cluster_count: float = 0.0


class WeeklyBucket(BaseModel):
    """
    Daily buckets grouped into one calendar week (Sunday to Saturday).
    """

    model_config = ConfigDict(frozen=True)

    week_start: str
    week_end: str
    day_count: int = Field(0, ge=0)
    avg_memory_usage_percent: float = 0.0
    avg_yarn_memory_available_percent: float = 0.0
    avg_runtime_hours: float = 0.0
    avg_remaining_capacity_gb: float = 0.0
    avg_unhealthy_nodes: float = 0.0
    cluster_count: int = Field(0, ge=0)
    clusters: Tuple[str, ...] = ()


class FilterOptions(BaseModel):
    """
    Record filter criteria. Every supplied criterion must match.
    """

    cluster_name: Optional[str] = None
    state: Optional[str] = None
    search_term: Optional[str] = None
    start_date: Optional[Union[datetime, date]] = None
    end_date: Optional[Union[datetime, date]] = None


class DateFilterOptions(BaseModel):
    """
    Date range selection from the dashboard filter control.

    daily and weekly choose the aggregation of the KPI time series; custom is
    a user-chosen range shown with daily aggregation.
    """

    type: Literal["daily", "weekly", "custom"]
    start_date: datetime
    end_date: datetime
