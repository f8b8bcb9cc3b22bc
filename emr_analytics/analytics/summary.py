"""
Session-wide headline numbers.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Optional

from emr_analytics.core.config import config
from emr_analytics.core.diagnostics import Diagnostics
from emr_analytics.data.aggregation import (
    record_memory_usage,
    record_remaining_capacity,
    record_runtime_hours,
)
from emr_analytics.data.metrics import average, is_finite_number
from emr_analytics.data.schema import ClusterRecord

from .schema import SessionSummary


def compute_session_summary(
    records: Iterable[ClusterRecord],
    diagnostics: Optional[Diagnostics] = None,
) -> SessionSummary:
    """
    Totals and breakdowns over every loaded record.

    Notes:
        - Memory usage is averaged only over records with a positive total
        - Runtime uses exact hours; reversed or missing ranges add nothing
        - Negative or non-finite remaining capacity adds nothing
    """
    records = list(records)
    if not records:
        return SessionSummary()

    active_states = set(config.analytics.active_states)

    usages = [
        record_memory_usage(r, diagnostics) for r in records if r.total_memory_mb > 0
    ]
    runtime = math.fsum(record_runtime_hours(r, diagnostics, fractional=True) for r in records)
    capacities = (record_remaining_capacity(r, diagnostics) for r in records)
    capacity = math.fsum(c for c in capacities if is_finite_number(c))

    return SessionSummary(
        total_clusters=len(records),
        avg_memory_usage=average(usages),
        total_runtime_hours=runtime,
        total_remaining_capacity_gb=capacity,
        active_clusters=sum(1 for r in records if r.state in active_states),
        clusters_by_state=dict(Counter(r.state for r in records)),
        clusters_by_name=dict(Counter(r.cluster_name for r in records)),
    )
