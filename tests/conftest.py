"""
Pytest configuration and shared fixtures.

Provides raw upload entries, canonical records and bucket factories for unit
and integration tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List

import pandas as pd

from emr_analytics.data.schema import ClusterRecord, DailyBucket


BASE_TIME = datetime(2025, 3, 3, 9, 0, 0, tzinfo=timezone.utc)


def _raw_entry(**overrides) -> Dict[str, Any]:
    entry = {
        "earliest_time": "2025-03-01T00:00:00Z",
        "latest_time": "2025-03-31T00:00:00Z",
        "ClusterName": "etl-nightly",
        "ClusterId": "j-0001",
        "CreationDateTime": "2025-03-03T09:00:00Z",
        "EndDateTime": "2025-03-03T15:00:00Z",
        "MinCapacityRemainingGB": 500,
        "MinYARNMemoryAvailablePercentage": 40,
        "MaxMemoryAllocatedMB": 600,
        "MaxMemoryTotalMB": 1000,
        "MaxMRUnhealthyNodes": 0,
        "State": "TERMINATED",
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def raw_entry() -> Callable[..., Dict[str, Any]]:
    """
    Factory for a single uploaded entry in the exact upload casing.

    Keyword overrides replace fields; pass a field as None to null it.
    """
    return _raw_entry


@pytest.fixture
def make_record() -> Callable[..., ClusterRecord]:
    """
    Factory for canonical ClusterRecord objects.

    Defaults describe a healthy 6-hour cluster created at BASE_TIME.
    """
    counter = {"n": 0}

    def _make(**overrides) -> ClusterRecord:
        counter["n"] += 1
        data = {
            "id": f"cluster-{counter['n']}-0",
            "cluster_name": "etl-nightly",
            "cluster_id": f"j-{counter['n']:04d}",
            "state": "TERMINATED",
            "creation_time": BASE_TIME,
            "end_time": BASE_TIME + timedelta(hours=6),
            "remaining_capacity_gb": 500.0,
            "yarn_available_percent": 40.0,
            "allocated_memory_mb": 600.0,
            "total_memory_mb": 1000.0,
            "unhealthy_node_count": 0.0,
        }
        data.update(overrides)
        return ClusterRecord(**data)

    return _make


@pytest.fixture
def make_bucket() -> Callable[..., DailyBucket]:
    """Factory for DailyBucket objects with neutral metric values."""

    def _make(date: str, **overrides) -> DailyBucket:
        data = {
            "date": date,
            "avg_memory_usage_percent": 50.0,
            "avg_yarn_memory_available_percent": 50.0,
            "avg_runtime_hours": 4.0,
            "avg_remaining_capacity_gb": 500.0,
            "avg_unhealthy_nodes": 0.0,
            "cluster_count": 1,
            "clusters": ("etl-nightly",),
        }
        data.update(overrides)
        return DailyBucket(**data)

    return _make


@pytest.fixture
def sample_upload() -> List[Dict[str, Any]]:
    """
    Realistic upload covering 16 consecutive days.

    Three cluster names rotate; every day has two entries. Usage climbs
    slowly over the period and one day carries unhealthy nodes.
    """
    names = ["etl-nightly", "adhoc-analytics", "ml-training"]
    entries = []

    for day in range(16):
        for slot in range(2):
            created = BASE_TIME + timedelta(days=day, hours=slot * 3)
            ended = created + timedelta(hours=2 + slot)
            entries.append(_raw_entry(
                ClusterName=names[(day + slot) % 3],
                ClusterId=f"j-{day:02d}{slot}",
                CreationDateTime=created.strftime("%Y-%m-%dT%H:%M:%SZ"),
                EndDateTime=ended.strftime("%Y-%m-%dT%H:%M:%SZ"),
                MaxMemoryAllocatedMB=400 + day * 20 + slot * 10,
                MaxMemoryTotalMB=1000,
                MinYARNMemoryAvailablePercentage=60 - day,
                MinCapacityRemainingGB=800 - day * 10,
                MaxMRUnhealthyNodes=3 if day == 10 else 0,
                State="RUNNING" if day == 15 else "TERMINATED",
            ))

    return entries


@pytest.fixture
def records_dataframe() -> Callable[[List[ClusterRecord]], pd.DataFrame]:
    """
    Convert records to a DataFrame for cross-checking aggregations.

    Adds a "day" column (UTC creation date) and a clamped "usage" column.
    """

    def _to_frame(records: List[ClusterRecord]) -> pd.DataFrame:
        df = pd.DataFrame([r.model_dump() for r in records])
        df["creation_time"] = pd.to_datetime(df["creation_time"], utc=True)
        df["day"] = df["creation_time"].dt.strftime("%Y-%m-%d")
        ratio = (df["allocated_memory_mb"] / df["total_memory_mb"]) * 100
        df["usage"] = ratio.clip(lower=0, upper=100)
        return df

    return _to_frame


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
