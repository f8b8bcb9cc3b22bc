"""
Unit tests for daily and weekly aggregation.
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from emr_analytics.core.diagnostics import (
    ALLOCATED_EXCEEDS_TOTAL,
    END_BEFORE_CREATION,
    NEGATIVE_CAPACITY,
    UNPARSEABLE_TIMESTAMP,
    Diagnostics,
)
from emr_analytics.data.aggregation import (
    aggregate_by_day,
    calendar_weekly_kpi_metrics,
    day_key,
    parse_day_key,
    previous_weekly_kpis,
    week_end,
    week_start,
    weekly_kpis,
)
from emr_analytics.data.normalizers import normalize_records


def _day(n: int) -> str:
    return (date(2025, 3, 1) + timedelta(days=n)).isoformat()


class TestDayKey:
    """Test the UTC day convention."""

    def test_utc_timestamp(self):
        assert day_key(datetime(2025, 3, 3, 23, 59, tzinfo=timezone.utc)) == "2025-03-03"

    def test_offset_is_converted_first(self):
        ts = datetime(2025, 3, 3, 22, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert day_key(ts) == "2025-03-04"

    def test_naive_is_taken_as_utc(self):
        assert day_key(datetime(2025, 3, 3, 1, 0)) == "2025-03-03"


class TestAggregateByDay:
    """Test daily bucketing."""

    def test_same_day_mean_and_distinct_names(self, make_record):
        records = [
            make_record(cluster_name="A", allocated_memory_mb=800, total_memory_mb=1000),
            make_record(cluster_name="B", allocated_memory_mb=1200, total_memory_mb=1000),
        ]

        buckets = aggregate_by_day(records)

        assert len(buckets) == 1
        assert buckets[0].avg_memory_usage_percent == pytest.approx(90.0)
        assert buckets[0].cluster_count == 2
        assert buckets[0].clusters == ("A", "B")

    def test_repeated_name_counted_once(self, make_record):
        records = [make_record(cluster_name="A"), make_record(cluster_name="A")]

        buckets = aggregate_by_day(records)

        assert buckets[0].cluster_count == 1

    def test_sorted_ascending(self, make_record):
        base = datetime(2025, 3, 10, 12, tzinfo=timezone.utc)
        records = [
            make_record(creation_time=base, end_time=None),
            make_record(creation_time=base - timedelta(days=5), end_time=None),
            make_record(creation_time=base - timedelta(days=2), end_time=None),
        ]

        dates = [b.date for b in aggregate_by_day(records)]

        assert dates == ["2025-03-05", "2025-03-08", "2025-03-10"]

    def test_reversed_range_runtime_is_zero(self, make_record):
        start = datetime(2025, 3, 3, 12, tzinfo=timezone.utc)
        diagnostics = Diagnostics()

        buckets = aggregate_by_day(
            [make_record(creation_time=start, end_time=start - timedelta(hours=4))],
            diagnostics=diagnostics,
        )

        assert buckets[0].avg_runtime_hours == 0
        assert len(diagnostics.by_code(END_BEFORE_CREATION)) == 1

    def test_runtime_floors_whole_hours(self, make_record):
        start = datetime(2025, 3, 3, 12, tzinfo=timezone.utc)
        records = [
            make_record(creation_time=start, end_time=start + timedelta(hours=2, minutes=50)),
            make_record(creation_time=start, end_time=start + timedelta(minutes=30)),
        ]

        buckets = aggregate_by_day(records)

        assert buckets[0].avg_runtime_hours == pytest.approx(1.0)

    def test_negative_capacity_counts_as_zero(self, make_record):
        diagnostics = Diagnostics()
        records = [
            make_record(remaining_capacity_gb=-100),
            make_record(remaining_capacity_gb=300),
        ]

        buckets = aggregate_by_day(records, diagnostics=diagnostics)

        assert buckets[0].avg_remaining_capacity_gb == pytest.approx(150.0)
        assert len(diagnostics.by_code(NEGATIVE_CAPACITY)) == 1

    def test_over_allocation_is_reported(self, make_record):
        diagnostics = Diagnostics()

        aggregate_by_day(
            [make_record(allocated_memory_mb=2000, total_memory_mb=1000)],
            diagnostics=diagnostics,
        )

        assert diagnostics.by_code(ALLOCATED_EXCEEDS_TOTAL)[0].context["cluster_id"]

    def test_record_without_creation_time_skipped(self, make_record):
        diagnostics = Diagnostics()
        records = [make_record(), make_record(creation_time=None)]

        buckets = aggregate_by_day(records, diagnostics=diagnostics)

        assert len(buckets) == 1
        assert buckets[0].cluster_count == 1
        assert len(diagnostics.by_code(UNPARSEABLE_TIMESTAMP)) == 1

    def test_empty_input(self):
        assert aggregate_by_day([]) == []

    def test_zero_total_memory_counts_as_zero_usage(self, make_record):
        records = [
            make_record(allocated_memory_mb=500, total_memory_mb=0),
            make_record(allocated_memory_mb=500, total_memory_mb=1000),
        ]

        buckets = aggregate_by_day(records)

        assert buckets[0].avg_memory_usage_percent == pytest.approx(25.0)

    def test_matches_pandas_groupby(self, sample_upload, records_dataframe):
        records = normalize_records(sample_upload)
        df = records_dataframe(records)

        buckets = aggregate_by_day(records)
        expected_usage = df.groupby("day")["usage"].mean()
        expected_yarn = df.groupby("day")["yarn_available_percent"].mean()
        expected_names = df.groupby("day")["cluster_name"].nunique()

        assert [b.date for b in buckets] == list(expected_usage.index)
        for bucket in buckets:
            assert bucket.avg_memory_usage_percent == pytest.approx(expected_usage[bucket.date])
            assert bucket.avg_yarn_memory_available_percent == pytest.approx(
                expected_yarn[bucket.date]
            )
            assert bucket.cluster_count == expected_names[bucket.date]


class TestWeeklyKPIs:
    """Test trailing-window KPIs."""

    def test_current_window_is_latest_seven(self, make_bucket):
        buckets = [
            make_bucket(_day(i), avg_memory_usage_percent=10.0 * i) for i in range(10)
        ]

        current = weekly_kpis(buckets)

        # days 3..9
        assert current.avg_memory_usage_percent == pytest.approx(60.0)

    def test_previous_window(self, make_bucket):
        buckets = [
            make_bucket(_day(i), avg_memory_usage_percent=10.0 * i) for i in range(10)
        ]

        previous = previous_weekly_kpis(buckets)

        # days 0..2
        assert previous.avg_memory_usage_percent == pytest.approx(10.0)

    def test_order_of_input_does_not_matter(self, make_bucket):
        buckets = [
            make_bucket(_day(i), avg_runtime_hours=float(i)) for i in range(9)
        ]

        assert weekly_kpis(list(reversed(buckets))) == weekly_kpis(buckets)

    def test_cluster_count_is_union(self, make_bucket):
        buckets = [
            make_bucket(_day(0), clusters=("a", "b"), cluster_count=2),
            make_bucket(_day(1), clusters=("b", "c"), cluster_count=2),
            make_bucket(_day(2), clusters=("a",), cluster_count=1),
        ]

        assert weekly_kpis(buckets).cluster_count == 3

    def test_empty_previous_window_is_zero(self, make_bucket):
        buckets = [make_bucket(_day(i)) for i in range(5)]

        previous = previous_weekly_kpis(buckets)

        assert previous.avg_memory_usage_percent == 0
        assert previous.cluster_count == 0

    def test_custom_window(self, make_bucket):
        buckets = [
            make_bucket(_day(i), avg_unhealthy_nodes=float(i)) for i in range(4)
        ]

        kpis = weekly_kpis(buckets, window_days=2)

        assert kpis.avg_unhealthy_nodes == pytest.approx(2.5)

    def test_gaps_are_not_filled(self, make_bucket):
        buckets = [
            make_bucket("2025-01-01", avg_runtime_hours=100.0),
            make_bucket("2025-03-01", avg_runtime_hours=2.0),
        ]

        assert weekly_kpis(buckets).avg_runtime_hours == pytest.approx(51.0)


class TestCalendarWeeks:
    """Test Sunday-to-Saturday grouping."""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2025, 3, 2), date(2025, 3, 2)),
            (date(2025, 3, 3), date(2025, 3, 2)),
            (date(2025, 3, 8), date(2025, 3, 2)),
            (date(2025, 3, 9), date(2025, 3, 9)),
        ],
    )
    def test_week_start(self, day, expected):
        assert week_start(day) == expected

    def test_grouping(self, make_bucket):
        buckets = [
            make_bucket("2025-03-07", avg_memory_usage_percent=40.0, clusters=("a",)),
            make_bucket("2025-03-03", avg_memory_usage_percent=20.0, clusters=("b",)),
            make_bucket("2025-03-10", avg_memory_usage_percent=70.0, clusters=("a",)),
        ]

        weeks = calendar_weekly_kpi_metrics(buckets)

        assert [w.week_start for w in weeks] == ["2025-03-02", "2025-03-09"]
        assert weeks[0].week_end == "2025-03-08"
        assert weeks[0].day_count == 2
        assert weeks[0].avg_memory_usage_percent == pytest.approx(30.0)
        assert weeks[0].clusters == ("b", "a")
        assert weeks[0].cluster_count == 2
        assert weeks[1].day_count == 1

    def test_empty(self):
        assert calendar_weekly_kpi_metrics([]) == []


class TestCalendarEdges:
    """Test day keys and weeks at the ends of the calendar."""

    def test_early_year_key_is_zero_padded(self):
        key = day_key(datetime(999, 6, 1, tzinfo=timezone.utc))

        assert key == "0999-06-01"
        assert parse_day_key(key) == date(999, 6, 1)

    def test_early_year_sorts_before_modern_days(self, make_record):
        records = [
            make_record(creation_time=datetime(2025, 3, 3, tzinfo=timezone.utc), end_time=None),
            make_record(creation_time=datetime(999, 6, 1, tzinfo=timezone.utc), end_time=None),
        ]

        assert [b.date for b in aggregate_by_day(records)] == ["0999-06-01", "2025-03-03"]

    def test_first_week_of_calendar_starts_at_date_min(self):
        # 0001-01-01 is a Monday; its Sunday does not exist
        assert week_start(date(1, 1, 3)) == date.min
        assert week_start(date(1, 1, 7)) == date(1, 1, 7)

    def test_last_week_of_calendar_ends_at_date_max(self):
        assert week_end(date(9999, 12, 26)) == date.max
        assert week_end(date(2025, 3, 2)) == date(2025, 3, 8)

    def test_weeks_at_both_ends(self, make_bucket):
        buckets = [
            make_bucket("0001-01-02"),
            make_bucket("0999-06-01"),
            make_bucket("9999-12-31"),
        ]

        weeks = calendar_weekly_kpi_metrics(buckets)

        assert [w.week_start for w in weeks] == ["0001-01-01", "0999-05-26", "9999-12-26"]
        assert weeks[-1].week_end == "9999-12-31"
