"""
Unit tests for the linear memory-usage forecast.
"""

import pytest

from emr_analytics.core.diagnostics import DATE_OUT_OF_RANGE, Diagnostics
from emr_analytics.analytics.forecast import fit_linear_trend, forecast_memory_usage


class TestFitLinearTrend:
    """Test least-squares fitting."""

    def test_exact_line(self):
        intercept, slope = fit_linear_trend([10.0, 20.0, 30.0])

        assert intercept == pytest.approx(0.0)
        assert slope == pytest.approx(10.0)

    def test_single_point_is_flat(self):
        assert fit_linear_trend([42.0]) == (42.0, 0.0)

    def test_empty(self):
        assert fit_linear_trend([]) == (0.0, 0.0)


class TestForecastMemoryUsage:
    """Test forecast points."""

    def test_extends_trend(self, make_bucket):
        buckets = [
            make_bucket("2025-03-01", avg_memory_usage_percent=10.0),
            make_bucket("2025-03-02", avg_memory_usage_percent=20.0),
            make_bucket("2025-03-03", avg_memory_usage_percent=30.0),
        ]

        forecast = forecast_memory_usage(buckets)

        assert len(forecast) == 7
        assert forecast[0].date == "2025-03-04"
        assert forecast[0].avg_memory_usage_percent == pytest.approx(40.0)
        assert forecast[-1].date == "2025-03-10"
        assert forecast[-1].avg_memory_usage_percent == pytest.approx(100.0)

    def test_unsorted_input(self, make_bucket):
        buckets = [
            make_bucket("2025-03-03", avg_memory_usage_percent=30.0),
            make_bucket("2025-03-01", avg_memory_usage_percent=10.0),
            make_bucket("2025-03-02", avg_memory_usage_percent=20.0),
        ]

        forecast = forecast_memory_usage(buckets, horizon_days=1)

        assert forecast[0].avg_memory_usage_percent == pytest.approx(40.0)

    def test_clamped_to_percent_range(self, make_bucket):
        rising = [
            make_bucket("2025-03-01", avg_memory_usage_percent=90.0),
            make_bucket("2025-03-02", avg_memory_usage_percent=95.0),
            make_bucket("2025-03-03", avg_memory_usage_percent=100.0),
        ]
        falling = [
            make_bucket("2025-03-01", avg_memory_usage_percent=10.0),
            make_bucket("2025-03-02", avg_memory_usage_percent=5.0),
            make_bucket("2025-03-03", avg_memory_usage_percent=0.0),
        ]

        assert all(p.avg_memory_usage_percent == 100.0 for p in forecast_memory_usage(rising))
        assert all(p.avg_memory_usage_percent == 0.0 for p in forecast_memory_usage(falling))

    def test_single_bucket_is_flat(self, make_bucket):
        forecast = forecast_memory_usage([make_bucket("2025-03-31", avg_memory_usage_percent=64.0)])

        assert forecast[0].date == "2025-04-01"
        assert {p.avg_memory_usage_percent for p in forecast} == {64.0}

    def test_empty(self):
        assert forecast_memory_usage([]) == []


class TestForecastCalendarEnd:
    """Test a forecast starting near the last representable date."""

    def test_horizon_stops_at_date_max(self, make_bucket):
        diagnostics = Diagnostics()

        forecast = forecast_memory_usage(
            [make_bucket("9999-12-28", avg_memory_usage_percent=40.0)],
            diagnostics=diagnostics,
        )

        assert [p.date for p in forecast] == ["9999-12-29", "9999-12-30", "9999-12-31"]
        assert len(diagnostics.by_code(DATE_OUT_OF_RANGE)) == 1

    def test_last_day_gives_empty_forecast(self, make_bucket):
        diagnostics = Diagnostics()

        forecast = forecast_memory_usage([make_bucket("9999-12-31")], diagnostics=diagnostics)

        assert forecast == []
        assert diagnostics.by_code(DATE_OUT_OF_RANGE)[0].context["last_date"] == "9999-12-31"

    def test_early_year_day(self, make_bucket):
        forecast = forecast_memory_usage([make_bucket("0999-06-01")], horizon_days=1)

        assert forecast[0].date == "0999-06-02"
