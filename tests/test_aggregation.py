"""
Tests for daily aggregation (hotel_analytics/aggregation.py).

Validates:
- One observation per local calendar day, sorted ascending
- COGS: actual when present, 30% estimate otherwise
- Coercion of missing/malformed numeric fields
- Department grouping
"""

import pytest
from datetime import date, datetime, timezone

from hotel_analytics.aggregation import (
    aggregate_daily,
    aggregate_daily_by_department,
    group_records_by_department,
    record_cogs,
)
from hotel_analytics.domain.models import DailyObservation, SalesRecord


class TestAggregateDaily:
    """Folding raw records into daily observations."""

    def test_empty_input(self):
        assert aggregate_daily([]) == []

    def test_same_day_records_are_summed(self):
        records = [
            SalesRecord("2024-01-01T10:00:00", amount=100, cogs=25),
            SalesRecord("2024-01-01T21:45:00", amount=50, cogs=20),
        ]
        series = aggregate_daily(records)

        assert series == [DailyObservation(date(2024, 1, 1), 150.0, 45.0, 2)]

    def test_sorted_ascending(self):
        records = [
            SalesRecord(datetime(2024, 1, 3, 9), amount=30),
            SalesRecord(datetime(2024, 1, 1, 9), amount=10),
            SalesRecord(datetime(2024, 1, 2, 9), amount=20),
            SalesRecord(datetime(2024, 1, 1, 18), amount=5),
        ]
        series = aggregate_daily(records)

        assert [d.date for d in series] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
        assert [d.revenue for d in series] == [15.0, 20.0, 30.0]
        assert [d.order_count for d in series] == [2, 1, 1]

    def test_accepts_date_objects(self):
        series = aggregate_daily([SalesRecord(date(2024, 5, 1), amount=80, cogs=10)])
        assert series[0].date == date(2024, 5, 1)

    def test_aware_timestamp_uses_local_day(self):
        aware = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
        series = aggregate_daily([SalesRecord(aware, amount=10, cogs=1)])
        assert series[0].date == aware.astimezone().date()

    def test_invalid_timestamps_skipped(self):
        records = [
            SalesRecord("not-a-date", amount=100),
            SalesRecord(None, amount=100),
            SalesRecord("", amount=100),
            SalesRecord("2024-02-01", amount=40, cogs=4),
        ]
        series = aggregate_daily(records)

        assert len(series) == 1
        assert series[0].revenue == 40.0


class TestCOGSEstimation:
    """Per-record COGS fallback ratio."""

    def test_missing_cogs_estimated_at_30_percent(self):
        assert record_cogs(SalesRecord("2024-01-01", amount=200)) == pytest.approx(60.0)

    def test_zero_cogs_estimated(self):
        assert record_cogs(SalesRecord("2024-01-01", amount=200, cogs=0)) == pytest.approx(60.0)

    def test_explicit_cogs_used(self):
        assert record_cogs(SalesRecord("2024-01-01", amount=200, cogs=75)) == 75.0

    def test_mixed_records_same_day(self):
        records = [
            SalesRecord("2024-01-01T08:00:00", amount=100),
            SalesRecord("2024-01-01T09:00:00", amount=100, cogs=50),
        ]
        assert aggregate_daily(records)[0].cogs == pytest.approx(80.0)


class TestCoercion:
    """Malformed numeric fields become 0 before entering the pipeline."""

    @pytest.mark.parametrize("amount", [None, "", "abc", -25, float("nan"), float("inf")])
    def test_bad_amounts_count_as_zero(self, amount):
        series = aggregate_daily([SalesRecord("2024-01-01", amount=amount)])

        assert series[0].revenue == 0.0
        assert series[0].cogs == 0.0
        assert series[0].order_count == 1

    def test_numeric_strings_parsed(self):
        series = aggregate_daily([SalesRecord("2024-01-01", amount="12.50", cogs="2.5")])
        assert series[0].revenue == 12.5
        assert series[0].cogs == 2.5

    def test_bad_cogs_falls_back_to_estimate(self):
        series = aggregate_daily([SalesRecord("2024-01-01", amount=10, cogs="n/a")])
        assert series[0].cogs == pytest.approx(3.0)


class TestDepartmentGrouping:
    """Per-department record split and daily series."""

    def test_requested_departments_always_present(self):
        records = [SalesRecord("2024-01-01", amount=10, department="bar")]
        grouped = group_records_by_department(records, ["spa", "bar"])

        assert list(grouped) == ["bar", "spa"]
        assert grouped["spa"] == []
        assert len(grouped["bar"]) == 1

    def test_records_without_department_left_out(self):
        records = [
            SalesRecord("2024-01-01", amount=10, department=None),
            SalesRecord("2024-01-01", amount=10, department="  "),
            SalesRecord("2024-01-01", amount=10, department=" kitchen "),
        ]
        grouped = group_records_by_department(records)

        assert list(grouped) == ["kitchen"]

    def test_daily_series_per_department(self):
        records = [
            SalesRecord("2024-01-01T10:00:00", amount=100, cogs=30, department="bar"),
            SalesRecord("2024-01-01T11:00:00", amount=300, cogs=90, department="restaurant"),
            SalesRecord("2024-01-02T10:00:00", amount=50, cogs=15, department="bar"),
        ]
        per_dept = aggregate_daily_by_department(records, ["spa"])

        assert set(per_dept) == {"bar", "restaurant", "spa"}
        assert [d.revenue for d in per_dept["bar"]] == [100.0, 50.0]
        assert per_dept["restaurant"][0].order_count == 1
        assert per_dept["spa"] == []
