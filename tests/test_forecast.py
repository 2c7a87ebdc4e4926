"""
Tests for revenue forecasting module.

Validates:
1. Primitives (moving average, growth rate, DOW patterns, confidence, trend)
2. Horizon length and date sequence of projections
3. Non-negative outputs
4. Edge cases (empty data, zero baselines, short history)
5. Department ranking
"""

import numpy as np
import pytest
from datetime import date, timedelta

from hotel_analytics.domain.models import (
    Confidence,
    DailyObservation,
    TrendDirection,
)
from hotel_analytics.forecast import (
    calculate_forecast,
    day_of_week_patterns,
    department_forecasts,
    forecast_confidence,
    forecast_stats,
    growth_rate,
    moving_average,
    trend_direction,
)


ASOF = date(2024, 3, 1)  # Friday


def make_series(revenues, start=date(2024, 1, 1), cogs_ratio=0.3, orders=5):
    """Consecutive daily observations starting at *start* (a Monday by default)."""
    return [
        DailyObservation(
            date=start + timedelta(days=i),
            revenue=float(rev),
            cogs=float(rev) * cogs_ratio,
            order_count=orders,
        )
        for i, rev in enumerate(revenues)
    ]


class TestMovingAverage:
    """Trailing simple moving average."""

    def test_empty_series_is_zero(self):
        assert moving_average([], 7) == 0.0

    def test_uses_trailing_window(self):
        assert moving_average([1, 2, 3, 4], 2) == 3.5

    def test_shorter_series_uses_all_values(self):
        assert moving_average([10, 20], 7) == 15.0


class TestGrowthRate:
    """Week-over-week growth ratio."""

    def test_requires_14_observations(self):
        assert growth_rate(make_series([100] * 13)) == 0.0

    def test_week_two_up_ten_percent(self):
        """Scenario: 7 days at 100 followed by 7 days at 110."""
        series = make_series([100] * 7 + [110] * 7)
        assert growth_rate(series) == pytest.approx(0.10)

    def test_only_last_two_weeks_count(self):
        series = make_series([1000] * 7 + [100] * 7 + [50] * 7)
        assert growth_rate(series) == pytest.approx(-0.5)

    def test_zero_prior_week_is_zero_growth(self):
        series = make_series([0] * 7 + [500] * 7)
        assert growth_rate(series) == 0.0


class TestDayOfWeekPatterns:
    """Per-weekday averages, Sunday first."""

    def test_always_seven_entries(self):
        patterns = day_of_week_patterns([])
        assert len(patterns) == 7
        assert all(p.count == 0 and p.avg_revenue == 0 and p.avg_orders == 0 for p in patterns)

    def test_sunday_is_index_zero(self):
        sunday = date(2024, 1, 7)
        patterns = day_of_week_patterns([DailyObservation(sunday, 80.0, 24.0, 4)])
        assert patterns[0].count == 1
        assert patterns[0].avg_revenue == 80.0
        assert patterns[0].avg_orders == 4.0
        assert all(p.count == 0 for p in patterns[1:])

    def test_identical_revenue_gives_equal_averages(self):
        """Days with data report equal averages, days without data report 0."""
        # Mon-Thu only, two weeks
        series = [
            DailyObservation(date(2024, 1, 1) + timedelta(days=week * 7 + d), 150.0, 45.0, 3)
            for week in range(2)
            for d in range(4)
        ]
        patterns = day_of_week_patterns(series)

        with_data = [patterns[i] for i in (1, 2, 3, 4)]  # Mon..Thu
        without_data = [patterns[i] for i in (0, 5, 6)]  # Sun, Fri, Sat

        assert all(p.avg_revenue == 150.0 for p in with_data)
        assert all(p.count == 2 for p in with_data)
        assert all(p.avg_revenue == 0.0 for p in without_data)


class TestConfidence:
    """Confidence from sample count only."""

    @pytest.mark.parametrize("n_days,expected", [
        (0, Confidence.LOW),
        (13, Confidence.LOW),
        (14, Confidence.MEDIUM),
        (29, Confidence.MEDIUM),
        (30, Confidence.HIGH),
        (365, Confidence.HIGH),
    ])
    def test_thresholds(self, n_days, expected):
        assert forecast_confidence(make_series([100] * n_days)) == expected


class TestTrendDirection:
    """Recent 7-day average vs the previous 7 days."""

    def test_short_history_is_stable(self):
        assert trend_direction(make_series([10, 500, 1000, 2000, 3000, 4000])) == TrendDirection.STABLE

    def test_seven_days_has_no_prior_window(self):
        assert trend_direction(make_series([100] * 7)) == TrendDirection.STABLE

    def test_up(self):
        assert trend_direction(make_series([100] * 7 + [110] * 7)) == TrendDirection.UP

    def test_down(self):
        assert trend_direction(make_series([100] * 7 + [90] * 7)) == TrendDirection.DOWN

    def test_five_percent_is_stable(self):
        assert trend_direction(make_series([100] * 7 + [105] * 7)) == TrendDirection.STABLE

    def test_zero_prior_average_is_stable(self):
        assert trend_direction(make_series([0] * 7 + [300] * 7)) == TrendDirection.STABLE


class TestEmptyForecast:
    """Empty history yields a zeroed forecast."""

    @pytest.mark.parametrize("horizon", [1, 7, 30])
    def test_empty_history(self, horizon):
        fc = calculate_forecast([], horizon, asof_date=ASOF)

        assert fc.projected_revenue == 0
        assert fc.projected_cogs == 0
        assert fc.projected_profit == 0
        assert fc.confidence == Confidence.LOW
        assert fc.trend_direction == TrendDirection.STABLE
        assert fc.growth_rate == 0
        assert len(fc.daily_projections) == horizon
        assert all(p.revenue == 0 and p.cogs == 0 and p.profit == 0 for p in fc.daily_projections)

    def test_empty_history_day_of_week_analysis_all_zero(self):
        fc = calculate_forecast([], 7, asof_date=ASOF)
        assert [d.day for d in fc.day_of_week_analysis] == [
            "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
        ]
        assert all(d.avg_revenue == 0 and d.avg_orders == 0 for d in fc.day_of_week_analysis)

    def test_default_asof_is_today(self):
        fc = calculate_forecast([], 3)
        assert fc.daily_projections[0].date == date.today() + timedelta(days=1)


class TestForecastProjections:
    """Projection generator behaviour."""

    @pytest.mark.parametrize("n_days,horizon", [(1, 7), (10, 1), (45, 30), (20, 90)])
    def test_horizon_length_and_dates(self, n_days, horizon):
        fc = calculate_forecast(make_series([100 + i for i in range(n_days)]), horizon, asof_date=ASOF)

        assert len(fc.daily_projections) == horizon
        expected_dates = [ASOF + timedelta(days=i) for i in range(1, horizon + 1)]
        assert [p.date for p in fc.daily_projections] == expected_dates

    def test_flat_series_is_stable(self):
        """30 identical days project the same revenue every day."""
        series = [
            DailyObservation(date(2024, 1, 1) + timedelta(days=i), 200.0, 60.0, 8)
            for i in range(30)
        ]
        fc = calculate_forecast(series, 14, asof_date=ASOF)

        assert fc.growth_rate == pytest.approx(0.0)
        assert fc.trend_direction == TrendDirection.STABLE
        assert fc.confidence == Confidence.HIGH
        for p in fc.daily_projections:
            assert p.revenue == pytest.approx(200.0, abs=0.01)
            assert p.cogs == pytest.approx(60.0, abs=0.01)
            assert p.profit == pytest.approx(140.0, abs=0.01)
        assert fc.projected_revenue == pytest.approx(2800.0, abs=0.01)

    def test_strong_negative_growth_never_negative(self):
        series = make_series([5000] * 7 + [10] * 7)
        fc = calculate_forecast(series, 60, asof_date=ASOF)

        assert fc.growth_rate < -90
        assert fc.trend_direction == TrendDirection.DOWN
        assert all(p.revenue >= 0 for p in fc.daily_projections)
        assert all(p.cogs >= 0 for p in fc.daily_projections)

    def test_growth_rate_reported_as_percentage(self):
        """Scenario: week 2 up 10% → growth 10.00%."""
        series = make_series([100] * 7 + [110] * 7)
        fc = calculate_forecast(series, 7, asof_date=ASOF)

        assert fc.growth_rate == pytest.approx(10.0)
        assert fc.trend_direction == TrendDirection.UP
        assert fc.confidence == Confidence.MEDIUM

    def test_growth_compounds_daily(self):
        series = make_series([100] * 7 + [110] * 7)
        fc = calculate_forecast(series, 3, asof_date=ASOF)

        # Every weekday averages 105, the overall average: multiplier 1, baseline 110
        expected = [110 * (1 + 0.1 / 7) ** i for i in (1, 2, 3)]
        assert [p.revenue for p in fc.daily_projections] == pytest.approx(expected, abs=0.01)

    def test_day_of_week_multiplier(self):
        """Saturdays at 200, other days at 100: Saturday projection stays at 200."""
        start = date(2024, 1, 1)  # Monday
        revenues = [200 if (start + timedelta(days=i)).weekday() == 5 else 100 for i in range(28)]
        series = make_series(revenues, start=start)
        asof = date(2024, 1, 28)  # Sunday → projections Mon 29 .. Sun Feb 4

        fc = calculate_forecast(series, 7, asof_date=asof)
        by_date = {p.date: p for p in fc.daily_projections}

        assert by_date[date(2024, 2, 3)].revenue == pytest.approx(200.0)  # Saturday
        assert by_date[date(2024, 2, 3)].cogs == pytest.approx(60.0)
        assert by_date[date(2024, 1, 29)].revenue == pytest.approx(100.0)  # Monday
        assert fc.projected_revenue == pytest.approx(800.0)

    def test_weekday_without_history_gets_no_multiplier(self):
        # Only Mondays observed
        series = [DailyObservation(date(2024, 1, 1) + timedelta(weeks=w), 300.0, 90.0, 2) for w in range(3)]
        fc = calculate_forecast(series, 7, asof_date=date(2024, 1, 21))

        assert all(p.revenue == pytest.approx(300.0) for p in fc.daily_projections)

    def test_zero_baseline_uses_fallback_cogs_ratio(self):
        series = [DailyObservation(date(2024, 1, 1) + timedelta(days=i), 0.0, 0.0, 0) for i in range(10)]
        fc = calculate_forecast(series, 5, asof_date=ASOF)

        assert fc.projected_revenue == 0
        assert fc.projected_cogs == 0
        assert fc.confidence == Confidence.LOW

    def test_unsorted_input_same_as_sorted(self):
        series = make_series([100, 120, 90, 130, 80, 150, 110, 140, 95, 105, 125, 115, 135, 100, 160])
        shuffled = list(reversed(series))

        assert calculate_forecast(shuffled, 10, asof_date=ASOF) == calculate_forecast(series, 10, asof_date=ASOF)

    def test_totals_rounded_from_unrounded_sums(self):
        series = make_series([101.37, 99.11, 104.53, 97.77, 100.01, 103.33, 98.89] * 3)
        fc = calculate_forecast(series, 30, asof_date=ASOF)

        daily_sum = sum(p.revenue for p in fc.daily_projections)
        # Independently rounded: can differ by at most half a cent per day
        assert abs(fc.projected_revenue - daily_sum) <= 0.005 * 30 + 0.01
        assert fc.projected_profit == pytest.approx(fc.projected_revenue - fc.projected_cogs, abs=0.01)

    def test_day_of_week_analysis_rounded(self):
        series = [
            DailyObservation(date(2024, 1, 7), 100.0, 30.0, 1),   # Sunday
            DailyObservation(date(2024, 1, 14), 100.005, 30.0, 2),
            DailyObservation(date(2024, 1, 21), 100.0, 30.0, 2),
        ]
        fc = calculate_forecast(series, 1, asof_date=ASOF)
        sunday = fc.day_of_week_analysis[0]

        assert sunday.day == "Sunday"
        assert sunday.avg_revenue == 100.0
        assert sunday.avg_orders == 1.67

    @pytest.mark.parametrize("horizon", [0, -3, 2.5, None, True])
    def test_invalid_horizon_raises(self, horizon):
        with pytest.raises(ValueError):
            calculate_forecast(make_series([100] * 5), horizon, asof_date=ASOF)

    def test_numpy_integer_horizon(self):
        fc = calculate_forecast(make_series([100] * 5), np.int64(3), asof_date=ASOF)

        assert len(fc.daily_projections) == 3
        assert fc.daily_projections[-1].date == ASOF + timedelta(days=3)

    def test_to_dict_uses_report_keys(self):
        fc = calculate_forecast(make_series([100] * 14), 2, asof_date=ASOF)
        data = fc.to_dict()

        assert set(data) == {
            "projectedRevenue", "projectedCOGS", "projectedProfit", "confidence",
            "dailyProjections", "trendDirection", "growthRate", "dayOfWeekAnalysis",
        }
        assert data["confidence"] == "medium"
        assert data["dailyProjections"][0]["date"] == "2024-03-02"
        assert data["dayOfWeekAnalysis"][0] == {"day": "Sunday", "avgRevenue": 100.0, "avgOrders": 5.0}


class TestDepartmentForecasts:
    """Per-department forecasts ranked by projected revenue."""

    def test_empty_mapping(self):
        assert department_forecasts({}, 7, asof_date=ASOF) == []

    def test_single_department_forty_flat_days(self):
        series = [
            DailyObservation(date(2024, 1, 1) + timedelta(days=i), 1000.0, 300.0, 20)
            for i in range(40)
        ]
        result = department_forecasts({"bar": series}, 7, asof_date=ASOF)

        assert len(result) == 1
        assert result[0].department == "bar"
        assert result[0].confidence == Confidence.HIGH
        assert result[0].projected_revenue == pytest.approx(7000.0, rel=0.03)
        assert result[0].current_revenue == pytest.approx(40000.0)

    def test_ranked_descending_with_empty_department(self):
        result = department_forecasts(
            {
                "spa": make_series([50] * 10),
                "kitchen": [],
                "restaurant": make_series([400] * 20),
                "bar": make_series([150] * 35),
            },
            7,
            asof_date=ASOF,
        )

        assert [f.department for f in result] == ["restaurant", "bar", "spa", "kitchen"]
        kitchen = result[-1]
        assert kitchen.projected_revenue == 0
        assert kitchen.current_revenue == 0
        assert kitchen.growth_rate == 0
        assert kitchen.confidence == Confidence.LOW

    def test_invalid_horizon_raises_even_when_empty(self):
        with pytest.raises(ValueError):
            department_forecasts({}, 0)

    def test_to_dict_display_names(self):
        result = department_forecasts(
            {"frontoffice": make_series([80] * 3), "minibar": make_series([20] * 3)},
            2,
            asof_date=ASOF,
        )
        names = {f.department: f.to_dict()["displayName"] for f in result}

        assert names == {"frontoffice": "Front Office", "minibar": "minibar"}


class TestForecastStats:

    def test_flat_forecast_stats(self):
        series = [DailyObservation(date(2024, 1, 1) + timedelta(days=i), 200.0, 60.0, 8) for i in range(30)]
        stats = forecast_stats(calculate_forecast(series, 7, asof_date=ASOF))

        assert stats["min_daily_revenue"] == pytest.approx(200.0)
        assert stats["max_daily_revenue"] == pytest.approx(200.0)
        assert stats["mean_daily_revenue"] == pytest.approx(200.0)
        assert stats["margin_percent"] == pytest.approx(70.0)

    def test_zero_forecast_stats(self):
        stats = forecast_stats(calculate_forecast([], 7, asof_date=ASOF))
        assert stats["margin_percent"] == 0.0
        assert stats["max_daily_revenue"] == 0.0
