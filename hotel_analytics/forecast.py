"""
Revenue, COGS and profit forecasting from a daily series.

Model: trailing moving-average baseline × compounded growth × day-of-week factor.

Approach:
- Baseline: mean revenue/COGS of the last 7 daily observations
- Growth: week-over-week revenue change, spread evenly across the 7 days it
  was measured over and compounded daily: baseline × (1 + g/7)^i
- Day-of-week factor: weekday average revenue / overall average revenue
- COGS: projected revenue × (baseline COGS / baseline revenue)

Fallback for short history:
- < 7 days: trend "stable"
- < 14 days: growth 0, confidence "low"
- Empty series: zeroed forecast, one zero projection per horizon day

Output: Always non-negative. Monetary values rounded to 2 decimals on emission.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from .config import (
    DEFAULT_COGS_RATIO,
    GROWTH_MIN_DAYS,
    HIGH_CONFIDENCE_MIN_DAYS,
    MEDIUM_CONFIDENCE_MIN_DAYS,
    TREND_THRESHOLD,
    TREND_WINDOW_DAYS,
)
from .domain.models import (
    DAY_NAMES,
    Confidence,
    DailyObservation,
    DailyProjection,
    DayOfWeekPattern,
    DayOfWeekSummary,
    DepartmentForecast,
    Forecast,
    TrendDirection,
    round2,
    sunday_first_weekday,
)
from .domain.validation import validate_horizon

logger = logging.getLogger(__name__)


def moving_average(values: Sequence[float], period: int) -> float:
    """
    Simple trailing average of the last *period* values.

    Uses the whole series when it is shorter than *period*; 0 for an empty series.

    Example:
        >>> moving_average([1, 2, 3, 4], 2)
        3.5
    """
    if not values:
        return 0.0
    window = list(values)[-period:]
    return sum(window) / len(window)


def growth_rate(series: Sequence[DailyObservation]) -> float:
    """
    Week-over-week revenue growth as a ratio (0.10 = +10%).

    Compares the last 7 observations with the 7 before them. Returns 0 with
    fewer than 14 observations, or when the prior week's revenue is 0.
    """
    if len(series) < GROWTH_MIN_DAYS:
        return 0.0

    this_week = sum(d.revenue for d in series[-TREND_WINDOW_DAYS:])
    prior_week = sum(d.revenue for d in series[-2 * TREND_WINDOW_DAYS:-TREND_WINDOW_DAYS])

    if prior_week == 0:
        return 0.0
    return (this_week - prior_week) / prior_week


def day_of_week_patterns(series: Sequence[DailyObservation]) -> List[DayOfWeekPattern]:
    """
    Average revenue and order count per weekday.

    Returns:
        List of 7 DayOfWeekPattern, index 0=Sunday .. 6=Saturday. Weekdays
        without observations have count 0 and zero averages.
    """
    revenue = [0.0] * 7
    orders = [0.0] * 7
    counts = [0] * 7

    for obs in series:
        dow = sunday_first_weekday(obs.date)
        revenue[dow] += obs.revenue
        orders[dow] += obs.order_count
        counts[dow] += 1

    return [
        DayOfWeekPattern(
            avg_revenue=revenue[i] / counts[i] if counts[i] > 0 else 0.0,
            avg_orders=orders[i] / counts[i] if counts[i] > 0 else 0.0,
            count=counts[i],
        )
        for i in range(7)
    ]


def forecast_confidence(series: Sequence[DailyObservation]) -> Confidence:
    """Confidence bucket from the number of daily observations."""
    n = len(series)
    if n >= HIGH_CONFIDENCE_MIN_DAYS:
        return Confidence.HIGH
    if n >= MEDIUM_CONFIDENCE_MIN_DAYS:
        return Confidence.MEDIUM
    return Confidence.LOW


def trend_direction(series: Sequence[DailyObservation]) -> TrendDirection:
    """
    Compare the last 7-day average revenue with the 7 days before it.

    "up" above +5%, "down" below -5%, otherwise "stable". Short series and
    a zero prior average are "stable".
    """
    if len(series) < TREND_WINDOW_DAYS:
        return TrendDirection.STABLE

    recent_avg = moving_average(
        [d.revenue for d in series[-TREND_WINDOW_DAYS:]], TREND_WINDOW_DAYS
    )
    older_avg = moving_average(
        [d.revenue for d in series[-2 * TREND_WINDOW_DAYS:-TREND_WINDOW_DAYS]], TREND_WINDOW_DAYS
    )

    if older_avg == 0:
        return TrendDirection.STABLE

    change = (recent_avg - older_avg) / older_avg

    if change > TREND_THRESHOLD:
        return TrendDirection.UP
    if change < -TREND_THRESHOLD:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def _day_of_week_analysis(patterns: Sequence[DayOfWeekPattern]) -> tuple:
    return tuple(
        DayOfWeekSummary(
            day=name,
            avg_revenue=round2(pattern.avg_revenue),
            avg_orders=round2(pattern.avg_orders),
        )
        for name, pattern in zip(DAY_NAMES, patterns)
    )


def _empty_forecast(horizon_days: int, start: date) -> Forecast:
    projections = tuple(
        DailyProjection(date=start + timedelta(days=i), revenue=0.0, cogs=0.0, profit=0.0)
        for i in range(1, horizon_days + 1)
    )
    return Forecast(
        projected_revenue=0.0,
        projected_cogs=0.0,
        projected_profit=0.0,
        confidence=Confidence.LOW,
        daily_projections=projections,
        trend_direction=TrendDirection.STABLE,
        growth_rate=0.0,
        day_of_week_analysis=_day_of_week_analysis([DayOfWeekPattern()] * 7),
    )


def calculate_forecast(
    series: Sequence[DailyObservation],
    horizon_days: int,
    asof_date: Optional[date] = None,
) -> Forecast:
    """
    Project revenue, COGS and profit for the next *horizon_days* days.

    Args:
        series: Daily observations (sorted here again, any order accepted)
        horizon_days: Number of days to project (>= 1)
        asof_date: "Today"; the first projected day is asof_date + 1
                   (defaults to date.today())

    Returns:
        Forecast with exactly horizon_days daily projections

    Raises:
        ValueError: If horizon_days is not a positive integer

    Example:
        >>> history = [DailyObservation(date(2024, 1, i), 100.0, 30.0, 5) for i in range(1, 31)]
        >>> fc = calculate_forecast(history, 7, asof_date=date(2024, 1, 30))
        >>> fc.projected_revenue
        700.0
    """
    is_valid, error = validate_horizon(horizon_days)
    if not is_valid:
        raise ValueError(f"Invalid forecast inputs: {error}")
    horizon_days = int(horizon_days)

    if asof_date is None:
        asof_date = date.today()

    if not series:
        logger.debug("Empty daily series: returning zeroed forecast")
        return _empty_forecast(horizon_days, asof_date)

    ordered = sorted(series, key=lambda d: d.date)
    revenues = [d.revenue for d in ordered]
    cogs_values = [d.cogs for d in ordered]

    baseline_period = min(TREND_WINDOW_DAYS, len(ordered))
    avg_revenue = moving_average(revenues, baseline_period)
    avg_cogs = moving_average(cogs_values, baseline_period)
    rate = growth_rate(ordered)
    patterns = day_of_week_patterns(ordered)
    confidence = forecast_confidence(ordered)
    trend = trend_direction(ordered)

    # Grand mean, used only to normalise day-of-week factors
    overall_avg_revenue = sum(revenues) / len(revenues)
    cogs_ratio = avg_cogs / avg_revenue if avg_revenue > 0 else DEFAULT_COGS_RATIO

    projections = []
    total_revenue = 0.0
    total_cogs = 0.0

    for i in range(1, horizon_days + 1):
        target_date = asof_date + timedelta(days=i)
        pattern = patterns[sunday_first_weekday(target_date)]

        base = avg_revenue * (1 + rate / 7) ** i

        if pattern.avg_revenue > 0 and overall_avg_revenue > 0:
            base *= pattern.avg_revenue / overall_avg_revenue

        projected_revenue = max(0.0, base)
        projected_cogs = projected_revenue * cogs_ratio

        projections.append(DailyProjection(
            date=target_date,
            revenue=round2(projected_revenue),
            cogs=round2(projected_cogs),
            profit=round2(projected_revenue - projected_cogs),
        ))

        total_revenue += projected_revenue
        total_cogs += projected_cogs

    logger.debug(
        f"Forecast from {len(ordered)} days (asof {asof_date}, horizon {horizon_days}): "
        f"growth={rate:.4f}, trend={trend.value}, confidence={confidence.value}"
    )

    return Forecast(
        projected_revenue=round2(total_revenue),
        projected_cogs=round2(total_cogs),
        projected_profit=round2(total_revenue - total_cogs),
        confidence=confidence,
        daily_projections=tuple(projections),
        trend_direction=trend,
        growth_rate=round2(rate * 100),
        day_of_week_analysis=_day_of_week_analysis(patterns),
    )


def department_forecasts(
    department_series: Mapping[str, Sequence[DailyObservation]],
    horizon_days: int,
    asof_date: Optional[date] = None,
) -> List[DepartmentForecast]:
    """
    Forecast each department independently and rank by projected revenue.

    Args:
        department_series: Mapping department id → daily observations
        horizon_days: Number of days to project (>= 1)
        asof_date: "Today" (defaults to date.today())

    Returns:
        DepartmentForecast list sorted descending by projected_revenue
        (ties keep mapping order). Empty mapping → empty list.
    """
    is_valid, error = validate_horizon(horizon_days)
    if not is_valid:
        raise ValueError(f"Invalid forecast inputs: {error}")

    if asof_date is None:
        asof_date = date.today()

    results = []
    for department, series in department_series.items():
        forecast = calculate_forecast(series, horizon_days, asof_date=asof_date)
        results.append(DepartmentForecast(
            department=department,
            current_revenue=round2(sum(d.revenue for d in series)),
            projected_revenue=forecast.projected_revenue,
            growth_rate=forecast.growth_rate,
            confidence=forecast.confidence,
        ))

    results.sort(key=lambda f: f.projected_revenue, reverse=True)
    return results


def forecast_stats(forecast: Forecast) -> Dict[str, float]:
    """
    Statistical summary of the daily projections.

    Returns:
        Dict with keys "min_daily_revenue", "max_daily_revenue",
        "mean_daily_revenue" and "margin_percent" (projected profit / revenue)
    """
    daily = [p.revenue for p in forecast.daily_projections]
    if not daily:
        return {
            "min_daily_revenue": 0.0,
            "max_daily_revenue": 0.0,
            "mean_daily_revenue": 0.0,
            "margin_percent": 0.0,
        }

    margin = (
        forecast.projected_profit / forecast.projected_revenue * 100
        if forecast.projected_revenue > 0 else 0.0
    )
    return {
        "min_daily_revenue": min(daily),
        "max_daily_revenue": max(daily),
        "mean_daily_revenue": round2(sum(daily) / len(daily)),
        "margin_percent": round2(margin),
    }
