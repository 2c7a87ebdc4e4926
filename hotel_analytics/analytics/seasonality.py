"""
Monthly and quarterly seasonality analysis.

Groups raw records by calendar month (regardless of year), averages each
month over the distinct year-months observed, classifies every month and
quarter into a seasonality tier relative to the grand average, and derives
business insights from the result.

Profit here is estimated per record as revenue - 35% COGS - tax. This ratio
is independent of the 30% COGS fallback used by daily aggregation.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from ..aggregation import record_day
from ..config import (
    MONTHLY_TIER_THRESHOLDS,
    QUARTERLY_TIER_THRESHOLDS,
    REVENUE_GAP_RATIO,
    SEASONALITY_COGS_RATIO,
    SEASONALITY_INDEX_ALERT,
)
from ..domain.calendar import month_window
from ..domain.models import (
    MONTH_NAMES,
    QUARTER_NAMES,
    InsightImpact,
    InsightType,
    MonthSummary,
    MonthlySeasonData,
    QuarterlySeasonData,
    SalesRecord,
    SeasonalityInsight,
    SeasonalityMetrics,
    SeasonalityReport,
    SeasonType,
    round2,
)
from ..domain.validation import coerce_amount, validate_years_back

logger = logging.getLogger(__name__)


class _Bucket:
    """Unrounded per-period averages, kept until emission."""

    __slots__ = ("index", "avg_revenue", "avg_orders", "avg_profit", "data_points",
                 "percent_from_average", "season_type")

    def __init__(self, index: int, avg_revenue: float, avg_orders: float,
                 avg_profit: float, data_points: int):
        self.index = index
        self.avg_revenue = avg_revenue
        self.avg_orders = avg_orders
        self.avg_profit = avg_profit
        self.data_points = data_points
        self.percent_from_average = 0.0
        self.season_type = SeasonType.NORMAL


def _classify(percent_from_average: float, thresholds) -> SeasonType:
    for lower_bound, tier in thresholds:
        if percent_from_average >= lower_bound:
            return SeasonType(tier)
    return SeasonType.OFF_PEAK


def classify_month(percent_from_average: float) -> SeasonType:
    """Monthly tier: >=20 peak, >=10 high, >=-10 normal, >=-20 low, else off-peak."""
    return _classify(percent_from_average, MONTHLY_TIER_THRESHOLDS)


def classify_quarter(percent_from_average: float) -> SeasonType:
    """Quarterly tier: >=15 peak, >=5 high, >=-5 normal, >=-15 low, else off-peak."""
    return _classify(percent_from_average, QUARTERLY_TIER_THRESHOLDS)


def lookback_window(asof_date: date, years_back: int) -> Tuple[date, date]:
    """
    Inclusive analysis window: first day of the month years_back*12 months
    before asof's month, through the last day of asof's month.
    """
    return month_window(asof_date, years_back * 12 + 1)


def _apply_tiers(buckets: Sequence[_Bucket], classifier) -> None:
    grand_avg = sum(b.avg_revenue for b in buckets) / len(buckets)
    for b in buckets:
        b.percent_from_average = (
            (b.avg_revenue - grand_avg) / grand_avg * 100 if grand_avg > 0 else 0.0
        )
        b.season_type = classifier(b.percent_from_average)


def _monthly_buckets(records: Iterable[Tuple[date, SalesRecord]]) -> Tuple[List[_Bucket], Dict[Tuple[int, int], float]]:
    revenue = [0.0] * 12
    orders = [0] * 12
    profit = [0.0] * 12
    year_months: Set[Tuple[int, int]] = set()
    revenue_by_year_month: Dict[Tuple[int, int], float] = {}

    for day, record in records:
        month = day.month - 1
        amount = coerce_amount(record.amount)
        tax = coerce_amount(record.tax)

        revenue[month] += amount
        orders[month] += 1
        profit[month] += amount - amount * SEASONALITY_COGS_RATIO - tax

        key = (day.year, day.month)
        year_months.add(key)
        revenue_by_year_month[key] = revenue_by_year_month.get(key, 0.0) + amount

    data_points = [0] * 12
    for _year, month in year_months:
        data_points[month - 1] += 1

    buckets = []
    for m in range(12):
        n = data_points[m]
        buckets.append(_Bucket(
            index=m,
            avg_revenue=revenue[m] / n if n > 0 else 0.0,
            avg_orders=orders[m] / n if n > 0 else 0.0,
            avg_profit=profit[m] / n if n > 0 else 0.0,
            data_points=n,
        ))

    _apply_tiers(buckets, classify_month)
    return buckets, revenue_by_year_month


def _quarterly_buckets(months: Sequence[_Bucket]) -> List[_Bucket]:
    buckets = []
    for q in range(4):
        members = months[q * 3:q * 3 + 3]
        buckets.append(_Bucket(
            index=q,
            avg_revenue=sum(m.avg_revenue for m in members),
            avg_orders=sum(m.avg_orders for m in members),
            avg_profit=sum(m.avg_profit for m in members),
            data_points=max([m.data_points for m in members] + [0]),
        ))

    _apply_tiers(buckets, classify_quarter)
    return buckets


def seasonality_index(monthly_revenue: Sequence[float]) -> float:
    """
    Coefficient of variation of monthly average revenue, scaled ×2 and capped
    at 100. 0 when the grand average is 0.
    """
    values = np.asarray(monthly_revenue, dtype=float)
    if values.size == 0:
        return 0.0
    mean = float(values.mean())
    if mean <= 0:
        return 0.0
    std_dev = float(values.std())  # population std (ddof=0)
    return min(100.0, std_dev / mean * 100 * 2)


def _year_over_year_growth(revenue_by_year_month: Dict[Tuple[int, int], float]) -> float:
    """
    Latest calendar year with records vs the calendar year before it.

    0 when the earlier year has no records or no revenue.
    """
    by_year: Dict[int, float] = {}
    for (year, _month), revenue in revenue_by_year_month.items():
        by_year[year] = by_year.get(year, 0.0) + revenue
    if not by_year:
        return 0.0

    latest = max(by_year)
    prior = by_year.get(latest - 1, 0.0)
    if prior <= 0:
        return 0.0
    return (by_year[latest] - prior) / prior * 100


def _build_insights(
    peak_months: List[str],
    low_months: List[str],
    index: float,
    best: MonthSummary,
    worst: MonthSummary,
) -> List[SeasonalityInsight]:
    insights = []

    if peak_months:
        insights.append(SeasonalityInsight(
            type=InsightType.PEAK,
            title="Peak Season Identified",
            description=(
                f"{', '.join(peak_months)} are your strongest months. "
                "Consider increasing inventory and staffing during these periods."
            ),
            impact=InsightImpact.HIGH,
            months=tuple(peak_months),
        ))

    if low_months:
        insights.append(SeasonalityInsight(
            type=InsightType.LOW,
            title="Off-Peak Season Alert",
            description=(
                f"{', '.join(low_months)} show lower activity. "
                "Consider promotional campaigns or special packages to boost revenue."
            ),
            impact=InsightImpact.MEDIUM,
            months=tuple(low_months),
        ))

    if index > SEASONALITY_INDEX_ALERT:
        insights.append(SeasonalityInsight(
            type=InsightType.TREND,
            title="High Seasonal Variation",
            description=(
                "Your business shows significant seasonal patterns. "
                "Plan cash reserves during peak months to cover low seasons."
            ),
            impact=InsightImpact.HIGH,
        ))

    if best.avg_revenue > 0 and worst.avg_revenue > 0:
        ratio = best.avg_revenue / worst.avg_revenue
        if ratio > REVENUE_GAP_RATIO:
            insights.append(SeasonalityInsight(
                type=InsightType.OPPORTUNITY,
                title="Revenue Gap Opportunity",
                description=(
                    f"{best.month} generates {ratio:.1f}x more revenue than {worst.month}. "
                    f"Analyze what works in {best.month} to apply during slower months."
                ),
                impact=InsightImpact.MEDIUM,
            ))

    return insights


def analyze_seasonality(
    records: Iterable[SalesRecord],
    years_back: int = 2,
    asof_date: Optional[date] = None,
) -> SeasonalityReport:
    """
    Build the monthly/quarterly seasonality report.

    Args:
        records: Raw records (timestamp, amount, optional tax); records
                 outside the lookback window or without a usable timestamp
                 are ignored
        years_back: Lookback in years (>= 1)
        asof_date: Reference date for the window and "next month"
                   (defaults to date.today())

    Returns:
        SeasonalityReport with 12 months (Jan first), 4 quarters and metrics

    Raises:
        ValueError: If years_back is not a positive integer
    """
    is_valid, error = validate_years_back(years_back)
    if not is_valid:
        raise ValueError(f"Invalid seasonality inputs: {error}")
    years_back = int(years_back)

    if asof_date is None:
        asof_date = date.today()

    start, end = lookback_window(asof_date, years_back)
    in_window = []
    for record in records:
        day = record_day(record)
        if day is not None and start <= day <= end:
            in_window.append((day, record))

    months, revenue_by_year_month = _monthly_buckets(in_window)
    quarters = _quarterly_buckets(months)

    monthly_data = tuple(
        MonthlySeasonData(
            month=b.index,
            month_name=MONTH_NAMES[b.index],
            avg_revenue=round2(b.avg_revenue),
            avg_orders=round2(b.avg_orders),
            avg_profit=round2(b.avg_profit),
            data_points=b.data_points,
            season_type=b.season_type,
            percent_from_average=b.percent_from_average,
        )
        for b in months
    )
    quarterly_data = tuple(
        QuarterlySeasonData(
            quarter=b.index,
            quarter_name=QUARTER_NAMES[b.index],
            avg_revenue=round2(b.avg_revenue),
            avg_orders=round2(b.avg_orders),
            avg_profit=round2(b.avg_profit),
            data_points=b.data_points,
            season_type=b.season_type,
            percent_from_average=b.percent_from_average,
        )
        for b in quarters
    )

    peak_months = [MONTH_NAMES[b.index] for b in months
                   if b.season_type in (SeasonType.PEAK, SeasonType.HIGH)]
    low_months = [MONTH_NAMES[b.index] for b in months
                  if b.season_type in (SeasonType.LOW, SeasonType.OFF_PEAK)]

    # Stable sort: ties keep calendar order
    by_revenue = sorted(months, key=lambda b: b.avg_revenue, reverse=True)
    best = MonthSummary(MONTH_NAMES[by_revenue[0].index], round2(by_revenue[0].avg_revenue))
    worst = MonthSummary(MONTH_NAMES[by_revenue[-1].index], round2(by_revenue[-1].avg_revenue))

    quarters_by_revenue = sorted(quarters, key=lambda b: b.avg_revenue, reverse=True)
    peak_quarter = QUARTER_NAMES[quarters_by_revenue[0].index]
    low_quarter = QUARTER_NAMES[quarters_by_revenue[-1].index]

    monthly_revenue = [b.avg_revenue for b in months]
    grand_avg = sum(monthly_revenue) / 12
    index = seasonality_index(monthly_revenue)

    next_month = asof_date.month % 12  # 0-based index of the following month
    predicted = months[next_month].avg_revenue or grand_avg

    insights = _build_insights(
        peak_months,
        low_months,
        index,
        MonthSummary(best.month, by_revenue[0].avg_revenue),
        MonthSummary(worst.month, by_revenue[-1].avg_revenue),
    )

    metrics = SeasonalityMetrics(
        peak_months=tuple(peak_months),
        low_months=tuple(low_months),
        peak_quarter=peak_quarter,
        low_quarter=low_quarter,
        seasonality_index=index,
        best_month=best,
        worst_month=worst,
        year_over_year_growth=round2(
            _year_over_year_growth(revenue_by_year_month)
        ),
        predicted_next_month_revenue=round2(predicted),
        insights=tuple(insights),
    )

    logger.debug(
        f"Seasonality over {start}..{end}: {len(in_window)} records, "
        f"index={index:.2f}, peak={peak_months}, low={low_months}"
    )

    return SeasonalityReport(monthly_data=monthly_data, quarterly_data=quarterly_data, metrics=metrics)
