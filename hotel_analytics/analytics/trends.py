"""
Month-by-month revenue and profitability trend.

Every calendar month in the window gets revenue, COGS, gross and net
profit, margins, order count and average order value, overall and per
department. Trend metrics compare the first and last month of the window.

COGS per record is the recorded value when positive, otherwise an estimate
from DEPARTMENT_COGS_RATIOS (DEFAULT_COGS_RATIO for unlisted departments).
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..aggregation import record_day
from ..config import (
    DEFAULT_COGS_RATIO,
    DEFAULT_TREND_MONTHS,
    DEPARTMENT_COGS_RATIOS,
    MARGIN_TREND_THRESHOLD,
    NET_PROFIT_TAX_EXEMPT_DEPARTMENTS,
)
from ..domain.calendar import month_window, months_in_window
from ..domain.models import (
    MONTH_NAMES,
    Department,
    DepartmentMonthTrend,
    MarginTrend,
    MonthlyTrendData,
    MonthRevenue,
    SalesRecord,
    TrendMetrics,
    TrendReport,
    round2,
)
from ..domain.validation import coerce_amount, validate_trend_months

logger = logging.getLogger(__name__)

# Listed in every month, in this order; other departments follow sorted
TREND_DEPARTMENTS = tuple(d.value for d in Department)


class _Totals:
    __slots__ = ("revenue", "cogs", "tax", "orders")

    def __init__(self):
        self.revenue = 0.0
        self.cogs = 0.0
        self.tax = 0.0
        self.orders = 0

    def add(self, amount: float, cogs: float, tax: float) -> None:
        self.revenue += amount
        self.cogs += cogs
        self.tax += tax
        self.orders += 1


def trend_record_cogs(record: SalesRecord, department: str) -> float:
    """Recorded COGS if positive, else the department's estimate."""
    cogs = coerce_amount(record.cogs)
    if cogs > 0:
        return cogs
    ratio = DEPARTMENT_COGS_RATIOS.get(department, DEFAULT_COGS_RATIO)
    return coerce_amount(record.amount) * ratio


def classify_margin_trend(margin_change: float) -> MarginTrend:
    """Gross margin change in percentage points → improving/declining/stable."""
    if margin_change > MARGIN_TREND_THRESHOLD:
        return MarginTrend.IMPROVING
    if margin_change < -MARGIN_TREND_THRESHOLD:
        return MarginTrend.DECLINING
    return MarginTrend.STABLE


def _percent_change(first: float, last: float) -> float:
    if first > 0:
        return (last - first) / first * 100
    return 100.0 if last > 0 else 0.0


def _margin(part: float, revenue: float) -> float:
    return part / revenue * 100 if revenue > 0 else 0.0


def _month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def _trend_metrics(months: Sequence[MonthlyTrendData]) -> TrendMetrics:
    """Metrics over unrounded monthly figures (rounded on emission)."""
    if len(months) < 2:
        only = months[0] if months else None
        return TrendMetrics(
            revenue_growth=0.0,
            profit_growth=0.0,
            margin_trend=MarginTrend.STABLE,
            best_month=None,
            worst_month=None,
            average_monthly_revenue=round2(only.revenue) if only else 0.0,
            average_monthly_profit=round2(only.net_profit) if only else 0.0,
            revenue_volatility=0.0,
        )

    first, last = months[0], months[-1]

    # Stable sort: ties keep calendar order
    by_revenue = sorted(months, key=lambda m: m.revenue, reverse=True)

    revenues = np.asarray([m.revenue for m in months], dtype=float)
    average_revenue = float(revenues.mean())
    average_profit = sum(m.net_profit for m in months) / len(months)
    volatility = float(revenues.std()) / average_revenue * 100 if average_revenue > 0 else 0.0

    return TrendMetrics(
        revenue_growth=round2(_percent_change(first.revenue, last.revenue)),
        profit_growth=round2(_percent_change(first.net_profit, last.net_profit)),
        margin_trend=classify_margin_trend(last.gross_margin - first.gross_margin),
        best_month=MonthRevenue(by_revenue[0].month_label, round2(by_revenue[0].revenue)),
        worst_month=MonthRevenue(by_revenue[-1].month_label, round2(by_revenue[-1].revenue)),
        average_monthly_revenue=round2(average_revenue),
        average_monthly_profit=round2(average_profit),
        revenue_volatility=round2(volatility),
    )


def _rounded(month: MonthlyTrendData) -> MonthlyTrendData:
    return MonthlyTrendData(
        month=month.month,
        month_label=month.month_label,
        revenue=round2(month.revenue),
        cogs=round2(month.cogs),
        gross_profit=round2(month.gross_profit),
        gross_margin=round2(month.gross_margin),
        tax=round2(month.tax),
        net_profit=round2(month.net_profit),
        net_margin=round2(month.net_margin),
        order_count=month.order_count,
        avg_order_value=round2(month.avg_order_value),
        departments=month.departments,
    )


def analyze_trends(
    records: Iterable[SalesRecord],
    months: int = DEFAULT_TREND_MONTHS,
    asof_date: Optional[date] = None,
) -> TrendReport:
    """
    Build the monthly trend report.

    Args:
        records: Raw records; records outside the window or without a usable
                 timestamp are ignored. Records without a department count
                 toward the month totals only.
        months: Number of calendar months, ending with asof's month (>= 1)
        asof_date: Any day of the last month (defaults to date.today())

    Returns:
        TrendReport with one entry per month, oldest first

    Raises:
        ValueError: If months is not a positive integer

    Example:
        >>> report = analyze_trends(records, months=6, asof_date=date(2024, 6, 30))
        >>> report.monthly_data[0].month_label
        'Jan 2024'
    """
    is_valid, error = validate_trend_months(months)
    if not is_valid:
        raise ValueError(f"Invalid trend inputs: {error}")
    months = int(months)

    if asof_date is None:
        asof_date = date.today()

    keys = months_in_window(asof_date, months)
    start, end = month_window(asof_date, months)

    month_totals: Dict[Tuple[int, int], _Totals] = {key: _Totals() for key in keys}
    department_totals: Dict[Tuple[int, int], Dict[str, _Totals]] = {key: {} for key in keys}
    extra_departments = set()
    used = 0

    for record in records:
        day = record_day(record)
        if day is None or not start <= day <= end:
            continue

        key = (day.year, day.month)
        department = (record.department or "").strip()
        amount = coerce_amount(record.amount)
        cogs = trend_record_cogs(record, department)
        tax = 0.0 if department in NET_PROFIT_TAX_EXEMPT_DEPARTMENTS else coerce_amount(record.tax)

        month_totals[key].add(amount, cogs, tax)
        if department:
            department_totals[key].setdefault(department, _Totals()).add(amount, cogs, tax)
            if department not in TREND_DEPARTMENTS:
                extra_departments.add(department)
        used += 1

    listed = TREND_DEPARTMENTS + tuple(sorted(extra_departments))

    monthly: List[MonthlyTrendData] = []
    for year, month in keys:
        totals = month_totals[(year, month)]
        per_department = department_totals[(year, month)]

        departments = []
        for department in listed:
            dept = per_department.get(department) or _Totals()
            departments.append(DepartmentMonthTrend(
                department=department,
                revenue=round2(dept.revenue),
                cogs=round2(dept.cogs),
                gross_profit=round2(dept.revenue - dept.cogs),
                order_count=dept.orders,
            ))

        gross_profit = totals.revenue - totals.cogs
        net_profit = gross_profit - totals.tax
        monthly.append(MonthlyTrendData(
            month=f"{year:04d}-{month:02d}",
            month_label=_month_label(year, month),
            revenue=totals.revenue,
            cogs=totals.cogs,
            gross_profit=gross_profit,
            gross_margin=_margin(gross_profit, totals.revenue),
            tax=totals.tax,
            net_profit=net_profit,
            net_margin=_margin(net_profit, totals.revenue),
            order_count=totals.orders,
            avg_order_value=totals.revenue / totals.orders if totals.orders > 0 else 0.0,
            departments=tuple(departments),
        ))

    metrics = _trend_metrics(monthly)

    logger.debug(
        f"Trend over {start}..{end}: {used} records in {months} months, "
        f"revenue growth {metrics.revenue_growth}%, margin {metrics.margin_trend.value}"
    )

    return TrendReport(
        monthly_data=tuple(_rounded(m) for m in monthly),
        metrics=metrics,
    )
