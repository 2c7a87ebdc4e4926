"""
Report builders: one blocking fetch, then the full computation.

The record source is read exactly once per report; everything after the
fetch is pure computation over that snapshot. Nothing is cached between
calls, callers own memoization.
"""

from datetime import date
from typing import Iterable, Optional
import logging

from ..aggregation import aggregate_daily, aggregate_daily_by_department
from ..config import DEFAULT_FORECAST_DAYS, DEFAULT_TREND_MONTHS, DEFAULT_YEARS_BACK
from ..domain.calendar import month_window
from ..domain.models import Department, OperationalReport, SeasonalityReport, TrendReport
from ..domain.validation import validate_horizon, validate_trend_months, validate_years_back
from ..forecast import calculate_forecast, department_forecasts
from .seasonality import analyze_seasonality, lookback_window
from .trends import analyze_trends

logger = logging.getLogger(__name__)

# Departments always reported, even without records in the window
FORECAST_DEPARTMENTS = (
    Department.BAR.value,
    Department.RESTAURANT.value,
    Department.KITCHEN.value,
    Department.SPA.value,
)


def build_operational_report(
    source,
    horizon_days: int = DEFAULT_FORECAST_DAYS,
    asof_date: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    departments: Iterable[str] = FORECAST_DEPARTMENTS,
) -> OperationalReport:
    """
    Build the overall forecast and the per-department ranking.

    Args:
        source: RecordSource (must have read_records(start, end))
        horizon_days: Number of days to project
        asof_date: "Today" for projections (defaults to date.today())
        start: First history day to fetch (None = open)
        end: Last history day to fetch (None = open)
        departments: Department ids forecast and ranked; records of other
                     departments are left out of every series

    Returns:
        OperationalReport

    Example:
        >>> report = build_operational_report(CSVLayer(tmp_dir), horizon_days=7)
        >>> report.forecast.confidence
        <Confidence.LOW: 'low'>
    """
    is_valid, error = validate_horizon(horizon_days)
    if not is_valid:
        raise ValueError(f"Invalid forecast inputs: {error}")

    if asof_date is None:
        asof_date = date.today()

    wanted = tuple(departments)
    records = source.read_records(start, end)
    # Room billing and unassigned records stay out of the forecast
    selected = [r for r in records if (r.department or "").strip() in wanted]

    daily_series = aggregate_daily(selected)
    per_department = aggregate_daily_by_department(selected, wanted)

    forecast = calculate_forecast(daily_series, horizon_days, asof_date=asof_date)
    ranking = department_forecasts(per_department, horizon_days, asof_date=asof_date)

    logger.info(
        f"Operational report (asof {asof_date}): {len(selected)}/{len(records)} records, "
        f"{len(daily_series)} days, {len(per_department)} departments"
    )

    return OperationalReport(
        forecast=forecast,
        department_forecasts=tuple(ranking),
        daily_series=tuple(daily_series),
        department_series={dept: tuple(series) for dept, series in per_department.items()},
    )


def build_seasonality_report(
    source,
    years_back: int = DEFAULT_YEARS_BACK,
    asof_date: Optional[date] = None,
) -> SeasonalityReport:
    """
    Fetch the lookback window from *source* and analyze seasonality.

    Args:
        source: RecordSource (must have read_records(start, end))
        years_back: Lookback in years
        asof_date: Reference date (defaults to date.today())

    Returns:
        SeasonalityReport
    """
    is_valid, error = validate_years_back(years_back)
    if not is_valid:
        raise ValueError(f"Invalid seasonality inputs: {error}")

    if asof_date is None:
        asof_date = date.today()

    start, end = lookback_window(asof_date, years_back)
    records = source.read_records(start, end)

    logger.info(f"Seasonality report (asof {asof_date}, {years_back}y): {len(records)} records")
    return analyze_seasonality(records, years_back=years_back, asof_date=asof_date)


def build_trend_report(
    source,
    months: int = DEFAULT_TREND_MONTHS,
    asof_date: Optional[date] = None,
) -> TrendReport:
    """
    Fetch the last *months* calendar months from *source* and build the
    monthly trend report.

    Args:
        source: RecordSource (must have read_records(start, end))
        months: Number of months ending with asof's month
        asof_date: Reference date (defaults to date.today())

    Returns:
        TrendReport
    """
    is_valid, error = validate_trend_months(months)
    if not is_valid:
        raise ValueError(f"Invalid trend inputs: {error}")

    if asof_date is None:
        asof_date = date.today()

    start, end = month_window(asof_date, int(months))
    records = source.read_records(start, end)

    logger.info(f"Trend report (asof {asof_date}, {months} months): {len(records)} records")
    return analyze_trends(records, months=months, asof_date=asof_date)
