"""
Centralized validation rules for analytics inputs.

Provides validation functions for call parameters and numeric coercion
for raw record fields.
"""
import math
import numbers
from datetime import date, datetime
from typing import Any, Optional, Tuple


def validate_horizon(horizon_days: Any) -> Tuple[bool, str]:
    """
    Validate forecast horizon.

    Args:
        horizon_days: Number of future days to project

    Returns:
        (is_valid, error_message)
    """
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, numbers.Integral):
        return False, "Forecast horizon must be an integer number of days"

    if horizon_days < 1:
        return False, "Forecast horizon must be at least 1 day"

    return True, ""


def validate_years_back(years_back: Any) -> Tuple[bool, str]:
    """
    Validate seasonality lookback.

    Args:
        years_back: Number of years of history to analyze

    Returns:
        (is_valid, error_message)
    """
    if isinstance(years_back, bool) or not isinstance(years_back, numbers.Integral):
        return False, "Lookback must be an integer number of years"

    if years_back < 1:
        return False, "Lookback must be at least 1 year"

    return True, ""


def validate_trend_months(months: Any) -> Tuple[bool, str]:
    """
    Validate the number of months in a trend report.

    Returns:
        (is_valid, error_message)
    """
    if isinstance(months, bool) or not isinstance(months, numbers.Integral):
        return False, "Trend window must be an integer number of months"

    if months < 1:
        return False, "Trend window must be at least 1 month"

    return True, ""


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> Tuple[bool, str]:
    """
    Validate an optional date range (either bound may be open).

    Returns:
        (is_valid, error_message)
    """
    if start_date is not None and end_date is not None and start_date > end_date:
        return False, "Start date cannot be after end date"

    return True, ""


def coerce_amount(value: Any) -> float:
    """
    Coerce a raw monetary field to a finite, non-negative float.

    None, empty strings, non-numeric values, NaN/inf and negative values
    all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a raw timestamp to a naive local datetime.

    Accepts datetime, date and ISO-8601 strings (a trailing "Z" is read as
    UTC). Aware datetimes are converted to local time so the calendar day
    follows the local day boundary. Returns None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
