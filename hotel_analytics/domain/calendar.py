"""
Calendar-month arithmetic for reporting windows.

Usage Examples:
    from datetime import date
    from hotel_analytics.domain.calendar import shift_month, month_window

    shift_month(2024, 1, -1)               # (2023, 12)
    month_window(date(2024, 3, 10), 12)    # (date(2023, 4, 1), date(2024, 3, 31))
"""
from datetime import date as Date
from typing import List, Tuple


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Shift a (year, month 1-12) pair by *delta* months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_end(year: int, month: int) -> Date:
    """Last calendar day of the given month."""
    next_year, next_month = shift_month(year, month, 1)
    return Date.fromordinal(Date(next_year, next_month, 1).toordinal() - 1)


def month_window(asof_date: Date, months: int) -> Tuple[Date, Date]:
    """
    Inclusive window of *months* whole calendar months ending with the
    month of *asof_date*.

    Args:
        asof_date: Any day of the last month in the window
        months: Number of months (>= 1)

    Returns:
        (first day of the first month, last day of asof's month)
    """
    start_year, start_month = shift_month(asof_date.year, asof_date.month, -(months - 1))
    return Date(start_year, start_month, 1), month_end(asof_date.year, asof_date.month)


def months_in_window(asof_date: Date, months: int) -> List[Tuple[int, int]]:
    """(year, month) keys of month_window, oldest first."""
    return [
        shift_month(asof_date.year, asof_date.month, -offset)
        for offset in range(months - 1, -1, -1)
    ]
