"""
Daily aggregation of raw revenue records.

Folds raw dated records (orders, bookings, billing lines) into one
DailyObservation per local calendar day. This is the only place where raw
numeric fields are coerced: every downstream computation can assume fully
populated, non-negative values and a series sorted ascending by date.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_COGS_RATIO
from .domain.models import DailyObservation, SalesRecord
from .domain.validation import coerce_amount, coerce_timestamp

logger = logging.getLogger(__name__)


def record_day(record: SalesRecord) -> Optional[date]:
    """Local calendar day of a record, or None if the timestamp is unusable."""
    ts = coerce_timestamp(record.timestamp)
    return ts.date() if ts is not None else None


def record_cogs(record: SalesRecord) -> float:
    """
    Actual COGS of a record, or the 30% estimate when COGS is missing or zero.
    """
    cogs = coerce_amount(record.cogs)
    if cogs > 0:
        return cogs
    return coerce_amount(record.amount) * DEFAULT_COGS_RATIO


def aggregate_daily(records: Iterable[SalesRecord]) -> List[DailyObservation]:
    """
    Aggregate raw records into a daily series.

    Args:
        records: Unordered raw records (timestamp, amount, optional cogs)

    Returns:
        One DailyObservation per distinct day, sorted ascending by date.
        Empty input yields an empty list.

    Example:
        >>> aggregate_daily([
        ...     SalesRecord("2024-01-01T10:00:00", amount=100),
        ...     SalesRecord("2024-01-01T19:30:00", amount=50, cogs=20),
        ... ])
        [DailyObservation(date=datetime.date(2024, 1, 1), revenue=150.0, cogs=50.0, order_count=2)]
    """
    totals: Dict[date, List[float]] = {}
    skipped = 0

    for record in records:
        day = record_day(record)
        if day is None:
            skipped += 1
            continue

        bucket = totals.setdefault(day, [0.0, 0.0, 0])
        bucket[0] += coerce_amount(record.amount)
        bucket[1] += record_cogs(record)
        bucket[2] += 1

    if skipped:
        logger.warning(f"Skipped {skipped} record(s) with missing or invalid timestamp")

    series = [
        DailyObservation(date=day, revenue=revenue, cogs=cogs, order_count=int(orders))
        for day, (revenue, cogs, orders) in sorted(totals.items())
    ]

    logger.debug(f"Aggregated records into {len(series)} daily observations")
    return series


def group_records_by_department(
    records: Iterable[SalesRecord],
    departments: Optional[Iterable[str]] = None,
) -> Dict[str, List[SalesRecord]]:
    """
    Split raw records by department identifier.

    Args:
        records: Raw records; records without a department are left out
        departments: Department ids that must be present even with no records

    Returns:
        Mapping department → records, keys in ascending order
    """
    grouped: Dict[str, List[SalesRecord]] = {dept: [] for dept in departments or ()}

    for record in records:
        dept = (record.department or "").strip()
        if not dept:
            continue
        grouped.setdefault(dept, []).append(record)

    return {dept: grouped[dept] for dept in sorted(grouped)}


def aggregate_daily_by_department(
    records: Iterable[SalesRecord],
    departments: Optional[Iterable[str]] = None,
) -> Dict[str, List[DailyObservation]]:
    """
    Daily series per department (see aggregate_daily).
    """
    grouped = group_records_by_department(records, departments)
    return {dept: aggregate_daily(dept_records) for dept, dept_records in grouped.items()}
