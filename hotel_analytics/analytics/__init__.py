"""Analytics package: seasonality, monthly trends and report pipelines."""

from .seasonality import (
    analyze_seasonality,
    classify_month,
    classify_quarter,
    lookback_window,
    seasonality_index,
)
from .trends import (
    TREND_DEPARTMENTS,
    analyze_trends,
    classify_margin_trend,
)
from .pipeline import (
    FORECAST_DEPARTMENTS,
    build_operational_report,
    build_seasonality_report,
    build_trend_report,
)

__all__ = [
    "analyze_seasonality",
    "classify_month",
    "classify_quarter",
    "lookback_window",
    "seasonality_index",
    "TREND_DEPARTMENTS",
    "analyze_trends",
    "classify_margin_trend",
    "FORECAST_DEPARTMENTS",
    "build_operational_report",
    "build_seasonality_report",
    "build_trend_report",
]
