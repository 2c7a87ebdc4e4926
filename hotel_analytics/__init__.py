"""
Operational analytics for a multi-department hotel business.

Daily aggregation, revenue/COGS/profit forecasting, monthly/quarterly
seasonality analysis and monthly trend reports over dated revenue records.
"""

from .aggregation import aggregate_daily, aggregate_daily_by_department
from .analytics.seasonality import analyze_seasonality
from .analytics.trends import analyze_trends
from .forecast import (
    calculate_forecast,
    day_of_week_patterns,
    department_forecasts,
    forecast_confidence,
    growth_rate,
    moving_average,
    trend_direction,
)

__version__ = "1.0.0"

__all__ = [
    "aggregate_daily",
    "aggregate_daily_by_department",
    "analyze_seasonality",
    "analyze_trends",
    "calculate_forecast",
    "day_of_week_patterns",
    "department_forecasts",
    "forecast_confidence",
    "growth_rate",
    "moving_average",
    "trend_direction",
]
