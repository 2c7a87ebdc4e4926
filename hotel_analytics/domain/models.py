"""
Domain models for hotel-ops-analytics.

Pure data classes + value objects. No I/O, no side effects.
Deterministic and fully testable.

Every output structure exposes to_dict(), returning plain data with the
camelCase keys used by the reporting front-end.
"""
from dataclasses import dataclass, field
from enum import Enum
from datetime import date as Date, datetime
from typing import Any, Dict, Optional, Tuple, Union


MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
QUARTER_NAMES = ("Q1 (Jan-Mar)", "Q2 (Apr-Jun)", "Q3 (Jul-Sep)", "Q4 (Oct-Dec)")
# Sunday-first, matching the weekday index used by day-of-week patterns
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday",
             "Thursday", "Friday", "Saturday")


class Confidence(Enum):
    """Forecast reliability bucket (derived from sample count only)."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TrendDirection(Enum):
    """Week-over-week revenue direction."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class SeasonType(Enum):
    """Seasonality tier of a month or quarter."""
    PEAK = "peak"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"
    OFF_PEAK = "off-peak"


class InsightType(Enum):
    PEAK = "peak"
    LOW = "low"
    TREND = "trend"
    OPPORTUNITY = "opportunity"


class InsightImpact(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MarginTrend(Enum):
    """Gross margin movement from the first to the last month of a trend window."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class Department(Enum):
    """Revenue-producing departments."""
    BAR = "bar"
    RESTAURANT = "restaurant"
    KITCHEN = "kitchen"
    SPA = "spa"
    FRONT_OFFICE = "frontoffice"

    @property
    def display_name(self) -> str:
        return _DEPARTMENT_DISPLAY_NAMES[self]


_DEPARTMENT_DISPLAY_NAMES = {
    Department.BAR: "Bar",
    Department.RESTAURANT: "Restaurant",
    Department.KITCHEN: "Kitchen",
    Department.SPA: "Spa",
    Department.FRONT_OFFICE: "Front Office",
}


def department_display_name(department: str) -> str:
    """Display name for a department id; unknown ids are shown as-is."""
    try:
        return Department(department).display_name
    except ValueError:
        return department


def sunday_first_weekday(d: Date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SalesRecord:
    """
    Raw dated revenue record supplied by an external source.

    Fields are deliberately loose (as delivered by the source); numeric
    coercion happens in the daily aggregator, not here.
    """
    timestamp: Union[datetime, Date, str, None]
    amount: Any = 0.0
    cogs: Any = None        # None/0 → estimated from amount
    tax: Any = 0.0
    department: Optional[str] = None


@dataclass(frozen=True)
class DailyObservation:
    """One aggregated calendar day - immutable."""
    date: Date
    revenue: float = 0.0
    cogs: float = 0.0
    order_count: int = 0

    def __post_init__(self):
        if self.revenue < 0:
            raise ValueError("Revenue cannot be negative")
        if self.cogs < 0:
            raise ValueError("COGS cannot be negative")
        if self.order_count < 0:
            raise ValueError("Order count cannot be negative")


# ---------------------------------------------------------------------------
# Forecast outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DayOfWeekPattern:
    """Historical averages for one weekday (unrounded)."""
    avg_revenue: float = 0.0
    avg_orders: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class DailyProjection:
    date: Date
    revenue: float
    cogs: float
    profit: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "revenue": self.revenue,
            "cogs": self.cogs,
            "profit": self.profit,
        }


@dataclass(frozen=True)
class DayOfWeekSummary:
    day: str
    avg_revenue: float
    avg_orders: float

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "avgRevenue": self.avg_revenue, "avgOrders": self.avg_orders}


@dataclass(frozen=True)
class Forecast:
    """
    Multi-day forward projection.

    Totals are rounded from the unrounded daily sums, so they may differ by a
    cent from the sum of the (individually rounded) daily projections.
    """
    projected_revenue: float
    projected_cogs: float
    projected_profit: float
    confidence: Confidence
    daily_projections: Tuple[DailyProjection, ...]
    trend_direction: TrendDirection
    growth_rate: float  # percent
    day_of_week_analysis: Tuple[DayOfWeekSummary, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectedRevenue": self.projected_revenue,
            "projectedCOGS": self.projected_cogs,
            "projectedProfit": self.projected_profit,
            "confidence": self.confidence.value,
            "dailyProjections": [p.to_dict() for p in self.daily_projections],
            "trendDirection": self.trend_direction.value,
            "growthRate": self.growth_rate,
            "dayOfWeekAnalysis": [d.to_dict() for d in self.day_of_week_analysis],
        }


@dataclass(frozen=True)
class DepartmentForecast:
    department: str
    current_revenue: float
    projected_revenue: float
    growth_rate: float
    confidence: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "department": self.department,
            "displayName": department_display_name(self.department),
            "currentRevenue": self.current_revenue,
            "projectedRevenue": self.projected_revenue,
            "growthRate": self.growth_rate,
            "confidence": self.confidence.value,
        }


# ---------------------------------------------------------------------------
# Seasonality outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthlySeasonData:
    month: int  # 0=Jan .. 11=Dec
    month_name: str
    avg_revenue: float
    avg_orders: float
    avg_profit: float
    data_points: int
    season_type: SeasonType
    percent_from_average: float

    def __post_init__(self):
        if not 0 <= self.month <= 11:
            raise ValueError(f"Month must be between 0 and 11, got {self.month}")
        if self.data_points < 0:
            raise ValueError("Data points cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "monthName": self.month_name,
            "avgRevenue": self.avg_revenue,
            "avgOrders": self.avg_orders,
            "avgProfit": self.avg_profit,
            "dataPoints": self.data_points,
            "seasonType": self.season_type.value,
            "percentFromAverage": self.percent_from_average,
        }


@dataclass(frozen=True)
class QuarterlySeasonData:
    quarter: int  # 0=Q1 .. 3=Q4
    quarter_name: str
    avg_revenue: float
    avg_orders: float
    avg_profit: float
    data_points: int
    season_type: SeasonType
    percent_from_average: float

    def __post_init__(self):
        if not 0 <= self.quarter <= 3:
            raise ValueError(f"Quarter must be between 0 and 3, got {self.quarter}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quarter": self.quarter,
            "quarterName": self.quarter_name,
            "avgRevenue": self.avg_revenue,
            "avgOrders": self.avg_orders,
            "avgProfit": self.avg_profit,
            "dataPoints": self.data_points,
            "seasonType": self.season_type.value,
            "percentFromAverage": self.percent_from_average,
        }


@dataclass(frozen=True)
class SeasonalityInsight:
    type: InsightType
    title: str
    description: str
    impact: InsightImpact
    months: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "impact": self.impact.value,
        }
        if self.months is not None:
            result["months"] = list(self.months)
        return result


@dataclass(frozen=True)
class MonthSummary:
    month: str
    avg_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "avgRevenue": self.avg_revenue}


@dataclass(frozen=True)
class SeasonalityMetrics:
    peak_months: Tuple[str, ...]
    low_months: Tuple[str, ...]
    peak_quarter: str
    low_quarter: str
    seasonality_index: float  # 0-100
    best_month: MonthSummary
    worst_month: MonthSummary
    year_over_year_growth: float  # percent
    predicted_next_month_revenue: float
    insights: Tuple[SeasonalityInsight, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peakMonths": list(self.peak_months),
            "lowMonths": list(self.low_months),
            "peakQuarter": self.peak_quarter,
            "lowQuarter": self.low_quarter,
            "seasonalityIndex": self.seasonality_index,
            "bestMonth": self.best_month.to_dict(),
            "worstMonth": self.worst_month.to_dict(),
            "yearOverYearGrowth": self.year_over_year_growth,
            "predictedNextMonthRevenue": self.predicted_next_month_revenue,
            "insights": [i.to_dict() for i in self.insights],
        }


@dataclass(frozen=True)
class SeasonalityReport:
    monthly_data: Tuple[MonthlySeasonData, ...]
    quarterly_data: Tuple[QuarterlySeasonData, ...]
    metrics: SeasonalityMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyData": [m.to_dict() for m in self.monthly_data],
            "quarterlyData": [q.to_dict() for q in self.quarterly_data],
            "metrics": self.metrics.to_dict(),
        }


# ---------------------------------------------------------------------------
# Monthly trend outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DepartmentMonthTrend:
    department: str
    revenue: float
    cogs: float
    gross_profit: float
    order_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "department": self.department,
            "displayName": department_display_name(self.department),
            "revenue": self.revenue,
            "cogs": self.cogs,
            "grossProfit": self.gross_profit,
            "orderCount": self.order_count,
        }


@dataclass(frozen=True)
class MonthlyTrendData:
    month: str        # "2024-01"
    month_label: str  # "Jan 2024"
    revenue: float
    cogs: float
    gross_profit: float
    gross_margin: float  # percent of revenue
    tax: float
    net_profit: float
    net_margin: float
    order_count: int
    avg_order_value: float
    departments: Tuple[DepartmentMonthTrend, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.revenue < 0 or self.cogs < 0 or self.tax < 0:
            raise ValueError("Monthly revenue, COGS and tax cannot be negative")
        if self.order_count < 0:
            raise ValueError("Order count cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "monthLabel": self.month_label,
            "revenue": self.revenue,
            "cogs": self.cogs,
            "grossProfit": self.gross_profit,
            "grossMargin": self.gross_margin,
            "tax": self.tax,
            "netProfit": self.net_profit,
            "netMargin": self.net_margin,
            "orderCount": self.order_count,
            "avgOrderValue": self.avg_order_value,
            "departments": [d.to_dict() for d in self.departments],
        }


@dataclass(frozen=True)
class MonthRevenue:
    month: str  # month label
    revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "revenue": self.revenue}


@dataclass(frozen=True)
class TrendMetrics:
    revenue_growth: float  # percent, first vs last month
    profit_growth: float
    margin_trend: MarginTrend
    best_month: Optional[MonthRevenue]
    worst_month: Optional[MonthRevenue]
    average_monthly_revenue: float
    average_monthly_profit: float
    revenue_volatility: float  # coefficient of variation, percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenueGrowth": self.revenue_growth,
            "profitGrowth": self.profit_growth,
            "marginTrend": self.margin_trend.value,
            "bestMonth": self.best_month.to_dict() if self.best_month else None,
            "worstMonth": self.worst_month.to_dict() if self.worst_month else None,
            "averageMonthlyRevenue": self.average_monthly_revenue,
            "averageMonthlyProfit": self.average_monthly_profit,
            "revenueVolatility": self.revenue_volatility,
        }


@dataclass(frozen=True)
class TrendReport:
    monthly_data: Tuple[MonthlyTrendData, ...]
    metrics: TrendMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyData": [m.to_dict() for m in self.monthly_data],
            "metrics": self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class OperationalReport:
    """Overall forecast plus per-department ranking, built from one fetch."""
    forecast: Forecast
    department_forecasts: Tuple[DepartmentForecast, ...]
    daily_series: Tuple[DailyObservation, ...]
    department_series: Dict[str, Tuple[DailyObservation, ...]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forecast": self.forecast.to_dict(),
            "departmentForecasts": [d.to_dict() for d in self.department_forecasts],
            "historyDays": len(self.daily_series),
        }


def round2(value: float) -> float:
    """Round a monetary value to 2 decimals at the point of emission."""
    return round(value, 2)
