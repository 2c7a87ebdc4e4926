"""
Project configuration and constants.
"""
from pathlib import Path
import json
import logging
from typing import Any, Dict, Optional

from .utils.paths import get_data_dir

logger = logging.getLogger(__name__)

# Settings file (runtime-tunable defaults only)
SETTINGS_FILENAME = "settings.json"

# COGS estimation ratios. The seasonality ratio is independent of the
# aggregation fallback and must not be unified with it.
DEFAULT_COGS_RATIO = 0.3
SEASONALITY_COGS_RATIO = 0.35

# Forecast confidence (number of daily observations)
HIGH_CONFIDENCE_MIN_DAYS = 30
MEDIUM_CONFIDENCE_MIN_DAYS = 14

# Trend / growth windows
TREND_WINDOW_DAYS = 7
GROWTH_MIN_DAYS = 14
TREND_THRESHOLD = 0.05  # ±5% band for "stable"

# Monthly tiers: (lower bound in % from average, tier), checked top-down
MONTHLY_TIER_THRESHOLDS = (
    (20.0, "peak"),
    (10.0, "high"),
    (-10.0, "normal"),
    (-20.0, "low"),
)
QUARTERLY_TIER_THRESHOLDS = (
    (15.0, "peak"),
    (5.0, "high"),
    (-5.0, "normal"),
    (-15.0, "low"),
)

SEASONALITY_INDEX_ALERT = 30.0
REVENUE_GAP_RATIO = 2.0

# Monthly trend analysis
MARGIN_TREND_THRESHOLD = 2.0  # gross margin change, percentage points
# COGS estimate when a record carries none (others use DEFAULT_COGS_RATIO)
DEPARTMENT_COGS_RATIOS = {
    "spa": 0.2,
    "frontoffice": 0.0,
}
# Tax on these departments is not deducted from net profit
NET_PROFIT_TAX_EXEMPT_DEPARTMENTS = ("frontoffice",)

# Default parameters (can be overridden via settings.json)
DEFAULT_FORECAST_DAYS = 7
DEFAULT_YEARS_BACK = 2
DEFAULT_TREND_MONTHS = 6

_DEFAULT_SETTINGS = {
    "forecast_days": DEFAULT_FORECAST_DAYS,
    "years_back": DEFAULT_YEARS_BACK,
    "trend_months": DEFAULT_TREND_MONTHS,
}


def _settings_path(data_dir: Optional[Path] = None) -> Path:
    base = Path(data_dir) if data_dir is not None else get_data_dir()
    return base / SETTINGS_FILENAME


def get_analytics_settings(data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load analytics defaults from settings.json.

    Unknown keys are ignored; invalid values (non-integer or < 1) fall back
    to the built-in defaults.

    Args:
        data_dir: Directory holding settings.json (default: application data dir)

    Returns:
        Dict with "forecast_days", "years_back" and "trend_months"
    """
    settings = dict(_DEFAULT_SETTINGS)
    path = _settings_path(data_dir)

    if not path.exists():
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Unreadable settings file {path}: {e}, using defaults")
        return settings

    if not isinstance(stored, dict):
        return settings

    for key in _DEFAULT_SETTINGS:
        value = stored.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
            settings[key] = value

    return settings


def set_analytics_settings(
    data_dir: Optional[Path] = None,
    forecast_days: Optional[int] = None,
    years_back: Optional[int] = None,
    trend_months: Optional[int] = None,
) -> bool:
    """
    Persist analytics defaults to settings.json (other keys are preserved).

    Returns:
        True if successful, False otherwise
    """
    updates = {}
    if forecast_days is not None:
        if forecast_days < 1:
            return False
        updates["forecast_days"] = forecast_days
    if years_back is not None:
        if years_back < 1:
            return False
        updates["years_back"] = years_back
    if trend_months is not None:
        if trend_months < 1:
            return False
        updates["trend_months"] = trend_months

    path = _settings_path(data_dir)

    settings = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                settings = json.load(f)
        except (json.JSONDecodeError, IOError):
            pass  # Start with empty settings
        if not isinstance(settings, dict):
            settings = {}

    settings.update(updates)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
        return True
    except IOError as e:
        logger.error(f"Failed to write settings file {path}: {e}")
        return False
