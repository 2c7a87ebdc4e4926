"""
Path resolver for hotel-ops-analytics.

Rules
-----
* base_dir  → $HOTEL_ANALYTICS_HOME if set, otherwise the project root
* data_dir  → base_dir/data  (preferred); fallback ~/.hotel_analytics/data
* logs_dir  → base_dir/logs  (preferred); fallback ~/.hotel_analytics/logs

NEVER use os.getcwd() or relative Path("...") strings in runtime code;
always call one of the functions below.
"""

import os
from pathlib import Path

HOME_ENV_VAR = "HOTEL_ANALYTICS_HOME"


def _get_base_dir() -> Path:
    """
    Return the application's root directory.

    Dev: hotel_analytics/utils/paths.py → parent.parent.parent = project root
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    return Path(__file__).resolve().parent.parent.parent


def _try_writable(path: Path) -> bool:
    """
    Return True if *path* can be created and used as a writable directory.

    Uses a canary-file probe so permission issues are detected up front.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        canary = path / ".write_probe"
        canary.touch()
        canary.unlink()
        return True
    except (OSError, PermissionError):
        return False


def _home_dir(sub: str) -> Path:
    """Return ~/.hotel_analytics/<sub>."""
    return Path.home() / ".hotel_analytics" / sub


def _resolve(sub: str) -> Path:
    primary = _get_base_dir() / sub
    if _try_writable(primary):
        return primary
    fallback = _home_dir(sub)
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def get_data_dir() -> Path:
    """
    Data directory (settings.json, sales_records.csv).

    Priority:
      1. <base_dir>/data
      2. ~/.hotel_analytics/data  ← fallback if base_dir is read-only
    """
    return _resolve("data")


def get_logs_dir() -> Path:
    """
    Logs directory.

    Priority:
      1. <base_dir>/logs
      2. ~/.hotel_analytics/logs
    """
    return _resolve("logs")
