"""
Command-line reports over a CSV record file.

Usage:
    hotel-analytics forecast --data-dir data/ --days 14
    hotel-analytics forecast --asof 2024-06-30 --stats
    hotel-analytics seasonality --years 3
    hotel-analytics trends --months 12

Output is the report as JSON on stdout. Defaults for --days, --years and
--months come from settings.json in the data directory.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from .analytics.pipeline import (
    build_operational_report,
    build_seasonality_report,
    build_trend_report,
)
from .config import get_analytics_settings
from .forecast import forecast_stats
from .persistence.csv_layer import CSVLayer
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError("Value must be >= 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotel-analytics",
        description="Revenue forecast, seasonality and trend reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--data-dir", type=Path, help="Directory with sales_records.csv and settings.json")
    parser.add_argument("--log-dir", type=Path, help="Log directory (default: logs/)")
    parser.add_argument("--asof", type=_parse_date, help="Reference date (default: today)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to the console")

    sub = parser.add_subparsers(dest="command", required=True)

    fc = sub.add_parser("forecast", help="Overall and per-department forecast")
    fc.add_argument("--days", type=_positive_int, help="Forecast horizon in days")
    fc.add_argument("--stats", action="store_true", help="Include daily projection statistics")

    season = sub.add_parser("seasonality", help="Monthly/quarterly seasonality analysis")
    season.add_argument("--years", type=_positive_int, help="Lookback in years")

    trends = sub.add_parser("trends", help="Month-by-month revenue and margin trend")
    trends.add_argument("--months", type=_positive_int, help="Number of months ending with --asof")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(log_dir=args.log_dir, verbose=args.verbose)

    source = CSVLayer(args.data_dir)
    settings = get_analytics_settings(source.data_dir)
    asof = args.asof or date.today()

    try:
        if args.command == "forecast":
            horizon = args.days or settings["forecast_days"]
            report = build_operational_report(source, horizon_days=horizon, asof_date=asof)
            payload = report.to_dict()
            if args.stats:
                payload["stats"] = forecast_stats(report.forecast)
        elif args.command == "seasonality":
            years = args.years or settings["years_back"]
            payload = build_seasonality_report(source, years_back=years, asof_date=asof).to_dict()
        else:
            months = args.months or settings["trend_months"]
            payload = build_trend_report(source, months=months, asof_date=asof).to_dict()
    except (OSError, ValueError) as e:
        logger.error(f"Report failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
