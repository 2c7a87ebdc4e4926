"""
CSV record source with auto-create functionality.

Reads and writes raw revenue records (one row per order, booking or billing
line). Auto-creates the file with correct headers on first run.
"""
import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..domain.models import SalesRecord
from ..domain.validation import coerce_timestamp, validate_date_range
from ..utils.paths import get_data_dir

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Anything that can deliver raw records for an (inclusive) day range."""

    def read_records(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[SalesRecord]:
        ...


class CSVLayer:
    """Manages the raw-record CSV file with auto-create."""

    RECORDS_FILE = "sales_records.csv"
    COLUMNS = ["timestamp", "department", "amount", "cogs", "tax"]

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize CSV layer.

        Args:
            data_dir: Directory holding sales_records.csv. Defaults to the
                      application data directory.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._ensure_file_exists()

    @property
    def records_path(self) -> Path:
        return self.data_dir / self.RECORDS_FILE

    def _ensure_file_exists(self):
        """Create the CSV file with headers if it doesn't exist."""
        if not self.records_path.exists():
            with open(self.records_path, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=self.COLUMNS)
                writer.writeheader()

    def _read_csv(self) -> List[Dict[str, str]]:
        """Read CSV file and return list of dicts."""
        if not self.records_path.exists():
            return []

        with open(self.records_path, "r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            return list(reader)

    def read_records(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[SalesRecord]:
        """
        Read raw records, optionally limited to an inclusive day range.

        Rows with a missing or unparseable timestamp are skipped (warning).
        Numeric fields are returned as stored; coercion happens during
        aggregation.

        Raises:
            ValueError: If start is after end
        """
        is_valid, error = validate_date_range(start, end)
        if not is_valid:
            raise ValueError(error)

        records = []
        for line_no, row in enumerate(self._read_csv(), start=2):
            ts = coerce_timestamp(row.get("timestamp", ""))
            if ts is None:
                logger.warning(
                    f"Invalid timestamp '{row.get('timestamp')}' in {self.RECORDS_FILE} "
                    f"line {line_no}, row skipped"
                )
                continue

            day = ts.date()
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue

            records.append(SalesRecord(
                timestamp=ts,
                amount=row.get("amount"),
                cogs=row.get("cogs") or None,
                tax=row.get("tax") or 0.0,
                department=(row.get("department") or "").strip() or None,
            ))

        logger.debug(f"Read {len(records)} records from {self.records_path}")
        return records

    @staticmethod
    def _to_row(record: SalesRecord) -> Dict[str, Any]:
        ts = record.timestamp
        if isinstance(ts, (datetime, date)):
            ts = ts.isoformat()
        return {
            "timestamp": ts or "",
            "department": record.department or "",
            "amount": "" if record.amount is None else record.amount,
            "cogs": "" if record.cogs is None else record.cogs,
            "tax": "" if record.tax is None else record.tax,
        }

    def append_records(self, records: Iterable[SalesRecord]):
        """Append records to sales_records.csv."""
        with open(self.records_path, "a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self.COLUMNS)
            for record in records:
                writer.writerow(self._to_row(record))

    def write_records(self, records: Iterable[SalesRecord]):
        """Overwrite sales_records.csv with the given records (bulk updates)."""
        with open(self.records_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self.COLUMNS)
            writer.writeheader()
            for record in records:
                writer.writerow(self._to_row(record))
