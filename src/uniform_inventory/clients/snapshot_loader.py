"""
Loads item and order snapshots exported by the inventory services.

Formats accepted:
- JSON: a list of records, or an object with the list under "items" /
  "orders" (the shape the list endpoints return)
- CSV / XLSX: one record per row, as exported from the admin spreadsheet.
  Headers like "Item Type" are mapped to item_type.

Rows are validated one at a time. A row that fails validation is skipped
and logged; it never aborts the load. A missing file is an empty snapshot.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, ValidationError

from .. import settings
from ..core.models import ItemRecord, OrderRecord
from ..core.quality import DataQualityIssue, DataQualityReport, raw_timestamp_checker

logger = logging.getLogger(__name__)

ITEM_TIMESTAMP_COLUMNS = ["createdAt", "created_at", "updatedAt", "updated_at"]
ORDER_TIMESTAMP_COLUMNS = ITEM_TIMESTAMP_COLUMNS + [
    "completedAt", "completed_at", "claimedDate", "claimed_date",
]


def _field_name(header: str) -> str:
    """
    Spreadsheet headers ("Item Type", "Name") become field names (item_type,
    name). camelCase headers are already aliases and are left alone.
    """
    header = header.strip()
    if " " in header or header[:1].isupper():
        return "_".join(header.lower().split())
    return header


@dataclass
class LoadedSnapshot:
    """Validated records from one load, plus what was wrong with the raw files."""

    items: list[ItemRecord] = field(default_factory=list)
    orders: list[OrderRecord] = field(default_factory=list)
    quality_reports: dict[str, DataQualityReport] = field(default_factory=dict)


class SnapshotLoader:
    """
    Reads items and orders from a data directory.

    Usage:
        loader = SnapshotLoader(settings.DATA_DIR)
        snapshot = loader.load_all()
        report = build_inventory_report(snapshot.items, snapshot.orders)
    """

    def __init__(
        self,
        data_dir: Path | str | None = None,
        items_filename: str | None = None,
        orders_filename: str | None = None,
    ):
        self.data_dir = Path(data_dir or settings.DATA_DIR)
        self.items_filename = items_filename or settings.ITEMS_FILENAME
        self.orders_filename = orders_filename or settings.ORDERS_FILENAME

    def load_all(self) -> LoadedSnapshot:
        """Load and validate both snapshots."""
        items_raw = self.read_records(self.data_dir / self.items_filename, "items")
        orders_raw = self.read_records(self.data_dir / self.orders_filename, "orders")

        items, item_rejects = self._validate(items_raw, ItemRecord, "items")
        orders, order_rejects = self._validate(orders_raw, OrderRecord, "orders")

        quality_reports = {
            "items": self._check_raw_quality(
                "items", items_raw, ITEM_TIMESTAMP_COLUMNS, item_rejects
            ),
            "orders": self._check_raw_quality(
                "orders", orders_raw, ORDER_TIMESTAMP_COLUMNS, order_rejects
            ),
        }

        logger.info(
            "Loaded %d items and %d orders from %s", len(items), len(orders), self.data_dir
        )
        return LoadedSnapshot(items=items, orders=orders, quality_reports=quality_reports)

    def fetch(self) -> tuple[list[ItemRecord], list[OrderRecord]]:
        """Fresh (items, orders) snapshots; usable as an InventoryMonitor provider."""
        snapshot = self.load_all()
        return snapshot.items, snapshot.orders

    def read_records(self, path: Path, list_key: str) -> list[Any]:
        """
        Raw records from a JSON, CSV or XLSX export.

        Returns an empty list (with a warning) when the file doesn't exist.
        """
        if not path.exists():
            logger.warning("Snapshot file %s not found; treating it as empty", path)
            return []

        suffix = path.suffix.lower()
        if suffix == ".json":
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                data = data.get(list_key, [])
            if not isinstance(data, list):
                logger.warning("%s does not contain a list of %s", path, list_key)
                return []
            return data

        if suffix == ".csv":
            df = pd.read_csv(path)
        elif suffix in (".xlsx", ".xls"):
            df = pd.read_excel(path)
        else:
            raise ValueError(f"Unsupported snapshot format: {path.name}")

        return self._frame_to_records(df)

    @staticmethod
    def _frame_to_records(df: pd.DataFrame) -> list[dict]:
        df.columns = [_field_name(c) for c in df.columns.astype(str)]
        df = df.astype(object).where(df.notna(), None)
        return df.to_dict("records")

    @staticmethod
    def _validate(
        records: list[Any], model: type[BaseModel], source_name: str
    ) -> tuple[list, list[Any]]:
        valid, rejected = [], []
        for position, record in enumerate(records):
            try:
                valid.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    "Skipping %s row %d: %d validation error(s): %s",
                    source_name,
                    position,
                    e.error_count(),
                    e.errors()[0]["msg"],
                )
                rejected.append(record)
        return valid, rejected

    @staticmethod
    def _check_raw_quality(
        source_name: str,
        records: list[Any],
        timestamp_columns: list[str],
        rejected: list[Any],
    ) -> DataQualityReport:
        """Quality checks that need the raw rows: unparseable timestamps and rejects."""
        df = pd.DataFrame([r for r in records if isinstance(r, dict)])
        columns = [c for c in timestamp_columns if c in df.columns]
        checker = raw_timestamp_checker(source_name, columns)

        def check_rejected(d: pd.DataFrame) -> list[DataQualityIssue]:
            if not rejected:
                return []
            return [
                DataQualityIssue(
                    column="*",
                    issue_type="invalid_format",
                    severity="warning",
                    count=len(rejected),
                    percentage=(len(rejected) / len(records)) * 100,
                    sample_values=[repr(r)[:80] for r in rejected[:5]],
                    description=f"{len(rejected):,} rows failed validation and were skipped",
                )
            ]

        checker.add_check(check_rejected)
        report = checker.run(df)
        report.total_rows = len(records)
        return report
