"""
CSV import/export of inventory records.

Format: one header row, columns in settings.CSV_COLUMNS order, text fields
double-quoted. On import, unusable numbers fall back to 0 (reorder level: 5).
"""

import csv
import io
import logging
import re
from dataclasses import dataclass, field

import pandas as pd

from clients.store_client import InventoryStore

from . import settings
from .errors import StoreError
from .models import InventoryFields, InventoryRecord
from .parsers import clean_sku, clean_text, parse_quantity
from .quality import DataQualityChecker, DataQualityIssue, DataQualityReport

logger = logging.getLogger(__name__)

NUMERIC_DEFAULTS = {
    "sellable_stock": 0,
    "unusable_stock": 0,
    "hold_stock": 0,
    "reorder_level": settings.DEFAULT_REORDER_LEVEL,
}


@dataclass
class CsvImportResult:
    created: int = 0
    failed: int = 0
    log: list[str] = field(default_factory=list)
    quality_report: DataQualityReport | None = None

    def message(self) -> str:
        return f"CSV import finished: {self.created} created, {self.failed} failed"


def records_to_csv(records: list[InventoryRecord]) -> str:
    """Render records in the fixed export column order."""
    df = pd.DataFrame(
        [r.model_dump(include=set(settings.CSV_COLUMNS)) for r in records],
        columns=settings.CSV_COLUMNS,
    )
    return df.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")


def normalize_header(name) -> str:
    """`productName`, `Product Name` and `product_name` all become `product_name`."""
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(name).strip())
    return re.sub(r"[\s_]+", "_", text).lower()


def _load_csv(text: str) -> tuple[pd.DataFrame, list[str]]:
    """Aligned raw frame plus the export columns the file does not provide."""
    if not text.strip():
        return pd.DataFrame(columns=settings.CSV_COLUMNS), []

    df = pd.read_csv(
        io.StringIO(text.lstrip("\ufeff")),
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
    )
    headers = [normalize_header(c) for c in df.columns]
    if len(headers) == len(settings.CSV_COLUMNS) and set(headers) != set(settings.CSV_COLUMNS):
        logger.info("Unrecognised CSV headers %s, mapping columns by position", list(df.columns))
        headers = list(settings.CSV_COLUMNS)
    df.columns = headers
    df = df.loc[:, ~df.columns.duplicated()]

    missing = [c for c in settings.CSV_COLUMNS if c not in df.columns]
    return df.reindex(columns=settings.CSV_COLUMNS, fill_value=""), missing


def read_inventory_csv(text: str) -> pd.DataFrame:
    """
    Load an uploaded CSV as raw strings, aligned to the export columns.

    Headers are matched by name in any order. A file with the full column
    count but unknown header names is read in export column order. Missing
    columns are added blank and extra columns dropped.
    """
    return _load_csv(text)[0]


def row_to_fields(row: dict) -> InventoryFields:
    values = {
        col: parse_quantity(row.get(col), default)
        for col, default in NUMERIC_DEFAULTS.items()
    }
    for col in ("product_name", "local_name", "design", "color", "supplier"):
        values[col] = clean_text(row.get(col))
    values["sku"] = clean_sku(row.get("sku"))
    return InventoryFields(**values)


def csv_quality_checker() -> DataQualityChecker:
    checker = (
        DataQualityChecker("CSV upload")
        .check_missing(["product_name"], severity="warning")
        .check_missing(["sku"], severity="info")
        .check_duplicates(["sku"], severity="warning")
    )
    for col in NUMERIC_DEFAULTS:
        checker.check_numbers(col)
    return checker


def import_csv(store: InventoryStore, text: str) -> CsvImportResult:
    """
    Insert every row of an uploaded CSV as a new record.

    Rows are inserted independently; a failed insert is logged and the rest
    of the file still goes in. A file missing any export column is rejected
    whole with a critical quality issue.
    """
    df, missing = _load_csv(text)
    result = CsvImportResult(quality_report=csv_quality_checker().run(df))

    if missing:
        result.quality_report.issues.append(
            DataQualityIssue(
                column=", ".join(missing),
                issue_type="missing_column",
                severity="critical",
                count=len(df),
                percentage=100.0 if len(df) else 0.0,
                description=f"Columns not found in the file: {', '.join(missing)}",
            )
        )
        result.failed = len(df)
        result.log.append(f"❌ CSV is missing columns: {', '.join(missing)}")
        logger.warning("CSV import rejected, missing columns: %s", missing)
        return result

    for line_no, row in enumerate(df.to_dict("records"), start=2):
        fields = row_to_fields(row)
        label = fields.sku or fields.product_name or f"line {line_no}"
        try:
            store.insert(fields)
        except StoreError as e:
            result.failed += 1
            result.log.append(f"❌ {label}: {e}")
            logger.warning("CSV import failed on line %d: %s", line_no, e)
            continue
        result.created += 1
        result.log.append(f"✅ {label}")

    logger.info("CSV import: %d created, %d failed", result.created, result.failed)
    return result
