"""
Data quality checks for inventory data.

Used on CSV uploads before they are inserted, and on the live store to
surface records the sync engine can't match reliably (blank or duplicate
SKUs, since SKU lookups take the first match).
"""

from dataclasses import dataclass, field
from typing import Any, Callable

import pandas as pd

from .models import InventoryRecord


@dataclass
class DataQualityIssue:
    """A single data quality issue found in the data."""

    column: str
    issue_type: str  # "missing", "duplicate", "invalid_number"
    severity: str  # "critical", "warning", "info"
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """Summary report of data quality for a single data source."""

    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "critical"]

    @property
    def warning_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "critical": len(self.critical_issues),
            "warnings": len(self.warning_issues),
            "info": len([i for i in self.issues if i.severity == "info"]),
        }


def _blank(series: pd.Series) -> pd.Series:
    return series.isna() | (series.astype(str).str.strip() == "")


class DataQualityChecker:
    """
    Collects checks and runs them against a DataFrame.

    Each check_* method registers a check and returns self for chaining:
        report = (
            DataQualityChecker("CSV upload")
            .check_missing(["product_name"])
            .check_duplicates(["sku"])
            .run(df)
        )
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self._checks: list[Callable[[pd.DataFrame], list[DataQualityIssue]]] = []

    def add_check(
        self, check_fn: Callable[[pd.DataFrame], list[DataQualityIssue]]
    ) -> "DataQualityChecker":
        self._checks.append(check_fn)
        return self

    def check_missing(self, columns: list[str], severity: str = "warning") -> "DataQualityChecker":
        """Flag blank or missing cells."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            issues = []
            for col in columns:
                if col not in df.columns or len(df) == 0:
                    continue
                missing = int(_blank(df[col]).sum())
                if missing > 0:
                    pct = (missing / len(df)) * 100
                    issues.append(
                        DataQualityIssue(
                            column=col,
                            issue_type="missing",
                            severity=severity,
                            count=missing,
                            percentage=pct,
                            description=f"{missing:,} blank values ({pct:.1f}%)",
                        )
                    )
            return issues

        return self.add_check(check)

    def check_duplicates(
        self, key_columns: list[str], severity: str = "warning"
    ) -> "DataQualityChecker":
        """Flag rows sharing the same non-blank key."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if any(col not in df.columns for col in key_columns) or len(df) == 0:
                return []
            keyed = df[~_blank(df[key_columns[0]])]
            dupe_mask = keyed.duplicated(subset=key_columns, keep=False)
            dupes = int(dupe_mask.sum())
            if dupes == 0:
                return []
            samples = keyed.loc[dupe_mask, key_columns[0]].drop_duplicates().head(5).tolist()
            return [
                DataQualityIssue(
                    column=", ".join(key_columns),
                    issue_type="duplicate",
                    severity=severity,
                    count=dupes,
                    percentage=(dupes / len(df)) * 100,
                    sample_values=samples,
                    description=f"{dupes:,} rows share a key; lookups use the first one",
                )
            ]

        return self.add_check(check)

    def check_numbers(self, column: str, severity: str = "warning") -> "DataQualityChecker":
        """Flag cells that are not a non-negative number (blank cells are fine)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns or len(df) == 0:
                return []
            present = df.loc[~_blank(df[column]), column]
            values = pd.to_numeric(present.astype(str).str.replace(",", ""), errors="coerce")
            invalid_mask = values.isna() | (values < 0)
            invalid = int(invalid_mask.sum())
            if invalid == 0:
                return []
            return [
                DataQualityIssue(
                    column=column,
                    issue_type="invalid_number",
                    severity=severity,
                    count=invalid,
                    percentage=(invalid / len(df)) * 100,
                    sample_values=present[invalid_mask].head(5).tolist(),
                    description=f"{invalid:,} values are not valid counts and will use the default",
                )
            ]

        return self.add_check(check)

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        """Run all checks and return a quality report."""
        all_issues = []
        for check_fn in self._checks:
            all_issues.extend(check_fn(df))

        return DataQualityReport(
            source_name=self.source_name, total_rows=len(df), issues=all_issues
        )


def inventory_quality_report(records: list[InventoryRecord]) -> DataQualityReport:
    """Check the live store for SKUs the sync engine can't match reliably."""
    df = pd.DataFrame(
        [{"sku": r.sku, "product_name": r.product_name} for r in records],
        columns=["sku", "product_name"],
    )
    checker = (
        DataQualityChecker("Inventory store")
        .check_missing(["sku"], severity="info")
        .check_duplicates(["sku"], severity="critical")
        .check_missing(["product_name"], severity="warning")
    )
    return checker.run(df)
