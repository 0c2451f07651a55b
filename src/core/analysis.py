"""
Inventory dashboard analysis functions.

Computes:
- Stock status per record (out of stock / critical / in stock)
- Filtered views for the record table
- Headline metrics and chart data
"""

import pandas as pd

from . import settings
from .models import InventoryRecord

RECORD_COLUMNS = ["id", "version", "created_at"] + settings.CSV_COLUMNS


def classify_status(sellable_stock: int, reorder_level: int) -> str:
    """
    Stock status of a record.

    - out_of_stock: nothing left to sell
    - critical: sellable stock below the reorder level
    - in_stock: everything else
    """
    if sellable_stock <= 0:
        return "out_of_stock"
    if sellable_stock < reorder_level:
        return "critical"
    return "in_stock"


def records_to_frame(records: list[InventoryRecord]) -> pd.DataFrame:
    """Records as a DataFrame with derived `total` and `status` columns."""
    df = pd.DataFrame([r.model_dump() for r in records], columns=RECORD_COLUMNS)

    for col in ("sellable_stock", "unusable_stock", "hold_stock", "reorder_level"):
        df[col] = df[col].astype(int)

    df["total"] = df["sellable_stock"] + df["unusable_stock"] + df["hold_stock"]
    df["status"] = [
        classify_status(s, r) for s, r in zip(df["sellable_stock"], df["reorder_level"])
    ]
    return df


def filter_inventory(
    df: pd.DataFrame,
    search: str = "",
    designs: list[str] | None = None,
    statuses: list[str] | None = None,
) -> pd.DataFrame:
    """
    Narrow the record table.

    Args:
        search: Case-insensitive text matched against product name, local name and SKU
        designs: Keep only these designs (None or empty keeps all)
        statuses: Keep only these statuses (None or empty keeps all)
    """
    mask = pd.Series(True, index=df.index)

    search = search.strip().lower()
    if search:
        text_mask = pd.Series(False, index=df.index)
        for col in ("product_name", "local_name", "sku"):
            text_mask |= df[col].fillna("").str.lower().str.contains(search, regex=False)
        mask &= text_mask

    if designs:
        mask &= df["design"].isin(designs)

    if statuses:
        mask &= df["status"].isin(statuses)

    return df[mask]


def compute_key_metrics(df: pd.DataFrame) -> dict:
    """Headline numbers for the metrics row."""
    return {
        "total_skus": len(df),
        "sellable_units": int(df["sellable_stock"].sum()),
        "unusable_units": int(df["unusable_stock"].sum()),
        "hold_units": int(df["hold_stock"].sum()),
        "total_units": int(df["total"].sum()),
        "critical_count": int((df["status"] == "critical").sum()),
        "out_of_stock_count": int((df["status"] == "out_of_stock").sum()),
    }


def stock_by_design(df: pd.DataFrame) -> pd.DataFrame:
    """Stock categories summed per design, largest total first."""
    if len(df) == 0:
        return pd.DataFrame(
            columns=["design", "sellable_stock", "unusable_stock", "hold_stock", "total"]
        )

    grouped = (
        df.assign(design=df["design"].replace("", "Unassigned"))
        .groupby("design")[["sellable_stock", "unusable_stock", "hold_stock", "total"]]
        .sum()
        .reset_index()
    )
    return grouped.sort_values("total", ascending=False).reset_index(drop=True)


def status_breakdown(df: pd.DataFrame) -> dict[str, int]:
    """Record count per status, in settings.STOCK_STATUSES order."""
    counts = df["status"].value_counts()
    return {status: int(counts.get(status, 0)) for status in settings.STOCK_STATUSES}
