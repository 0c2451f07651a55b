"""
Value parsers for inventory data arriving from CSV uploads, forms and Shopify.

These parsers handle the messy reality of operator-maintained data:
- Stock counts typed as "12", "12.0", " 12 " or left blank
- SKUs with stray whitespace, or missing entirely on the storefront side
"""

import math

import pandas as pd

from . import settings


def parse_quantity(value, default: int = 0) -> int:
    """
    Parse a stock count, falling back to `default` when it can't be used.

    Blank cells, non-numeric text and negative numbers all yield the default,
    so a bad cell never produces a negative stock level.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return default

    text = str(value).strip().replace(",", "")
    if not text:
        return default

    try:
        number = float(text)
    except ValueError:
        return default

    if not math.isfinite(number) or number < 0:
        return default
    return int(number)


def clean_text(value) -> str:
    """Strip a free-text cell; missing values become an empty string."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return " ".join(str(value).split())


def clean_sku(value) -> str:
    """
    Normalize a SKU for exact matching.

    Only surrounding whitespace is removed. Case and prefixes are preserved
    because Shopify compares SKUs verbatim.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def synthetic_sku(product_id: int) -> str:
    """Stand-in SKU for a storefront product whose variant has none."""
    return f"{settings.SYNTHETIC_SKU_PREFIX}{product_id}"
