import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Shopify Admin API ---
SHOPIFY_STORE_URL = os.getenv("SHOPIFY_STORE_URL")
SHOPIFY_ACCESS_TOKEN = os.getenv("SHOPIFY_ACCESS_TOKEN")
SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2025-01")
SHOPIFY_TIMEOUT = float(os.getenv("SHOPIFY_TIMEOUT", "30"))
# Shopify caps a single page at 250 records.
SHOPIFY_PAGE_LIMIT = int(os.getenv("SHOPIFY_PAGE_LIMIT", "250"))

# --- Storage ---
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'inventory.db'}")
SYNC_STATE_FILE = Path(os.getenv("SYNC_STATE_FILE", str(BASE_DIR / "sync_state.json")))
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))

# --- Sync Pacing ---
# Pause between consecutive storefront calls in catalog import and bulk push.
SYNC_DELAY_SECONDS = float(os.getenv("SYNC_DELAY_SECONDS", "0.5"))
# Order lookback used when the store has never been synced.
ORDER_LOOKBACK_DAYS = int(os.getenv("ORDER_LOOKBACK_DAYS", "7"))

# --- Shared Business Logic ---
DEFAULT_REORDER_LEVEL = 5
DEFAULT_DESIGN = "Shopify Import"
SYNTHETIC_SKU_PREFIX = "shopify-"

# Fixed column order for CSV import/export.
CSV_COLUMNS = [
    "product_name",
    "local_name",
    "sku",
    "sellable_stock",
    "unusable_stock",
    "hold_stock",
    "design",
    "color",
    "reorder_level",
    "supplier",
]

STOCK_STATUSES = ["out_of_stock", "critical", "in_stock"]
