# Core components for inventory records and Shopify stock reconciliation.
# Modules that talk to the store or storefront (sync, csv_io) are imported
# directly from their modules to keep this package free of client imports.

from .errors import (
    SyncError,
    ConnectivityError,
    NotFoundError,
    StoreError,
    ConflictError,
    StorefrontError,
    PushError,
)
from .models import InventoryFields, InventoryRecord, SyncState
from .reconciliation import MatchType, MatchResult, RecordResolver
from .pacing import Pacer, FixedIntervalPacer, TokenBucketPacer
from .quality import DataQualityReport, DataQualityChecker
from .analysis import (
    classify_status,
    records_to_frame,
    filter_inventory,
    compute_key_metrics,
)

__all__ = [
    "SyncError",
    "ConnectivityError",
    "NotFoundError",
    "StoreError",
    "ConflictError",
    "StorefrontError",
    "PushError",
    "InventoryFields",
    "InventoryRecord",
    "SyncState",
    "MatchType",
    "MatchResult",
    "RecordResolver",
    "Pacer",
    "FixedIntervalPacer",
    "TokenBucketPacer",
    "DataQualityReport",
    "DataQualityChecker",
    "classify_status",
    "records_to_frame",
    "filter_inventory",
    "compute_key_metrics",
]
