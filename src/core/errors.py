"""
Error taxonomy for store access and storefront synchronization.

Batch procedures catch these per item and turn them into log lines; only a
failed initial fetch or missing credentials abort a whole run.
"""

from typing import Any


class SyncError(Exception):
    """Base class for every error raised by the clients and the sync engine."""


class ConnectivityError(SyncError):
    """Credentials are missing or the storefront could not be reached."""


class NotFoundError(SyncError):
    """An expected entity (SKU, location, record) does not exist."""


class StoreError(SyncError):
    """The inventory store rejected or failed a read/write."""


class ConflictError(StoreError):
    """A versioned write found the record changed since it was read."""

    def __init__(self, record_id: int, expected_version: int, actual_version: int | None):
        self.record_id = record_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Record {record_id} changed since it was read "
            f"(expected version {expected_version}, found {actual_version})"
        )


class StorefrontError(SyncError):
    """Shopify answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class PushError(SyncError):
    """Pushing one record's stock to the storefront failed."""

    def __init__(self, sku: str, message: str):
        self.sku = sku
        super().__init__(message)
