"""
Record matching and run results for storefront <-> store reconciliation.

Handles the common retail challenge of finding the local record a storefront
line item refers to when the storefront's SKU may be blank or stale.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Protocol

from .models import InventoryRecord, SyncState


class MatchType(Enum):
    """How a match was determined."""

    SKU = "sku"  # Exact SKU equality
    NAME = "name"  # Case-insensitive substring of the product name
    NONE = "none"  # No match found


@dataclass(frozen=True)
class MatchResult:
    """Result of resolving a single storefront item to a local record."""

    matched_by: MatchType
    record: InventoryRecord | None = None

    @property
    def found(self) -> bool:
        return self.matched_by is not MatchType.NONE


class RecordLookup(Protocol):
    def get_one(self, field: str, value) -> InventoryRecord | None: ...

    def find_by_name(self, fragment: str) -> InventoryRecord | None: ...


class RecordResolver:
    """
    Resolves storefront items to local records using ordered strategies.

    Default order:
    1. Exact SKU match (skipped when the item has no SKU)
    2. Case-insensitive product-name substring match, first record wins

    The first strategy that returns a record decides the match, so a SKU hit
    always beats a name hit on a different record.

    Usage:
        resolver = RecordResolver(store)
        result = resolver.resolve(sku="RS-1", name="Red Saree")
        if result.found:
            ...
    """

    def __init__(self, lookup: RecordLookup):
        self.lookup = lookup
        self._strategies: list[
            tuple[MatchType, Callable[[str, str], InventoryRecord | None]]
        ] = [
            (MatchType.SKU, self._match_sku),
            (MatchType.NAME, self._match_name),
        ]

    def _match_sku(self, sku: str, name: str) -> InventoryRecord | None:
        if not sku:
            return None
        return self.lookup.get_one("sku", sku)

    def _match_name(self, sku: str, name: str) -> InventoryRecord | None:
        if not name:
            return None
        return self.lookup.find_by_name(name)

    def resolve(self, sku: str | None, name: str | None) -> MatchResult:
        sku = (sku or "").strip()
        name = (name or "").strip()

        for match_type, matcher in self._strategies:
            record = matcher(sku, name)
            if record is not None:
                return MatchResult(matched_by=match_type, record=record)

        return MatchResult(matched_by=MatchType.NONE)


def deduct_stock(current: int, quantity: int) -> int:
    """Stock left after selling `quantity`; never below zero."""
    return max(0, current - quantity)


@dataclass
class ImportResult:
    """Summary of a catalog import run."""

    created: int = 0
    updated: int = 0
    failed: int = 0
    log: list[str] = field(default_factory=list)
    records: list[InventoryRecord] = field(default_factory=list)
    sync_state: SyncState = field(default_factory=SyncState)

    def summary(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
        }

    def message(self) -> str:
        return (
            f"Catalog import finished: {self.created} created, "
            f"{self.updated} updated, {self.failed} failed"
        )


@dataclass
class OrdersResult:
    """Summary of an order sync run."""

    since: datetime | None = None
    processed: int = 0
    not_found: int = 0
    failed: int = 0
    log: list[str] = field(default_factory=list)
    records: list[InventoryRecord] = field(default_factory=list)
    sync_state: SyncState = field(default_factory=SyncState)

    def summary(self) -> dict:
        return {
            "processed": self.processed,
            "not_found": self.not_found,
            "failed": self.failed,
        }

    def message(self) -> str:
        return (
            f"Order sync finished: {self.processed} processed, "
            f"{self.not_found} not found, {self.failed} failed"
        )


@dataclass
class BulkPushResult:
    """Summary of a bulk stock push."""

    succeeded: int = 0
    failed: int = 0
    log: list[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {"succeeded": self.succeeded, "failed": self.failed}

    def message(self) -> str:
        return f"Stock push finished: {self.succeeded} succeeded, {self.failed} failed"
