"""
Shopify <-> local store synchronization.

Three procedures, each one long sequential run:
- import_catalog: storefront catalog -> local stock (overwrite)
- apply_orders: storefront orders since the last sync -> local stock (deduct)
- push_stock / bulk_push_stock: local sellable stock -> storefront (overwrite)

Only a failed initial fetch (or missing credentials) aborts a run. Per-item
failures are logged and counted, and the run moves on. Runs do not lock the
store; concurrent writers are detected per record through the version
counter and reported as failures.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

from clients.shopify_client import ShopifyClient
from clients.store_client import InventoryStore

from . import settings
from .errors import ConnectivityError, NotFoundError, PushError, StoreError, SyncError
from .models import InventoryFields, InventoryRecord, StorefrontProduct, SyncState
from .pacing import FixedIntervalPacer, Pacer
from .parsers import clean_sku, synthetic_sku
from .reconciliation import (
    BulkPushResult,
    ImportResult,
    OrdersResult,
    RecordResolver,
    deduct_stock,
)

logger = logging.getLogger(__name__)

# Catalog import maps each storefront product to exactly one local record, built
# from its first variant. Further variants of multi-variant products are not
# imported.
IMPORTED_VARIANT_INDEX = 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncEngine:
    """
    Reconciles the local inventory store with a Shopify storefront.

    Usage:
        engine = SyncEngine(InventoryStore(), ShopifyClient())
        result = engine.apply_orders(state_store.load())
        state_store.save(result.sync_state)
    """

    def __init__(
        self,
        store: InventoryStore,
        storefront: ShopifyClient,
        pacer: Pacer | None = None,
        clock: Callable[[], datetime] = _utcnow,
        lookback_days: int | None = None,
    ):
        self.store = store
        self.storefront = storefront
        self.pacer = pacer if pacer is not None else FixedIntervalPacer(settings.SYNC_DELAY_SECONDS)
        self.clock = clock
        self.lookback_days = (
            lookback_days if lookback_days is not None else settings.ORDER_LOOKBACK_DAYS
        )
        self.resolver = RecordResolver(store)

    def _require_connection(self) -> None:
        if not self.storefront.check_connection():
            raise ConnectivityError("Shopify credentials not configured")

    def _reload_records(self, result: ImportResult | OrdersResult) -> None:
        # Item writes are already committed; a failed reload must not lose sync_state
        try:
            result.records = self.store.list()
        except StoreError as e:
            result.log.append(f"⚠️ Could not reload inventory after sync: {e}")
            logger.warning("Inventory reload after sync failed: %s", e)

    # --- Catalog import ---

    def import_catalog(self, state: SyncState | None = None) -> ImportResult:
        """
        Pull the storefront catalog and overwrite local sellable stock.

        Raises ConnectivityError / StorefrontError without touching the store
        if the catalog can't be fetched.
        """
        state = state or SyncState()
        started = self.clock()
        self._require_connection()

        products = self.storefront.list_products()
        logger.info("Catalog import: %d products fetched", len(products))

        result = ImportResult()
        for product in self.pacer.paced(products):
            self._import_product(product, result)

        result.sync_state = state.model_copy(update={"last_sync_time": started})
        self._reload_records(result)
        logger.info("Catalog import done: %s", result.summary())
        return result

    def _import_product(self, product: StorefrontProduct, result: ImportResult) -> None:
        if not product.variants:
            result.failed += 1
            result.log.append(f"❌ {product.title or product.id}: product has no variants")
            return

        variant = product.variants[IMPORTED_VARIANT_INDEX]
        sku = clean_sku(variant.sku) or synthetic_sku(product.id)
        quantity = max(0, variant.inventory_quantity)

        try:
            existing = self.store.get_one("sku", sku)
            if existing is not None:
                self.store.update(
                    existing.id,
                    {"sellable_stock": quantity, "product_name": product.title},
                    expected_version=existing.version,
                )
                result.updated += 1
                result.log.append(f"✅ Updated {sku} ({product.title}): sellable stock {quantity}")
            else:
                self.store.insert(
                    InventoryFields(
                        product_name=product.title,
                        sku=sku,
                        sellable_stock=quantity,
                        unusable_stock=0,
                        hold_stock=0,
                        design=(product.product_type or "").strip() or settings.DEFAULT_DESIGN,
                        reorder_level=settings.DEFAULT_REORDER_LEVEL,
                    )
                )
                result.created += 1
                result.log.append(f"✅ Created {sku} ({product.title}): sellable stock {quantity}")
        except (StoreError, NotFoundError) as e:
            result.failed += 1
            result.log.append(f"❌ {sku} ({product.title}): {e}")
            logger.warning("Catalog import failed for %s: %s", sku, e)

    # --- Order sync ---

    def effective_since(self, state: SyncState, now: datetime | None = None) -> datetime:
        """Start of the order window: the last sync, or a bounded lookback."""
        if state.last_sync_time is not None:
            return state.last_sync_time
        return (now or self.clock()) - timedelta(days=self.lookback_days)

    def apply_orders(self, state: SyncState | None = None) -> OrdersResult:
        """
        Deduct quantities sold on the storefront since the last sync.

        Orders are not deduplicated across runs. If the returned sync_state is
        not saved, the next run re-reads the same window and deducts again.
        """
        state = state or SyncState()
        started = self.clock()
        self._require_connection()

        since = self.effective_since(state, started)
        orders = self.storefront.list_orders(since)
        logger.info("Order sync: %d orders since %s", len(orders), since.isoformat())

        result = OrdersResult(since=since)
        for order in orders:
            for item in order.line_items:
                label = item.sku or item.name
                try:
                    match = self.resolver.resolve(item.sku, item.name)
                    if not match.found:
                        result.not_found += 1
                        result.log.append(f"⚠️ {order.name}: '{label}' not found in inventory")
                        continue

                    record = match.record
                    remaining = deduct_stock(record.sellable_stock, item.quantity)
                    self.store.update(
                        record.id,
                        {"sellable_stock": remaining},
                        expected_version=record.version,
                    )
                except (StoreError, NotFoundError) as e:
                    result.failed += 1
                    result.log.append(f"❌ {order.name}: '{label}' could not be updated: {e}")
                    logger.warning("Order sync failed for %s: %s", label, e)
                    continue

                result.processed += 1
                result.log.append(
                    f"✅ {order.name}: deducted {item.quantity} from {record.product_name} "
                    f"(matched by {match.matched_by.value}), {remaining} remaining"
                )

        result.sync_state = state.model_copy(update={"last_sync_time": started})
        self._reload_records(result)
        logger.info("Order sync done: %s", result.summary())
        return result

    # --- Stock push ---

    def push_stock(self, record: InventoryRecord) -> None:
        """
        Set the storefront's available quantity to the record's sellable stock.

        Raises PushError (chained to the underlying cause) on any failure.
        """
        sku = clean_sku(record.sku)
        if not sku:
            raise PushError("", f"{record.product_name or record.id} has no SKU")

        try:
            variant = self.storefront.find_variant_by_sku(sku)
            if variant.inventory_item_id is None:
                raise PushError(sku, f"Shopify variant {sku} has no inventory item")

            locations = self.storefront.list_locations()
            if not locations:
                raise PushError(sku, "No Shopify location to push stock to")

            self.storefront.set_inventory(
                locations[0].id, variant.inventory_item_id, record.sellable_stock
            )
        except PushError:
            raise
        except SyncError as e:
            raise PushError(sku, f"Push failed for {sku}: {e}") from e

        logger.info("Pushed %s = %d", sku, record.sellable_stock)

    def bulk_push_stock(self, records: Iterable[InventoryRecord]) -> BulkPushResult:
        """Push every record in order; one failure never stops the batch."""
        self._require_connection()

        result = BulkPushResult()
        for record in self.pacer.paced(records):
            try:
                self.push_stock(record)
            except PushError as e:
                result.failed += 1
                result.log.append(f"❌ {e}")
                continue
            result.succeeded += 1
            result.log.append(f"✅ {record.sku}: {record.sellable_stock}")

        logger.info("Bulk push done: %s", result.summary())
        return result
