"""
Pytest configuration and shared fixtures for the inventory sync tests.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from clients.shopify_client import ShopifyClient
from clients.store_client import InventoryStore
from core.models import InventoryFields, StorefrontProduct, StorefrontVariant
from core.pacing import Pacer
from core.sync import SyncEngine

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class RecordingPacer(Pacer):
    """Never sleeps; counts how often the engine asked to wait."""

    def __init__(self):
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1


@pytest.fixture
def store(tmp_path):
    """A fresh SQLite-backed store per test."""
    return InventoryStore(f"sqlite:///{tmp_path / 'inventory.db'}")


@pytest.fixture
def storefront():
    """Shopify client double with credentials configured and empty responses."""
    client = MagicMock(spec=ShopifyClient)
    client.check_connection.return_value = True
    client.list_products.return_value = []
    client.list_orders.return_value = []
    client.list_locations.return_value = []
    return client


@pytest.fixture
def pacer():
    return RecordingPacer()


@pytest.fixture
def engine(store, storefront, pacer):
    return SyncEngine(store, storefront, pacer=pacer, clock=lambda: FIXED_NOW)


@pytest.fixture
def add_record(store):
    """Insert a record with sensible defaults; keyword arguments override fields."""

    def _add(**overrides):
        values = {"product_name": "Item", "sku": "", "sellable_stock": 0}
        values.update(overrides)
        return store.insert(InventoryFields(**values))

    return _add


def make_product(product_id, title, sku=None, quantity=0, product_type="", inventory_item_id=None):
    return StorefrontProduct(
        id=product_id,
        title=title,
        product_type=product_type,
        variants=[
            StorefrontVariant(
                id=product_id * 10,
                sku=sku,
                inventory_quantity=quantity,
                inventory_item_id=inventory_item_id,
            )
        ],
    )
