# Adapters for the two external systems: the inventory database and Shopify.

from .store_client import InventoryStore, RecordFilter
from .shopify_client import ShopifyClient

__all__ = ["InventoryStore", "RecordFilter", "ShopifyClient"]
