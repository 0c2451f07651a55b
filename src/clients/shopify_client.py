"""
Client for the Shopify REST Admin API.

Only the handful of endpoints the stock sync needs:
- products.json (catalog pull, SKU -> inventory item lookup)
- orders.json (sold quantities since a timestamp)
- locations.json (target location for stock pushes)
- inventory_levels/set.json (absolute stock write)

Each list call reads a single page (Shopify's maximum is 250 records).
"""

import logging
from datetime import datetime
from typing import Any

import requests
from pydantic import BaseModel, ValidationError

from core import settings
from core.errors import ConnectivityError, NotFoundError, StorefrontError
from core.models import (
    StorefrontLocation,
    StorefrontOrder,
    StorefrontProduct,
    StorefrontVariant,
)

logger = logging.getLogger(__name__)


class ShopifyClient:
    """
    Thin wrapper over a requests.Session carrying the admin access token.

    Credentials default to the values in core.settings (read from .env).
    """

    def __init__(
        self,
        store_url: str | None = None,
        access_token: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        page_limit: int | None = None,
        session: requests.Session | None = None,
    ):
        self.store_url = store_url if store_url is not None else settings.SHOPIFY_STORE_URL
        self.access_token = (
            access_token if access_token is not None else settings.SHOPIFY_ACCESS_TOKEN
        )
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout or settings.SHOPIFY_TIMEOUT
        self.page_limit = page_limit or settings.SHOPIFY_PAGE_LIMIT
        self.session = session or requests.Session()

    def check_connection(self) -> bool:
        """True when both the store URL and the access token are configured."""
        return bool(self.store_url and self.access_token)

    @property
    def base_url(self) -> str:
        host = (self.store_url or "").removeprefix("https://").removeprefix("http://").rstrip("/")
        return f"https://{host}/admin/api/{self.api_version}"

    # --- Endpoints ---

    def list_products(self, limit: int | None = None) -> list[StorefrontProduct]:
        data = self._request("GET", "products.json", params={"limit": limit or self.page_limit})
        return self._parse(StorefrontProduct, data, "products")

    def list_orders(self, since: datetime, limit: int | None = None) -> list[StorefrontOrder]:
        params = {
            "status": "any",
            "created_at_min": since.isoformat(),
            "limit": limit or self.page_limit,
        }
        data = self._request("GET", "orders.json", params=params)
        return self._parse(StorefrontOrder, data, "orders")

    def list_locations(self) -> list[StorefrontLocation]:
        data = self._request("GET", "locations.json")
        return self._parse(StorefrontLocation, data, "locations")

    def set_inventory(self, location_id: int, inventory_item_id: int, quantity: int) -> dict:
        payload = {
            "location_id": location_id,
            "inventory_item_id": inventory_item_id,
            "available": quantity,
        }
        return self._request("POST", "inventory_levels/set.json", json=payload)

    def find_variant_by_sku(self, sku: str) -> StorefrontVariant:
        """Scan every product's variants for an exact SKU match."""
        for product in self.list_products():
            for variant in product.variants:
                if variant.sku == sku:
                    return variant
        raise NotFoundError(f"No Shopify variant with SKU '{sku}'")

    @staticmethod
    def _parse(model: type[BaseModel], data: dict[str, Any], key: str) -> list:
        items = data.get(key) or []
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise StorefrontError(
                f"Shopify returned malformed {key}: {e.error_count()} invalid field(s)",
                payload=items,
            ) from e

    # --- Transport ---

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        if not self.check_connection():
            raise ConnectivityError("Shopify credentials not configured")

        url = f"{self.base_url}/{path}"
        headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }

        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise ConnectivityError(f"Could not reach Shopify: {e}") from e

        if not response.ok:
            payload = self._error_payload(response)
            logger.warning("Shopify %s %s -> %s", method, path, response.status_code)
            raise StorefrontError(
                f"Shopify API error: {response.status_code} - {payload}",
                status_code=response.status_code,
                payload=payload,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise StorefrontError(
                f"Shopify returned invalid JSON for {path}",
                status_code=response.status_code,
                payload=response.text,
            ) from e

    @staticmethod
    def _error_payload(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
