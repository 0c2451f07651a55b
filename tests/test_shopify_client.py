import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from clients.shopify_client import ShopifyClient
from core.errors import ConnectivityError, NotFoundError, StorefrontError


def fake_response(status_code=200, body=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if body is None:
        response.content = b""
        response.text = ""
        response.json.side_effect = ValueError("no body")
    elif isinstance(body, str):
        response.content = body.encode()
        response.text = body
        response.json.side_effect = ValueError("not json")
    else:
        response.content = json.dumps(body).encode()
        response.text = json.dumps(body)
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ShopifyClient(
        store_url="test-shop.myshopify.com",
        access_token="shpat_test",
        api_version="2025-01",
        timeout=5,
        session=session,
    )


def test_list_products_sends_token_and_parses_variants(client, session):
    session.request.return_value = fake_response(
        body={
            "products": [
                {
                    "id": 1,
                    "title": "Red Saree",
                    "product_type": "Saree",
                    "handle": "red-saree",
                    "variants": [
                        {"id": 11, "sku": "RS-1", "inventory_quantity": 12, "inventory_item_id": 111}
                    ],
                }
            ]
        }
    )

    [product] = client.list_products()

    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "GET"
    assert url == "https://test-shop.myshopify.com/admin/api/2025-01/products.json"
    assert kwargs["params"] == {"limit": 250}
    assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_test"
    assert kwargs["timeout"] == 5
    assert product.title == "Red Saree"
    assert product.variants[0].sku == "RS-1"
    assert product.variants[0].inventory_item_id == 111


def test_list_orders_filters_by_creation_time(client, session):
    session.request.return_value = fake_response(
        body={
            "orders": [
                {
                    "id": 5,
                    "name": "#1005",
                    "created_at": "2025-03-09T10:00:00+00:00",
                    "line_items": [{"sku": "RS-1", "name": "Red Saree", "quantity": 2}],
                }
            ]
        }
    )
    since = datetime(2025, 3, 3, tzinfo=timezone.utc)

    [order] = client.list_orders(since)

    params = session.request.call_args.kwargs["params"]
    assert params == {"status": "any", "created_at_min": since.isoformat(), "limit": 250}
    assert order.line_items[0].quantity == 2


def test_set_inventory_posts_available_quantity(client, session):
    session.request.return_value = fake_response(body={"inventory_level": {"available": 7}})

    client.set_inventory(location_id=9, inventory_item_id=111, quantity=7)

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url.endswith("/inventory_levels/set.json")
    assert session.request.call_args.kwargs["json"] == {
        "location_id": 9,
        "inventory_item_id": 111,
        "available": 7,
    }


def test_non_2xx_raises_with_payload(client, session):
    session.request.return_value = fake_response(401, body={"errors": "Invalid API key"})

    with pytest.raises(StorefrontError) as exc_info:
        client.list_locations()

    assert exc_info.value.status_code == 401
    assert exc_info.value.payload == {"errors": "Invalid API key"}


def test_non_json_error_body_is_kept_as_text(client, session):
    session.request.return_value = fake_response(502, body="Bad Gateway")

    with pytest.raises(StorefrontError) as exc_info:
        client.list_products()

    assert exc_info.value.payload == "Bad Gateway"


def test_network_failure_raises_connectivity_error(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ConnectivityError):
        client.list_products()


def test_missing_credentials_never_hit_the_network(session):
    client = ShopifyClient(store_url="", access_token="", session=session)

    assert client.check_connection() is False
    with pytest.raises(ConnectivityError):
        client.list_products()
    session.request.assert_not_called()


def test_store_url_scheme_is_normalized(session):
    client = ShopifyClient(
        store_url="https://test-shop.myshopify.com/", access_token="t", api_version="2024-10", session=session
    )

    assert client.base_url == "https://test-shop.myshopify.com/admin/api/2024-10"


def test_find_variant_by_sku_scans_all_variants(client, session):
    session.request.return_value = fake_response(
        body={
            "products": [
                {"id": 1, "title": "A", "variants": [{"sku": "A-1", "inventory_item_id": 1}]},
                {
                    "id": 2,
                    "title": "B",
                    "variants": [
                        {"sku": "B-S", "inventory_item_id": 2},
                        {"sku": "B-M", "inventory_item_id": 3},
                    ],
                },
            ]
        }
    )

    assert client.find_variant_by_sku("B-M").inventory_item_id == 3
    with pytest.raises(NotFoundError):
        client.find_variant_by_sku("C-1")


@pytest.mark.parametrize(
    "call, body",
    [
        (lambda c: c.list_products(), {"products": [{"id": "not-a-number", "title": "X"}]}),
        (lambda c: c.list_orders(datetime(2025, 3, 1, tzinfo=timezone.utc)),
         {"orders": [{"id": 1, "line_items": [{"quantity": "lots"}]}]}),
        (lambda c: c.list_locations(), {"locations": [{"name": "Main"}]}),
    ],
)
def test_malformed_payload_raises_storefront_error(client, session, call, body):
    session.request.return_value = fake_response(200, body)

    with pytest.raises(StorefrontError) as exc_info:
        call(client)

    assert exc_info.value.payload == next(iter(body.values()))
