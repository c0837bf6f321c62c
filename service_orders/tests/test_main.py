"""
Unit tests for the Orders service HTTP surface.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from shared.errors import CacheUnavailable, StoreError
from service_orders.app.main import OrdersService, create_app
from service_orders.app.store import InMemoryOrderStore


@pytest.fixture
def app(memory_config, c1_orders):
    return create_app(memory_config, store=InMemoryOrderStore("Orders", c1_orders))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def service(client) -> OrdersService:
    return client.app.state.orders_service


@pytest.fixture
def new_order():
    return {
        "CustomerID": "C1",
        "OrderNumber": "C1-NEW",
        "OrderValue": 42.5,
        "OrderDate": "2030-01-01T00:00:00Z",
    }


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "orders"
    assert "cursor_cache" in data["capabilities"]


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["dependencies"] == {"store": "ok", "cursor_cache": "ok"}


def test_health_reports_degraded_cache(client, service):
    service.cache_manager.cache.health_check = AsyncMock(return_value=False)

    data = client.get("/health").json()

    assert data["status"] == "degraded"
    assert data["dependencies"]["cursor_cache"] == "error"


def test_first_page_with_defaults(client):
    response = client.get("/orders/C1")

    assert response.status_code == 200
    data = response.json()
    assert data["customerId"] == "C1"
    assert data["currentPage"] == 1
    assert data["itemsPerPage"] == 10
    assert data["hasNextPage"] is True
    assert data["totalItems"] == 10
    assert data["orders"][0]["OrderNumber"] == "C1-0025"


def test_last_page(client):
    data = client.get("/orders/C1", params={"page": 3, "limit": 10}).json()

    assert data["hasNextPage"] is False
    assert data["totalItems"] == 5
    assert [order["OrderNumber"] for order in data["orders"]] == [
        "C1-0005", "C1-0004", "C1-0003", "C1-0002", "C1-0001"
    ]


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"page": "abc"}])
def test_invalid_pagination_parameters(client, params):
    response = client.get("/orders/C1", params=params)

    assert response.status_code == 422


def test_store_failure_returns_server_error(client, service):
    with patch.object(service.store, "query_page", new_callable=AsyncMock) as mock_query:
        mock_query.side_effect = StoreError("query", "throttled")

        response = client.get("/orders/C1")

    assert response.status_code == 500
    assert response.json()["code"] == "STORE_ERROR"


def test_create_order_requires_all_fields(client, new_order):
    del new_order["OrderDate"]
    new_order["OrderNumber"] = ""

    response = client.post("/orders", json=new_order)

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["details"]["fields"] == ["OrderDate", "OrderNumber"]


def test_create_order_rejects_zero_value(client, new_order):
    new_order["OrderValue"] = 0

    response = client.post("/orders", json=new_order)

    assert response.status_code == 400


@pytest.mark.parametrize("value", [True, "12", None])
def test_create_order_rejects_non_numeric_value(client, new_order, value):
    new_order["OrderValue"] = value

    response = client.post("/orders", json=new_order)

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["details"]["fields"] == ["OrderValue"]


def test_create_order_accepts_integer_value(client, new_order):
    new_order["OrderValue"] = 12

    response = client.post("/orders", json=new_order)

    assert response.status_code == 201
    assert response.json()["order"]["OrderValue"] == 12.0


def test_create_order_invalidates_partition(client, service, new_order):
    client.get("/orders/C1", params={"page": 2})
    client.get("/orders/C2")
    assert client.get("/orders/cache/stats").json()["cursor_cache"]["entries"] == 3

    response = client.post("/orders", json=new_order)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Order created successfully"
    assert data["cacheInvalidated"] is True
    assert data["order"]["OrderNumber"] == "C1-NEW"

    stats = client.get("/orders/cache/stats").json()["cursor_cache"]
    assert stats["entries"] == 1

    first_page = client.get("/orders/C1").json()
    assert first_page["orders"][0]["OrderNumber"] == "C1-NEW"


def test_create_order_survives_cache_outage(client, service, new_order):
    with patch.object(service.cache_manager.cache, "invalidate", new_callable=AsyncMock) as mock_invalidate:
        mock_invalidate.side_effect = CacheUnavailable("redis down")

        response = client.post("/orders", json=new_order)

    assert response.status_code == 201
    assert response.json()["cacheInvalidated"] is False


def test_all_orders_scan(client):
    data = client.get("/all-orders").json()

    assert data["count"] == 25
    assert data["scannedCount"] == 25
    assert data["tableName"] == "Orders"


def test_table_info(client):
    data = client.get("/table-info").json()

    assert data["TableName"] == "Orders"
    assert data["GlobalSecondaryIndexes"][0]["IndexName"] == "CustomerID-OrderDate-index"


def test_metrics_endpoint_exposes_pagination_counters(client):
    client.get("/orders/C1", params={"page": 2})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'store_fetches_total{origin="replay"} 1.0' in response.text
    assert "chain_replays_total 1.0" in response.text


def test_service_wiring(memory_config):
    service = OrdersService(memory_config)

    assert isinstance(service.store, InMemoryOrderStore)
    assert service.prefetcher.pages == 0
    assert service.pagination.prefetcher is service.prefetcher
    assert service.invalidation.cache_manager is service.cache_manager
