"""
Fixtures for Orders service integration tests.
"""

from typing import Any, Dict, List

import httpx
import pytest
import pytest_asyncio

from shared.config import get_config
from service_orders.app.main import OrdersService
from service_orders.app.store import InMemoryOrderStore


def make_orders(customer_id: str, count: int) -> List[Dict[str, Any]]:
    """Orders numbered 1..count; a higher number means a later OrderDate."""
    return [
        {
            "CustomerID": customer_id,
            "OrderNumber": f"{customer_id}-{index:04d}",
            "OrderValue": 5.0 * index,
            "OrderDate": f"2024-06-01T{index // 3600:02d}:{index // 60 % 60:02d}:{index % 60:02d}Z",
        }
        for index in range(1, count + 1)
    ]


@pytest.fixture
def store():
    return InMemoryOrderStore("Orders", make_orders("C1", 25) + make_orders("BIG", 100))


@pytest.fixture
def orders_service(store):
    config = get_config(
        "orders",
        8020,
        store_backend="memory",
        cursor_cache_backend="memory",
        prefetch_pages=3,
    )
    return OrdersService(config, store=store)


@pytest_asyncio.fixture
async def client(orders_service):
    transport = httpx.ASGITransport(app=orders_service.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://orders.test") as http_client:
        yield http_client
