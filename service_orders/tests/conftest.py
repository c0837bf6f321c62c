"""
Shared fixtures for Orders service tests.
"""

from typing import Any, Dict, List

import pytest

from shared.config import get_config
from service_orders.app.caching import CursorCacheManager, InMemoryCursorCache
from service_orders.app.pagination import PageFetcher
from service_orders.app.store import InMemoryOrderStore


def make_orders(customer_id: str, count: int, value: float = 10.0) -> List[Dict[str, Any]]:
    """Orders numbered 1..count; a higher number means a later OrderDate."""
    return [
        {
            "CustomerID": customer_id,
            "OrderNumber": f"{customer_id}-{index:04d}",
            "OrderValue": value + index,
            "OrderDate": f"2024-03-01T00:{index // 60:02d}:{index % 60:02d}Z",
        }
        for index in range(1, count + 1)
    ]


class DummyMetrics:
    """Minimal metrics collector stub."""

    def __init__(self):
        self.counters = []
        self.histograms = []

    def increment_counter(self, metric_name: str, **labels):
        self.counters.append((metric_name, labels))

    def observe_histogram(self, metric_name: str, value: float, **labels):
        self.histograms.append((metric_name, value, labels))

    def count(self, metric_name: str, **labels) -> int:
        return sum(
            1 for name, recorded in self.counters
            if name == metric_name and all(recorded.get(k) == v for k, v in labels.items())
        )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def order_factory():
    return make_orders


@pytest.fixture
def c1_orders():
    """Customer C1 with 25 orders."""
    return make_orders("C1", 25)


@pytest.fixture
def store(c1_orders):
    return InMemoryOrderStore("Orders", c1_orders + make_orders("C2", 7))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cursor_cache(clock):
    return InMemoryCursorCache(ttl_seconds=600, clock=clock)


@pytest.fixture
def metrics():
    return DummyMetrics()


@pytest.fixture
def cache_manager(cursor_cache, metrics):
    return CursorCacheManager(cursor_cache, metrics=metrics)


@pytest.fixture
def fetcher(store, metrics):
    return PageFetcher(store, metrics=metrics)


@pytest.fixture
def memory_config():
    """Service config backed entirely by in-process stores, prefetch disabled."""
    return get_config(
        "orders",
        8020,
        store_backend="memory",
        cursor_cache_backend="memory",
        prefetch_pages=0,
    )
