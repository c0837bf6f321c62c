"""
Single keyset page query against the order store.
"""

import time
from typing import TYPE_CHECKING, Optional

from shared.errors import StoreError
from shared.logging import get_logger

from ..store.base import Cursor, OrderStore, QueryResult

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class PageFetcher:
    """Runs one keyset-paginated query and normalises its failures to ``StoreError``."""

    def __init__(self, store: OrderStore, *, metrics: Optional["MetricsCollector"] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("orders.page_fetcher")

    async def fetch(
        self,
        partition_key: str,
        page_size: int,
        cursor: Optional[Cursor] = None,
        *,
        origin: str = "request",
    ) -> QueryResult:
        """Fetch the page that starts right after ``cursor`` (partition start when None).

        ``origin`` labels the call for metrics: ``request``, ``replay`` or
        ``prefetch``.
        """
        start = time.perf_counter()
        try:
            result = await self.store.query_page(partition_key, page_size, cursor)
        except StoreError:
            raise
        except Exception as exc:
            self.logger.error("Order store query raised", customer_id=partition_key, error=str(exc))
            raise StoreError("query", str(exc), {"customer_id": partition_key}) from exc
        finally:
            if self.metrics:
                self.metrics.increment_counter("store_fetches_total", origin=origin)
                self.metrics.observe_histogram(
                    "store_fetch_duration_seconds",
                    time.perf_counter() - start,
                    origin=origin,
                )

        self.logger.debug(
            "Fetched order page",
            customer_id=partition_key,
            page_size=page_size,
            resumed=cursor is not None,
            items=len(result.items),
            has_more=result.has_more,
            origin=origin,
        )
        return result
