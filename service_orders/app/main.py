"""
Orders service for the Orders Access Layer.

Serves customer orders newest-first with keyset pagination, caching the
store's continuation cursor for every page so sequential reads do not re-walk
the partition from the start.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Body, Query
from pydantic import ValidationError as PydanticValidationError

from shared.base_service import BaseService, describe
from shared.config import ServiceConfig, get_config
from shared.errors import ValidationError
from shared.logging import set_customer_context

from .caching import CursorCacheManager, InMemoryCursorCache, InvalidationManager, RedisCursorCache
from .caching.cursor_cache import CursorCache
from .models import Order, OrderCreatedResponse, OrderPageResponse, ScanResponse
from .pagination import PageFetcher, PaginationService, Prefetcher
from .store import DynamoDBOrderStore, InMemoryOrderStore, OrderStore

SERVICE_NAME = "orders"
SERVICE_PORT = 8020


class OrdersService(BaseService):
    """Orders service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        store: Optional[OrderStore] = None,
        cursor_cache: Optional[CursorCache] = None,
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config=config or get_config(SERVICE_NAME, SERVICE_PORT))

        self.store = store or self._create_store()
        self.cache_manager = CursorCacheManager(
            cursor_cache or self._create_cursor_cache(),
            metrics=self.metrics,
        )
        self.page_fetcher = PageFetcher(self.store, metrics=self.metrics)
        self.prefetcher = Prefetcher(
            self.page_fetcher,
            self.cache_manager,
            pages=self.config.prefetch_pages,
            metrics=self.metrics,
        )
        self.pagination = PaginationService(
            self.page_fetcher,
            self.cache_manager,
            self.prefetcher,
            metrics=self.metrics,
        )
        self.invalidation = InvalidationManager(self.cache_manager, metrics=self.metrics)

        self._setup_orders_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.orders_service = self

    def _create_store(self) -> OrderStore:
        backend = self.config.store_backend.lower()
        if backend == "memory":
            return InMemoryOrderStore(self.config.dynamodb_table_name)
        if backend == "dynamodb":
            return DynamoDBOrderStore(
                self.config.dynamodb_table_name,
                index_name=self.config.dynamodb_index_name,
                region_name=self.config.aws_region,
                endpoint_url=self.config.dynamodb_endpoint_url,
            )
        raise ValueError(f"Unknown store backend: {self.config.store_backend}")

    def _create_cursor_cache(self) -> CursorCache:
        backend = self.config.cursor_cache_backend.lower()
        ttl = self.config.cursor_cache_ttl_seconds
        if backend == "memory":
            return InMemoryCursorCache(ttl_seconds=ttl)
        if backend == "redis":
            return RedisCursorCache(self.config.redis_url, ttl_seconds=ttl)
        raise ValueError(f"Unknown cursor cache backend: {self.config.cursor_cache_backend}")

    def _setup_orders_routes(self):
        """Set up orders-specific routes."""
        max_page_size = self.config.max_page_size

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                **describe(self),
                "capabilities": ["keyset_pagination", "cursor_cache", "prefetch"],
            }

        @self.app.get("/orders/cache/stats")
        async def cache_stats():
            """Cursor cache and prefetch statistics."""
            return {
                "cursor_cache": await self.cache_manager.get_cache_stats(),
                "prefetch_pages": self.prefetcher.pages,
                "prefetch_pending": self.prefetcher.pending,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

        @self.app.get("/orders/{customer_id}", response_model=OrderPageResponse)
        async def get_customer_orders(
            customer_id: str,
            page: int = Query(1, ge=1, description="1-based page number"),
            limit: Optional[int] = Query(None, ge=1, le=max_page_size, description="Orders per page"),
        ):
            """Get one page of a customer's orders, newest first."""
            set_customer_context(customer_id)
            page_size = limit or self.config.default_page_size

            result = await self.pagination.get_page(customer_id, page, page_size)

            return OrderPageResponse(
                orders=result.items,
                customerId=customer_id,
                currentPage=page,
                itemsPerPage=page_size,
                hasNextPage=result.has_next,
                totalItems=result.count,
            )

        @self.app.post("/orders", status_code=201, response_model=OrderCreatedResponse)
        async def create_order(payload: Dict[str, Any] = Body(...)):
            """Create an order and drop the customer's cached cursors."""
            order = self._validate_order(payload)
            set_customer_context(order.CustomerID)

            await self.store.put_order(order.model_dump())
            invalidated = await self.invalidation.invalidate(order.CustomerID)

            self.logger.info(
                "Order created",
                customer_id=order.CustomerID,
                order_number=order.OrderNumber,
                cache_invalidated=invalidated,
            )
            return OrderCreatedResponse(order=order, cacheInvalidated=invalidated)

        @self.app.get("/all-orders", response_model=ScanResponse)
        async def all_orders():
            """Unpaginated scan of the whole table."""
            result = await self.store.scan()
            return ScanResponse(
                items=result.items,
                count=result.count,
                scannedCount=result.scanned_count,
                tableName=self.store.table_name,
            )

        @self.app.get("/table-info")
        async def table_info():
            """Describe the backing table."""
            return await self.store.describe()

    @staticmethod
    def _validate_order(payload: Dict[str, Any]) -> Order:
        try:
            return Order.model_validate(payload)
        except PydanticValidationError as exc:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
            raise ValidationError(
                "Missing required fields",
                {"fields": fields, "errors": [error["msg"] for error in exc.errors()]},
            ) from exc

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check orders service dependencies."""
        dependencies = {}

        try:
            dependencies["store"] = "ok" if await self.store.health_check() else "error"
        except Exception:
            dependencies["store"] = "error"

        dependencies["cursor_cache"] = "ok" if await self.cache_manager.health_check() else "error"
        return dependencies

    async def start(self):
        """Open the order store connection."""
        await self.store.start()
        self.logger.info(
            "Orders service started",
            store_backend=self.config.store_backend,
            cursor_cache_backend=self.config.cursor_cache_backend,
            prefetch_pages=self.prefetcher.pages,
        )

    async def stop(self):
        """Let in-flight prefetches finish, then release backends."""
        await self.prefetcher.drain()
        await self.cache_manager.close()
        await self.store.close()
        self.logger.info("Orders service stopped")


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create orders service application."""
    service = OrdersService(config, **kwargs)
    return service.app


if __name__ == "__main__":
    service = OrdersService()
    service.run()
