"""
Write-path invalidation of cached cursors.
"""

from typing import TYPE_CHECKING, Optional

from shared.logging import get_logger

from .cache_manager import CursorCacheManager

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class InvalidationManager:
    """Drops a partition's whole cursor chain after a write to it.

    A new order can shift every later position in the partition, so the
    footprint is purged in full rather than page by page. Failures are
    reported, never raised: the write has already been committed.
    """

    def __init__(self, cache_manager: CursorCacheManager, *, metrics: Optional["MetricsCollector"] = None):
        self.cache_manager = cache_manager
        self.metrics = metrics
        self.logger = get_logger("orders.invalidation")

    async def invalidate(self, partition_key: str) -> bool:
        try:
            removed = await self.cache_manager.invalidate_partition(partition_key)
        except Exception as exc:
            self.logger.warning(
                "Cursor cache invalidation failed; stale cursors may be served until TTL",
                customer_id=partition_key,
                error=str(exc),
            )
            self._count("error")
            return False

        self.logger.info("Invalidated cursor cache for customer", customer_id=partition_key, removed=removed)
        self._count("ok")
        return True

    def _count(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("cache_invalidations_total", status=status)
