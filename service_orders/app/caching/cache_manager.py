"""
Degrading front for the cursor cache.

Pagination and prefetch go through ``CursorCacheManager`` so that a broken
cache backend turns into misses and skipped writes instead of failed requests.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from shared.logging import get_logger

from ..store.base import Cursor
from .cursor_cache import MISS, CachedCursor, CursorCache, PageSpec

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class CursorCacheManager:
    """Wraps a ``CursorCache`` backend with error isolation and metrics."""

    def __init__(self, cache: CursorCache, *, metrics: Optional["MetricsCollector"] = None):
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("orders.cache_manager")

    async def get_cursor(self, spec: PageSpec) -> CachedCursor:
        """Look up the cursor produced by ``spec``; any backend failure reads as a miss."""
        try:
            cursor = await self.cache.get(spec)
        except Exception as exc:
            self.logger.warning(
                "Cursor cache read failed, treating as miss",
                customer_id=spec.partition_key,
                page=spec.page_number,
                page_size=spec.page_size,
                error=str(exc),
            )
            self._count_lookup("error")
            return MISS

        self._count_lookup("miss" if cursor is MISS else "hit")
        return cursor

    async def set_cursor(self, spec: PageSpec, cursor: Optional[Cursor]) -> bool:
        """Store the cursor produced by ``spec``; returns False when the write was dropped."""
        try:
            await self.cache.set(spec, cursor)
        except Exception as exc:
            self.logger.warning(
                "Cursor cache write failed, skipping",
                customer_id=spec.partition_key,
                page=spec.page_number,
                page_size=spec.page_size,
                error=str(exc),
            )
            return False
        return True

    async def invalidate_partition(self, partition_key: str) -> int:
        """Remove every cursor of a partition. Backend errors propagate."""
        return await self.cache.invalidate(partition_key)

    async def get_cache_stats(self) -> Dict[str, Any]:
        try:
            return await self.cache.get_stats()
        except Exception as e:
            self.logger.error("Cache stats error", error=str(e))
            return {"error": str(e)}

    async def health_check(self) -> bool:
        try:
            return await self.cache.health_check()
        except Exception:
            return False

    async def close(self) -> None:
        await self.cache.close()

    def _count_lookup(self, result: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("cursor_cache_lookups_total", result=result)
