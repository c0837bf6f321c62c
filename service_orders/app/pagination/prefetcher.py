"""
Background extension of a partition's cursor chain.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Set

from shared.logging import get_logger

from ..caching.cache_manager import CursorCacheManager
from ..caching.cursor_cache import PageSpec
from ..store.base import Cursor
from .page_fetcher import PageFetcher

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

DEFAULT_PREFETCH_PAGES = 3


class Prefetcher:
    """Walks a few pages past the one just served and caches their cursors.

    Work is dispatched with ``schedule`` onto tasks owned by the prefetcher,
    not by the request: a closed connection does not cancel them and the
    caller never observes their outcome. ``drain`` waits for whatever is
    still running (shutdown, tests).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        cache_manager: CursorCacheManager,
        *,
        pages: int = DEFAULT_PREFETCH_PAGES,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.fetcher = fetcher
        self.cache_manager = cache_manager
        self.pages = max(0, pages)
        self.metrics = metrics
        self.logger = get_logger("orders.prefetcher")
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(
        self,
        partition_key: str,
        from_page: int,
        page_size: int,
        start_cursor: Optional[Cursor],
    ) -> Optional[asyncio.Task]:
        """Start a detached prefetch; returns the task, or None when there is nothing to do."""
        if self.pages == 0 or start_cursor is None:
            return None

        task = asyncio.create_task(
            self.prefetch(partition_key, from_page, page_size, start_cursor),
            name=f"prefetch:{partition_key}:{from_page}:{page_size}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def prefetch(
        self,
        partition_key: str,
        from_page: int,
        page_size: int,
        start_cursor: Optional[Cursor],
    ) -> int:
        """Cache cursors for pages ``from_page + 1 .. from_page + pages``.

        Stops at the end of the partition or on the first failed fetch; cursors
        cached by earlier steps stay. Returns the number of fetches issued.
        """
        cursor = start_cursor
        fetches = 0

        for offset in range(1, self.pages + 1):
            if cursor is None:
                break

            page_number = from_page + offset
            try:
                result = await self.fetcher.fetch(partition_key, page_size, cursor, origin="prefetch")
            except Exception as exc:
                fetches += 1
                self.logger.warning(
                    "Prefetch stopped after failed fetch",
                    customer_id=partition_key,
                    page=page_number,
                    page_size=page_size,
                    error=str(exc),
                )
                self._count("failed")
                break

            fetches += 1
            cursor = result.next_cursor
            await self.cache_manager.set_cursor(PageSpec(partition_key, page_number, page_size), cursor)
            self._count("cached" if cursor is not None else "exhausted")

        self.logger.debug(
            "Prefetch finished",
            customer_id=partition_key,
            from_page=from_page,
            page_size=page_size,
            fetches=fetches,
        )
        return fetches

    async def drain(self) -> None:
        """Wait for every scheduled prefetch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("Prefetch task crashed", task=task.get_name(), error=str(exc))

    def _count(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("prefetch_pages_total", outcome=outcome)
