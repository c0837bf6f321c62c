"""
Page resolution over cached continuation cursors.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from shared.logging import get_logger

from ..caching.cache_manager import CursorCacheManager
from ..caching.cursor_cache import MISS, PageSpec
from ..store.base import Cursor
from .page_fetcher import PageFetcher
from .prefetcher import Prefetcher

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass
class PageResult:
    """One served page and whether another one follows."""

    items: list = field(default_factory=list)
    has_next: bool = False
    next_cursor: Optional[Cursor] = None

    @property
    def count(self) -> int:
        return len(self.items)


class PaginationService:
    """Serves page N of a customer's orders.

    The cursor for page N is whatever page N-1 produced, read from the cursor
    cache. On a miss the chain is replayed from page 1, caching every cursor
    on the way, so a cold late page costs N-1 extra store queries.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        cache_manager: CursorCacheManager,
        prefetcher: Optional[Prefetcher] = None,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.fetcher = fetcher
        self.cache_manager = cache_manager
        self.prefetcher = prefetcher
        self.metrics = metrics
        self.logger = get_logger("orders.pagination")

    async def get_page(self, partition_key: str, page_number: int, page_size: int) -> PageResult:
        spec = PageSpec(partition_key, page_number, page_size)

        cursor: Optional[Cursor] = None
        if page_number > 1:
            cached = await self.cache_manager.get_cursor(
                PageSpec(partition_key, page_number - 1, page_size)
            )
            if cached is MISS:
                cursor = await self._replay_chain(partition_key, page_number - 1, page_size)
            else:
                cursor = cached

            if cursor is None:
                # The partition ends before the requested page
                return PageResult()

        result = await self.fetcher.fetch(partition_key, page_size, cursor, origin="request")
        await self.cache_manager.set_cursor(spec, result.next_cursor)

        has_next = result.next_cursor is not None
        if has_next and self.prefetcher is not None:
            self.prefetcher.schedule(partition_key, page_number, page_size, result.next_cursor)

        return PageResult(items=list(result.items), has_next=has_next, next_cursor=result.next_cursor)

    async def _replay_chain(self, partition_key: str, through_page: int, page_size: int) -> Optional[Cursor]:
        """Walk pages 1..through_page and return the cursor the last one produced."""
        self.logger.info(
            "Cursor cache miss, replaying chain",
            customer_id=partition_key,
            through_page=through_page,
            page_size=page_size,
        )
        if self.metrics:
            self.metrics.increment_counter("chain_replays_total")

        cursor: Optional[Cursor] = None
        for page_number in range(1, through_page + 1):
            result = await self.fetcher.fetch(partition_key, page_size, cursor, origin="replay")
            cursor = result.next_cursor
            await self.cache_manager.set_cursor(PageSpec(partition_key, page_number, page_size), cursor)
            if cursor is None:
                break
        return cursor

    async def iter_pages(self, partition_key: str, page_size: int, max_pages: int):
        """Yield ``(page_number, PageResult)`` from page 1 until exhausted or ``max_pages``."""
        for page_number in range(1, max_pages + 1):
            page = await self.get_page(partition_key, page_number, page_size)
            yield page_number, page
            if not page.has_next:
                break
