"""
Keyset pagination core: page fetching, chain resolution and cursor prefetch.
"""

from .page_fetcher import PageFetcher
from .prefetcher import DEFAULT_PREFETCH_PAGES, Prefetcher
from .service import PageResult, PaginationService

__all__ = [
    "DEFAULT_PREFETCH_PAGES",
    "PageFetcher",
    "PageResult",
    "PaginationService",
    "Prefetcher",
]
