"""
Cursor caching package.

Holds the continuation cursors that let paginated reads resume without
re-walking a customer's order chain. Everything here is soft state with a
fixed TTL and explicit invalidation on writes.
"""

from .cache_manager import CursorCacheManager
from .cursor_cache import MISS, CursorCache, InMemoryCursorCache, PageSpec, RedisCursorCache
from .invalidation import InvalidationManager

__all__ = [
    "MISS",
    "CursorCache",
    "CursorCacheManager",
    "InMemoryCursorCache",
    "InvalidationManager",
    "PageSpec",
    "RedisCursorCache",
]
