"""
Unit tests for CursorCacheManager and InvalidationManager.
"""

from unittest.mock import AsyncMock, patch

import pytest

from shared.errors import CacheUnavailable
from service_orders.app.caching import MISS, InvalidationManager, PageSpec


class TestCursorCacheManager:
    """Cache failures must degrade, never propagate."""

    @pytest.mark.asyncio
    async def test_hit_and_miss_are_counted(self, cache_manager, metrics):
        await cache_manager.set_cursor(PageSpec("C1", 1, 10), {"k": 1})

        assert await cache_manager.get_cursor(PageSpec("C1", 1, 10)) == {"k": 1}
        assert await cache_manager.get_cursor(PageSpec("C1", 2, 10)) is MISS

        assert metrics.count("cursor_cache_lookups_total", result="hit") == 1
        assert metrics.count("cursor_cache_lookups_total", result="miss") == 1

    @pytest.mark.asyncio
    async def test_read_failure_becomes_miss(self, cache_manager, metrics):
        with patch.object(cache_manager.cache, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = CacheUnavailable("redis down")

            result = await cache_manager.get_cursor(PageSpec("C1", 1, 10))

        assert result is MISS
        assert metrics.count("cursor_cache_lookups_total", result="error") == 1

    @pytest.mark.asyncio
    async def test_write_failure_is_dropped(self, cache_manager):
        with patch.object(cache_manager.cache, "set", new_callable=AsyncMock) as mock_set:
            mock_set.side_effect = RuntimeError("boom")

            assert await cache_manager.set_cursor(PageSpec("C1", 1, 10), {"k": 1}) is False

    @pytest.mark.asyncio
    async def test_stats_error_is_reported(self, cache_manager):
        with patch.object(cache_manager.cache, "get_stats", new_callable=AsyncMock) as mock_stats:
            mock_stats.side_effect = CacheUnavailable("redis down")

            stats = await cache_manager.get_cache_stats()

        assert "error" in stats

    @pytest.mark.asyncio
    async def test_health_check_swallows_errors(self, cache_manager):
        with patch.object(cache_manager.cache, "health_check", new_callable=AsyncMock) as mock_health:
            mock_health.side_effect = RuntimeError("boom")

            assert await cache_manager.health_check() is False


class TestInvalidationManager:
    """Test cases for InvalidationManager."""

    @pytest.fixture
    def invalidation(self, cache_manager, metrics):
        return InvalidationManager(cache_manager, metrics=metrics)

    @pytest.mark.asyncio
    async def test_removes_whole_partition_footprint(self, invalidation, cache_manager, metrics):
        for page_size in (10, 20):
            for page in (1, 2, 3):
                await cache_manager.set_cursor(PageSpec("C1", page, page_size), {"page": page})
        await cache_manager.set_cursor(PageSpec("C2", 1, 10), {"page": 1})

        assert await invalidation.invalidate("C1") is True

        for page_size in (10, 20):
            for page in (1, 2, 3):
                assert await cache_manager.get_cursor(PageSpec("C1", page, page_size)) is MISS
        assert await cache_manager.get_cursor(PageSpec("C2", 1, 10)) == {"page": 1}
        assert metrics.count("cache_invalidations_total", status="ok") == 1

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, invalidation, cache_manager, metrics):
        with patch.object(cache_manager.cache, "invalidate", new_callable=AsyncMock) as mock_invalidate:
            mock_invalidate.side_effect = CacheUnavailable("redis down")

            assert await invalidation.invalidate("C1") is False

        assert metrics.count("cache_invalidations_total", status="error") == 1
