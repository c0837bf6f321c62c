"""
Continuation cursor cache backends.

An entry for ``PageSpec(k, n, s)`` holds the cursor produced by page ``n``,
i.e. the cursor required to fetch page ``n + 1`` of partition ``k`` at page
size ``s``. Entries are soft state: losing one only costs a chain replay.
"""

import json
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Protocol, Union
from urllib.parse import quote

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import CacheUnavailable, ValidationError
from shared.logging import get_logger

from ..store.base import Cursor


class _Miss:
    """Sentinel for "nothing cached", distinct from a cached ``None`` cursor."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"


MISS = _Miss()

CachedCursor = Union[Cursor, None, _Miss]


@dataclass(frozen=True)
class PageSpec:
    """Cache key: one page of one partition at one page size."""

    partition_key: str
    page_number: int
    page_size: int

    def __post_init__(self):
        if self.page_number < 1:
            raise ValidationError("page_number must be >= 1", {"page_number": self.page_number})
        if self.page_size < 1:
            raise ValidationError("page_size must be >= 1", {"page_size": self.page_size})


class CursorCache(Protocol):
    """Expiring keyed store of continuation cursors."""

    ttl_seconds: int

    async def get(self, spec: PageSpec) -> CachedCursor:
        ...

    async def set(self, spec: PageSpec, cursor: Optional[Cursor]) -> None:
        ...

    async def invalidate(self, partition_key: str) -> int:
        ...

    async def get_stats(self) -> Dict[str, Any]:
        ...

    async def health_check(self) -> bool:
        ...

    async def close(self) -> None:
        ...


class InMemoryCursorCache:
    """Single-process cursor cache.

    No operation awaits between reading and writing the dict, so each one is
    atomic with respect to other tasks on the event loop.
    """

    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[PageSpec, tuple] = {}
        self._next_purge = clock() + ttl_seconds
        self.logger = get_logger("orders.cache.memory")

    async def get(self, spec: PageSpec) -> CachedCursor:
        entry = self._entries.get(spec)
        if entry is None:
            return MISS

        cursor, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(spec, None)
            return MISS
        return cursor

    async def set(self, spec: PageSpec, cursor: Optional[Cursor]) -> None:
        now = self._clock()
        if now >= self._next_purge:
            self.purge_expired()
            self._next_purge = now + self.ttl_seconds
        self._entries[spec] = (cursor, now + self.ttl_seconds)

    async def invalidate(self, partition_key: str) -> int:
        doomed = [spec for spec in self._entries if spec.partition_key == partition_key]
        for spec in doomed:
            self._entries.pop(spec, None)
        return len(doomed)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [spec for spec, (_, expires_at) in self._entries.items() if expires_at <= now]
        for spec in expired:
            self._entries.pop(spec, None)
        return len(expired)

    async def get_stats(self) -> Dict[str, Any]:
        self.purge_expired()
        return {
            "backend": "memory",
            "entries": len(self._entries),
            "partitions": len({spec.partition_key for spec in self._entries}),
            "ttl_seconds": self.ttl_seconds,
        }

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()


_DECIMAL_TAG = "__decimal__"


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        # Kept as text so key attributes reload digit for digit
        return {_DECIMAL_TAG: str(value)}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_object_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _DECIMAL_TAG in obj:
        return Decimal(obj[_DECIMAL_TAG])
    return obj


class RedisCursorCache:
    """Cursor cache shared across workers through Redis.

    Keys look like ``orders:cursor:<quoted partition>:<page>:<size>``. The
    partition is percent-quoted so glob metacharacters and ``:`` in customer
    ids cannot widen an invalidation pattern.
    """

    KEY_PREFIX = "orders:cursor:"

    def __init__(self, redis_url: str, ttl_seconds: int = 600, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = get_logger("orders.cache.redis")
        self._redis: Optional[redis.Redis] = client

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )
        return self._redis

    def _partition_prefix(self, partition_key: str) -> str:
        return f"{self.KEY_PREFIX}{quote(partition_key, safe='')}:"

    def _make_key(self, spec: PageSpec) -> str:
        return f"{self._partition_prefix(spec.partition_key)}{spec.page_number}:{spec.page_size}"

    async def get(self, spec: PageSpec) -> CachedCursor:
        key = self._make_key(spec)
        try:
            client = await self._get_redis()
            raw = await client.get(key)
        except RedisError as exc:
            raise CacheUnavailable(str(exc), {"key": key}) from exc

        if raw is None:
            return MISS
        return json.loads(raw, parse_float=Decimal, object_hook=_json_object_hook)

    async def set(self, spec: PageSpec, cursor: Optional[Cursor]) -> None:
        key = self._make_key(spec)
        payload = json.dumps(cursor, default=_json_default)
        try:
            client = await self._get_redis()
            await client.setex(key, self.ttl_seconds, payload)
        except RedisError as exc:
            raise CacheUnavailable(str(exc), {"key": key}) from exc

    async def invalidate(self, partition_key: str) -> int:
        pattern = f"{self._partition_prefix(partition_key)}*"
        try:
            client = await self._get_redis()
            keys = await client.keys(pattern)
            if keys:
                await client.delete(*keys)
        except RedisError as exc:
            raise CacheUnavailable(str(exc), {"pattern": pattern}) from exc

        self.logger.debug("Invalidated cursor keys", pattern=pattern, count=len(keys))
        return len(keys)

    async def get_stats(self) -> Dict[str, Any]:
        try:
            client = await self._get_redis()
            keys = await client.keys(f"{self.KEY_PREFIX}*")
        except RedisError as exc:
            raise CacheUnavailable(str(exc)) from exc

        return {
            "backend": "redis",
            "entries": len(keys),
            "ttl_seconds": self.ttl_seconds,
        }

    async def health_check(self) -> bool:
        try:
            client = await self._get_redis()
            return bool(await client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
