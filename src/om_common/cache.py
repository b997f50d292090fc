"""Tag-aware memoization for read paths.

Reads go through `CacheService.memoize(key, ttl_seconds, tags, compute)`;
writes call `invalidate_tags(...)` after their transaction commits. Values must
be JSON-serializable (callers cache `model_dump(mode="json")` output) so the
in-process and Redis backends behave identically.

Backends:
  - MemoryCacheStore: per-process dict, expiry driven by an injected clock
  - RedisCacheStore:  shared across workers, expiry via Redis TTL,
                      tag membership kept in Redis sets
"""

import json
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol, TypeVar

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings
from src.om_common.redis_client import get_redis

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Miss:
    def __repr__(self) -> str:
        return "<cache miss>"


MISS: Any = _Miss()


class CacheStore(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(
        self, key: str, value: Any, ttl_seconds: int, tags: Iterable[str]
    ) -> None: ...

    async def invalidate_tags(self, tags: Iterable[str]) -> int: ...


class MemoryCacheStore:
    """In-process store; returns MISS for absent or expired keys.

    Every write first sweeps expired entries and drops them from their tag
    sets, so both maps only hold live keys.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}
        self._tags: dict[str, set[str]] = {}

    async def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return MISS
        expires_at, payload = entry
        if self._clock() >= expires_at:
            self._discard([key])
            return MISS
        return json.loads(payload)

    async def set(
        self, key: str, value: Any, ttl_seconds: int, tags: Iterable[str]
    ) -> None:
        now = self._clock()
        self._discard([k for k, (expires_at, _) in self._entries.items() if now >= expires_at])
        self._entries[key] = (now + ttl_seconds, json.dumps(value))
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)

    async def invalidate_tags(self, tags: Iterable[str]) -> int:
        removed = 0
        for tag in tags:
            for key in self._tags.pop(tag, set()):
                if self._entries.pop(key, None) is not None:
                    removed += 1
        return removed

    def _discard(self, keys: list[str]) -> None:
        if not keys:
            return
        for key in keys:
            del self._entries[key]
        for tag in list(self._tags):
            members = self._tags[tag]
            members.difference_update(keys)
            if not members:
                del self._tags[tag]


class RedisCacheStore:
    """Redis-backed store. A Redis outage degrades to cache misses."""

    _KEY_PREFIX = "om:cache:"
    _TAG_PREFIX = "om:cache-tag:"

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def get(self, key: str) -> Any:
        try:
            payload = await self._redis.get(self._KEY_PREFIX + key)
        except RedisError as exc:
            logger.warning("Cache read failed: key=%s error=%s", key, exc)
            return MISS
        if payload is None:
            return MISS
        return json.loads(payload)

    async def set(
        self, key: str, value: Any, ttl_seconds: int, tags: Iterable[str]
    ) -> None:
        full_key = self._KEY_PREFIX + key
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(full_key, json.dumps(value), ex=ttl_seconds)
                for tag in tags:
                    pipe.sadd(self._TAG_PREFIX + tag, full_key)
                await pipe.execute()
        except RedisError as exc:
            logger.warning("Cache write failed: key=%s error=%s", key, exc)

    async def invalidate_tags(self, tags: Iterable[str]) -> int:
        removed = 0
        try:
            for tag in tags:
                tag_key = self._TAG_PREFIX + tag
                keys = await self._redis.smembers(tag_key)
                if keys:
                    removed += await self._redis.delete(*keys)
                await self._redis.delete(tag_key)
        except RedisError as exc:
            logger.warning("Cache invalidation failed: tags=%s error=%s", list(tags), exc)
        return removed


class CacheService:
    def __init__(self, store: CacheStore) -> None:
        self._store = store

    async def memoize(
        self,
        key: str,
        ttl_seconds: int,
        tags: Iterable[str],
        compute: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the cached value for `key`, computing and storing it on a miss."""
        cached = await self._store.get(key)
        if cached is not MISS:
            return cached
        value = await compute()
        await self._store.set(key, value, ttl_seconds, list(tags))
        return value

    async def invalidate_tags(self, *tags: str) -> None:
        removed = await self._store.invalidate_tags(tags)
        logger.debug("Cache invalidated: tags=%s entries=%d", tags, removed)


_cache_service: CacheService | None = None


async def get_cache() -> CacheService:
    """Process-wide cache service for the configured backend."""
    global _cache_service  # noqa: PLW0603
    if _cache_service is None:
        if settings.CACHE_BACKEND == "redis":
            store: CacheStore = RedisCacheStore(await get_redis())
        else:
            store = MemoryCacheStore()
        _cache_service = CacheService(store)
    return _cache_service
