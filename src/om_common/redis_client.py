"""Redis connection for the shared cache backend (CACHE_BACKEND=redis).

Socket timeouts are short on purpose: a slow or absent Redis must surface as
a RedisError quickly so the cache falls through to the database.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def ping_redis() -> None:
    """Fail startup early when the redis backend is configured but unreachable."""
    await (await get_redis()).ping()


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
