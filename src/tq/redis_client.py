"""Optional Redis client for rate-limit counters and economy event pub/sub.

The economy never depends on Redis: when ``TQ_REDIS_URL`` is empty the
client is simply never created and callers see ``None``.
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str) -> bool:
    """Create the client for ``url``. Returns False (and does nothing) for an empty URL."""
    global _client  # noqa: PLW0603
    if not url:
        logger.info("Redis disabled: no URL configured")
        return False
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
        socket_connect_timeout=2,
    )
    return True


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Get the Redis client; RuntimeError when Redis is disabled."""
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client


def get_redis_or_none() -> redis.Redis | None:
    """Get the Redis client, or None when Redis is disabled."""
    return _client
