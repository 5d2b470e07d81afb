from functools import lru_cache

from redis.asyncio import Redis

from app.core.settings import settings


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    """Process-wide client; used by the readiness probe."""
    return Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )


async def close_redis_client() -> None:
    if get_redis_client.cache_info().currsize == 0:
        return
    await get_redis_client().aclose()
    get_redis_client.cache_clear()
