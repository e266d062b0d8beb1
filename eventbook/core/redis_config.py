import redis

from eventbook.core.config import settings


def get_redis_url() -> str:
    return settings.REDIS_URL


def get_redis_client() -> redis.Redis:
    """Redis client used for the per-event booking locks."""
    return redis.from_url(
        get_redis_url(),
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
