from redis.asyncio import ConnectionPool, Redis

from shared.config import settings

# Notification payloads are JSON text, so replies are decoded to str
pool = ConnectionPool.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    socket_connect_timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
    socket_timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
)


def get_redis_pool() -> Redis:
    return Redis(connection_pool=pool)
