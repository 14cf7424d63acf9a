import redis.asyncio as redis

from teamflow.core.config import settings


def create_redis_client() -> redis.Redis:
    """
    Создает Redis-клиент по настройкам приложения
    """
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        decode_responses=True,
    )
