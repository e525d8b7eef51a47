"""
Factory for creating link store instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum
from typing import Optional

from .strategies import LinkStore, SQLAlchemyLinkStore, RedisLinkStore, InMemoryLinkStore
from tinylink_app.config import settings

logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available link store backends"""
    SQLALCHEMY = "sqlalchemy"
    REDIS = "redis"
    MEMORY = "memory"


class LinkStoreFactory:
    """
    Simple factory for creating link store instances.

    Uses Singleton Pattern - creates the store once at startup, reuses it for
    every request, closes it at shutdown.
    Gets configuration from settings (not passed as parameters).
    """

    _instance: Optional[LinkStore] = None  # Single cached instance

    @classmethod
    def create(cls, backend: StoreBackend) -> LinkStore:
        """
        Create or return cached link store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton link store instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == StoreBackend.SQLALCHEMY:
            from tinylink_app.database.connection import engine

            cls._instance = SQLAlchemyLinkStore(engine)

        elif backend == StoreBackend.REDIS:
            import redis.asyncio as redis

            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            cls._instance = RedisLinkStore(redis_client, key_prefix=settings.redis_key_prefix)
            logger.info("Redis link store initialized")

        elif backend == StoreBackend.MEMORY:
            cls._instance = InMemoryLinkStore()
            logger.info("In-memory link store initialized")

        else:
            raise ValueError(f"Unknown store backend: {backend}")

        return cls._instance

    @classmethod
    async def close_instance(cls):
        """Close and forget the cached instance (app shutdown)"""
        if cls._instance is not None:
            await cls._instance.close()
        cls._instance = None

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
