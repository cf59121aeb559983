"""
Factory for creating link store instances.

The factory only builds; the application creates one store at startup and
passes it explicitly to every component that needs it.
"""

from enum import Enum

import redis.asyncio as redis

from shortlink_app.config import Settings
from .strategies import LinkStore, RedisLinkStore, InMemoryLinkStore


class StoreBackend(Enum):
    """Available link store backends"""
    REDIS = "redis"
    MEMORY = "memory"


class LinkStoreFactory:
    """Simple factory for creating link stores from settings."""

    @classmethod
    def create(cls, backend: StoreBackend, settings: Settings) -> LinkStore:
        """
        Create a link store.

        Args:
            backend: Type of store backend (from enum)
            settings: Application settings with connection parameters

        Returns:
            A new, not yet connected, LinkStore
        """
        if backend == StoreBackend.REDIS:
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
            )
            return RedisLinkStore(
                redis_client,
                connect_attempts=settings.redis_connect_attempts,
                connect_interval=settings.redis_connect_interval,
            )

        if backend == StoreBackend.MEMORY:
            return InMemoryLinkStore()

        raise ValueError(f"Unknown store backend: {backend}")
