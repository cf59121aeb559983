"""
Link storage module.

Implements the Strategy Pattern for pluggable persistence of links and
the index of active codes.
"""

from .strategies import LinkStore, RedisLinkStore, InMemoryLinkStore
from .factory import LinkStoreFactory, StoreBackend

__all__ = [
    "LinkStore",
    "RedisLinkStore",
    "InMemoryLinkStore",
    "LinkStoreFactory",
    "StoreBackend",
]
