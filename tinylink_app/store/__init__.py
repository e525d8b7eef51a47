"""
Link store module.

This module implements the Strategy Pattern for pluggable link persistence.
The link service only sees LinkStore; the backend is picked from settings.
"""

from .models import Link
from .strategies import LinkStore, SQLAlchemyLinkStore, RedisLinkStore, InMemoryLinkStore
from .factory import LinkStoreFactory, StoreBackend

__all__ = [
    "Link",
    "LinkStore",
    "SQLAlchemyLinkStore",
    "RedisLinkStore",
    "InMemoryLinkStore",
    "LinkStoreFactory",
    "StoreBackend",
]
