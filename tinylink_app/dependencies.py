"""
FastAPI dependencies for dependency injection.

This module provides the link store singleton and the link service built on
top of it.

Pattern: Dependency Injection
- Routes never construct stores or services themselves
- Tests override get_link_store with an isolated store
- The backend is swapped via config, not code
"""

from functools import lru_cache

from fastapi import Depends

from tinylink_app.config import settings
from tinylink_app.services.link_service import LinkService
from tinylink_app.store.factory import LinkStoreFactory, StoreBackend
from tinylink_app.store.strategies import LinkStore


@lru_cache()
def get_link_store() -> LinkStore:
    """
    Get link store instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = StoreBackend(settings.store_backend)
    return LinkStoreFactory.create(backend)


def get_link_service(store: LinkStore = Depends(get_link_store)) -> LinkService:
    """Get LinkService with its store injected"""
    return LinkService(store=store)
