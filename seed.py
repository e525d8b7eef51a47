#!/usr/bin/env python3
"""
Seed the configured link store with a few sample links.
Codes that already exist are left untouched, so this is safe to re-run.
"""

import asyncio
import sys

from tinylink_app.config import settings
from tinylink_app.exceptions import CodeConflictError
from tinylink_app.logging_config import setup_logging
from tinylink_app.services.link_service import LinkService
from tinylink_app.store.factory import LinkStoreFactory, StoreBackend
from tinylink_app.store.strategies import LinkStore

# (code, url, clicks)
SAMPLE_LINKS = [
    ("google", "https://www.google.com", 42),
    ("github", "https://github.com", 18),
    ("example", "https://example.com", 5),
]

logger = setup_logging(settings.log_level)


async def seed(store: LinkStore) -> int:
    """
    Insert the sample links with their demo click counts.

    Clicks go through the same atomic increment as real redirects, so
    lastClicked ends up set to the seeding time.

    Returns:
        How many links were created
    """
    service = LinkService(store=store)
    created = 0
    for code, url, clicks in SAMPLE_LINKS:
        try:
            await service.create_link(url, code)
        except CodeConflictError:
            logger.info("Skipping %s, already seeded", code)
            continue
        for _ in range(clicks):
            await service.record_click(code)
        created += 1
        logger.info("Seeded %s with %d click(s)", code, clicks)
    return created


async def main() -> int:
    store = LinkStoreFactory.create(StoreBackend(settings.store_backend))
    try:
        return await seed(store)
    finally:
        await LinkStoreFactory.close_instance()


if __name__ == "__main__":
    logger.info("Seeding %s store...", settings.store_backend)
    count = asyncio.run(main())
    logger.info("Seeding completed: %d link(s) created", count)
    sys.exit(0)
