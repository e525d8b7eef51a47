import asyncio
import logging
from typing import List, Optional

from tinylink_app.config import settings
from tinylink_app.exceptions import (
    CodeConflictError,
    GenerationExhaustedError,
    StorageUnavailableError,
    ValidationError,
)
from tinylink_app.services.short_code_strategies import ShortCodeStrategy, RandomShortCodeStrategy
from tinylink_app.services.validators import (
    MAX_CODE_LENGTH,
    MIN_CODE_LENGTH,
    is_valid_code,
    is_valid_url,
)
from tinylink_app.store.models import Link
from tinylink_app.store.strategies import LinkStore, call_timeout

logger = logging.getLogger(__name__)


class LinkService:
    """
    Link service with dependency injection for the store and code generator.

    - The store is injected (never created internally), so any backend works
    - This is the only place that retries anything: generated codes are
      retried on collision up to ``max_generation_attempts`` times
    - Every store call is bounded by ``storage_timeout``; an abandoned call
      surfaces as StorageUnavailableError
    """

    def __init__(
        self,
        store: LinkStore,
        code_strategy: Optional[ShortCodeStrategy] = None,
        max_generation_attempts: Optional[int] = None,
        storage_timeout: Optional[float] = None
    ):
        """
        Initialize link service with dependencies.

        Args:
            store: Link store strategy
            code_strategy: Short code generator (random by default)
            max_generation_attempts: Collision retry bound (settings by default)
            storage_timeout: Seconds allowed per store call (settings by default)
        """
        self.store = store
        self.code_strategy = code_strategy or RandomShortCodeStrategy()
        self.max_generation_attempts = (
            max_generation_attempts
            if max_generation_attempts is not None
            else settings.max_generation_attempts
        )
        self.storage_timeout = (
            storage_timeout if storage_timeout is not None else settings.storage_timeout
        )

    async def _store_call(self, awaitable):
        # The database enforces storage_timeout itself, so a write blocked on
        # a lock is rolled back rather than committed after the caller gave
        # up. wait_for only guards against a backend that never answers.
        token = call_timeout.set(self.storage_timeout)
        try:
            return await asyncio.wait_for(awaitable, timeout=self.storage_timeout * 2)
        except asyncio.TimeoutError as exc:
            logger.warning("Link store call timed out after %ss", self.storage_timeout)
            raise StorageUnavailableError(
                f"Link store did not answer within {self.storage_timeout}s"
            ) from exc
        finally:
            call_timeout.reset(token)

    @staticmethod
    def _require_valid_code(code: str) -> None:
        if not is_valid_code(code):
            raise ValidationError("Invalid code format")

    async def create_link(self, url: str, code: Optional[str] = None) -> Link:
        """Create a new short link

        Process:
        1. Validate the target URL
        2. Custom code: validate it and insert once; a conflict goes straight
           back to the caller, who picked that code on purpose
        3. No code: generate and insert, retrying on conflict until the
           attempt bound is used up

        Raises:
            ValidationError: Bad URL or malformed custom code
            CodeConflictError: Custom code already taken
            GenerationExhaustedError: Every generated code collided
        """
        if not is_valid_url(url):
            raise ValidationError("URL must be a valid HTTP or HTTPS URL")

        if code:
            if not is_valid_code(code):
                raise ValidationError(
                    f"Custom code must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} "
                    f"alphanumeric characters"
                )
            link = await self._store_call(self.store.create(code, url))
            logger.info("Created link %s -> %s", link.code, link.url)
            return link

        for attempt in range(1, self.max_generation_attempts + 1):
            candidate = self.code_strategy.generate()
            try:
                link = await self._store_call(self.store.create(candidate, url))
            except CodeConflictError:
                logger.debug("Generated code %s collided (attempt %d)", candidate, attempt)
                continue
            logger.info("Created link %s -> %s", link.code, link.url)
            return link

        logger.warning(
            "Gave up generating a code after %d collisions", self.max_generation_attempts
        )
        raise GenerationExhaustedError(self.max_generation_attempts)

    async def record_click(self, code: str) -> Link:
        """
        Count a redirect and return the link to redirect to.

        Malformed codes are rejected before the store is touched.
        """
        self._require_valid_code(code)
        return await self._store_call(self.store.atomic_increment_and_fetch(code))

    async def get_stats(self, code: str) -> Link:
        """Get a link with its click statistics"""
        self._require_valid_code(code)
        return await self._store_call(self.store.find_by_code(code))

    async def delete_link(self, code: str) -> None:
        """Delete a link (hard delete, the code becomes free again)"""
        self._require_valid_code(code)
        await self._store_call(self.store.delete_by_code(code))
        logger.info("Deleted link %s", code)

    async def list_links(self) -> List[Link]:
        """Get all links, newest first"""
        return await self._store_call(self.store.list_all())
