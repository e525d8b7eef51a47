"""
Link store strategies using Strategy Pattern.

Allows switching between different link backends:
- SQLAlchemy: SQLite for development, PostgreSQL in production
- Redis: shared in-memory datastore with Lua scripts for atomicity
- In-memory: tests and throwaway instances
"""

import asyncio
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from contextvars import ContextVar
from typing import Dict, List, Optional

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy import delete, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker

from tinylink_app.config import settings
from tinylink_app.database.connection import Base
from tinylink_app.exceptions import (
    CodeConflictError,
    LinkNotFoundError,
    StorageUnavailableError,
)
from tinylink_app.models.link import LinkRow
from .models import Link

logger = logging.getLogger(__name__)

# Seconds a single store call may wait on the database. Set per call by the
# link service; copied into worker threads along with the context.
call_timeout: ContextVar[Optional[float]] = ContextVar("call_timeout", default=None)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands timestamps back naive; they were written as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class LinkStore(ABC):
    """
    Abstract base class for link stores.

    This is the Strategy Pattern interface - the link service talks to this
    and never to a concrete database.

    Every implementation guarantees:
    - create() checks and inserts in one atomic step (no check-then-insert)
    - atomic_increment_and_fetch() never loses an increment and returns the
      snapshot produced by its own increment
    - transient backend failures raise StorageUnavailableError, never
      LinkNotFoundError

    All methods are async because store operations involve I/O.
    """

    @abstractmethod
    async def create(self, code: str, url: str) -> Link:
        """
        Insert a new link with clicks=0 and no last_clicked.

        Args:
            code: Short code (already validated)
            url: Target URL (already validated)

        Returns:
            The created link

        Raises:
            CodeConflictError: If the code is already taken
        """
        pass

    @abstractmethod
    async def find_by_code(self, code: str) -> Link:
        """
        Get a link by its short code.

        Raises:
            LinkNotFoundError: If no link has this code
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[Link]:
        """Get every link, newest first"""
        pass

    @abstractmethod
    async def atomic_increment_and_fetch(self, code: str) -> Link:
        """
        Count one click and stamp last_clicked, as a single atomic unit.

        Returns:
            The link as it is right after this increment

        Raises:
            LinkNotFoundError: If no link has this code
        """
        pass

    @abstractmethod
    async def delete_by_code(self, code: str) -> None:
        """
        Remove a link. The code can be reused immediately afterwards.

        Raises:
            LinkNotFoundError: If no link has this code
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is reachable"""
        pass

    async def close(self) -> None:
        """Release backend resources (connections, pools)"""
        return None


class SQLAlchemyLinkStore(LinkStore):
    """
    SQLAlchemy implementation backed by the ``links`` table.

    - Uniqueness comes from the unique index on ``code``
    - Clicks are counted with one ``UPDATE ... RETURNING`` statement, so the
      database serializes concurrent redirects
    - Each operation opens and closes its own session; the engine pool is the
      only shared state

    Database calls are blocking, so they run in a worker thread and the event
    loop stays free for other requests.
    """

    def __init__(self, engine: Engine, timeout: float = settings.storage_timeout):
        """
        Initialize the store and create the links table if it doesn't exist.

        Args:
            engine: SQLAlchemy engine (SQLite or PostgreSQL)
            timeout: Database wait bound for calls made without call_timeout
        """
        self.engine = engine
        self.timeout = timeout
        self.table = LinkRow.__table__
        self.session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        Base.metadata.create_all(bind=engine)
        logger.info("SQLAlchemy link store initialized (%s)", engine.url.get_backend_name())

    @contextmanager
    def _session(self):
        session = self.session_factory()
        try:
            self._bound_wait(session)
            yield session
        except OperationalError as exc:
            session.rollback()
            logger.error("Link database unavailable: %s", exc)
            raise StorageUnavailableError("Link database is unavailable") from exc
        finally:
            session.close()

    def _bound_wait(self, session) -> None:
        """
        Cap how long this session waits on locks or statements.

        Pooled connections keep the setting, so it is applied on every call.
        The database then aborts and rolls back instead of the write landing
        after the caller was already told it failed.
        """
        milliseconds = max(1, int((call_timeout.get() or self.timeout) * 1000))
        dialect = self.engine.dialect.name
        if dialect == "sqlite":
            session.execute(text(f"PRAGMA busy_timeout = {milliseconds}"))
        elif dialect == "postgresql":
            session.execute(text(f"SET LOCAL statement_timeout = {milliseconds}"))

    @staticmethod
    def _to_link(row) -> Link:
        return Link(
            id=row["id"],
            code=row["code"],
            url=row["url"],
            clicks=row["clicks"],
            created_at=_as_utc(row["created_at"]),
            last_clicked=_as_utc(row["last_clicked"]),
        )

    async def create(self, code: str, url: str) -> Link:
        return await asyncio.to_thread(self._create, code, url)

    def _create(self, code: str, url: str) -> Link:
        link = Link(id=uuid.uuid4().hex, code=code, url=url, clicks=0, created_at=_utcnow())
        with self._session() as session:
            session.add(LinkRow(**link.model_dump()))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise CodeConflictError(code) from exc
        return link

    async def find_by_code(self, code: str) -> Link:
        return await asyncio.to_thread(self._find_by_code, code)

    def _find_by_code(self, code: str) -> Link:
        stmt = select(self.table).where(self.table.c.code == code)
        with self._session() as session:
            row = session.execute(stmt).mappings().one_or_none()
        if row is None:
            raise LinkNotFoundError(code)
        return self._to_link(row)

    async def list_all(self) -> List[Link]:
        return await asyncio.to_thread(self._list_all)

    def _list_all(self) -> List[Link]:
        stmt = select(self.table).order_by(self.table.c.created_at.desc())
        with self._session() as session:
            rows = session.execute(stmt).mappings().all()
        return [self._to_link(row) for row in rows]

    async def atomic_increment_and_fetch(self, code: str) -> Link:
        return await asyncio.to_thread(self._atomic_increment_and_fetch, code)

    def _atomic_increment_and_fetch(self, code: str) -> Link:
        # Increment in SQL, never read-modify-write in Python
        stmt = (
            update(self.table)
            .where(self.table.c.code == code)
            .values(clicks=self.table.c.clicks + 1, last_clicked=_utcnow())
            .returning(*self.table.c)
        )
        with self._session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            session.commit()
        if row is None:
            raise LinkNotFoundError(code)
        return self._to_link(row)

    async def delete_by_code(self, code: str) -> None:
        await asyncio.to_thread(self._delete_by_code, code)

    def _delete_by_code(self, code: str) -> None:
        stmt = delete(self.table).where(self.table.c.code == code)
        with self._session() as session:
            deleted = session.execute(stmt).rowcount
            session.commit()
        if deleted == 0:
            raise LinkNotFoundError(code)

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._ping)
            return True
        except StorageUnavailableError:
            return False

    def _ping(self) -> None:
        with self._session() as session:
            session.execute(text("SELECT 1"))

    async def close(self) -> None:
        await asyncio.to_thread(self.engine.dispose)


# Each script runs atomically inside Redis; no other command interleaves.
CREATE_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], 'id', ARGV[1], 'code', ARGV[2], 'url', ARGV[3],
           'clicks', 0, 'created_at', ARGV[4], 'last_clicked', '')
redis.call('ZADD', KEYS[2], ARGV[5], ARGV[2])
return 1
"""

INCREMENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return false
end
redis.call('HINCRBY', KEYS[1], 'clicks', 1)
redis.call('HSET', KEYS[1], 'last_clicked', ARGV[1])
return redis.call('HGETALL', KEYS[1])
"""

DELETE_SCRIPT = """
if redis.call('DEL', KEYS[1]) == 0 then
    return 0
end
redis.call('ZREM', KEYS[2], ARGV[1])
return 1
"""

LIST_SCRIPT = """
local codes = redis.call('ZREVRANGE', KEYS[1], 0, -1)
local links = {}
for i, code in ipairs(codes) do
    links[i] = redis.call('HGETALL', ARGV[1] .. code)
end
return links
"""


class RedisLinkStore(LinkStore):
    """
    Redis implementation.

    Layout:
    - ``<prefix>:link:<code>`` hash with the link fields
    - ``<prefix>:links`` sorted set of codes scored by creation time

    Create, click and delete are Lua scripts so the existence check and the
    write happen in one step on the server. LIST_SCRIPT builds key names at
    runtime, so this store targets a single Redis node, not a cluster.
    """

    def __init__(self, redis_client, key_prefix: str = "tinylink"):
        """
        Initialize Redis link store.

        Args:
            redis_client: redis.asyncio.Redis created with decode_responses=True
            key_prefix: Namespace for every key this store writes
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.index_key = f"{key_prefix}:links"
        self._create_script = redis_client.register_script(CREATE_SCRIPT)
        self._increment_script = redis_client.register_script(INCREMENT_SCRIPT)
        self._delete_script = redis_client.register_script(DELETE_SCRIPT)
        self._list_script = redis_client.register_script(LIST_SCRIPT)

    def _link_key(self, code: str) -> str:
        return f"{self.key_prefix}:link:{code}"

    @staticmethod
    def _to_link(fields: Dict[str, str]) -> Link:
        last_clicked = fields.get("last_clicked")
        return Link(
            id=fields["id"],
            code=fields["code"],
            url=fields["url"],
            clicks=int(fields["clicks"]),
            created_at=datetime.fromisoformat(fields["created_at"]),
            last_clicked=datetime.fromisoformat(last_clicked) if last_clicked else None,
        )

    @staticmethod
    def _pairs_to_dict(items: List[str]) -> Dict[str, str]:
        return dict(zip(items[::2], items[1::2]))

    async def _call(self, coro):
        try:
            return await coro
        except (RedisConnectionError, RedisTimeoutError) as exc:
            logger.error("Redis link store unavailable: %s", exc)
            raise StorageUnavailableError("Redis link store is unavailable") from exc

    async def create(self, code: str, url: str) -> Link:
        link = Link(id=uuid.uuid4().hex, code=code, url=url, clicks=0, created_at=_utcnow())
        created = await self._call(self._create_script(
            keys=[self._link_key(code), self.index_key],
            args=[link.id, code, url, link.created_at.isoformat(), link.created_at.timestamp()],
        ))
        if not created:
            raise CodeConflictError(code)
        return link

    async def find_by_code(self, code: str) -> Link:
        fields = await self._call(self.redis.hgetall(self._link_key(code)))
        if not fields:
            raise LinkNotFoundError(code)
        return self._to_link(fields)

    async def list_all(self) -> List[Link]:
        rows = await self._call(self._list_script(
            keys=[self.index_key],
            args=[f"{self.key_prefix}:link:"],
        ))
        # An indexed code without a hash would be a half-written link; skip it
        return [self._to_link(self._pairs_to_dict(row)) for row in rows if row]

    async def atomic_increment_and_fetch(self, code: str) -> Link:
        items = await self._call(self._increment_script(
            keys=[self._link_key(code)],
            args=[_utcnow().isoformat()],
        ))
        if not items:
            raise LinkNotFoundError(code)
        return self._to_link(self._pairs_to_dict(items))

    async def delete_by_code(self, code: str) -> None:
        deleted = await self._call(self._delete_script(
            keys=[self._link_key(code), self.index_key],
            args=[code],
        ))
        if not deleted:
            raise LinkNotFoundError(code)

    async def health_check(self) -> bool:
        try:
            return bool(await self._call(self.redis.ping()))
        except StorageUnavailableError:
            return False

    async def close(self) -> None:
        await self.redis.aclose()


class InMemoryLinkStore(LinkStore):
    """
    In-memory implementation using a dict keyed by code.

    Pros:
    - No external services, instant operations
    - Good for tests and local experiments

    Cons:
    - Not shared between processes
    - Lost on restart

    A threading lock guards every read-modify-write, so the guarantees hold
    even when the store is shared across event loops or threads.
    Note: Async for interface consistency, but operations are instant.
    """

    def __init__(self):
        self._links: Dict[str, Link] = {}
        self._lock = threading.Lock()

    async def create(self, code: str, url: str) -> Link:
        with self._lock:
            if code in self._links:
                raise CodeConflictError(code)
            link = Link(id=uuid.uuid4().hex, code=code, url=url, clicks=0, created_at=_utcnow())
            self._links[code] = link
        return link

    async def find_by_code(self, code: str) -> Link:
        with self._lock:
            link = self._links.get(code)
        if link is None:
            raise LinkNotFoundError(code)
        return link

    async def list_all(self) -> List[Link]:
        with self._lock:
            links = list(self._links.values())
        # Reversed first so equal timestamps still come out newest first
        return sorted(reversed(links), key=lambda link: link.created_at, reverse=True)

    async def atomic_increment_and_fetch(self, code: str) -> Link:
        with self._lock:
            link = self._links.get(code)
            if link is None:
                raise LinkNotFoundError(code)
            link = link.model_copy(update={"clicks": link.clicks + 1, "last_clicked": _utcnow()})
            self._links[code] = link
        return link

    async def delete_by_code(self, code: str) -> None:
        with self._lock:
            if self._links.pop(code, None) is None:
                raise LinkNotFoundError(code)

    async def health_check(self) -> bool:
        return True
