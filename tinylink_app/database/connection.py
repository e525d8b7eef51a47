from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from tinylink_app.config import settings


def create_db_engine(database_url: str, timeout: float = settings.storage_timeout) -> Engine:
    """
    Create an engine that is safe to share between request threads.

    Every connection waits at most ``timeout`` seconds on the database:
    - SQLite: busy timeout, so a writer blocked on a lock gives up with
      "database is locked" instead of committing late
    - PostgreSQL: statement_timeout, so the server cancels and rolls back
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout}
    elif database_url.startswith("postgresql"):
        connect_args = {"options": f"-c statement_timeout={max(1, int(timeout * 1000))}"}
    return create_engine(database_url, connect_args=connect_args)


engine = create_db_engine(settings.database_url)

Base = declarative_base()
