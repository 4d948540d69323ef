"""
Engine (connection pool) lifecycle and schema migration.
"""
import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import QueuePool, StaticPool
from sqlmodel import create_engine

from quote_server.config import get_settings
from quote_server.db.migrations import MigrationError, current_version, run_migrations
from quote_server.errors import StoreInitError, StoreIoError

logger = logging.getLogger(__name__)

_MEMORY = {"", ":memory:"}


def normalize_database_url(uri: str) -> str:
    """
    Accept both SQLAlchemy URLs and the short ``sqlite:path`` form.

        sqlite:db/quotes.db      -> sqlite:///db/quotes.db
        sqlite://db/quotes.db    -> sqlite:///db/quotes.db
        sqlite:///db/quotes.db   -> unchanged
    """
    uri = uri.strip()
    scheme, sep, rest = uri.partition(":")
    if not sep or not scheme.startswith("sqlite"):
        return uri
    if rest.startswith("///"):
        return uri
    if rest.startswith("//"):
        rest = rest[2:]
    return f"{scheme}:///{rest}"


def database_path(uri: str) -> Optional[Path]:
    """Filesystem path of a sqlite URL, or None for an in-memory database."""
    url = make_url(normalize_database_url(uri))
    if url.get_backend_name() != "sqlite":
        raise StoreInitError(f"Unsupported database scheme: {url.get_backend_name()}")
    if url.database in _MEMORY or url.database is None:
        return None
    return Path(url.database)


def _enable_transactional_ddl(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first DML statement; emit it ourselves so
    # DDL and single-record imports get real transactions.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN")


def create_store_engine(uri: str) -> Engine:
    """Build a bounded connection pool for ``uri`` without touching the file."""
    settings = get_settings()
    url = make_url(normalize_database_url(uri))
    if url.get_backend_name() != "sqlite":
        raise StoreInitError(f"Unsupported database scheme: {url.get_backend_name()}")

    connect_args: dict[str, Any] = {
        "check_same_thread": False,
        "timeout": settings.DB_POOL_TIMEOUT,
    }

    if url.database in _MEMORY or url.database is None:
        # One shared connection, otherwise each checkout sees an empty database.
        engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(
            url,
            connect_args=connect_args,
            poolclass=QueuePool,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )

    _enable_transactional_ddl(engine)
    return engine


def init_store(uri: Optional[str] = None, migrations_dir: Optional[Path] = None) -> Engine:
    """
    Open the database at ``uri`` and bring its schema up to date.

    Creates the containing directory and the database file if they are
    missing. Any failure here is fatal for the process and is raised as
    StoreInitError.
    """
    settings = get_settings()
    uri = uri or settings.DATABASE_URL
    migrations_dir = migrations_dir or settings.migrations_path

    try:
        path = database_path(uri)
    except ArgumentError as e:
        raise StoreInitError(f"Invalid database URI {uri!r}", cause=e) from e

    if path is not None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreInitError(f"Cannot create database directory {path.parent}", cause=e) from e
        if not path.exists():
            logger.info("Creating new database at %s", path)

    engine = create_store_engine(uri)
    try:
        applied = run_migrations(engine, migrations_dir)
    except (SQLAlchemyError, MigrationError, OSError) as e:
        engine.dispose()
        raise StoreInitError(f"Cannot initialize database {uri!r}", cause=e) from e

    if applied:
        logger.info("Database migrated to version %s", applied[-1])
    else:
        logger.info("Database schema is up to date")
    return engine


def check_db_health(engine: Engine) -> dict[str, Any]:
    """
    Check database connectivity and get basic stats.

    Returns:
        Dict with status, quote count and schema version
    """
    from quote_server.services.quotes import count_quotes

    try:
        quote_count = count_quotes(engine)
        return {
            "status": "healthy",
            "counts": {"quotes": quote_count},
            "schema_version": current_version(engine),
        }
    except (SQLAlchemyError, StoreIoError) as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
