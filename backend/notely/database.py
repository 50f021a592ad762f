"""
Notely Backend — Database Handle & Connection String Handling
==============================================================

What:  Connection string normalization, the async SQLAlchemy engine wrapper
       (`Database`) and the declarative `Base` for ORM models.
Why:   The service has at most one database, decided at startup. Everything
       that talks to it receives this handle explicitly instead of importing
       a module-level engine.
How:   `normalize_database_url()` makes the raw DATABASE_URL parseable and adds
       the driver hint; `build_engine_url()` converts that into a SQLAlchemy
       async URL; `Database` owns the engine, the session factory and the
       per-request session dependency.
Who:   Created by `bootstrap()`, injected into routers and the authenticator.

Connection Pooling Strategy:
    pool_size / max_overflow come from settings; pool_pre_ping validates
    connections before use; pool_recycle=3600 recycles long-lived
    connections. SQLite URLs skip the sizing arguments.
"""

import logging
from typing import AsyncGenerator
from urllib.parse import parse_qsl, urlencode, urlsplit

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notely.exceptions import ConfigurationError, DatabaseConnectionError

logger = logging.getLogger(__name__)


# ── Connection String Constants ───────────────────────────────────────────
# The temporary scheme only exists so urlsplit() sees a netloc; it is
# stripped again before the string leaves normalize_database_url()
TEMPORARY_SCHEME = "http://"
PARSE_TIME_PARAM = "parseTime"
PARSE_TIME_VALUE = "true"

DEFAULT_DRIVER = "postgresql+asyncpg"

# Sync driver names people put in DATABASE_URL → async drivers we ship with
_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def normalize_database_url(raw: str) -> str:
    """
    Normalize a raw DATABASE_URL value.

    Steps:
        1. Prefix `http://` when the string carries no `scheme://` marker
        2. Validate that the result is URL-parseable (host, port)
        3. Merge `parseTime=true` into the query string; existing parameters
           are kept and `parseTime` is never duplicated
        4. Strip the temporary scheme again if step 1 added it

    Calling this on its own output returns the same string.

    Raises:
        ConfigurationError: the string is empty or cannot be parsed.
    """
    value = (raw or "").strip()
    if not value:
        raise ConfigurationError("DATABASE_URL is empty")

    added_scheme = "://" not in value
    candidate = TEMPORARY_SCHEME + value if added_scheme else value

    try:
        parts = urlsplit(candidate)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError as e:
        raise ConfigurationError(
            f"DATABASE_URL could not be parsed: {e}",
            context={"error_type": type(e).__name__},
        ) from e

    # Only the query string is rewritten; the rest of the URL is kept verbatim
    base, _, query_string = candidate.partition("?")
    query_string, _, fragment = query_string.partition("#")
    params = parse_qsl(query_string, keep_blank_values=True)
    if not any(key == PARSE_TIME_PARAM for key, _ in params):
        params.append((PARSE_TIME_PARAM, PARSE_TIME_VALUE))

    result = f"{base}?{urlencode(params)}"
    if fragment:
        result = f"{result}#{fragment}"

    if added_scheme:
        result = result[len(TEMPORARY_SCHEME):]
    return result


def build_engine_url(normalized: str) -> URL:
    """
    Convert a normalized connection string into a SQLAlchemy async URL.

    Schemeless strings are treated as PostgreSQL. The `parseTime` hint is
    dropped here because asyncpg and aiosqlite decode timestamps themselves
    and would reject it as an unknown connect argument.

    Raises:
        ConfigurationError: SQLAlchemy cannot parse the URL.
    """
    candidate = normalized if "://" in normalized else f"{DEFAULT_DRIVER}://{normalized}"
    try:
        url = make_url(candidate)
    except (ArgumentError, ValueError) as e:
        # ValueError: a port that is not an integer
        raise ConfigurationError(
            f"DATABASE_URL is not a valid database URL: {e}",
            context={"error_type": type(e).__name__},
        ) from e

    drivername = _ASYNC_DRIVERS.get(url.drivername, url.drivername)
    query = {key: value for key, value in url.query.items() if key != PARSE_TIME_PARAM}
    return url.set(drivername=drivername, query=query)


def redact_database_url(url: str) -> str:
    """Render a connection string for logs with the password masked."""
    try:
        return build_engine_url(url).render_as_string(hide_password=True)
    except ConfigurationError:
        return "<unparseable>"


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, Alembic's
    --autogenerate and Database.create_tables().
    """
    pass


class Database:
    """
    The process-wide database handle.

    What:    Owns the async engine and session factory for one database.
    Who:     Built once by bootstrap(); passed to build_v1_router() and from
             there into every route and the authenticator.

    Concurrency:
        The handle itself is immutable after construction. Connection
        sharing is delegated to SQLAlchemy's pool; each request gets its
        own AsyncSession from session().
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = normalize_database_url(url)
        engine_url = build_engine_url(self.url)

        engine_kwargs = {"pool_pre_ping": pool_pre_ping, "echo": echo}
        if engine_url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )

        try:
            self.engine = create_async_engine(engine_url, **engine_kwargs)
        except (SQLAlchemyError, ImportError) as e:
            # Unknown dialect or a driver package that is not installed
            raise ConfigurationError(
                f"Unsupported database driver '{engine_url.drivername}': {e}",
                context={"error_type": type(e).__name__},
            ) from e

        # expire_on_commit=False: returned objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def backend_name(self) -> str:
        return self.engine.url.get_backend_name()

    async def ping(self) -> None:
        """
        Liveness check: open a connection and run SELECT 1.

        Raises:
            DatabaseConnectionError: the server is unreachable or rejected us.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseConnectionError(
                f"Could not connect to the database: {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_tables(self) -> None:
        """Create all tables known to Base.metadata (no-op for existing ones)."""
        # Import registers the models with Base.metadata
        from notely import models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseConnectionError(
                f"Could not create database tables: {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        FastAPI dependency that provides a database session per request.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the route handler (services commit their own writes)
            3. On error: rolls back so the connection returns to the pool clean
            4. Always: closes the session

        Example usage in a route:
            @router.get("/notes")
            async def list_notes(db: AsyncSession = Depends(database.session)):
                ...
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self) -> None:
        """Close every pooled connection. Safe to call more than once."""
        await self.engine.dispose()
        logger.debug("Database connection pool disposed")

    def __repr__(self) -> str:
        return f"<Database(url='{redact_database_url(self.url)}')>"
