"""
Notely Backend — Startup Bootstrapper
======================================

What:  Decides, once per process, which capability set the service exposes.
How:   Reads DATABASE_URL from Settings. Without it the service runs in
       degraded mode and SQLAlchemy is never touched. With it, the string is
       normalized, an engine is built and pinged; any failure is fatal.
When:  Called by main() before the FastAPI app is created.

Startup sequence (strictly sequential):
    settings → normalize → connect → ping → [create tables] → routes → listen
"""

import enum
import logging
from typing import Optional

from notely.config import Settings
from notely.database import Database, redact_database_url

logger = logging.getLogger(__name__)


class ServiceMode(str, enum.Enum):
    """Capability set of the running process; fixed after startup."""
    FULL = "full"
    DEGRADED = "degraded"


def service_mode(database: Optional[Database]) -> ServiceMode:
    return ServiceMode.FULL if database is not None else ServiceMode.DEGRADED


async def bootstrap(settings: Settings) -> Optional[Database]:
    """
    Build the process-wide Database handle, or None for degraded mode.

    Returns:
        A pinged Database, or None when DATABASE_URL is not configured.

    Raises:
        ConfigurationError: DATABASE_URL is malformed or names an unknown driver.
        DatabaseConnectionError: the database is unreachable or the ping fails.
    """
    if not settings.database_enabled:
        logger.warning("DATABASE_URL environment variable is not set")
        logger.warning("Running without CRUD endpoints")
        return None

    database = Database(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        echo=settings.log_level == "DEBUG",
    )
    logger.info("Connecting to database %s", redact_database_url(database.url))

    try:
        await database.ping()
        if settings.database_create_tables:
            await database.create_tables()
            logger.info("Database tables created from model metadata")
    finally:
        # Drop the connections opened on this event loop; the pool refills
        # lazily on the loop that serves requests
        await database.dispose()

    logger.info("Connected to database!")
    return database
