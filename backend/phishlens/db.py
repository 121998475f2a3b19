# backend/phishlens/db.py

import logging
import asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import OperationalError
import sqlalchemy

from .config import settings

logger = logging.getLogger("phishlens.db")

# ---------------------------------------------------------
# Declarative base (shared with Alembic)
# ---------------------------------------------------------
Base = declarative_base()

# ---------------------------------------------------------
# Lazy engine + lazy session maker
# ---------------------------------------------------------
_engine = None
_session_maker = None


def get_engine(url: str | None = None):
    """Lazy async engine creation."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            url or settings.DATABASE_URL,
            echo=bool(settings.DEBUG),
            pool_pre_ping=True,
        )
    return _engine


def get_session_maker(url: str | None = None):
    """Lazy sessionmaker creation."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            bind=get_engine(url),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_maker


async def dispose_engine():
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


# ---------------------------------------------------------
# DB readiness check for container startup
# ---------------------------------------------------------
async def wait_for_db(engine=None, max_retries: int = 8, delay: float = 2.0):
    """
    Wait for DB to accept connections before serving requests.
    """
    engine = engine or get_engine()

    last_exc = None
    for attempt in range(1, max_retries + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(sqlalchemy.text("SELECT 1"))
                logger.info("Database connected (attempt %d)", attempt)
                return True

        except OperationalError as e:
            last_exc = e
            msg = str(e.__cause__ or e)

            if "password authentication failed" in msg.lower():
                logger.error("Database authentication failed: %s", msg)
                raise

            logger.warning(
                "DB not ready (attempt %d/%d): %s",
                attempt, max_retries, msg
            )
            await asyncio.sleep(delay)

        except Exception as e:
            # raw driver errors (refused connection, unknown host) are not wrapped
            last_exc = e
            logger.warning(
                "DB not reachable (attempt %d/%d): %r",
                attempt, max_retries, e
            )
            await asyncio.sleep(delay)

    logger.error("Failed to connect to DB after %d retries. Last error: %s",
                 max_retries, last_exc)
    raise last_exc
