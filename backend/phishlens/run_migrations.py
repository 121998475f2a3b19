# run_migrations.py (wraps alembic upgrade with wait_for_db)
import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from phishlens.config import settings
from phishlens.db import get_engine, wait_for_db

logging.basicConfig(level=logging.INFO)
log = logging.getLogger("phishlens.migrations")

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"


def alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    return cfg


def _upgrade(connection, cfg: Config, revision: str):
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, revision)


async def run_migrations(revision: str = "head"):
    engine = get_engine()
    # wait for DB (will raise if auth fails)
    await wait_for_db(engine, max_retries=8, delay=2.0)

    log.info("Upgrading schema to %s", revision)
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade, alembic_config(), revision)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(run_migrations())
