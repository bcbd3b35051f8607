"""Create (or recreate) all tables.

Usage: python -m school_admin.db.init_db [--drop]
"""

import argparse
import asyncio
import logging

from school_admin.core import models  # noqa: F401  registers the tables on Base
from school_admin.core.config import settings
from school_admin.core.logging import setup_logging
from school_admin.db.session import Base, engine

logger = logging.getLogger("school_admin.db.init_db")


async def init_db(drop: bool = False) -> None:
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning("Dropped all tables")
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the school admin tables.")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()
    setup_logging(settings.log_level, settings.log_json)
    asyncio.run(init_db(drop=args.drop))


if __name__ == "__main__":
    main()
