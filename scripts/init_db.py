"""
Create every table from the ORM metadata.

Usage:
    python -m scripts.init_db
"""

import asyncio
import logging

from core.config import settings
from core.database import create_engine, create_schema
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def init_database():
    logger.info("Connecting to database...")
    engine = create_engine(settings.DATABASE_URL)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


def main():
    setup_logging(settings)
    asyncio.run(init_database())


if __name__ == "__main__":
    main()
