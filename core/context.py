"""
Explicit dependency bundle passed into every pipeline entry point
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from core.config import Settings, settings as default_settings
from core.database import create_engine, create_session_factory
from ingestion.client.http import FeedHttpClient

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Settings, store and outbound client for one process or run"""
    settings: Settings
    session_factory: async_sessionmaker
    http: FeedHttpClient
    engine: Optional[AsyncEngine] = None


@asynccontextmanager
async def open_context(settings: Optional[Settings] = None) -> AsyncIterator[PipelineContext]:
    """
    Build the engine, session factory and HTTP client once, and dispose
    them when the block exits.
    """
    settings = settings or default_settings
    engine = create_engine(settings.DATABASE_URL)
    http = FeedHttpClient(settings)
    
    try:
        yield PipelineContext(
            settings=settings,
            session_factory=create_session_factory(engine),
            http=http,
            engine=engine,
        )
    finally:
        await http.aclose()
        await engine.dispose()
        logger.debug("Pipeline context closed")
