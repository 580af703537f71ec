"""
HTTP surface: health, run history and party recommendations.

The PipelineContext is opened once at startup and shared by every request
through app.state.ctx; tests may set app.state.ctx themselves beforehand.
"""

from contextlib import AsyncExitStack
import logging

from fastapi import FastAPI

from api.middleware import RequestContextMiddleware
from api.routes import health, recommendations, runs
from core.config import settings
from core.context import open_context
from core.logging import setup_logging
from ingestion.scheduler import SyncScheduler

setup_logging(settings)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="Knesset Activity API",
    description="Operational endpoints for the parliament data pipeline and party recommendations",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

for module in (health, runs, recommendations):
    app.include_router(module.router)

scheduler = SyncScheduler(settings)
_resources = AsyncExitStack()


def _database_host(url: str) -> str:
    """DSN without credentials, for the startup log line."""
    return url.rsplit("@", 1)[-1] if "@" in url else url.split("://", 1)[0]


@app.on_event("startup")
async def open_resources():
    logger.info(
        f"Starting API (environment={settings.ENVIRONMENT}, "
        f"database={_database_host(settings.DATABASE_URL)})"
    )
    
    if getattr(app.state, "ctx", None) is None:
        app.state.ctx = await _resources.enter_async_context(open_context(settings))
    
    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def close_resources():
    logger.info("Shutting down API")
    if scheduler.scheduler.running:
        scheduler.stop()
    await _resources.aclose()


@app.get("/")
async def root():
    """Service index"""
    return {
        "message": "Knesset Activity API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "runs": "/runs",
            "recommendations": "/recommendations"
        }
    }
