"""
Core utilities and configuration for the Knesset ingestion service.

Modules:
    config: Application configuration and environment variable management
    context: PipelineContext bundle (settings, session factory, HTTP client)
    database: Engine and session factory construction
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration
    utils: best_effort wrapper for fire-and-forget side effects

Usage:
    from core.config import settings
    from core.context import open_context
    from core.exceptions import TransientFetchError, MappingError
    from core.logging import setup_logging

Example:
    setup_logging()

    async with open_context(settings) as ctx:
        async with ctx.session_factory() as session:
            ...
"""

__all__ = [
    "settings",
    "open_context",
    "PipelineContext",
    "setup_logging",
    "best_effort",
    # Exceptions
    "ETLException",
    "RetryableError",
    "NonRetryableError",
    "FetchError",
    "SSRFError",
    "DisallowedHost",
    "InvalidUrl",
    "TransientFetchError",
    "FatalFetchError",
    "MetadataError",
    "MappingError",
    "MissingCollection",
    "LoadError",
    "UpsertError",
    "SnapshotError",
    "CheckpointError",
    "AggregatesNotComputed",
]
