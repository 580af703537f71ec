"""
Small helpers shared across the pipeline
"""

from typing import Awaitable
import logging

logger = logging.getLogger(__name__)


async def best_effort(operation: Awaitable, description: str) -> None:
    """
    Await a side effect whose failure must never reach the caller.

    The error is logged at WARNING and dropped; nothing is returned.
    """
    try:
        await operation
    except Exception as e:
        logger.warning(f"{description} failed: {type(e).__name__}: {e}")
