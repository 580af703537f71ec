"""
FastAPI dependencies
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.context import PipelineContext


def get_context(request: Request) -> PipelineContext:
    """Context opened at application startup"""
    return request.app.state.ctx


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    ctx = get_context(request)
    async with ctx.session_factory() as session:
        yield session
