from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.core.db import database_manager


async def database_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One `AsyncSession` per request.

    Services commit their own mutations; anything left uncommitted when the
    request fails is rolled back by the manager.
    """
    await database_manager.initialize()
    async with database_manager.session() as session:
        yield session
