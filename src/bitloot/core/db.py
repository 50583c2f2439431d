"""
Database manager (async SQLAlchemy).

A shared manager owns the engine and sessionmaker; `bitloot.commons.depends`
yields request-scoped sessions from it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (  # type: ignore[import-not-found]
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # type: ignore[import-not-found]

from bitloot.commons.exceptions import BaseCoreException
from bitloot.commons.logging import logger
from bitloot.core.settings import settings


class DatabaseException(BaseCoreException):
    pass


def build_dsn() -> str:
    if settings.BITLOOT_DB_URL:
        return settings.BITLOOT_DB_URL
    # psycopg async driver
    return (
        "postgresql+psycopg://"
        f"{settings.BITLOOT_DB_USER}:{settings.BITLOOT_DB_PASSWORD}"
        f"@{settings.BITLOOT_DB_HOST}:{settings.BITLOOT_DB_PORT}"
        f"/{settings.BITLOOT_DB_NAME}"
    )


def create_engine_for(dsn: str) -> AsyncEngine:
    if dsn.startswith("sqlite") and (dsn.endswith("://") or ":memory:" in dsn):
        # A single shared connection, otherwise every checkout sees an empty DB.
        return create_async_engine(
            dsn,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(dsn, echo=False)


class DatabaseManager:
    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def initialize(self) -> None:
        if self.engine is not None:
            return
        try:
            self.engine = create_engine_for(build_dsn())
            self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
            logger.info("Database initialized")
        except Exception as exc:
            raise DatabaseException("Failed to initialize database", str(exc)) from exc

    async def shutdown(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.sessionmaker = None
        logger.info("Database shut down")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.sessionmaker is None:
            raise DatabaseException("Database is not initialized")
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()


database_manager = DatabaseManager()
