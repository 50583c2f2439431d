"""
Global pytest fixtures.

The app is pointed at an in-memory SQLite database before anything imports
the settings, so no test ever reaches a real Postgres instance.
"""

import datetime as dt
import os

os.environ.setdefault("BITLOOT_DB_URL", "sqlite+aiosqlite://")

import pytest  # type: ignore[import-not-found]  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # type: ignore[import-not-found]  # noqa: E402

from bitloot.api.main import build_app  # noqa: E402
from bitloot.auth.models import Base  # noqa: E402
from bitloot.core.db import create_engine_for  # noqa: E402
from bitloot.sessions import models as _sessions_models  # noqa: E402,F401


class FakeClock:
    def __init__(self, start: dt.datetime) -> None:
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


@pytest.fixture()
def app() -> FastAPI:
    """Fresh FastAPI app per test, so dependency overrides never leak."""
    return build_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    """Sync test client (covers most HTTP unit tests)."""
    return TestClient(app)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Default AnyIO backend for async tests."""
    return "asyncio"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(dt.datetime(2026, 1, 1, 12, 0, 0, tzinfo=dt.UTC))


@pytest.fixture()
async def db(anyio_backend):  # type: ignore[no-untyped-def]
    """Sessionmaker over a throwaway in-memory SQLite database with all tables."""
    engine = create_engine_for("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()
