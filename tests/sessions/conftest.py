from __future__ import annotations

import pytest  # type: ignore[import-not-found]

from bitloot.sessions.repository import SessionsRepository
from bitloot.sessions.service import SessionsService


@pytest.fixture()
def svc(clock) -> SessionsService:  # type: ignore[no-untyped-def]
    return SessionsService(repo=SessionsRepository(), clock=clock)
