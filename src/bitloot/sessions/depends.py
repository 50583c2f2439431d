from __future__ import annotations

from functools import lru_cache

from bitloot.sessions.service import SessionsService


@lru_cache
def get_sessions_service() -> SessionsService:
    return SessionsService.create()
