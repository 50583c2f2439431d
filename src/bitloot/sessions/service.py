from __future__ import annotations

import datetime as dt
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.auth.crypto import hash_refresh_token
from bitloot.commons.ids import uuid7_uuid
from bitloot.commons.logging import logger
from bitloot.commons.time import utcnow
from bitloot.core.settings import settings
from bitloot.sessions.device import parse_user_agent
from bitloot.sessions.exceptions import (
    SESSION_NOT_FOUND,
    SESSION_NOT_OWNED,
    SessionsServiceForbiddenException,
    SessionsServiceNotFoundException,
)
from bitloot.sessions.models import Session
from bitloot.sessions.repository import SessionsRepository


@dataclass(frozen=True)
class SessionListing:
    session: Session
    is_current: bool


@dataclass(frozen=True)
class SessionsPage:
    items: list[SessionListing]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _session_ttl() -> dt.timedelta:
    return dt.timedelta(days=int(settings.SESSION_TTL_DAYS))


@dataclass(frozen=True)
class SessionsService:
    """
    Session lifecycle: create at login, refresh on activity, revoke, sweep.

    Stateless; every call gets the request's `AsyncSession`. Mutations commit.
    """

    repo: SessionsRepository
    clock: Callable[[], dt.datetime] = utcnow
    ttl: dt.timedelta = field(default_factory=_session_ttl)

    @classmethod
    def create(cls) -> "SessionsService":
        return cls(repo=SessionsRepository())

    async def create_session(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        refresh_token: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> Session:
        # Duplicate-hash IntegrityError propagates; login handles it as a lookup.
        device = parse_user_agent(user_agent)
        now = self.clock()
        max_ua = int(settings.SESSION_USER_AGENT_MAX_LENGTH)
        s = await self.repo.insert_session(
            session,
            session_id=uuid7_uuid(),
            user_id=user_id,
            refresh_token_hash=hash_refresh_token(refresh_token),
            device_info=device.summary,
            user_agent=user_agent[:max_ua] if user_agent else None,
            ip_address=ip_address,
            expires_at=now + self.ttl,
            last_active_at=now,
        )
        await session.commit()
        logger.info("Session created for user %s: %s", user_id, device.summary)
        return s

    async def find_by_refresh_token(
        self, session: AsyncSession, *, refresh_token: str
    ) -> Session | None:
        return await self.repo.get_active_session_by_token_hash(
            session, token_hash=hash_refresh_token(refresh_token), now=self.clock()
        )

    async def update_activity(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        new_refresh_token: str | None = None,
    ) -> None:
        """
        Bump `last_active_at`; with a new token, rotate the hash and restart the
        expiry window. Callers must pass a freshly issued token each time.
        """
        now = self.clock()
        token_hash = None
        expires_at = None
        if new_refresh_token:
            token_hash = hash_refresh_token(new_refresh_token)
            expires_at = now + self.ttl
        await self.repo.update_activity(
            session,
            session_id=session_id,
            last_active_at=now,
            refresh_token_hash=token_hash,
            expires_at=expires_at,
        )
        await session.commit()

    async def list_active_sessions(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        current_refresh_token: str | None = None,
    ) -> list[SessionListing]:
        rows = await self.repo.list_active_for_user(
            session, user_id=user_id, now=self.clock()
        )
        current_hash = (
            hash_refresh_token(current_refresh_token) if current_refresh_token else None
        )
        return [
            SessionListing(
                session=s,
                is_current=current_hash is not None
                and s.refresh_token_hash == current_hash,
            )
            for s in rows
        ]

    async def list_active_sessions_with_current(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        current_session_id: str | None = None,
    ) -> list[SessionListing]:
        rows = await self.repo.list_active_for_user(
            session, user_id=user_id, now=self.clock()
        )
        return [
            SessionListing(
                session=s, is_current=_matches_id(s, current_session_id)
            )
            for s in rows
        ]

    async def list_active_sessions_paginated(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        current_session_id: str | None = None,
        current_refresh_token: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SessionsPage:
        now = self.clock()
        rows = await self.repo.list_active_for_user(
            session,
            user_id=user_id,
            now=now,
            limit=limit,
            offset=(page - 1) * limit,
        )
        total = await self.repo.count_active_for_user(session, user_id=user_id, now=now)

        # An explicit session id wins; otherwise fall back to the caller's token.
        current_hash = None
        if not current_session_id and current_refresh_token:
            current_hash = hash_refresh_token(current_refresh_token)

        items = []
        for s in rows:
            if current_session_id:
                is_current = _matches_id(s, current_session_id)
            else:
                is_current = current_hash is not None and s.refresh_token_hash == current_hash
            items.append(SessionListing(session=s, is_current=is_current))
        return SessionsPage(items=items, total=total, page=page, limit=limit)

    async def revoke_session(
        self, session: AsyncSession, *, session_id: UUID, user_id: UUID
    ) -> None:
        s = await self.repo.get_session_by_id(session, session_id=session_id)
        if s is None:
            raise SessionsServiceNotFoundException(SESSION_NOT_FOUND, "Session not found")
        if s.user_id != user_id:
            raise SessionsServiceForbiddenException(
                SESSION_NOT_OWNED, "Cannot revoke session belonging to another user"
            )
        await self.repo.mark_revoked(session, session_id=session_id, now=self.clock())
        await session.commit()
        logger.info("Session %s revoked for user %s", session_id, user_id)

    async def revoke_all_sessions(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        exclude_session_id: UUID | None = None,
    ) -> int:
        count = await self.repo.revoke_all_for_user(
            session,
            user_id=user_id,
            now=self.clock(),
            exclude_session_id=exclude_session_id,
        )
        await session.commit()
        logger.info("Revoked %d sessions for user %s", count, user_id)
        return count

    async def revoke_by_refresh_token(
        self, session: AsyncSession, *, refresh_token: str
    ) -> int:
        count = await self.repo.mark_revoked_by_token_hash(
            session, token_hash=hash_refresh_token(refresh_token), now=self.clock()
        )
        await session.commit()
        return count

    async def is_valid_session(
        self, session: AsyncSession, *, refresh_token: str
    ) -> bool:
        return await self.find_by_refresh_token(session, refresh_token=refresh_token) is not None

    async def is_session_valid(
        self, session: AsyncSession, *, session_id: UUID, user_id: UUID
    ) -> bool:
        s = await self.repo.get_active_session_for_user(
            session, session_id=session_id, user_id=user_id, now=self.clock()
        )
        return s is not None

    async def get_session_count(self, session: AsyncSession, *, user_id: UUID) -> int:
        return await self.repo.count_active_for_user(
            session, user_id=user_id, now=self.clock()
        )

    async def cleanup_expired_sessions(self, session: AsyncSession) -> int:
        count = await self.repo.delete_expired(session, now=self.clock())
        await session.commit()
        if count > 0:
            logger.info("Cleaned up %d expired sessions", count)
        return count

    async def list_user_sessions(
        self, session: AsyncSession, *, user_id: UUID, limit: int, offset: int
    ) -> tuple[list[Session], int]:
        rows = await self.repo.list_for_user(
            session, user_id=user_id, limit=limit, offset=offset
        )
        total = await self.repo.count_for_user(session, user_id=user_id)
        return rows, total

    async def revoke_user_session(
        self, session: AsyncSession, *, user_id: UUID, session_id: UUID
    ) -> None:
        s = await self.repo.get_session_by_id(session, session_id=session_id)
        # Admins address sessions through their owner; a mismatch is a miss.
        if s is None or s.user_id != user_id:
            raise SessionsServiceNotFoundException(SESSION_NOT_FOUND, "Session not found")
        await self.repo.mark_revoked(session, session_id=session_id, now=self.clock())
        await session.commit()
        logger.info("Session %s of user %s revoked by admin", session_id, user_id)


def _matches_id(s: Session, current_session_id: str | None) -> bool:
    return bool(current_session_id) and str(s.id) == str(current_session_id)
