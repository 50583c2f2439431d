from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.admin.exceptions import (
    USER_ALREADY_SUSPENDED,
    USER_NOT_FOUND,
    USER_NOT_SUSPENDED,
    AdminServiceException,
    AdminServiceNotFoundException,
)
from bitloot.auth.models import User
from bitloot.auth.repository import AuthRepository
from bitloot.commons.logging import logger
from bitloot.sessions.models import Session
from bitloot.sessions.service import SessionsService


@dataclass(frozen=True)
class AdminSessionsService:
    """Session management on behalf of another user; callers must be admins."""

    users: AuthRepository
    sessions: SessionsService

    @classmethod
    def create(cls) -> "AdminSessionsService":
        return cls(users=AuthRepository(), sessions=SessionsService.create())

    async def get_user_sessions(
        self, session: AsyncSession, *, user_id: UUID, limit: int, offset: int
    ) -> tuple[list[Session], int]:
        await self._find_user_or_raise(session, user_id=user_id)
        return await self.sessions.list_user_sessions(
            session, user_id=user_id, limit=limit, offset=offset
        )

    async def revoke_session(
        self, session: AsyncSession, *, user_id: UUID, session_id: UUID
    ) -> None:
        await self._find_user_or_raise(session, user_id=user_id)
        await self.sessions.revoke_user_session(
            session, user_id=user_id, session_id=session_id
        )

    async def force_logout(self, session: AsyncSession, *, user_id: UUID) -> int:
        await self._find_user_or_raise(session, user_id=user_id)
        count = await self.sessions.revoke_all_sessions(session, user_id=user_id)
        logger.info("Force logout of user %s revoked %d sessions", user_id, count)
        return count

    async def suspend_user(
        self, session: AsyncSession, *, user_id: UUID, reason: str
    ) -> tuple[User, int]:
        """Flag the account as suspended, then revoke every session it holds."""
        user = await self._find_user_or_raise(session, user_id=user_id)
        if user.disabled_at is not None:
            raise AdminServiceException(
                USER_ALREADY_SUSPENDED, "User is already suspended"
            )

        await self.users.set_disabled(
            session, user_id=user_id, disabled_at=self.sessions.clock(), reason=reason
        )
        # revoke_all_sessions commits the flag together with the revocations.
        count = await self.sessions.revoke_all_sessions(session, user_id=user_id)
        logger.info("User %s suspended, %d sessions revoked", user_id, count)
        return await self._find_user_or_raise(session, user_id=user_id), count

    async def unsuspend_user(self, session: AsyncSession, *, user_id: UUID) -> User:
        user = await self._find_user_or_raise(session, user_id=user_id)
        if user.disabled_at is None:
            raise AdminServiceException(USER_NOT_SUSPENDED, "User is not suspended")

        await self.users.set_disabled(
            session, user_id=user_id, disabled_at=None, reason=None
        )
        await session.commit()
        logger.info("User %s unsuspended", user_id)
        return await self._find_user_or_raise(session, user_id=user_id)

    async def _find_user_or_raise(self, session: AsyncSession, *, user_id: UUID) -> User:
        user = await self.users.get_user_by_id(session, user_id=user_id)
        if user is None:
            raise AdminServiceNotFoundException(USER_NOT_FOUND, "User not found")
        return user


@lru_cache
def get_admin_sessions_service() -> AdminSessionsService:
    return AdminSessionsService.create()
