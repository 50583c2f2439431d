from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.auth.crypto import hash_password, new_refresh_token, verify_password
from bitloot.auth.exceptions import (
    INVALID_CREDENTIALS,
    INVALID_REFRESH_TOKEN,
    AuthServiceException,
    AuthServiceNotFoundException,
    AuthServiceUnprocessableException,
)
from bitloot.auth.models import User
from bitloot.auth.repository import AuthRepository
from bitloot.commons.ids import uuid7_uuid
from bitloot.commons.logging import logger
from bitloot.sessions.service import SessionsService


@dataclass(frozen=True)
class IssuedSession:
    user: User
    session_id: UUID
    refresh_token: str


@dataclass
class AuthService:
    repo: AuthRepository
    sessions: SessionsService

    @classmethod
    def create(cls) -> "AuthService":
        return cls(repo=AuthRepository(), sessions=SessionsService.create())

    async def signup(
        self,
        session: AsyncSession,
        *,
        email: str,
        name: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> IssuedSession:
        existing = await self.repo.get_user_by_email(session, email=email)
        if existing is not None:
            raise AuthServiceUnprocessableException(
                "email_taken", "A user with this email already exists"
            )

        user = await self.repo.insert_user(
            session,
            user_id=uuid7_uuid(),
            email=email,
            name=name,
            password_hash=hash_password(password),
        )
        return await self._open_session(
            session, user=user, user_agent=user_agent, ip_address=ip_address
        )

    async def login(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> IssuedSession:
        user = await self.repo.get_user_by_email(session, email=email)
        if user is None:
            raise AuthServiceNotFoundException(
                INVALID_CREDENTIALS, "Invalid email or password"
            )

        if user.disabled_at is not None:
            raise AuthServiceException("user_disabled", "User is disabled")

        if not verify_password(password, user.password_hash):
            raise AuthServiceNotFoundException(
                INVALID_CREDENTIALS, "Invalid email or password"
            )

        await self.repo.touch_last_login(session, user_id=user.id)
        return await self._open_session(
            session, user=user, user_agent=user_agent, ip_address=ip_address
        )

    async def refresh(self, session: AsyncSession, *, refresh_token: str) -> IssuedSession:
        """Rotate the refresh token of a valid session and extend its expiry."""
        s = await self.sessions.find_by_refresh_token(session, refresh_token=refresh_token)
        if s is None:
            raise AuthServiceNotFoundException(
                INVALID_REFRESH_TOKEN, "Session is expired or revoked"
            )
        user = await self.repo.get_user_by_id(session, user_id=s.user_id)
        if user is None or user.disabled_at is not None:
            raise AuthServiceNotFoundException(
                INVALID_REFRESH_TOKEN, "Session is expired or revoked"
            )

        session_id = s.id
        token = new_refresh_token()
        await self.sessions.update_activity(
            session, session_id=session_id, new_refresh_token=token
        )
        return IssuedSession(user=user, session_id=session_id, refresh_token=token)

    async def logout(self, session: AsyncSession, *, refresh_token: str) -> None:
        await self.sessions.revoke_by_refresh_token(session, refresh_token=refresh_token)

    async def get_user_for_refresh_token(
        self, session: AsyncSession, *, refresh_token: str
    ) -> User | None:
        s = await self.sessions.find_by_refresh_token(session, refresh_token=refresh_token)
        if s is None:
            return None
        user = await self.repo.get_user_by_id(session, user_id=s.user_id)
        if user is None or user.disabled_at is not None:
            return None
        return user

    async def get_user(self, session: AsyncSession, *, user_id: UUID) -> User | None:
        return await self.repo.get_user_by_id(session, user_id=user_id)

    async def _open_session(
        self,
        session: AsyncSession,
        *,
        user: User,
        user_agent: str | None,
        ip_address: str | None,
    ) -> IssuedSession:
        user_id = user.id
        token = new_refresh_token()
        try:
            s = await self.sessions.create_session(
                session,
                user_id=user_id,
                refresh_token=token,
                user_agent=user_agent,
                ip_address=ip_address,
            )
            return IssuedSession(user=user, session_id=s.id, refresh_token=token)
        except IntegrityError:
            # A concurrent insert already holds this hash: adopt that row.
            await session.rollback()
            logger.warning("Duplicate session hash for user %s, reusing existing", user_id)
            existing = await self.sessions.find_by_refresh_token(
                session, refresh_token=token
            )
            if existing is None or existing.user_id != user_id:
                raise
            reloaded = await self.repo.get_user_by_id(session, user_id=user_id)
            if reloaded is None:
                raise
            return IssuedSession(user=reloaded, session_id=existing.id, refresh_token=token)
