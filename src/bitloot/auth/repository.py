from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.auth.models import User
from bitloot.commons.time import utcnow


@dataclass(frozen=True)
class AuthRepository:
    async def get_user_by_email(
        self, session: AsyncSession, *, email: str
    ) -> User | None:
        stmt = (
            sa.select(User)
            .where(sa.func.lower(User.email) == email.lower())
            .execution_options(populate_existing=True)
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_user_by_id(self, session: AsyncSession, *, user_id: UUID) -> User | None:
        stmt = (
            sa.select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def insert_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        email: str,
        name: str,
        password_hash: str,
    ) -> User:
        user = User(
            id=user_id, email=email.lower(), name=name.strip(), password_hash=password_hash
        )
        session.add(user)
        await session.flush()
        return user

    async def touch_last_login(self, session: AsyncSession, *, user_id: UUID) -> None:
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(last_login_at=utcnow())
        )
        await session.execute(stmt)
        await session.flush()

    async def set_disabled(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        disabled_at: dt.datetime | None,
        reason: str | None,
    ) -> int:
        # disabled_at doubles as the suspension flag.
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(disabled_at=disabled_at, suspended_reason=reason)
            .execution_options(synchronize_session=False)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)
