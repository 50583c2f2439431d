from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.sessions.models import Session


def active_session_clause(now: dt.datetime) -> sa.ColumnElement[bool]:
    """The one definition of a valid session: not revoked and not yet expired."""
    return sa.and_(Session.is_revoked.is_(False), Session.expires_at > now)


# Bulk updates and deletes skip ORM synchronisation, so every select reloads
# with populate_existing rather than trusting rows already in the session.
@dataclass(frozen=True)
class SessionsRepository:
    async def insert_session(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        user_id: UUID,
        refresh_token_hash: str,
        device_info: str | None,
        user_agent: str | None,
        ip_address: str | None,
        expires_at: dt.datetime,
        last_active_at: dt.datetime,
    ) -> Session:
        s = Session(
            id=session_id,
            user_id=user_id,
            refresh_token_hash=refresh_token_hash,
            device_info=device_info,
            user_agent=user_agent,
            ip_address=ip_address,
            expires_at=expires_at,
            last_active_at=last_active_at,
            is_revoked=False,
        )
        session.add(s)
        await session.flush()
        return s

    async def get_session_by_id(
        self, session: AsyncSession, *, session_id: UUID
    ) -> Session | None:
        stmt = sa.select(Session).where(Session.id == session_id).execution_options(
            populate_existing=True
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_active_session_by_token_hash(
        self, session: AsyncSession, *, token_hash: str, now: dt.datetime
    ) -> Session | None:
        stmt = (
            sa.select(Session)
            .where(Session.refresh_token_hash == token_hash)
            .where(active_session_clause(now))
            .execution_options(populate_existing=True)
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def get_active_session_for_user(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        user_id: UUID,
        now: dt.datetime,
    ) -> Session | None:
        stmt = (
            sa.select(Session)
            .where(Session.id == session_id)
            .where(Session.user_id == user_id)
            .where(active_session_clause(now))
            .execution_options(populate_existing=True)
        )
        res = await session.execute(stmt)
        return res.scalar_one_or_none()

    async def list_active_for_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        now: dt.datetime,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Session]:
        stmt = (
            sa.select(Session)
            .where(Session.user_id == user_id)
            .where(active_session_clause(now))
            .order_by(Session.last_active_at.desc(), Session.id.desc())
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        res = await session.execute(stmt)
        return list(res.scalars().all())

    async def count_active_for_user(
        self, session: AsyncSession, *, user_id: UUID, now: dt.datetime
    ) -> int:
        stmt = (
            sa.select(sa.func.count())
            .select_from(Session)
            .where(Session.user_id == user_id)
            .where(active_session_clause(now))
        )
        res = await session.execute(stmt)
        return int(res.scalar_one())

    async def list_for_user(
        self, session: AsyncSession, *, user_id: UUID, limit: int, offset: int
    ) -> list[Session]:
        # Admin view: every row, revoked and expired included.
        stmt = (
            sa.select(Session)
            .where(Session.user_id == user_id)
            .order_by(Session.created_at.desc(), Session.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        res = await session.execute(stmt)
        return list(res.scalars().all())

    async def count_for_user(self, session: AsyncSession, *, user_id: UUID) -> int:
        stmt = (
            sa.select(sa.func.count())
            .select_from(Session)
            .where(Session.user_id == user_id)
        )
        res = await session.execute(stmt)
        return int(res.scalar_one())

    async def update_activity(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        last_active_at: dt.datetime,
        refresh_token_hash: str | None = None,
        expires_at: dt.datetime | None = None,
    ) -> int:
        values: dict[str, object] = {"last_active_at": last_active_at}
        if refresh_token_hash is not None:
            values["refresh_token_hash"] = refresh_token_hash
        if expires_at is not None:
            values["expires_at"] = expires_at
        stmt = (
            sa.update(Session)
            .where(Session.id == session_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)

    async def mark_revoked(
        self, session: AsyncSession, *, session_id: UUID, now: dt.datetime
    ) -> int:
        stmt = (
            sa.update(Session)
            .where(Session.id == session_id)
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)

    async def mark_revoked_by_token_hash(
        self, session: AsyncSession, *, token_hash: str, now: dt.datetime
    ) -> int:
        stmt = (
            sa.update(Session)
            .where(Session.refresh_token_hash == token_hash)
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)

    async def revoke_all_for_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        now: dt.datetime,
        exclude_session_id: UUID | None = None,
    ) -> int:
        stmt = (
            sa.update(Session)
            .where(Session.user_id == user_id)
            .where(Session.is_revoked.is_(False))
        )
        if exclude_session_id is not None:
            stmt = stmt.where(Session.id != exclude_session_id)
        stmt = stmt.values(is_revoked=True, revoked_at=now).execution_options(
            synchronize_session=False
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)

    async def delete_expired(self, session: AsyncSession, *, now: dt.datetime) -> int:
        stmt = (
            sa.delete(Session)
            .where(Session.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        res = await session.execute(stmt)
        await session.flush()
        return int(res.rowcount or 0)
