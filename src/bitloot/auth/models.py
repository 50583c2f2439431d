from __future__ import annotations

import datetime as dt
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column  # type: ignore[import-not-found]

from bitloot.commons.time import utcnow


class Base(DeclarativeBase):
    pass


USER_ROLE = "user"
ADMIN_ROLE = "admin"


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    email: Mapped[str] = mapped_column(sa.Text(), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    role: Mapped[str] = mapped_column(
        sa.String(16), nullable=False, default=USER_ROLE, server_default=USER_ROLE
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
        nullable=False,
    )
    last_login_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    disabled_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    suspended_reason: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
