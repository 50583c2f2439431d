from __future__ import annotations

import datetime as dt
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import Mapped, mapped_column  # type: ignore[import-not-found]

from bitloot.auth.models import Base
from bitloot.commons.time import utcnow

USER_AGENT_MAX_LENGTH = 500


class Session(Base):
    """
    One logged-in device/browser.

    The plaintext refresh token is never stored; `refresh_token_hash` is the
    only lookup key. A row is valid while it is not revoked and not expired.
    """

    __tablename__ = "user_sessions"
    __table_args__ = (
        sa.Index("user_sessions_user_revoked_idx", "user_id", "is_revoked"),
        sa.Index("user_sessions_expires_at_idx", "expires_at"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    refresh_token_hash: Mapped[str] = mapped_column(
        sa.Text(), nullable=False, unique=True
    )
    # Display-only metadata.
    device_info: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(
        sa.String(USER_AGENT_MAX_LENGTH), nullable=True
    )
    ip_address: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    location: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)

    last_active_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )
    is_revoked: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, default=False, server_default=sa.false()
    )
    revoked_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=sa.func.now(),
        nullable=False,
    )
