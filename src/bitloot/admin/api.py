from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.admin.schemas import (
    AdminMessageResponse,
    AdminSessionPublic,
    AdminUserSessionsResponse,
    AdminUserStatusResponse,
    ForceLogoutResponse,
    SuspendUserRequest,
)
from bitloot.admin.service import AdminSessionsService, get_admin_sessions_service
from bitloot.auth.depends import current_admin_required
from bitloot.commons.depends import database_session
from bitloot.core.settings import settings

router = APIRouter(
    prefix="/admin/users",
    tags=["admin"],
    dependencies=[Depends(current_admin_required)],
)


def _to_admin_session(s) -> AdminSessionPublic:  # type: ignore[no-untyped-def]
    return AdminSessionPublic(
        id=s.id,
        device_info=s.device_info,
        ip_address=s.ip_address,
        location=s.location,
        is_revoked=s.is_revoked,
        last_active_at=s.last_active_at,
        created_at=s.created_at,
        expires_at=s.expires_at,
    )


@router.get("/{user_id}/sessions", response_model=AdminUserSessionsResponse)
async def get_user_sessions(
    user_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AdminSessionsService, Depends(get_admin_sessions_service)],
    limit: int = Query(default=settings.ADMIN_SESSIONS_LIMIT_DEFAULT, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> AdminUserSessionsResponse:
    rows, total = await svc.get_user_sessions(
        session, user_id=user_id, limit=limit, offset=offset
    )
    return AdminUserSessionsResponse(data=[_to_admin_session(s) for s in rows], total=total)


@router.delete("/{user_id}/sessions/{session_id}", response_model=AdminMessageResponse)
async def revoke_user_session(
    user_id: UUID,
    session_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AdminSessionsService, Depends(get_admin_sessions_service)],
) -> AdminMessageResponse:
    await svc.revoke_session(session, user_id=user_id, session_id=session_id)
    return AdminMessageResponse(message="Session revoked")


@router.post("/{user_id}/force-logout", response_model=ForceLogoutResponse)
async def force_logout(
    user_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AdminSessionsService, Depends(get_admin_sessions_service)],
) -> ForceLogoutResponse:
    count = await svc.force_logout(session, user_id=user_id)
    return ForceLogoutResponse(revoked_count=count)


def _to_user_status(user, revoked_count: int | None = None) -> AdminUserStatusResponse:  # type: ignore[no-untyped-def]
    return AdminUserStatusResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        is_suspended=user.disabled_at is not None,
        suspended_at=user.disabled_at,
        suspended_reason=user.suspended_reason,
        revoked_count=revoked_count,
    )


@router.post("/{user_id}/suspend", response_model=AdminUserStatusResponse)
async def suspend_user(
    user_id: UUID,
    req: SuspendUserRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AdminSessionsService, Depends(get_admin_sessions_service)],
) -> AdminUserStatusResponse:
    user, count = await svc.suspend_user(session, user_id=user_id, reason=req.reason)
    return _to_user_status(user, revoked_count=count)


@router.post("/{user_id}/unsuspend", response_model=AdminUserStatusResponse)
async def unsuspend_user(
    user_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AdminSessionsService, Depends(get_admin_sessions_service)],
) -> AdminUserStatusResponse:
    user = await svc.unsuspend_user(session, user_id=user_id)
    return _to_user_status(user)
