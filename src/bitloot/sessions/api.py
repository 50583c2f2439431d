from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from bitloot.auth.depends import current_user_required, refresh_token_optional
from bitloot.commons.depends import database_session
from bitloot.commons.logging import logger
from bitloot.core.settings import settings
from bitloot.sessions.depends import get_sessions_service
from bitloot.sessions.paging import coerce_limit, coerce_page
from bitloot.sessions.schemas import (
    ListSessionsResponse,
    RevokeAllSessionsResponse,
    RevokeSessionResponse,
    SessionCountResponse,
    SessionPublic,
    ValidateSessionResponse,
)
from bitloot.sessions.service import SessionListing, SessionsService

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _to_session_public(item: SessionListing) -> SessionPublic:
    s = item.session
    return SessionPublic(
        id=s.id,
        device_info=s.device_info,
        ip_address=s.ip_address,
        location=s.location,
        last_active_at=s.last_active_at,
        created_at=s.created_at,
        is_current=item.is_current,
    )


@router.get("", response_model=ListSessionsResponse)
async def list_sessions(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[SessionsService, Depends(get_sessions_service)],
    token: Annotated[str | None, Depends(refresh_token_optional)],
    user=Depends(current_user_required),
    current_session_id: str | None = Query(default=None, alias="currentSessionId"),
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> ListSessionsResponse:
    page_n = coerce_page(page)
    limit_n = coerce_limit(
        limit,
        default=int(settings.SESSIONS_PAGE_LIMIT_DEFAULT),
        maximum=int(settings.SESSIONS_PAGE_LIMIT_MAX),
    )
    logger.debug(
        "Listing sessions for user %s (current=%s, page=%d, limit=%d)",
        user.id,
        current_session_id or "-",
        page_n,
        limit_n,
    )
    result = await svc.list_active_sessions_paginated(
        session,
        user_id=user.id,
        current_session_id=current_session_id,
        current_refresh_token=token,
        page=page_n,
        limit=limit_n,
    )
    return ListSessionsResponse(
        sessions=[_to_session_public(i) for i in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/count", response_model=SessionCountResponse)
async def session_count(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[SessionsService, Depends(get_sessions_service)],
    user=Depends(current_user_required),
) -> SessionCountResponse:
    count = await svc.get_session_count(session, user_id=user.id)
    return SessionCountResponse(count=count)


@router.get("/validate/{session_id}", response_model=ValidateSessionResponse)
async def validate_session(
    session_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[SessionsService, Depends(get_sessions_service)],
    user=Depends(current_user_required),
) -> ValidateSessionResponse:
    valid = await svc.is_session_valid(session, session_id=session_id, user_id=user.id)
    if not valid:
        logger.warning(
            "Session %s is invalid or does not belong to user %s", session_id, user.id
        )
    return ValidateSessionResponse(
        valid=valid,
        message=(
            "Session is active"
            if valid
            else "Session is expired, revoked, or does not exist"
        ),
    )


@router.delete("/{session_id}", response_model=RevokeSessionResponse)
async def revoke_session(
    session_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[SessionsService, Depends(get_sessions_service)],
    user=Depends(current_user_required),
) -> RevokeSessionResponse:
    await svc.revoke_session(session, session_id=session_id, user_id=user.id)
    return RevokeSessionResponse(success=True, message="Session revoked successfully")


@router.delete("", response_model=RevokeAllSessionsResponse)
async def revoke_all_sessions(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[SessionsService, Depends(get_sessions_service)],
    user=Depends(current_user_required),
) -> RevokeAllSessionsResponse:
    # The caller's own session goes too; the client has to log in again.
    count = await svc.revoke_all_sessions(session, user_id=user.id)
    return RevokeAllSessionsResponse(
        success=True,
        message=f"Logged out from {count} device(s)",
        revoked_count=count,
    )
