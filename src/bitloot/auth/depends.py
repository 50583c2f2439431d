from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request  # type: ignore[import-not-found]
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]
from starlette import status  # type: ignore[import-not-found]

from bitloot.auth.models import ADMIN_ROLE
from bitloot.auth.service import AuthService
from bitloot.commons.depends import database_session
from bitloot.core.settings import settings


@lru_cache
def get_auth_service() -> AuthService:
    return AuthService.create()


security = HTTPBearer(auto_error=False)


def refresh_token_optional(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """The caller's refresh token: the auth cookie, else an `Authorization: Bearer` header."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


async def current_user_optional(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(refresh_token_optional)],
):
    if not token:
        return None
    return await svc.get_user_for_refresh_token(session, refresh_token=token)


async def current_user_required(
    user=Depends(current_user_optional),
):
    # Raised here (not via BaseServiceException) so the guard answers 401.
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    return user


async def current_admin_required(
    user=Depends(current_user_required),
):
    if getattr(user, "role", None) != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required"
        )
    return user
