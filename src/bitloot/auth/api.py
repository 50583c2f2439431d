from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response  # type: ignore[import-not-found]
from fastapi.responses import JSONResponse  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]
from starlette import status  # type: ignore[import-not-found]

from bitloot.auth.depends import (
    current_user_required,
    get_auth_service,
    refresh_token_optional,
)
from bitloot.auth.exceptions import AuthServiceNotFoundException
from bitloot.auth.schemas import AuthResponse, LoginRequest, SignupRequest, UserPublic
from bitloot.auth.service import AuthService, IssuedSession
from bitloot.commons.depends import database_session
from bitloot.core.settings import settings

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.client.host if request.client else None


def _user_public(user) -> UserPublic:  # type: ignore[no-untyped-def]
    return UserPublic(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )


def _set_refresh_cookie(resp: Response, token: str) -> None:
    resp.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=bool(settings.AUTH_COOKIE_SECURE),
        samesite=str(settings.AUTH_COOKIE_SAMESITE),
        path="/",
        max_age=int(settings.SESSION_TTL_DAYS) * 24 * 60 * 60,
    )


def _clear_refresh_cookie(resp: Response) -> None:
    resp.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
    )


def _issued_response(issued: IssuedSession) -> JSONResponse:
    data = AuthResponse(
        user=_user_public(issued.user),
        session_id=issued.session_id,
        refresh_token=issued.refresh_token,
    ).model_dump(mode="json")
    resp = JSONResponse(status_code=status.HTTP_200_OK, content=data)
    _set_refresh_cookie(resp, issued.refresh_token)
    return resp


@router.post("/signup", response_model=AuthResponse)
async def signup(
    req: SignupRequest,
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    issued = await svc.signup(
        session,
        email=str(req.email),
        name=req.name,
        password=req.password,
        user_agent=request.headers.get("user-agent"),
        ip_address=_client_ip(request),
    )
    return _issued_response(issued)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    request: Request,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    try:
        issued = await svc.login(
            session,
            email=str(req.email),
            password=req.password,
            user_agent=request.headers.get("user-agent"),
            ip_address=_client_ip(request),
        )
    except AuthServiceNotFoundException as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
        ) from exc
    return _issued_response(issued)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(refresh_token_optional)],
) -> JSONResponse:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    try:
        issued = await svc.refresh(session, refresh_token=token)
    except AuthServiceNotFoundException as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session is expired or revoked",
        ) from exc
    return _issued_response(issued)


@router.post("/logout")
async def logout(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(refresh_token_optional)],
) -> JSONResponse:
    if token:
        await svc.logout(session, refresh_token=token)
    resp = JSONResponse(status_code=status.HTTP_200_OK, content={"ok": True})
    _clear_refresh_cookie(resp)
    return resp


@router.get("/me", response_model=AuthResponse)
async def me(
    user=Depends(current_user_required),
) -> AuthResponse:
    return AuthResponse(user=_user_public(user))
