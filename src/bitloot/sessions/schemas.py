from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class SessionPublic(BaseModel):
    id: UUID
    device_info: str | None = None
    ip_address: str | None = None
    location: str | None = None
    last_active_at: datetime | None = None
    created_at: datetime
    is_current: bool = False


class ListSessionsResponse(BaseModel):
    sessions: list[SessionPublic]
    total: int
    page: int
    limit: int
    total_pages: int


class RevokeSessionResponse(BaseModel):
    success: bool
    message: str


class RevokeAllSessionsResponse(BaseModel):
    success: bool
    message: str
    revoked_count: int


class SessionCountResponse(BaseModel):
    count: int


class ValidateSessionResponse(BaseModel):
    valid: bool
    message: str
