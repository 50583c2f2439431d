from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AdminSessionPublic(BaseModel):
    id: UUID
    device_info: str | None = None
    ip_address: str | None = None
    location: str | None = None
    is_revoked: bool
    last_active_at: datetime | None = None
    created_at: datetime
    expires_at: datetime


class AdminUserSessionsResponse(BaseModel):
    data: list[AdminSessionPublic]
    total: int


class AdminMessageResponse(BaseModel):
    message: str


class ForceLogoutResponse(BaseModel):
    revoked_count: int


class SuspendUserRequest(BaseModel):
    reason: str = Field(min_length=5, max_length=500)


class AdminUserStatusResponse(BaseModel):
    id: UUID
    email: str
    role: str
    is_suspended: bool
    suspended_at: datetime | None = None
    suspended_reason: str | None = None
    revoked_count: int | None = None
