from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-not-found]

from bitloot.auth.depends import current_user_required
from bitloot.commons.depends import database_session
from bitloot.core.settings import settings
from bitloot.sessions.depends import get_sessions_service
from bitloot.sessions.exceptions import (
    SESSION_NOT_FOUND,
    SESSION_NOT_OWNED,
    SessionsServiceForbiddenException,
    SessionsServiceNotFoundException,
)
from bitloot.sessions.service import SessionListing, SessionsPage

USER_ID = UUID("11111111-1111-1111-1111-111111111111")
SESSION_ID = UUID("22222222-2222-2222-2222-222222222222")
FOREIGN_ID = UUID("33333333-3333-3333-3333-333333333333")


class FakeUser:
    id = USER_ID
    role = "user"


class FakeSession:
    id = SESSION_ID
    device_info = "Chrome 120 on Windows 10/11"
    ip_address = "203.0.113.7"
    location = None
    last_active_at = datetime(2026, 1, 1, tzinfo=UTC)
    created_at = datetime(2026, 1, 1, tzinfo=UTC)


class FakeSessionsService:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    async def list_active_sessions_paginated(self, session, **kwargs):  # type: ignore[no-untyped-def]
        self.calls.append(("list", kwargs))
        return SessionsPage(
            items=[SessionListing(session=FakeSession(), is_current=True)],
            total=11,
            page=kwargs["page"],
            limit=kwargs["limit"],
        )

    async def get_session_count(self, session, *, user_id):  # type: ignore[no-untyped-def]
        assert user_id == USER_ID
        return 3

    async def is_session_valid(self, session, *, session_id, user_id):  # type: ignore[no-untyped-def]
        return session_id == SESSION_ID

    async def revoke_session(self, session, *, session_id, user_id):  # type: ignore[no-untyped-def]
        self.calls.append(("revoke", {"session_id": session_id, "user_id": user_id}))
        if session_id == FOREIGN_ID:
            raise SessionsServiceForbiddenException(
                SESSION_NOT_OWNED, "Cannot revoke session belonging to another user"
            )
        if session_id != SESSION_ID:
            raise SessionsServiceNotFoundException(SESSION_NOT_FOUND, "Session not found")

    async def revoke_all_sessions(self, session, *, user_id, exclude_session_id=None):  # type: ignore[no-untyped-def]
        self.calls.append(("revoke_all", {"user_id": user_id}))
        return 4


@pytest.fixture()
def fake_svc() -> FakeSessionsService:
    return FakeSessionsService()


@pytest.fixture()
def sessions_client(client: TestClient, fake_svc: FakeSessionsService) -> TestClient:
    async def fake_db_session():  # type: ignore[no-untyped-def]
        yield None

    client.app.dependency_overrides[database_session] = fake_db_session
    client.app.dependency_overrides[current_user_required] = lambda: FakeUser()
    client.app.dependency_overrides[get_sessions_service] = lambda: fake_svc
    return client


def test_sessions_require_authentication(client: TestClient) -> None:
    async def fake_db_session():  # type: ignore[no-untyped-def]
        yield None

    client.app.dependency_overrides[database_session] = fake_db_session
    for method, path in [
        ("GET", "/sessions"),
        ("GET", "/sessions/count"),
        ("DELETE", "/sessions"),
        ("DELETE", f"/sessions/{SESSION_ID}"),
        ("GET", f"/sessions/validate/{SESSION_ID}"),
    ]:
        r = client.request(method, path)
        assert r.status_code == 401, (method, path)


def test_list_sessions_defaults(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get("/sessions")
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 11
    assert data["page"] == 1
    assert data["limit"] == 10
    assert data["total_pages"] == 2
    item = data["sessions"][0]
    assert item["id"] == str(SESSION_ID)
    assert item["device_info"] == "Chrome 120 on Windows 10/11"
    assert item["is_current"] is True

    _, kwargs = fake_svc.calls[0]
    assert kwargs["user_id"] == USER_ID
    assert kwargs["current_session_id"] is None
    assert kwargs["current_refresh_token"] is None


def test_list_sessions_clamps_paging(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get(
        "/sessions", params={"page": "-2", "limit": "999", "currentSessionId": "abc"}
    )
    assert r.status_code == 200
    _, kwargs = fake_svc.calls[0]
    assert kwargs["page"] == 1
    assert kwargs["limit"] == 50
    assert kwargs["current_session_id"] == "abc"


def test_list_sessions_passes_caller_token(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get("/sessions", headers={"Authorization": "Bearer tok-mine"})
    assert r.status_code == 200
    _, kwargs = fake_svc.calls[0]
    assert kwargs["current_refresh_token"] == "tok-mine"


def test_list_sessions_reads_refresh_cookie(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get(
        "/sessions", headers={"Cookie": f"{settings.AUTH_COOKIE_NAME}=tok-cookie"}
    )
    assert r.status_code == 200
    _, kwargs = fake_svc.calls[0]
    assert kwargs["current_refresh_token"] == "tok-cookie"


def test_session_count(sessions_client: TestClient) -> None:
    r = sessions_client.get("/sessions/count")
    assert r.status_code == 200
    assert r.json() == {"count": 3}


def test_validate_session(sessions_client: TestClient) -> None:
    r = sessions_client.get(f"/sessions/validate/{SESSION_ID}")
    assert r.json() == {"valid": True, "message": "Session is active"}

    r = sessions_client.get(f"/sessions/validate/{FOREIGN_ID}")
    assert r.status_code == 200
    assert r.json()["valid"] is False


def test_revoke_session(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.delete(f"/sessions/{SESSION_ID}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Session revoked successfully"}
    assert fake_svc.calls[-1] == ("revoke", {"session_id": SESSION_ID, "user_id": USER_ID})


def test_revoke_foreign_session_is_forbidden(sessions_client: TestClient) -> None:
    r = sessions_client.delete(f"/sessions/{FOREIGN_ID}")
    assert r.status_code == 403
    assert r.json()["exception"]["message"] == SESSION_NOT_OWNED


def test_revoke_missing_session_is_not_found(sessions_client: TestClient) -> None:
    r = sessions_client.delete("/sessions/44444444-4444-4444-4444-444444444444")
    assert r.status_code == 404


def test_revoke_all_sessions(sessions_client: TestClient) -> None:
    r = sessions_client.delete("/sessions")
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "message": "Logged out from 4 device(s)",
        "revoked_count": 4,
    }


def test_list_sessions_ignores_non_bearer_authorization(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get("/sessions", headers={"Authorization": "Basic dXNlcjpwdw=="})
    assert r.status_code == 200
    _, kwargs = fake_svc.calls[0]
    assert kwargs["current_refresh_token"] is None


def test_refresh_cookie_wins_over_bearer(sessions_client: TestClient, fake_svc) -> None:  # type: ignore[no-untyped-def]
    r = sessions_client.get(
        "/sessions",
        headers={
            "Authorization": "Bearer tok-header",
            "Cookie": f"{settings.AUTH_COOKIE_NAME}=tok-cookie",
        },
    )
    assert r.status_code == 200
    _, kwargs = fake_svc.calls[0]
    assert kwargs["current_refresh_token"] == "tok-cookie"
