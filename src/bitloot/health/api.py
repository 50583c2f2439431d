from __future__ import annotations

from fastapi import APIRouter

from bitloot.health import service
from bitloot.health.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Sessions API liveness and database reachability",
)
async def health() -> HealthResponse:
    # Always 200; callers read `status` and `db.ok`.
    return HealthResponse(**(await service.get_health_payload()))
