from bitloot.core.db import database_manager
from bitloot.health import service


async def test_get_health_payload_shape(anyio_backend: str) -> None:
    try:
        payload = await service.get_health_payload()
    finally:
        await database_manager.shutdown()
    assert payload["status"] in ("ok", "error")
    assert payload["db"]["ok"] is (payload["status"] == "ok")
