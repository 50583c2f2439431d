from __future__ import annotations

from bitloot.health import repository


async def get_health_payload() -> dict:
    db_ok, db_detail = await repository.check_db()
    # The sessions API cannot do anything without its database.
    return {
        "status": "ok" if db_ok else "error",
        "db": {"ok": db_ok, "detail": db_detail},
    }
