"""
Expired-session sweep.

Meant to be driven by an external scheduler (cron, k8s CronJob):

    python -m bitloot.sessions.cleanup          # one pass
    python -m bitloot.sessions.cleanup --loop   # every SESSION_CLEANUP_INTERVAL_S

Revoked rows are left alone until they expire as well.
"""

from __future__ import annotations

import argparse
import asyncio

from bitloot.commons.logging import logger
from bitloot.core.db import database_manager
from bitloot.core.settings import settings
from bitloot.sessions.service import SessionsService


async def run_cleanup_once(svc: SessionsService | None = None) -> int:
    svc = svc or SessionsService.create()
    await database_manager.initialize()
    async with database_manager.session() as session:
        return await svc.cleanup_expired_sessions(session)


async def run_cleanup_loop(interval_s: float) -> None:
    svc = SessionsService.create()
    while True:
        try:
            await run_cleanup_once(svc)
        except Exception:
            # Keep the loop alive; the next pass retries.
            logger.exception("Session cleanup pass failed")
        await asyncio.sleep(interval_s)


async def _main(loop: bool) -> None:
    try:
        if loop:
            await run_cleanup_loop(float(settings.SESSION_CLEANUP_INTERVAL_S))
        else:
            count = await run_cleanup_once()
            logger.info("Session cleanup finished, %d rows removed", count)
    finally:
        await database_manager.shutdown()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Delete expired user sessions.")
    parser.add_argument(
        "--loop",
        action="store_true",
        help="repeat every SESSION_CLEANUP_INTERVAL_S seconds",
    )
    args = parser.parse_args(argv)
    asyncio.run(_main(args.loop))


if __name__ == "__main__":
    main()
