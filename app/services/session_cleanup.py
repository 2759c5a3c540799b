"""
Periodic session sweep.

MongoDB's TTL monitor already removes expired sessions (roughly once a
minute), but it never touches revoked ones. This task runs
SessionService.cleanup_expired() on an interval for both.
"""

import asyncio
import logging
from typing import Optional

from app.services.session_service import SessionService

logger = logging.getLogger(__name__)


class SessionCleanupTask:
    """
    Background asyncio loop started from the app lifespan.

    Usage:
        task = SessionCleanupTask(interval_seconds=3600)
        task.start()
        ...
        await task.stop()
    """

    def __init__(self, interval_seconds: int):
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> int:
        # pymongo is blocking; keep it off the event loop
        deleted = await asyncio.to_thread(SessionService().cleanup_expired)
        logger.info("Session sweep removed %d session(s)", deleted)
        return deleted

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Session sweep failed; will retry next interval")

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Session sweeper started (every %ds)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
