from __future__ import annotations

"""Periodic rate refresh.

Runs RateAcquisitionService.refresh() on a fixed interval in a background
asyncio task owned by the application lifespan. The startup refresh is awaited
by the lifespan itself so the first requests already see warm data.
"""
import asyncio
import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from app.services.rate_service import RateAcquisitionService, RefreshResult

logger = logging.getLogger("app.scheduler")


class RefreshScheduler:
    def __init__(self, service: "RateAcquisitionService", interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("refresh interval must be positive")
        self._service = service
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Optional["RefreshResult"]:
        try:
            result = await self._service.refresh()
        except Exception:
            # Keep the loop alive; refresh() should not raise but a bug must not stop updates.
            logger.exception("scheduled exchange rate update crashed")
            return None
        logger.info(
            "scheduled exchange rate update finished",
            extra={"status": result.status.value, "error": result.error},
        )
        return result

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            logger.info("running scheduled exchange rate update")
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="rate-refresh")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
