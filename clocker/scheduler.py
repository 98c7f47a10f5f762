
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from clocker.config import settings
from clocker.service import ClockerService

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "clocker-refresh"


class RefreshScheduler:
    """
    Runs ClockerService.refresh on a fixed interval.
    max_instances=1 makes APScheduler skip a tick while the previous one is
    still in flight; coalesce folds missed ticks into one.
    """

    def __init__(self, service: ClockerService, interval_seconds: Optional[int] = None):
        self.service = service
        self.interval_seconds = interval_seconds or settings.REFRESH_INTERVAL_SECONDS
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def tick(self) -> None:
        snapshot = await self.service.refresh()
        logger.debug(f"Scheduled refresh finished in state {snapshot.state.value}")

    def start(self) -> AsyncIOScheduler:
        """Start refreshing now and then every interval. Must run inside the event loop."""
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler()
            self._scheduler.add_job(
                self.tick,
                IntervalTrigger(seconds=self.interval_seconds),
                id=REFRESH_JOB_ID,
                max_instances=1,
                coalesce=True,
                next_run_time=datetime.now(timezone.utc),
            )
            self._scheduler.start()
            logger.info(f"Refresh scheduled every {self.interval_seconds}s")
        return self._scheduler

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Refresh schedule cancelled")
