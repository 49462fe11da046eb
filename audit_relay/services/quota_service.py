from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from audit_relay.core.errors import QuotaExceededError

logger = logging.getLogger(__name__)

RESET_JOB_ID = "audit_quota_reset"


@dataclass(frozen=True)
class QuotaCheck:
    allowed: bool
    current_count: int
    limit: int


class AuditQuotaTracker:
    """In-memory count of accepted report dispatches per client.

    The whole table is cleared on a fixed wall-clock interval by a job on the
    tracker's own scheduler; counts are not persisted, so a restart forgets
    them. The table is only touched from the event loop, which makes every
    single read or write atomic with respect to other requests. ``check`` and
    ``charge`` are separate steps, so parallel requests from one client can
    overshoot the limit.
    """

    def __init__(self, *, limit: int = 3, reset_interval_hours: float = 24) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.reset_interval_hours = reset_interval_hours
        self._counts: Dict[str, int] = {}
        self._scheduler: AsyncIOScheduler | None = None

    def count(self, key: str) -> int:
        return self._counts.get(key, 0)

    def check(self, key: str) -> QuotaCheck:
        current = self.count(key)
        return QuotaCheck(allowed=current < self.limit, current_count=current, limit=self.limit)

    def ensure_allowed(self, key: str) -> QuotaCheck:
        status = self.check(key)
        if not status.allowed:
            logger.warning("Audit quota exhausted for %s (%s/%s)", key, status.current_count, self.limit)
            raise QuotaExceededError(
                client_id=key,
                current=status.current_count,
                limit=self.limit,
                window_hours=self.reset_interval_hours,
            )
        return status

    def charge(self, key: str) -> int:
        new_count = self._counts.get(key, 0) + 1
        self._counts[key] = new_count
        return new_count

    def remaining(self, count: int) -> int:
        return max(self.limit - count, 0)

    def reset(self) -> None:
        tracked = len(self._counts)
        self._counts = {}
        logger.info("Audit quota table reset (%s clients cleared)", tracked)

    async def _reset_job(self) -> None:
        self.reset()

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        """Schedule the recurring reset. Must be called with a running event loop."""
        if self._scheduler is not None:
            return
        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self._reset_job,
            IntervalTrigger(hours=self.reset_interval_hours),
            id=RESET_JOB_ID,
            max_instances=1,
            replace_existing=True,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Audit quota reset scheduled every %s hours", self.reset_interval_hours)

    def shutdown(self) -> None:
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            logger.info("Audit quota reset scheduler stopped")
            self._scheduler = None
