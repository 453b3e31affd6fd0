"""Background scoring maintenance.

This module provides the ScoringWorker class that keeps derived scores fresh
between requests. Each tick it:

- Recomputes trending scores once the trending interval has elapsed
- Reconciles resources flagged ``scores_stale`` by a failed rescore
- Computes the weekly reward batch for the last completed week
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stumble_higher.core.settings import settings
from stumble_higher.db.session import SessionLocal
from stumble_higher.db.time import as_utc, utcnow
from stumble_higher.services.errors import ConfigurationError, JobLockedError, StumbleError
from stumble_higher.services.jobs import TRENDING_JOB, last_completed_at
from stumble_higher.services.resource_state import reconcile_stale_scores
from stumble_higher.services.rewards import (
    compute_weekly_rewards,
    get_weekly_reward,
    last_completed_week_start,
)
from stumble_higher.services.trending import recompute_trending_scores

logger = logging.getLogger(__name__)


@dataclass
class ScoringWorkerState:
    """When each periodic task last ran in this process."""

    last_reconcile: datetime | None = None
    last_rewards_check: datetime | None = None


def _due(last_run: datetime | None, interval_seconds: float, now: datetime) -> bool:
    if last_run is None:
        return True
    return (now - as_utc(last_run)).total_seconds() >= interval_seconds


class ScoringWorker:
    """Periodically refreshes trending scores, stale scores and weekly rewards."""

    def __init__(self, db_session: Session | None = None, enabled: bool | None = None) -> None:
        """Initialize the scoring worker.

        Args:
            db_session: Optional database session. If None, creates new sessions as needed.
            enabled: Overrides ``settings.scoring_worker_enabled`` when given.
        """
        self.enabled = settings.scoring_worker_enabled if enabled is None else enabled
        self.state = ScoringWorkerState()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self._db_session = db_session

    async def start(self) -> None:
        """Start the background loop."""

        if not self.enabled:
            return

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop."""

        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        interval = max(0.1, float(settings.worker_tick_seconds))

        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.run_once)
            except ConfigurationError as e:
                logger.error("ScoringWorker configuration error: %s", e)
                await self._sleep(min(interval * 4, 300.0))
                continue
            except (StumbleError, SQLAlchemyError) as e:
                logger.warning("ScoringWorker encountered error: %s", e)
                await self._sleep(min(interval * 4, 300.0))
                continue
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.error(
                    "ScoringWorker encountered data processing error: %s", e, exc_info=True
                )
                await self._sleep(min(interval * 4, 300.0))
                continue

            await self._sleep(interval)

    async def _sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except TimeoutError:
            pass

    def run_once(self, now: datetime | None = None) -> None:
        """Run every task that is due."""
        now = now or utcnow()
        if self._db_session is not None:
            self._tick(self._db_session, now)
        else:
            with SessionLocal() as db:
                self._tick(db, now)

    def _tick(self, db: Session, now: datetime) -> None:
        self._maybe_recompute_trending(db, now)

        if _due(self.state.last_reconcile, settings.reconcile_interval_seconds, now):
            reconcile_stale_scores(db, limit=settings.reconcile_batch_size)
            self.state.last_reconcile = now

        if _due(self.state.last_rewards_check, settings.rewards_check_interval_seconds, now):
            self._maybe_compute_rewards(db, now)
            self.state.last_rewards_check = now

    def _maybe_recompute_trending(self, db: Session, now: datetime) -> None:
        # Completion time lives in the job lock row so restarts keep the cadence.
        if not _due(last_completed_at(db, TRENDING_JOB), settings.trending_interval_seconds, now):
            return
        try:
            recompute_trending_scores(db, now)
        except JobLockedError:
            logger.debug("Trending recompute already running elsewhere")

    def _maybe_compute_rewards(self, db: Session, now: datetime) -> None:
        week_start = last_completed_week_start(now.date())
        if get_weekly_reward(db, week_start) is not None:
            return
        try:
            compute_weekly_rewards(db, week_start, now)
        except JobLockedError:
            logger.debug("Weekly rewards already being computed elsewhere")
