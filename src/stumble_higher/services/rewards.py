"""Weekly reward pool computation and allocation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stumble_higher.db.time import utcnow
from stumble_higher.models import Resource, RewardDistribution, User, WeeklyReward
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED
from stumble_higher.services.analytics import record_event
from stumble_higher.services.jobs import WEEKLY_REWARDS_JOB, job_lock
from stumble_higher.services.system_config import load_distribution_percentage

logger = logging.getLogger(__name__)

# Share of the pool for ranks 1-5; ranks 6-10 split the remaining 17% equally.
REWARD_TIERS = (Decimal("0.30"), Decimal("0.20"), Decimal("0.15"), Decimal("0.10"), Decimal("0.08"))
TAIL_SHARE = Decimal("0.034")
MAX_WINNERS = 10

AMOUNT_QUANTUM = Decimal("0.0001")


def rank_share(rank: int) -> Decimal:
    """Fraction of the pool paid to the 1-based ``rank``."""
    if rank < 1 or rank > MAX_WINNERS:
        return Decimal(0)
    if rank <= len(REWARD_TIERS):
        return REWARD_TIERS[rank - 1]
    return TAIL_SHARE


def allocate_rewards(pool: float, winners: int) -> list[float]:
    """Split ``pool`` over ``winners`` ranked slots.

    With ten winners the amounts add up to the whole pool; with fewer, the
    shares of the missing ranks stay undistributed.
    """
    pool_amount = Decimal(str(pool))
    return [
        float((pool_amount * rank_share(rank)).quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP))
        for rank in range(1, min(winners, MAX_WINNERS) + 1)
    ]


def week_bounds(week_start: date) -> tuple[date, datetime, datetime]:
    """Return ``(week_end, window_start, window_end)`` for a reward week.

    The window is half-open and covers the whole of ``week_end``.
    """
    week_end = week_start + timedelta(days=6)
    window_start = datetime.combine(week_start, time.min, tzinfo=UTC)
    window_end = datetime.combine(week_end + timedelta(days=1), time.min, tzinfo=UTC)
    return week_end, window_start, window_end


def last_completed_week_start(today: date) -> date:
    """Monday of the most recent Monday-Sunday week that has fully elapsed."""
    return today - timedelta(days=today.weekday() + 7)


def get_weekly_reward(db: Session, week_start: date) -> WeeklyReward | None:
    return db.query(WeeklyReward).filter(WeeklyReward.week_start == week_start).first()


def _ranked_resources(
    db: Session,
    window_start: datetime,
    window_end: datetime,
) -> Sequence[Resource]:
    return (
        db.query(Resource)
        .filter(
            Resource.created_at >= window_start,
            Resource.created_at < window_end,
            Resource.status == RESOURCE_STATUS_APPROVED,
            Resource.quality_score > 0,
        )
        .order_by(Resource.quality_score.desc(), Resource.created_at.asc(), Resource.id)
        .limit(MAX_WINNERS)
        .all()
    )


def compute_weekly_rewards(
    db: Session,
    week_start: date,
    now: datetime | None = None,
) -> str:
    """Compute and persist the reward batch for the week starting ``week_start``.

    Idempotent per week: an existing batch is returned unchanged. A week with
    no eligible resources yields a batch without distributions.

    Raises:
        JobLockedError: If another reward computation is in progress.
    """
    existing = get_weekly_reward(db, week_start)
    if existing is not None:
        return existing.id

    now = now or utcnow()
    week_end, window_start, window_end = week_bounds(week_start)

    with job_lock(db, WEEKLY_REWARDS_JOB):
        existing = get_weekly_reward(db, week_start)
        if existing is not None:
            return existing.id

        paid_total, paid_count = (
            db.query(
                func.coalesce(func.sum(Resource.submission_amount), 0),
                func.count(Resource.id),
            )
            .filter(
                Resource.created_at >= window_start,
                Resource.created_at < window_end,
                Resource.submission_tx_hash.is_not(None),
            )
            .one()
        )
        percentage = Decimal(str(load_distribution_percentage(db)))
        pool = float(
            (Decimal(str(paid_total)) * percentage / 100).quantize(
                AMOUNT_QUANTUM, rounding=ROUND_HALF_UP
            )
        )

        winners = _ranked_resources(db, window_start, window_end)
        amounts = allocate_rewards(pool, len(winners))

        reward = WeeklyReward(
            week_start=week_start,
            week_end=week_end,
            total_pool_amount=pool,
            total_submissions=paid_count,
            total_participants=len({r.submitted_by for r in winners if r.submitted_by}),
        )
        try:
            with db.begin_nested():
                db.add(reward)
                db.flush()
        except IntegrityError:
            db.rollback()
            existing = get_weekly_reward(db, week_start)
            if existing is None:
                raise
            return existing.id

        for rank, (resource, amount) in enumerate(zip(winners, amounts, strict=True), start=1):
            db.add(
                RewardDistribution(
                    weekly_reward_id=reward.id,
                    user_id=resource.submitted_by,
                    resource_id=resource.id,
                    amount=amount,
                    rank=rank,
                    quality_score=resource.quality_score,
                )
            )
            if resource.submitted_by:
                submitter = db.get(User, resource.submitted_by)
                if submitter is not None:
                    submitter.total_rewards_earned = (
                        float(submitter.total_rewards_earned or 0) + amount
                    )

        reward.calculation_completed_at = now
        record_event(
            db,
            "weekly_rewards_calculated",
            properties={
                "week_start": week_start.isoformat(),
                "pool": pool,
                "winners": len(winners),
            },
        )
        db.commit()

    logger.info(
        "Computed weekly rewards for %s: pool=%s winners=%d",
        week_start,
        pool,
        len(winners),
    )
    return reward.id
