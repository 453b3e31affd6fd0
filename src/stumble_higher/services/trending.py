"""Periodic trending-score recomputation for approved resources."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from stumble_higher.db.time import as_utc, utcnow
from stumble_higher.models import Resource, UserInteraction, Vote
from stumble_higher.models.interaction import INTERACTION_VIEW
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED
from stumble_higher.services.analytics import record_event
from stumble_higher.services.jobs import TRENDING_JOB, job_lock

logger = logging.getLogger(__name__)

QUALITY_WEIGHT = 0.4
RECENT_VIEWS_WEIGHT = 0.3
RECENT_VOTES_WEIGHT = 0.2
RECENCY_WEIGHT = 0.1

ENGAGEMENT_WINDOW = timedelta(days=7)

# (maximum age, bonus) checked in order.
RECENCY_BONUSES = (
    (timedelta(days=3), 5.0),
    (timedelta(days=7), 2.0),
    (timedelta(days=30), 1.0),
)


def recency_bonus(created_at: datetime, now: datetime) -> float:
    """Return the freshness bonus for content created at ``created_at``."""
    age = as_utc(now) - as_utc(created_at)
    for max_age, bonus in RECENCY_BONUSES:
        if age <= max_age:
            return bonus
    return 0.0


def compute_trending_score(
    quality_score: float,
    recent_views: int,
    recent_votes: int,
    created_at: datetime,
    now: datetime,
) -> float:
    """Blend quality, trailing-week engagement and recency into one score.

    Scores are only comparable within a single computation pass; there is no
    normalisation across resources.
    """
    return round(
        float(quality_score or 0) * QUALITY_WEIGHT
        + recent_views * RECENT_VIEWS_WEIGHT
        + recent_votes * RECENT_VOTES_WEIGHT
        + recency_bonus(created_at, now) * RECENCY_WEIGHT,
        4,
    )


def _recent_counts(db: Session, column, *filters) -> dict[str, int]:
    return dict(db.query(column, func.count()).filter(*filters).group_by(column).all())


def recompute_trending_scores(db: Session, now: datetime | None = None) -> int:
    """Recompute ``trending_score`` for every approved resource.

    Pure function of table state and ``now``; safe to rerun. Guarded by the
    trending job lease. Returns the number of resources updated.

    Raises:
        JobLockedError: If another trending pass is in progress.
    """
    now = now or utcnow()
    cutoff = now - ENGAGEMENT_WINDOW

    with job_lock(db, TRENDING_JOB):
        views = _recent_counts(
            db,
            UserInteraction.resource_id,
            UserInteraction.interaction_type == INTERACTION_VIEW,
            UserInteraction.created_at > cutoff,
        )
        votes = _recent_counts(db, Vote.resource_id, Vote.created_at > cutoff)

        resources = (
            db.query(Resource).filter(Resource.status == RESOURCE_STATUS_APPROVED).all()
        )
        for resource in resources:
            resource.trending_score = compute_trending_score(
                resource.quality_score,
                views.get(resource.id, 0),
                votes.get(resource.id, 0),
                resource.created_at,
                now,
            )

        record_event(
            db,
            "trending_scores_updated",
            properties={"timestamp": now.isoformat(), "resources": len(resources)},
        )
        db.commit()

    logger.info("Recomputed trending scores for %d resources", len(resources))
    return len(resources)
