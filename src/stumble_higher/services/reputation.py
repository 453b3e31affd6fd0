"""User reputation derived from submissions, votes and engagement."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from stumble_higher.models import Resource, User, UserInteraction, Vote
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED, RESOURCE_STATUS_PENDING

MAX_POINTS_PER_RESOURCE = 50.0
MAX_VOTING_POINTS = 100
MAX_ENGAGEMENT_POINTS = 50.0
ENGAGEMENT_POINTS_PER_INTERACTION = 0.1


def compute_reputation(
    resource_quality_scores: Iterable[float],
    votes_cast: int,
    interaction_count: int,
) -> int:
    """Return the reputation implied by a user's activity.

    Content points are ``min(quality * 5, 50)`` per submitted resource, voting
    points ``min(votes, 100)`` and engagement points
    ``min(0.1 * interactions, 50)``. The total is rounded half away from zero.
    """
    content_points = sum(
        min(float(score) * 5, MAX_POINTS_PER_RESOURCE) for score in resource_quality_scores
    )
    voting_points = min(votes_cast, MAX_VOTING_POINTS)
    engagement_points = min(
        interaction_count * ENGAGEMENT_POINTS_PER_INTERACTION,
        MAX_ENGAGEMENT_POINTS,
    )
    total = Decimal(str(content_points + voting_points + engagement_points))
    return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def recompute_user_reputation(db: Session, user_id: str) -> int | None:
    """Recompute and store ``user_id``'s reputation from source tables.

    Idempotent; returns the new score or ``None`` when the user is unknown.
    The caller owns the transaction.
    """
    user = db.get(User, user_id)
    if user is None:
        return None

    quality_scores = [
        score
        for (score,) in db.query(Resource.quality_score).filter(
            Resource.submitted_by == user_id,
            Resource.status.in_((RESOURCE_STATUS_APPROVED, RESOURCE_STATUS_PENDING)),
        )
    ]
    votes_cast = db.query(func.count(Vote.id)).filter(Vote.user_id == user_id).scalar() or 0
    interactions = (
        db.query(func.count(UserInteraction.id))
        .filter(UserInteraction.user_id == user_id)
        .scalar()
        or 0
    )

    user.reputation_score = compute_reputation(quality_scores, votes_cast, interactions)
    db.flush()
    return user.reputation_score
