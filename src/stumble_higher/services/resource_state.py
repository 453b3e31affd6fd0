"""Apply scorer output to persisted resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stumble_higher.models import Resource
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED, RESOURCE_STATUS_HIDDEN
from stumble_higher.services.analytics import record_event
from stumble_higher.services.errors import ResourceNotFoundError, StumbleError
from stumble_higher.services.reputation import recompute_user_reputation
from stumble_higher.services.scoring import QualityScore, calculate_quality_score, next_status
from stumble_higher.services.system_config import ScoringConfig, load_scoring_config

logger = logging.getLogger(__name__)

_AUTO_EVENTS = {
    RESOURCE_STATUS_APPROVED: "resource_auto_approved",
    RESOURCE_STATUS_HIDDEN: "resource_auto_hidden",
}


@dataclass(frozen=True)
class ScoreUpdate:
    """Outcome of rescoring one resource."""

    resource_id: str
    previous_status: str
    status: str
    score: QualityScore

    @property
    def transitioned(self) -> bool:
        return self.previous_status != self.status


def update_resource_scores(
    db: Session,
    resource_id: str,
    config: ScoringConfig | None = None,
) -> ScoreUpdate:
    """Recompute cached vote totals and auto-moderate a pending resource.

    Writes ``upvotes``, ``downvotes`` and ``quality_score``; when the resource
    is still ``pending`` the scorer's verdict becomes a status transition and
    an audit event is staged. If the quality score moved, the submitter's
    reputation is recomputed too. The caller commits.

    Raises:
        ResourceNotFoundError: If the resource does not exist.
        ConfigurationError: If scoring thresholds are not configured.
    """
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise ResourceNotFoundError(f"Resource {resource_id} not found")

    score = calculate_quality_score(db, resource_id, config)
    previous_status = resource.status
    previous_quality = float(resource.quality_score or 0)

    resource.upvotes = score.upvotes
    resource.downvotes = score.downvotes
    resource.quality_score = score.weighted_score
    resource.scores_stale = False
    resource.status = next_status(previous_status, score)

    if resource.status != previous_status:
        record_event(
            db,
            _AUTO_EVENTS[resource.status],
            resource_id=resource_id,
            properties={
                "quality_score": score.weighted_score,
                "voter_count": score.voter_count,
            },
        )
        logger.info(
            "Resource %s auto-transitioned %s -> %s (score=%.2f, voters=%d)",
            resource_id,
            previous_status,
            resource.status,
            score.weighted_score,
            score.voter_count,
        )

    db.flush()
    status_changed = resource.status != previous_status
    if resource.submitted_by and (status_changed or previous_quality != score.weighted_score):
        recompute_user_reputation(db, resource.submitted_by)

    return ScoreUpdate(
        resource_id=resource_id,
        previous_status=previous_status,
        status=resource.status,
        score=score,
    )


def mark_scores_stale(db: Session, resource_id: str) -> None:
    """Flag a resource for the reconciliation pass after a failed recompute."""
    try:
        db.query(Resource).filter(Resource.id == resource_id).update(
            {Resource.scores_stale: True}, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Could not flag resource %s as stale: %s", resource_id, err, exc_info=True)


def reconcile_stale_scores(db: Session, limit: int = 100) -> int:
    """Recompute resources whose last best-effort rescore failed.

    Returns the number of resources successfully reconciled.

    Raises:
        ConfigurationError: If scoring thresholds are not configured.
    """
    config = load_scoring_config(db)
    stale_ids = [
        resource_id
        for (resource_id,) in db.query(Resource.id)
        .filter(Resource.scores_stale.is_(True))
        .order_by(Resource.updated_at)
        .limit(limit)
    ]

    reconciled = 0
    for resource_id in stale_ids:
        try:
            update_resource_scores(db, resource_id, config)
            db.commit()
            reconciled += 1
        except (StumbleError, SQLAlchemyError) as err:
            db.rollback()
            logger.warning("Reconciliation failed for resource %s: %s", resource_id, err)

    if stale_ids:
        logger.info("Reconciled %d/%d stale resources", reconciled, len(stale_ids))
    return reconciled
