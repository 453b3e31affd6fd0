"""Cast, switch and remove votes on resources."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stumble_higher.models import Resource, User, Vote
from stumble_higher.models.resource import VOTABLE_STATUSES
from stumble_higher.models.vote import VOTE_DOWN, VOTE_UP
from stumble_higher.services import events
from stumble_higher.services.analytics import record_event
from stumble_higher.services.errors import ResourceNotFoundError, VoteValidationError
from stumble_higher.services.events import VOTE_CREATED, VOTE_REMOVED, VOTE_UPDATED, VoteChanged
from stumble_higher.services.scoring import DEFAULT_MAX_VOTE_WEIGHT, vote_weight
from stumble_higher.services.system_config import MAX_REPUTATION_WEIGHT, get_config_value

logger = logging.getLogger(__name__)

VOTE_TYPES = (VOTE_UP, VOTE_DOWN)


@dataclass(frozen=True)
class VoteResult:
    """What a vote request did to the (user, resource) vote row."""

    resource_id: str
    action: str
    vote_type: str | None
    weight: float | None


def _get_votable_resource(db: Session, resource_id: str, voter: User) -> Resource:
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise ResourceNotFoundError("Resource not found")
    if resource.status not in VOTABLE_STATUSES:
        raise VoteValidationError("Cannot vote on this resource")
    if resource.submitted_by == voter.id:
        raise VoteValidationError("Cannot vote on your own submission")
    return resource


def _max_weight(db: Session) -> float:
    value = get_config_value(db, MAX_REPUTATION_WEIGHT)
    return DEFAULT_MAX_VOTE_WEIGHT if value is None else float(value)


def _find_vote(db: Session, resource_id: str, user_id: str) -> Vote | None:
    return (
        db.query(Vote)
        .filter(Vote.resource_id == resource_id, Vote.user_id == user_id)
        .first()
    )


def _bump_counter(voter: User, vote_type: str, delta: int) -> None:
    if vote_type == VOTE_UP:
        voter.total_upvotes = max((voter.total_upvotes or 0) + delta, 0)
    else:
        voter.total_downvotes = max((voter.total_downvotes or 0) + delta, 0)


def _apply_to_existing(
    db: Session,
    existing: Vote,
    voter: User,
    vote_type: str,
    weight: float,
) -> VoteResult:
    if existing.vote_type == vote_type:
        db.delete(existing)
        _bump_counter(voter, vote_type, -1)
        return VoteResult(existing.resource_id, VOTE_REMOVED, None, None)

    _bump_counter(voter, existing.vote_type, -1)
    _bump_counter(voter, vote_type, 1)
    existing.vote_type = vote_type
    existing.weight = weight
    return VoteResult(existing.resource_id, VOTE_UPDATED, vote_type, weight)


def cast_vote(db: Session, *, resource_id: str, voter: User, vote_type: str) -> VoteResult:
    """Toggle-style vote: same type removes, opposite type switches.

    The vote commits before rescoring is triggered; a ``VoteChanged`` event is
    then published to the scoring handlers.

    Raises:
        VoteValidationError: Malformed type, self-vote, or ineligible status.
        ResourceNotFoundError: If the resource does not exist.
    """
    if vote_type not in VOTE_TYPES:
        raise VoteValidationError(f"Invalid vote type: {vote_type!r}")

    _get_votable_resource(db, resource_id, voter)
    weight = vote_weight(voter.reputation_score or 0, _max_weight(db))

    existing = _find_vote(db, resource_id, voter.id)
    if existing is not None:
        result = _apply_to_existing(db, existing, voter, vote_type, weight)
    else:
        try:
            with db.begin_nested():
                db.add(
                    Vote(
                        resource_id=resource_id,
                        user_id=voter.id,
                        vote_type=vote_type,
                        weight=weight,
                    )
                )
            _bump_counter(voter, vote_type, 1)
            result = VoteResult(resource_id, VOTE_CREATED, vote_type, weight)
        except IntegrityError:
            # A concurrent request inserted first; treat as already voted.
            existing = _find_vote(db, resource_id, voter.id)
            if existing is None:
                raise
            result = _apply_to_existing(db, existing, voter, vote_type, weight)

    record_event(
        db,
        "vote_cast",
        user_id=voter.id,
        resource_id=resource_id,
        properties={"vote_type": vote_type, "action": result.action, "vote_weight": weight},
    )
    db.commit()

    events.publish(
        db,
        VoteChanged(
            resource_id=resource_id,
            user_id=voter.id,
            action=result.action,
            vote_type=result.vote_type,
        ),
    )
    return result


def remove_vote(db: Session, *, resource_id: str, voter: User) -> VoteResult:
    """Delete the voter's vote on ``resource_id``.

    Raises:
        ResourceNotFoundError: If the voter has no vote on the resource.
    """
    existing = _find_vote(db, resource_id, voter.id)
    if existing is None:
        raise ResourceNotFoundError("No vote found to delete")

    removed_type = existing.vote_type
    db.delete(existing)
    _bump_counter(voter, removed_type, -1)
    record_event(
        db,
        "vote_removed",
        user_id=voter.id,
        resource_id=resource_id,
        properties={"vote_type": removed_type},
    )
    db.commit()

    events.publish(
        db,
        VoteChanged(
            resource_id=resource_id,
            user_id=voter.id,
            action=VOTE_REMOVED,
            vote_type=None,
        ),
    )
    return VoteResult(resource_id, VOTE_REMOVED, None, None)


def get_user_vote(db: Session, resource_id: str, user_id: str) -> Vote | None:
    """Return the user's current vote on a resource, if any."""
    return _find_vote(db, resource_id, user_id)
