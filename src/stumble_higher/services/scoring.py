"""Reputation-weighted quality scoring for resources.

The scorer is a pure function over an explicit snapshot of vote rows, so it
can be exercised without a database. ``calculate_quality_score`` is the thin
database-facing wrapper that fetches the snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from stumble_higher.models import User, Vote
from stumble_higher.models.resource import (
    RESOURCE_STATUS_APPROVED,
    RESOURCE_STATUS_HIDDEN,
    RESOURCE_STATUS_PENDING,
)
from stumble_higher.models.vote import VOTE_DOWN, VOTE_UP
from stumble_higher.services.system_config import ScoringConfig, load_scoring_config

DEFAULT_MAX_VOTE_WEIGHT = 5.0


@dataclass(frozen=True)
class VoteSnapshot:
    """One vote row joined with its voter's current reputation."""

    user_id: str
    vote_type: str
    reputation: int


@dataclass(frozen=True)
class QualityScore:
    """Aggregated vote outcome for a single resource."""

    upvotes: int
    downvotes: int
    weighted_score: float
    voter_count: int
    should_auto_approve: bool
    should_auto_hide: bool


def vote_weight(reputation: float, max_weight: float = DEFAULT_MAX_VOTE_WEIGHT) -> float:
    """Return the weight a vote from a voter with ``reputation`` carries.

    The weight grows linearly (``0.1 * reputation + 1``) and is capped at
    ``max_weight``. There is no floor: below -10 reputation the weight turns
    negative, so such a voter's up-vote lowers the score.
    """
    return min(reputation * 0.1 + 1.0, max_weight)


def score_votes(votes: Iterable[VoteSnapshot], config: ScoringConfig) -> QualityScore:
    """Aggregate votes into a weighted score and an auto-moderation verdict."""
    upvotes = 0
    downvotes = 0
    weighted = 0.0
    voters: set[str] = set()

    for vote in votes:
        weight = vote_weight(vote.reputation, config.max_reputation_weight)
        if vote.vote_type == VOTE_UP:
            upvotes += 1
            weighted += weight
        elif vote.vote_type == VOTE_DOWN:
            downvotes += 1
            weighted -= weight
        voters.add(vote.user_id)

    weighted = round(weighted, 4)
    voter_count = len(voters)
    enough_voters = voter_count >= config.min_votes_required
    return QualityScore(
        upvotes=upvotes,
        downvotes=downvotes,
        weighted_score=weighted,
        voter_count=voter_count,
        should_auto_approve=enough_voters and weighted >= config.auto_approve_threshold,
        should_auto_hide=enough_voters and weighted <= config.auto_hide_threshold,
    )


def next_status(current_status: str, score: QualityScore) -> str:
    """Return the status a resource should move to after rescoring.

    Only ``pending`` resources are auto-moderated; approve takes precedence
    over hide when a misconfiguration makes both true.
    """
    if current_status != RESOURCE_STATUS_PENDING:
        return current_status
    if score.should_auto_approve:
        return RESOURCE_STATUS_APPROVED
    if score.should_auto_hide:
        return RESOURCE_STATUS_HIDDEN
    return current_status


def fetch_vote_snapshots(db: Session, resource_id: str) -> list[VoteSnapshot]:
    """Load every vote on ``resource_id`` with the voter's live reputation."""
    rows = (
        db.query(Vote.user_id, Vote.vote_type, User.reputation_score)
        .join(User, User.id == Vote.user_id)
        .filter(Vote.resource_id == resource_id)
        .all()
    )
    return [
        VoteSnapshot(user_id=user_id, vote_type=vote_type, reputation=reputation or 0)
        for user_id, vote_type, reputation in rows
    ]


def calculate_quality_score(
    db: Session,
    resource_id: str,
    config: ScoringConfig | None = None,
) -> QualityScore:
    """Score ``resource_id`` from the current vote table.

    Raises:
        ConfigurationError: If ``config`` is omitted and thresholds are unset.
    """
    if config is None:
        config = load_scoring_config(db)
    return score_votes(fetch_vote_snapshots(db, resource_id), config)
