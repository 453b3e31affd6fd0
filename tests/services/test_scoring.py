"""Tests for the weighted-vote quality scorer."""

import pytest

from stumble_higher.services.errors import ConfigurationError
from stumble_higher.services.scoring import (
    QualityScore,
    VoteSnapshot,
    calculate_quality_score,
    next_status,
    score_votes,
    vote_weight,
)
from stumble_higher.services.system_config import ScoringConfig

CONFIG = ScoringConfig(auto_approve_threshold=10, auto_hide_threshold=-5, min_votes_required=3)


def _up(user_id: str, reputation: int) -> VoteSnapshot:
    return VoteSnapshot(user_id=user_id, vote_type="up", reputation=reputation)


def _down(user_id: str, reputation: int) -> VoteSnapshot:
    return VoteSnapshot(user_id=user_id, vote_type="down", reputation=reputation)


@pytest.mark.parametrize(
    ("reputation", "expected"),
    [(0, 1.0), (10, 2.0), (20, 3.0), (40, 5.0), (50, 5.0), (10_000, 5.0), (-10, 0.0), (-30, -2.0)],
)
def test_vote_weight_is_linear_and_capped(reputation, expected) -> None:
    """Weight grows by 0.1 per reputation point and never exceeds the cap."""
    assert vote_weight(reputation) == pytest.approx(expected)


def test_vote_weight_respects_configured_cap() -> None:
    assert vote_weight(100, max_weight=3.0) == 3.0


def test_negative_reputation_up_vote_lowers_score() -> None:
    score = score_votes([_up("a", -30)], CONFIG)

    assert score.upvotes == 1
    assert score.weighted_score == pytest.approx(-2.0)


def test_three_votes_below_threshold_stay_pending() -> None:
    """Reputations {0, 20, 50} contribute {1, 3, 5} for a total of 9."""
    score = score_votes([_up("a", 0), _up("b", 20), _up("c", 50)], CONFIG)

    assert score.weighted_score == pytest.approx(9.0)
    assert score.voter_count == 3
    assert score.upvotes == 3
    assert not score.should_auto_approve
    assert next_status("pending", score) == "pending"


def test_fourth_vote_crosses_approval_threshold() -> None:
    """A reputation-10 up-vote adds 2.0 and approves the resource."""
    score = score_votes([_up("a", 0), _up("b", 20), _up("c", 50), _up("d", 10)], CONFIG)

    assert score.weighted_score == pytest.approx(11.0)
    assert score.voter_count == 4
    assert score.should_auto_approve
    assert next_status("pending", score) == "approved"


def test_approval_requires_minimum_voters() -> None:
    """A high score from too few voters does not auto-approve."""
    score = score_votes([_up("a", 100), _up("b", 100)], CONFIG)

    assert score.weighted_score == pytest.approx(10.0)
    assert not score.should_auto_approve


def test_down_votes_trigger_auto_hide() -> None:
    score = score_votes([_down("a", 10), _down("b", 10), _down("c", 0)], CONFIG)

    assert score.weighted_score == pytest.approx(-5.0)
    assert score.downvotes == 3
    assert score.should_auto_hide
    assert next_status("pending", score) == "hidden"


def test_no_votes_scores_zero() -> None:
    score = score_votes([], CONFIG)

    assert score == QualityScore(0, 0, 0.0, 0, False, False)


def test_only_pending_resources_transition() -> None:
    """Approved and hidden resources are never moved by the scorer."""
    approve = QualityScore(5, 0, 20.0, 5, True, False)
    hide = QualityScore(0, 5, -20.0, 5, False, True)

    assert next_status("approved", hide) == "approved"
    assert next_status("hidden", approve) == "hidden"
    assert next_status("rejected", approve) == "rejected"


def test_approve_wins_over_hide() -> None:
    both = QualityScore(3, 0, 0.0, 3, True, True)

    assert next_status("pending", both) == "approved"


def test_calculate_quality_score_uses_live_reputation(
    seeded_config, make_user, make_resource, add_vote
) -> None:
    """The database-backed scorer reads each voter's current reputation."""
    submitter = make_user()
    resource = make_resource(submitted_by=submitter.id, status="pending")
    add_vote(resource, make_user(reputation_score=20))
    add_vote(resource, make_user(reputation_score=0), "down")

    score = calculate_quality_score(seeded_config, resource.id)

    assert score.upvotes == 1
    assert score.downvotes == 1
    assert score.weighted_score == pytest.approx(2.0)


def test_calculate_quality_score_without_config_fails(db_session, make_resource) -> None:
    """Missing thresholds are fatal rather than defaulting to permissive values."""
    resource = make_resource()

    with pytest.raises(ConfigurationError):
        calculate_quality_score(db_session, resource.id)
