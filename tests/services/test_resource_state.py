"""Tests for applying scorer output to persisted resources."""

import pytest

from stumble_higher.models import AnalyticsEvent, Resource
from stumble_higher.services.errors import ResourceNotFoundError
from stumble_higher.services.resource_state import (
    mark_scores_stale,
    reconcile_stale_scores,
    update_resource_scores,
)


@pytest.fixture()
def pending_resource(make_user, make_resource):
    return make_resource(submitted_by=make_user().id, status="pending")


def _vote_from(make_user, add_vote, resource, reputation, vote_type="up"):
    add_vote(resource, make_user(reputation_score=reputation), vote_type)


def test_scenario_stays_pending_then_approves(
    seeded_config, make_user, add_vote, pending_resource
) -> None:
    """{0, 20, 50} scores 9.0 and stays pending; a reputation-10 vote approves."""
    for reputation in (0, 20, 50):
        _vote_from(make_user, add_vote, pending_resource, reputation)

    update = update_resource_scores(seeded_config, pending_resource.id)
    seeded_config.commit()

    assert update.score.weighted_score == pytest.approx(9.0)
    assert update.status == "pending"
    assert not update.transitioned

    _vote_from(make_user, add_vote, pending_resource, 10)
    update = update_resource_scores(seeded_config, pending_resource.id)
    seeded_config.commit()

    assert update.score.weighted_score == pytest.approx(11.0)
    assert update.transitioned
    assert pending_resource.status == "approved"
    assert pending_resource.upvotes == 4
    events = seeded_config.query(AnalyticsEvent).filter_by(
        event_type="resource_auto_approved"
    )
    assert events.count() == 1


def test_approved_resource_never_reverts(
    seeded_config, make_user, add_vote, pending_resource
) -> None:
    """Once approved, later down-votes only move the score."""
    for reputation in (50, 50, 50):
        _vote_from(make_user, add_vote, pending_resource, reputation)
    update_resource_scores(seeded_config, pending_resource.id)
    seeded_config.commit()
    assert pending_resource.status == "approved"

    for reputation in (50, 50, 50, 50, 50):
        _vote_from(make_user, add_vote, pending_resource, reputation, "down")
    update = update_resource_scores(seeded_config, pending_resource.id)
    seeded_config.commit()

    assert update.score.weighted_score == pytest.approx(-10.0)
    assert pending_resource.status == "approved"
    assert seeded_config.query(AnalyticsEvent).filter_by(
        event_type="resource_auto_approved"
    ).count() == 1


def test_auto_hide(seeded_config, make_user, add_vote, pending_resource) -> None:
    for _ in range(3):
        _vote_from(make_user, add_vote, pending_resource, 10, "down")

    update = update_resource_scores(seeded_config, pending_resource.id)

    assert update.status == "hidden"
    assert pending_resource.quality_score == pytest.approx(-6.0)


def test_submitter_reputation_follows_quality(
    seeded_config, make_user, add_vote, make_resource
) -> None:
    submitter = make_user()
    resource = make_resource(submitted_by=submitter.id, status="pending")
    _vote_from(make_user, add_vote, resource, 10)

    update_resource_scores(seeded_config, resource.id)
    seeded_config.commit()

    assert submitter.reputation_score == 10  # quality 2.0 * 5


def test_missing_resource_raises(seeded_config) -> None:
    with pytest.raises(ResourceNotFoundError):
        update_resource_scores(seeded_config, "does-not-exist")


def test_recompute_is_idempotent(seeded_config, make_user, add_vote, pending_resource) -> None:
    _vote_from(make_user, add_vote, pending_resource, 20)

    first = update_resource_scores(seeded_config, pending_resource.id)
    second = update_resource_scores(seeded_config, pending_resource.id)

    assert first.score == second.score
    assert pending_resource.quality_score == pytest.approx(3.0)


def test_reconcile_clears_stale_flag(
    seeded_config, make_user, add_vote, pending_resource
) -> None:
    _vote_from(make_user, add_vote, pending_resource, 20)
    mark_scores_stale(seeded_config, pending_resource.id)
    seeded_config.refresh(pending_resource)
    assert pending_resource.scores_stale is True

    assert reconcile_stale_scores(seeded_config) == 1

    refreshed = seeded_config.get(Resource, pending_resource.id)
    assert refreshed.scores_stale is False
    assert refreshed.quality_score == pytest.approx(3.0)
    assert reconcile_stale_scores(seeded_config) == 0
