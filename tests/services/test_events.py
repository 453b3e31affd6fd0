"""Tests for the post-commit vote event pipeline."""

from stumble_higher.models import Resource
from stumble_higher.services import events
from stumble_higher.services.events import VoteChanged, handle_vote_changed
from stumble_higher.services.resource_state import mark_scores_stale
from stumble_higher.services.voting import cast_vote, get_user_vote


def _event(resource, user) -> VoteChanged:
    return VoteChanged(resource_id=resource.id, user_id=user.id, action="created", vote_type="up")


def test_handler_rescores_resource_and_voter(
    seeded_config, make_user, make_resource, add_vote
) -> None:
    voter = make_user(reputation_score=20)
    resource = make_resource(submitted_by=make_user().id, status="pending")
    add_vote(resource, voter)

    update = handle_vote_changed(seeded_config, _event(resource, voter))

    assert update is not None
    assert resource.quality_score == 3.0
    # One vote cast is one reputation point.
    assert voter.reputation_score == 1


def test_configuration_error_marks_resource_stale(
    db_session, make_user, make_resource, add_vote, caplog
) -> None:
    """Without thresholds the vote survives and the resource is flagged."""
    voter = make_user()
    resource = make_resource(submitted_by=make_user().id, status="pending")
    add_vote(resource, voter)

    assert handle_vote_changed(db_session, _event(resource, voter)) is None

    db_session.refresh(resource)
    assert resource.scores_stale is True
    assert "configuration error" in caplog.text


def test_publish_calls_subscribers_in_order(db_session, mocker) -> None:
    calls = []
    first = mocker.Mock(side_effect=lambda db, event: calls.append("first"))
    second = mocker.Mock(side_effect=lambda db, event: calls.append("second"))
    events._handlers[:] = []
    events.subscribe(first)
    events.subscribe(second)
    events.subscribe(first)

    event = VoteChanged(resource_id="r", user_id="u", action="removed", vote_type=None)
    events.publish(db_session, event)

    assert calls == ["first", "second"]
    first.assert_called_once_with(db_session, event)

    events.unsubscribe(first)
    events.publish(db_session, event)
    assert calls == ["first", "second", "second"]


def test_stale_flag_does_not_touch_other_resources(
    db_session, make_resource
) -> None:
    target = make_resource()
    bystander = make_resource()

    mark_scores_stale(db_session, target.id)

    assert db_session.get(Resource, bystander.id).scores_stale is False


def test_failing_handler_is_contained(db_session, make_resource, mocker, caplog) -> None:
    resource = make_resource()
    after = mocker.Mock()
    events._handlers[:] = [mocker.Mock(side_effect=RuntimeError("boom"))]
    events.subscribe(after)

    event = VoteChanged(resource_id=resource.id, user_id="u", action="created", vote_type="up")
    events.publish(db_session, event)

    after.assert_called_once_with(db_session, event)
    db_session.refresh(resource)
    assert resource.scores_stale is True
    assert "handler" in caplog.text


def test_vote_survives_unexpected_handler_error(
    seeded_config, make_user, make_resource, mocker
) -> None:
    voter = make_user()
    resource = make_resource(submitted_by=make_user().id, status="pending")
    events._handlers[:] = [mocker.Mock(side_effect=KeyError("missing"))]

    result = cast_vote(seeded_config, resource_id=resource.id, voter=voter, vote_type="up")

    assert result.action == "created"
    assert get_user_vote(seeded_config, resource.id, voter.id) is not None
    seeded_config.refresh(resource)
    assert resource.scores_stale is True
