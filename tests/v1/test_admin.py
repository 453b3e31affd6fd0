# tests/v1/test_admin.py
"""Tests for administrative endpoints."""

from datetime import UTC, datetime

import pytest
from fastapi import status

from stumble_higher.models import AdminAction
from stumble_higher.services.jobs import TRENDING_JOB, acquire_job_lock
from stumble_higher.services.system_config import load_scoring_config


def test_moderate_approves_pending(client, admin_token, make_resource) -> None:
    resource = make_resource(status="pending")

    response = client.post(
        f"/api/v1/admin/resources/{resource.id}/moderate",
        json={"action": "approve", "notes": "looks good"},
        headers=admin_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "approved"


def test_moderate_invalid_transition(client, admin_token, make_resource) -> None:
    resource = make_resource(status="rejected")

    response = client.post(
        f"/api/v1/admin/resources/{resource.id}/moderate",
        json={"action": "hide"},
        headers=admin_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_moderate_missing_resource(client, admin_token) -> None:
    response = client.post(
        "/api/v1/admin/resources/missing/moderate",
        json={"action": "approve"},
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_moderation_requires_admin(client, auth_token, make_resource) -> None:
    resource = make_resource(status="pending")

    response = client.post(
        f"/api/v1/admin/resources/{resource.id}/moderate",
        json={"action": "approve"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_recompute_resource(
    client, admin_token, seeded_config, make_resource, make_user, add_vote
) -> None:
    resource = make_resource(status="pending", quality_score=7.0)
    add_vote(resource, make_user(), "down", weight=1.0)

    response = client.post(
        f"/api/v1/admin/resources/{resource.id}/recompute", headers=admin_token
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["quality_score"] == pytest.approx(-1.0)
    assert body["voter_count"] == 1
    assert seeded_config.query(AdminAction).filter_by(action="resource_recompute").count() == 1


def test_recompute_trending(client, admin_token, make_resource) -> None:
    make_resource(quality_score=2.0)

    response = client.post("/api/v1/admin/trending/recompute", headers=admin_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"job": TRENDING_JOB, "processed": 1, "weekly_reward_id": None}


def test_recompute_trending_conflicts_while_locked(client, admin_token, db_session) -> None:
    acquire_job_lock(db_session, TRENDING_JOB, ttl_seconds=600)

    response = client.post("/api/v1/admin/trending/recompute", headers=admin_token)

    assert response.status_code == status.HTTP_409_CONFLICT


def test_compute_rewards_is_idempotent(client, admin_token, make_resource) -> None:
    make_resource(quality_score=3.0, created_at=datetime(2026, 3, 3, tzinfo=UTC))

    first = client.post("/api/v1/admin/rewards/2026-03-02", headers=admin_token)
    second = client.post("/api/v1/admin/rewards/2026-03-02", headers=admin_token)

    assert first.status_code == status.HTTP_200_OK
    assert first.json()["weekly_reward_id"] is not None
    assert first.json()["weekly_reward_id"] == second.json()["weekly_reward_id"]

    reward = client.get(f"/api/v1/rewards/{first.json()['weekly_reward_id']}")
    assert reward.status_code == status.HTTP_200_OK
    assert reward.json()["week_end"] == "2026-03-08"
    assert [d["rank"] for d in reward.json()["distributions"]] == [1]


def test_config_round_trip(client, admin_token, seeded_config) -> None:
    update = client.put(
        "/api/v1/admin/config/auto_approve_threshold",
        json={"value": 12},
        headers=admin_token,
    )
    listing = client.get("/api/v1/admin/config", headers=admin_token)

    assert update.status_code == status.HTTP_200_OK
    assert listing.json()["auto_approve_threshold"] == 12
    assert seeded_config.query(AdminAction).filter_by(action="config_updated").count() == 1


def test_config_rejects_null(client, admin_token) -> None:
    response = client.put(
        "/api/v1/admin/config/auto_hide_threshold",
        json={"value": None},
        headers=admin_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_stats(client, admin_token, make_resource) -> None:
    make_resource()
    make_resource(status="pending")

    response = client.get("/api/v1/admin/stats", headers=admin_token)

    assert response.status_code == status.HTTP_200_OK
    resources = response.json()["resources"]
    assert resources["total"] == 2
    assert resources["pending"] == 1
    assert resources["approved"] == 1


def test_config_rejects_non_numeric_threshold(client, admin_token, seeded_config) -> None:
    response = client.put(
        "/api/v1/admin/config/auto_approve_threshold",
        json={"value": "lots"},
        headers=admin_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert load_scoring_config(seeded_config).auto_approve_threshold == 10
    assert seeded_config.query(AdminAction).count() == 0
