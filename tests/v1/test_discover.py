# tests/v1/test_discover.py
"""Tests for discovery and interaction endpoints."""

from datetime import timedelta

from fastapi import status

from stumble_higher.models import UserInteraction


def test_anonymous_personalized_falls_back_to_popular(client, make_resource) -> None:
    best = make_resource(quality_score=5.0)
    good = make_resource(quality_score=2.0)
    make_resource(quality_score=9.0, status="hidden")

    response = client.get("/api/v1/discover/")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["algorithm_used"] == "popular"
    assert body["resource_ids"] == [best.id, good.id]
    assert [r["id"] for r in body["resources"]] == [best.id, good.id]


def test_discover_applies_filters_and_exclusions(client, make_resource) -> None:
    kept = make_resource(category="tools", estimated_time_minutes=10)
    excluded = make_resource(category="tools", estimated_time_minutes=5)
    make_resource(category="tools", estimated_time_minutes=90)
    make_resource(category="books", estimated_time_minutes=5)

    response = client.get(
        "/api/v1/discover/",
        params={
            "algorithm": "popular",
            "category": "tools",
            "max_time": 30,
            "exclude_ids": [excluded.id],
        },
    )

    assert response.json()["resource_ids"] == [kept.id]


def test_discover_recent(client, make_resource, now) -> None:
    make_resource(created_at=now - timedelta(days=2))
    newest = make_resource(created_at=now - timedelta(hours=1))

    response = client.get("/api/v1/discover/", params={"algorithm": "recent", "limit": 1})

    body = response.json()
    assert body["algorithm_used"] == "recent"
    assert body["resource_ids"] == [newest.id]


def test_discover_rejects_unknown_algorithm(client) -> None:
    response = client.get("/api/v1/discover/", params={"algorithm": "magic"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_log_view_for_user(client, auth_token, make_resource, db_session) -> None:
    resource = make_resource()

    response = client.post(
        "/api/v1/discover/interactions",
        json={"resource_id": resource.id, "interaction_type": "view"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["interaction_type"] == "view"
    db_session.refresh(resource)
    assert resource.views == 1
    assert resource.unique_viewers == 1


def test_log_anonymous_interaction_with_session(client, make_resource, db_session) -> None:
    resource = make_resource()

    response = client.post(
        "/api/v1/discover/interactions",
        json={"resource_id": resource.id, "interaction_type": "share", "session_id": "s-1"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert db_session.query(UserInteraction).one().session_id == "s-1"


def test_anonymous_interaction_requires_session(client, make_resource) -> None:
    resource = make_resource()

    response = client.post(
        "/api/v1/discover/interactions",
        json={"resource_id": resource.id, "interaction_type": "view"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_interaction_on_missing_resource(client, auth_token) -> None:
    response = client.post(
        "/api/v1/discover/interactions",
        json={"resource_id": "missing", "interaction_type": "view"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
