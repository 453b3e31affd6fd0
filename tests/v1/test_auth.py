# tests/v1/test_auth.py
"""Tests for bearer-token resolution on protected endpoints."""

from fastapi import status

from stumble_higher.core.security import create_access_token


def test_malformed_token_is_rejected(client) -> None:
    response = client.get(
        "/api/v1/votes/anything/my-vote",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Could not validate credentials"


def test_token_for_unknown_user(client) -> None:
    token = create_access_token("ghost")
    response = client.get(
        "/api/v1/votes/anything/my-vote",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "User not found"


def test_suspended_user_is_forbidden(client, make_user, headers_for) -> None:
    suspended = make_user(is_suspended=True)
    response = client.get("/api/v1/votes/anything/my-vote", headers=headers_for(suspended))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Account suspended"


def test_admin_routes_reject_regular_users(client, auth_token) -> None:
    response = client.get("/api/v1/admin/config", headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Admin privileges required"
