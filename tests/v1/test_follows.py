"""Tests for follow endpoints."""

from __future__ import annotations

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from blogger.services import relationships


def test_follow_toggle_round_trip(client, alice, bob, alice_headers) -> None:
    response = client.post(f"/api/v1/follows/{bob.id}", headers=alice_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"isFollowing": True, "followersCount": 1, "followingCount": 1}

    response = client.post(f"/api/v1/follows/{bob.id}", headers=alice_headers)
    assert response.json() == {"isFollowing": False, "followersCount": 0, "followingCount": 0}


def test_follow_self_is_bad_request(client, alice, alice_headers) -> None:
    response = client.post(f"/api/v1/follows/{alice.id}", headers=alice_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["kind"] == "self_reference"
    assert body["detail"] == "You cannot follow yourself"


def test_follow_unknown_user(client, alice_headers) -> None:
    response = client.post("/api/v1/follows/999", headers=alice_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["identifiers"] == {"entity": "user", "id": 999}


def test_partial_failure_is_server_error(client, alice, bob, alice_headers, monkeypatch) -> None:
    def _broken(db, user_id):
        raise SQLAlchemyError("target write failed")

    monkeypatch.setattr(relationships, "_refresh_followers_count", _broken)

    response = client.post(f"/api/v1/follows/{bob.id}", headers=alice_headers)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body["kind"] == "partial_failure"
    assert body["identifiers"]["completed"] == "actor"
    assert body["identifiers"]["target_id"] == bob.id


def test_status_and_lists(client, alice, bob, carol, alice_headers, bob_headers) -> None:
    client.post(f"/api/v1/follows/{carol.id}", headers=alice_headers)
    client.post(f"/api/v1/follows/{carol.id}", headers=bob_headers)

    assert client.get(f"/api/v1/follows/{carol.id}/status", headers=alice_headers).json() == {
        "isFollowing": True
    }

    followers = client.get(f"/api/v1/follows/{carol.id}/followers").json()
    assert followers["pagination"]["totalItems"] == 2
    assert {u["username"] for u in followers["users"]} == {"alice", "bob"}

    following = client.get(f"/api/v1/follows/{alice.id}/following").json()
    assert [u["username"] for u in following["users"]] == ["carol"]


def test_suggestions_and_mutual(
    client, db_session, alice, bob, carol, alice_headers, bob_headers
) -> None:
    client.post(f"/api/v1/follows/{alice.id}", headers=bob_headers)
    relationships.toggle_follow(db_session, carol.id, bob.id)

    # carol has no followers yet.
    suggestions = client.get("/api/v1/follows/suggestions", headers=alice_headers).json()
    assert [u["username"] for u in suggestions] == ["bob"]

    mutual = client.get(f"/api/v1/follows/mutual/{carol.id}", headers=alice_headers).json()
    assert [u["username"] for u in mutual] == ["bob"]
