"""Tests for password hashing, tokens and the error taxonomy."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastapi import Request
from jose import JWTError

from blogger.api.v1.errors import engagement_error_handler, status_for
from blogger.core.errors import (
    AuthorizationError,
    ConflictError,
    EngagementError,
    InvalidStateError,
    NotFoundError,
    PartialFailure,
    SelfReferenceError,
)
from blogger.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_round_trip() -> None:
    stored = hash_password("hunter22")
    assert stored.startswith("$2b$")
    assert verify_password("hunter22", stored)
    assert not verify_password("hunter23", stored)


def test_hashes_are_salted() -> None:
    assert hash_password("same") != hash_password("same")


def test_long_passwords_hash_and_verify() -> None:
    password = "\u00e9" * 100
    stored = hash_password(password)
    assert verify_password(password, stored)


@pytest.mark.parametrize("stored", ["", "plain", "pbkdf2_sha256$1000$salt$digest"])
def test_unknown_hash_formats_never_verify(stored: str) -> None:
    assert not verify_password("anything", stored)


def test_token_carries_user_id() -> None:
    assert decode_access_token(create_access_token(42)) == 42


def test_tampered_token_rejected() -> None:
    token = create_access_token(42)
    with pytest.raises(JWTError):
        decode_access_token(token[:-2] + ("AA" if token[-2:] != "AA" else "BB"))


def test_not_found_shape() -> None:
    err = NotFoundError("post", 7)
    assert err.to_dict() == {
        "detail": "Post not found",
        "kind": "not_found",
        "identifiers": {"entity": "post", "id": 7},
    }


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (NotFoundError("user", 1), 404),
        (SelfReferenceError(1), 400),
        (InvalidStateError("nope"), 400),
        (AuthorizationError("nope"), 403),
        (ConflictError("taken"), 409),
        (PartialFailure("half", completed="actor", failed="target"), 500),
        (EngagementError("other"), 500),
    ],
)
def test_status_mapping(error: EngagementError, code: int) -> None:
    assert status_for(error) == code


def test_handler_renders_error_body() -> None:
    request = Request({"type": "http", "method": "GET", "path": "/api/v1/posts/7", "headers": []})

    response = asyncio.run(engagement_error_handler(request, NotFoundError("post", 7)))

    assert response.status_code == 404
    assert json.loads(response.body) == {
        "detail": "Post not found",
        "kind": "not_found",
        "identifiers": {"entity": "post", "id": 7},
    }
