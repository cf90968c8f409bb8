"""CRUD-style helpers for managing user accounts."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogger.core import security
from blogger.core.errors import ConflictError, NotFoundError
from blogger.models import User

logger = logging.getLogger(__name__)

__all__ = [
    "PROFILE_FIELDS",
    "authenticate",
    "get_user",
    "get_user_by_username",
    "register_user",
    "update_profile",
]

PROFILE_FIELDS = ("full_name", "bio", "avatar", "website", "location")


def get_user(db: Session, user_id: int) -> User:
    """Return a single user by primary key or raise :class:`NotFoundError`."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def get_user_by_username(db: Session, username: str) -> User:
    """Return a user by username or raise :class:`NotFoundError`."""
    user = db.scalar(select(User).where(User.username == username))
    if user is None:
        raise NotFoundError("user", username)
    return user


def register_user(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    full_name: str,
) -> User:
    """Persist a new account with a hashed password.

    Raises:
        ConflictError: The username or the email is already registered.
    """
    email = email.strip().lower()
    taken = db.scalar(
        select(User.id).where(or_(User.username == username, User.email == email))
    )
    if taken is not None:
        raise ConflictError(
            "User with this email or username already exists",
            username=username,
            email=email,
        )

    user = User(
        username=username,
        email=email,
        password_hash=security.hash_password(password),
        full_name=full_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise ConflictError(
            "User with this email or username already exists",
            username=username,
            email=email,
        ) from err
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, username)
    return user


def authenticate(db: Session, identifier: str, password: str) -> User | None:
    """Return the user matching ``identifier`` (username or email) and password."""
    user = db.scalar(
        select(User).where(
            or_(User.username == identifier, User.email == identifier.strip().lower())
        )
    )
    if user is None or not security.verify_password(password, user.password_hash):
        return None
    return user


def update_profile(db: Session, user: User, changes: dict[str, Any]) -> User:
    """Apply partial profile updates; counters and credentials are never touched."""
    for key, value in changes.items():
        if key in PROFILE_FIELDS and value is not None:
            setattr(user, key, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
