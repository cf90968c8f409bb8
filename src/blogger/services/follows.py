"""Read side of the follow graph."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session, aliased

from blogger.core.errors import NotFoundError
from blogger.models import Follow, User

__all__ = [
    "MUTUAL_LIMIT",
    "is_following",
    "list_followers",
    "list_following",
    "mutual_followers",
    "suggestions",
]

MUTUAL_LIMIT = 10


def _require_user(db: Session, user_id: int) -> None:
    if db.get(User, user_id) is None:
        raise NotFoundError("user", user_id)


def is_following(db: Session, follower_id: int, followee_id: int) -> bool:
    """Return True when ``follower_id`` currently follows ``followee_id``."""
    return bool(
        db.scalar(
            select(
                exists().where(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == followee_id,
                )
            )
        )
    )


def _page_users(
    db: Session, stmt, page: int, limit: int
) -> tuple[Sequence[User], int]:
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    users = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
    return users, int(total)


def list_followers(
    db: Session, user_id: int, *, page: int = 1, limit: int = 20
) -> tuple[Sequence[User], int]:
    """Return users following ``user_id``, most recent follow first."""
    _require_user(db, user_id)
    stmt = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.followee_id == user_id)
        .order_by(Follow.created_at.desc(), User.id.desc())
    )
    return _page_users(db, stmt, page, limit)


def list_following(
    db: Session, user_id: int, *, page: int = 1, limit: int = 20
) -> tuple[Sequence[User], int]:
    """Return users ``user_id`` follows, most recent follow first."""
    _require_user(db, user_id)
    stmt = (
        select(User)
        .join(Follow, Follow.followee_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), User.id.desc())
    )
    return _page_users(db, stmt, page, limit)


def suggestions(db: Session, user_id: int, *, limit: int = 10) -> Sequence[User]:
    """Suggest accounts to follow.

    Candidates are users other than ``user_id`` that it does not follow yet
    and that have at least one follower, most followed first.
    """
    already = select(Follow.followee_id).where(Follow.follower_id == user_id)
    stmt = (
        select(User)
        .where(
            User.id != user_id,
            User.id.not_in(already),
            User.followers_count > 0,
        )
        .order_by(User.followers_count.desc(), User.id)
        .limit(limit)
    )
    return db.scalars(stmt).all()


def mutual_followers(db: Session, viewer_id: int, target_id: int) -> Sequence[User]:
    """Return people who follow ``viewer_id`` and are followed by ``target_id``."""
    _require_user(db, target_id)
    of_target = aliased(Follow)
    stmt = (
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .join(of_target, of_target.followee_id == User.id)
        .where(Follow.followee_id == viewer_id, of_target.follower_id == target_id)
        .order_by(User.id)
        .limit(MUTUAL_LIMIT)
    )
    return db.scalars(stmt).all()
