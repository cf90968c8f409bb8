"""Counter reconciliation.

Every denormalized counter is a cache of a cardinality that can be computed
from stored rows. These helpers recompute the cache, write back the fields
that disagree and report what changed. They are the recovery path after a
:class:`~blogger.core.errors.PartialFailure` and for drift in the
increment-maintained ``posts_count`` and ``comments_count``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from blogger.core.errors import NotFoundError
from blogger.models import Comment, CommentLike, Follow, Post, PostLike, User

logger = logging.getLogger(__name__)

__all__ = [
    "Repair",
    "ReconcileReport",
    "reconcile_all",
    "reconcile_comment",
    "reconcile_post",
    "reconcile_user",
]


@dataclass(frozen=True)
class Repair:
    """One counter that was rewritten."""

    entity: str
    record_id: int
    field: str
    stored: int
    actual: int


@dataclass
class ReconcileReport:
    """Summary of a sweep."""

    users: int = 0
    posts: int = 0
    comments: int = 0
    repairs: list[Repair] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """Return True when no counter needed repair."""
        return not self.repairs


def _count(db: Session, model: type, *criteria: Any) -> int:
    return int(db.scalar(select(func.count()).select_from(model).where(*criteria)) or 0)


def _apply(entity: str, record: Any, actual: dict[str, int]) -> list[Repair]:
    repairs: list[Repair] = []
    for name, value in actual.items():
        stored = getattr(record, name)
        if stored != value:
            repairs.append(Repair(entity, record.id, name, stored, value))
            setattr(record, name, value)
            logger.info(
                "Repaired %s %s.%s: %s -> %s", entity, record.id, name, stored, value
            )
    return repairs


def _user_counters(db: Session, user_id: int) -> dict[str, int]:
    return {
        "followers_count": _count(db, Follow, Follow.followee_id == user_id),
        "following_count": _count(db, Follow, Follow.follower_id == user_id),
        "posts_count": _count(db, Post, Post.author_id == user_id),
    }


def _post_counters(db: Session, post_id: int) -> dict[str, int]:
    return {
        "likes_count": _count(db, PostLike, PostLike.post_id == post_id),
        "comments_count": _count(
            db, Comment, Comment.post_id == post_id, Comment.is_deleted.is_(False)
        ),
    }


def _comment_counters(db: Session, comment_id: int) -> dict[str, int]:
    return {"likes_count": _count(db, CommentLike, CommentLike.comment_id == comment_id)}


def reconcile_user(db: Session, user_id: int) -> list[Repair]:
    """Recompute a user's follower, following and post counters.

    Raises:
        NotFoundError: The user does not exist.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    repairs = _apply("user", user, _user_counters(db, user_id))
    db.commit()
    return repairs


def reconcile_post(db: Session, post_id: int) -> list[Repair]:
    """Recompute a post's like and comment counters.

    Raises:
        NotFoundError: The post does not exist.
    """
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("post", post_id)
    repairs = _apply("post", post, _post_counters(db, post_id))
    db.commit()
    return repairs


def reconcile_comment(db: Session, comment_id: int) -> list[Repair]:
    """Recompute a comment's like counter.

    Raises:
        NotFoundError: The comment does not exist.
    """
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("comment", comment_id)
    repairs = _apply("comment", comment, _comment_counters(db, comment_id))
    db.commit()
    return repairs


def reconcile_all(db: Session) -> ReconcileReport:
    """Sweep every user, post and comment, committing once per entity type."""
    report = ReconcileReport()

    for user in db.scalars(select(User).order_by(User.id)).unique().all():
        report.repairs.extend(_apply("user", user, _user_counters(db, user.id)))
        report.users += 1
    db.commit()

    for post in db.scalars(select(Post).order_by(Post.id)).unique().all():
        report.repairs.extend(_apply("post", post, _post_counters(db, post.id)))
        report.posts += 1
    db.commit()

    for comment in db.scalars(select(Comment).order_by(Comment.id)).unique().all():
        report.repairs.extend(
            _apply("comment", comment, _comment_counters(db, comment.id))
        )
        report.comments += 1
    db.commit()

    logger.info(
        "Reconciled %s users, %s posts, %s comments; %s repairs",
        report.users,
        report.posts,
        report.comments,
        len(report.repairs),
    )
    return report
