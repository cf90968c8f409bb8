"""Relationship toggle engine.

A toggle flips membership of an (actor, target) pair in one relation and
brings the denormalized counters on both participants back in line with the
stored rows:

* ``follow``       user -> user,    rows in ``follow``,       counters
  ``following_count`` (actor) and ``followers_count`` (target);
* ``post_like``    user -> post,    rows in ``post_like``,    counter
  ``Post.likes_count``;
* ``comment_like`` user -> comment, rows in ``comment_like``, counter
  ``Comment.likes_count``.

The direction of a toggle is decided only by what the store holds at read
time. Inserts are add-if-absent (the composite primary key rejects a second
row for the same pair), removals match on the pair identity, and counters are
always recomputed as the cardinality of the rows rather than adjusted by one,
so a counter that drifted after an earlier failure is healed by the next
toggle that touches it.

Nothing here spans records in one transaction. A follow writes the actor side
and commits before the target side is written; if the second write fails the
first is kept and :class:`~blogger.core.errors.PartialFailure` is raised.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, exists, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blogger.core.errors import (
    InvalidStateError,
    NotFoundError,
    PartialFailure,
    SelfReferenceError,
)
from blogger.models import Comment, CommentLike, Follow, Post, PostLike, User

logger = logging.getLogger(__name__)

__all__ = [
    "FollowToggle",
    "LikeToggle",
    "RelationKind",
    "ToggleResult",
    "toggle",
    "toggle_comment_like",
    "toggle_follow",
    "toggle_post_like",
]


class RelationKind(str, enum.Enum):
    """Relations the engine knows how to toggle."""

    FOLLOW = "follow"
    POST_LIKE = "post_like"
    COMMENT_LIKE = "comment_like"


@dataclass(frozen=True)
class ToggleResult:
    """Authoritative state after a toggle.

    Attributes:
        active: Whether the relation exists after the toggle.
        actor_count: The actor-side counter (following count, or the number of
            posts/comments the actor likes).
        target_count: The target-side counter (followers count or likes count).
    """

    active: bool
    actor_count: int
    target_count: int


@dataclass(frozen=True)
class FollowToggle:
    """Follow state reported back to the API layer."""

    is_following: bool
    followers_count: int
    following_count: int


@dataclass(frozen=True)
class LikeToggle:
    """Like state reported back to the API layer."""

    is_liked: bool
    likes_count: int


def _require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def _row_exists(db: Session, *criteria: Any) -> bool:
    return bool(db.scalar(select(exists().where(*criteria))))


def _insert_if_absent(db: Session, model: type, **values: Any) -> None:
    """Insert a membership row, tolerating a concurrent insert of the same pair."""
    try:
        db.execute(insert(model).values(**values))
    except IntegrityError:
        # The pair is already recorded; membership is present either way.
        db.rollback()
        logger.debug("Concurrent insert detected for %s %s", model.__tablename__, values)


def _recount(
    db: Session, model: type, entity: str, record_id: int, counter: str, count_query: Any
) -> None:
    """Set ``model.counter`` to the cardinality computed by ``count_query``.

    Raises:
        NotFoundError: If the host record vanished since it was read.
    """
    result = db.execute(
        update(model)
        .where(model.id == record_id)
        .values({counter: count_query.scalar_subquery()})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(entity, record_id)


def _refresh_following_count(db: Session, user_id: int) -> None:
    query = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    _recount(db, User, "user", user_id, "following_count", query)


def _refresh_followers_count(db: Session, user_id: int) -> None:
    query = select(func.count()).select_from(Follow).where(Follow.followee_id == user_id)
    _recount(db, User, "user", user_id, "followers_count", query)


def _refresh_post_likes(db: Session, post_id: int) -> None:
    query = select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
    _recount(db, Post, "post", post_id, "likes_count", query)


def _refresh_comment_likes(db: Session, comment_id: int) -> None:
    query = select(func.count()).select_from(CommentLike).where(
        CommentLike.comment_id == comment_id
    )
    _recount(db, Comment, "comment", comment_id, "likes_count", query)


def _count(db: Session, model: type, *criteria: Any) -> int:
    return int(db.scalar(select(func.count()).select_from(model).where(*criteria)) or 0)


def _stored_counter(db: Session, model: type, column: Any, record_id: int) -> int:
    value = db.scalar(select(column).where(model.id == record_id))
    return int(value or 0)


def _toggle_follow(db: Session, actor_id: int, target_id: int) -> ToggleResult:
    if actor_id == target_id:
        raise SelfReferenceError(actor_id)
    _require_user(db, actor_id)
    _require_user(db, target_id)

    pair = (Follow.follower_id == actor_id, Follow.followee_id == target_id)
    was_following = _row_exists(db, *pair)

    # Actor side: membership row and following_count commit together.
    try:
        if was_following:
            db.execute(delete(Follow).where(*pair))
        else:
            _insert_if_absent(db, Follow, follower_id=actor_id, followee_id=target_id)
        _refresh_following_count(db, actor_id)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise

    # Target side: followers_count. The actor side is already durable.
    try:
        _refresh_followers_count(db, target_id)
        db.commit()
    except (NotFoundError, SQLAlchemyError) as err:
        db.rollback()
        logger.warning(
            "Follow toggle %s -> %s recorded on the actor side only: %s",
            actor_id,
            target_id,
            err,
        )
        raise PartialFailure(
            "Follow was recorded for the actor but the target could not be updated",
            completed="actor",
            failed="target",
            actor_id=actor_id,
            target_id=target_id,
        ) from err

    active = not was_following
    logger.debug("User %s %s user %s", actor_id, "followed" if active else "unfollowed", target_id)
    return ToggleResult(
        active=active,
        actor_count=_stored_counter(db, User, User.following_count, actor_id),
        target_count=_stored_counter(db, User, User.followers_count, target_id),
    )


def _toggle_post_like(db: Session, actor_id: int, post_id: int) -> ToggleResult:
    _require_user(db, actor_id)
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("post", post_id)
    if not post.is_published:
        raise InvalidStateError(
            "Cannot like unpublished post",
            post_id=post_id,
            status=post.status,
        )

    pair = (PostLike.post_id == post_id, PostLike.user_id == actor_id)
    was_liked = _row_exists(db, *pair)
    try:
        if was_liked:
            db.execute(delete(PostLike).where(*pair))
        else:
            _insert_if_absent(db, PostLike, post_id=post_id, user_id=actor_id)
        _refresh_post_likes(db, post_id)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise

    active = not was_liked
    logger.debug("User %s %s post %s", actor_id, "liked" if active else "unliked", post_id)
    return ToggleResult(
        active=active,
        actor_count=_count(db, PostLike, PostLike.user_id == actor_id),
        target_count=_stored_counter(db, Post, Post.likes_count, post_id),
    )


def _toggle_comment_like(db: Session, actor_id: int, comment_id: int) -> ToggleResult:
    _require_user(db, actor_id)
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("comment", comment_id)
    if comment.is_deleted:
        raise InvalidStateError("Cannot like deleted comment", comment_id=comment_id)

    pair = (CommentLike.comment_id == comment_id, CommentLike.user_id == actor_id)
    was_liked = _row_exists(db, *pair)
    try:
        if was_liked:
            db.execute(delete(CommentLike).where(*pair))
        else:
            _insert_if_absent(db, CommentLike, comment_id=comment_id, user_id=actor_id)
        _refresh_comment_likes(db, comment_id)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise

    active = not was_liked
    logger.debug("User %s %s comment %s", actor_id, "liked" if active else "unliked", comment_id)
    return ToggleResult(
        active=active,
        actor_count=_count(db, CommentLike, CommentLike.user_id == actor_id),
        target_count=_stored_counter(db, Comment, Comment.likes_count, comment_id),
    )


_HANDLERS: dict[RelationKind, Callable[[Session, int, int], ToggleResult]] = {
    RelationKind.FOLLOW: _toggle_follow,
    RelationKind.POST_LIKE: _toggle_post_like,
    RelationKind.COMMENT_LIKE: _toggle_comment_like,
}


def toggle(db: Session, kind: RelationKind | str, actor_id: int, target_id: int) -> ToggleResult:
    """Flip the ``kind`` relation between ``actor_id`` and ``target_id``.

    Args:
        db: Database session.
        kind: Relation to toggle.
        actor_id: Authenticated user performing the toggle.
        target_id: User, post, or comment id depending on ``kind``.

    Returns:
        The relation's new state and both counters as stored.

    Raises:
        SelfReferenceError: A user tried to follow themselves.
        NotFoundError: Actor or target does not exist, or vanished mid-toggle.
        InvalidStateError: The target post is not published, or the target
            comment is deleted.
        PartialFailure: The follow was stored for the actor but the target's
            counter could not be written.
    """
    return _HANDLERS[RelationKind(kind)](db, actor_id, target_id)


def toggle_follow(db: Session, actor_id: int, target_user_id: int) -> FollowToggle:
    """Follow or unfollow ``target_user_id``."""
    result = toggle(db, RelationKind.FOLLOW, actor_id, target_user_id)
    return FollowToggle(
        is_following=result.active,
        followers_count=result.target_count,
        following_count=result.actor_count,
    )


def toggle_post_like(db: Session, actor_id: int, post_id: int) -> LikeToggle:
    """Like or unlike a published post."""
    result = toggle(db, RelationKind.POST_LIKE, actor_id, post_id)
    return LikeToggle(is_liked=result.active, likes_count=result.target_count)


def toggle_comment_like(db: Session, actor_id: int, comment_id: int) -> LikeToggle:
    """Like or unlike a live comment."""
    result = toggle(db, RelationKind.COMMENT_LIKE, actor_id, comment_id)
    return LikeToggle(is_liked=result.active, likes_count=result.target_count)
