"""Read side of post and comment likes."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from blogger.core.errors import NotFoundError
from blogger.models import POST_STATUS_PUBLISHED, Comment, CommentLike, Post, PostLike, User

__all__ = [
    "comment_likers",
    "liked_posts",
    "post_likers",
    "total_likes_received",
]


def post_likers(db: Session, post_id: int) -> Sequence[User]:
    """Return the users who liked ``post_id`` in the order they liked it."""
    if db.get(Post, post_id) is None:
        raise NotFoundError("post", post_id)
    stmt = (
        select(User)
        .join(PostLike, PostLike.user_id == User.id)
        .where(PostLike.post_id == post_id)
        .order_by(PostLike.liked_at, User.id)
    )
    return db.scalars(stmt).all()


def comment_likers(db: Session, comment_id: int) -> Sequence[User]:
    """Return the users who liked ``comment_id`` in the order they liked it."""
    if db.get(Comment, comment_id) is None:
        raise NotFoundError("comment", comment_id)
    stmt = (
        select(User)
        .join(CommentLike, CommentLike.user_id == User.id)
        .where(CommentLike.comment_id == comment_id)
        .order_by(CommentLike.liked_at, User.id)
    )
    return db.scalars(stmt).all()


def liked_posts(
    db: Session, user_id: int, *, page: int = 1, limit: int = 10
) -> tuple[Sequence[Post], int]:
    """Return published posts ``user_id`` likes, most recently liked first."""
    if db.get(User, user_id) is None:
        raise NotFoundError("user", user_id)
    criteria = (PostLike.user_id == user_id, Post.status == POST_STATUS_PUBLISHED)
    total = db.scalar(
        select(func.count())
        .select_from(PostLike)
        .join(Post, Post.id == PostLike.post_id)
        .where(*criteria)
    )
    posts = db.scalars(
        select(Post)
        .join(PostLike, PostLike.post_id == Post.id)
        .where(*criteria)
        .order_by(PostLike.liked_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return posts, int(total or 0)


def total_likes_received(db: Session, user_id: int) -> int:
    """Return the number of likes on ``user_id``'s published posts.

    Counted from the like rows, so it is correct even if a post's
    ``likes_count`` drifted.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError("user", user_id)
    total = db.scalar(
        select(func.count())
        .select_from(PostLike)
        .join(Post, Post.id == PostLike.post_id)
        .where(Post.author_id == user_id, Post.status == POST_STATUS_PUBLISHED)
    )
    return int(total or 0)
