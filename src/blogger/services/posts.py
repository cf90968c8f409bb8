"""Service-level helpers for creating, editing and listing posts."""
from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from sqlalchemy import Text, case, cast, delete, func, select, update
from sqlalchemy.orm import Session

from blogger.core.errors import AuthorizationError, NotFoundError
from blogger.core.settings import settings
from blogger.db.time import utcnow
from blogger.models import (
    POST_STATUS_PUBLISHED,
    Comment,
    CommentLike,
    Follow,
    Post,
    PostLike,
    User,
)

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200
_TAG_PATTERN = re.compile(r"<[^>]*>")

SORTABLE_FIELDS = {
    "published_at": Post.published_at,
    "created_at": Post.created_at,
    "likes_count": Post.likes_count,
    "views": Post.views,
}

_EDITABLE_FIELDS = ("title", "content", "excerpt", "featured_image")


def reading_time(content: str) -> int:
    """Return the estimated reading time of ``content`` in minutes."""
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


def make_excerpt(content: str) -> str:
    """Return the first characters of ``content`` with markup stripped."""
    plain = _TAG_PATTERN.sub("", content)
    if len(plain) > EXCERPT_LENGTH:
        return plain[:EXCERPT_LENGTH] + "..."
    return plain


def normalize_tags(tags: Sequence[str]) -> list[str]:
    """Lowercase and trim tags, dropping empties and duplicates."""
    normalized: list[str] = []
    for tag in tags:
        clean = tag.strip().lower()
        if clean and clean not in normalized:
            normalized.append(clean)
    return normalized


def get_post(db: Session, post_id: int) -> Post:
    """Return a post or raise :class:`NotFoundError`."""
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("post", post_id)
    return post


def _get_owned_post(db: Session, actor_id: int, post_id: int, action: str) -> Post:
    post = get_post(db, post_id)
    if post.author_id != actor_id:
        raise AuthorizationError(
            f"Not authorized to {action} this post",
            post_id=post_id,
            actor_id=actor_id,
        )
    return post


def create_post(
    db: Session,
    *,
    author_id: int,
    title: str,
    content: str,
    tags: Sequence[str] = (),
    status: str = "draft",
    excerpt: str | None = None,
    featured_image: str | None = None,
) -> Post:
    """Create a post and bump the author's ``posts_count``.

    Raises:
        NotFoundError: The author does not exist.
    """
    if db.get(User, author_id) is None:
        raise NotFoundError("user", author_id)

    post = Post(
        title=title,
        content=content,
        excerpt=excerpt or make_excerpt(content),
        author_id=author_id,
        tags=normalize_tags(tags),
        featured_image=featured_image or "",
        status=status,
        published_at=utcnow() if status == POST_STATUS_PUBLISHED else None,
        reading_time=reading_time(content),
    )
    db.add(post)
    db.flush()
    db.execute(
        update(User)
        .where(User.id == author_id)
        .values(posts_count=User.posts_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(post)
    logger.debug("User %s created post %s (%s)", author_id, post.id, status)
    return post


def update_post(db: Session, actor_id: int, post_id: int, changes: dict[str, Any]) -> Post:
    """Apply partial updates to a post owned by ``actor_id``.

    ``changes`` holds only the fields the caller supplied.

    Raises:
        NotFoundError: The post does not exist.
        AuthorizationError: The actor is not the post's author.
    """
    post = _get_owned_post(db, actor_id, post_id, "update")

    for field in _EDITABLE_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(post, field, changes[field])
    if changes.get("tags") is not None:
        post.tags = normalize_tags(changes["tags"])
    if "content" in changes and changes["content"] is not None:
        post.reading_time = reading_time(post.content)
        if not changes.get("excerpt"):
            post.excerpt = make_excerpt(post.content)

    new_status = changes.get("status")
    if new_status is not None:
        if new_status == POST_STATUS_PUBLISHED and post.published_at is None:
            post.published_at = utcnow()
        post.status = new_status

    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, actor_id: int, post_id: int) -> None:
    """Hard-delete a post owned by ``actor_id`` along with its engagement rows.

    Likes on the post, its comments and their likes go first, then the post;
    the author's ``posts_count`` drops by one in the same commit.

    Raises:
        NotFoundError: The post does not exist.
        AuthorizationError: The actor is not the post's author.
    """
    post = _get_owned_post(db, actor_id, post_id, "delete")
    author_id = post.author_id

    comment_ids = select(Comment.id).where(Comment.post_id == post_id)
    db.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
    db.execute(delete(PostLike).where(PostLike.post_id == post_id))
    # Children first so the self-referencing foreign key is never dangling.
    db.execute(delete(Comment).where(Comment.post_id == post_id, Comment.parent_id.isnot(None)))
    db.execute(delete(Comment).where(Comment.post_id == post_id))
    db.execute(delete(Post).where(Post.id == post_id))
    db.execute(
        update(User)
        .where(User.id == author_id)
        .values(posts_count=case((User.posts_count > 0, User.posts_count - 1), else_=0))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    logger.info("User %s deleted post %s", actor_id, post_id)


def view_post(db: Session, post_id: int) -> Post:
    """Return a post after incrementing its view counter."""
    result = db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(views=Post.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("post", post_id)
    db.commit()
    return get_post(db, post_id)


def _page(db: Session, stmt: Any, page: int, limit: int) -> tuple[Sequence[Post], int]:
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    posts = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all()
    return posts, int(total)


def list_published(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    tag: str | None = None,
    author: str | None = None,
    sort_by: str = "published_at",
    order: str = "desc",
) -> tuple[Sequence[Post], int]:
    """Return published posts filtered by tag and author username."""
    stmt = select(Post).where(Post.status == POST_STATUS_PUBLISHED)
    if tag:
        # Tags live in a JSON array; match the quoted element in its text form.
        stmt = stmt.where(
            cast(Post.tags, Text).contains(f'"{tag.strip().lower()}"', autoescape=True)
        )
    if author:
        author_id = db.scalar(select(User.id).where(User.username == author))
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
    column = SORTABLE_FIELDS.get(sort_by, Post.published_at)
    stmt = stmt.order_by(column.asc() if order == "asc" else column.desc(), Post.id.desc())
    return _page(db, stmt, page, limit)


def list_trending(db: Session, *, limit: int = 10, days: int | None = None) -> Sequence[Post]:
    """Return recently published posts ranked by likes, views and recency."""
    window = days if days is not None else settings.trending_window_days
    since = utcnow() - timedelta(days=window)
    stmt = (
        select(Post)
        .where(Post.status == POST_STATUS_PUBLISHED, Post.published_at >= since)
        .order_by(Post.likes_count.desc(), Post.views.desc(), Post.published_at.desc())
        .limit(limit)
    )
    return db.scalars(stmt).all()


def list_feed(
    db: Session, user_id: int, *, page: int = 1, limit: int = 10
) -> tuple[Sequence[Post], int]:
    """Return published posts from followed authors, or all published posts."""
    followed = select(Follow.followee_id).where(Follow.follower_id == user_id)
    stmt = select(Post).where(Post.status == POST_STATUS_PUBLISHED)
    if db.scalar(select(func.count()).select_from(followed.subquery())):
        stmt = stmt.where(Post.author_id.in_(followed))
    stmt = stmt.order_by(Post.published_at.desc(), Post.id.desc())
    return _page(db, stmt, page, limit)


def list_user_posts(
    db: Session,
    username: str,
    *,
    status: str = POST_STATUS_PUBLISHED,
    page: int = 1,
    limit: int = 10,
) -> tuple[Sequence[Post], int]:
    """Return posts by ``username``; ``status='all'`` disables the status filter."""
    author_id = db.scalar(select(User.id).where(User.username == username))
    if author_id is None:
        raise NotFoundError("user", username)
    stmt = select(Post).where(Post.author_id == author_id)
    if status != "all":
        stmt = stmt.where(Post.status == status)
    stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())
    return _page(db, stmt, page, limit)


def liked_post_ids(db: Session, user_id: int, post_ids: Sequence[int]) -> set[int]:
    """Return the subset of ``post_ids`` that ``user_id`` likes."""
    if not post_ids:
        return set()
    rows = db.scalars(
        select(PostLike.post_id).where(PostLike.user_id == user_id, PostLike.post_id.in_(post_ids))
    )
    return set(rows)
