"""Comment tree maintenance.

Comments form a forest per post: ``parent_id`` links a reply to the comment
it answers and ``Comment.replies`` lists the children in creation order.
``Post.comments_count`` counts the post's live comments, replies included.
Creation adds one and a soft delete removes one; both are single new facts,
so they adjust the counter instead of recounting.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session, aliased, selectinload

from blogger.core.errors import AuthorizationError, InvalidStateError, NotFoundError
from blogger.db.time import utcnow
from blogger.models import Comment, Post, User

logger = logging.getLogger(__name__)

__all__ = [
    "create_comment",
    "get_comment",
    "list_post_comments",
    "soft_delete_comment",
    "update_comment",
]


def _get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("post", post_id)
    return post


def _get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("comment", comment_id)
    return comment


def _get_owned_comment(db: Session, actor_id: int, comment_id: int, action: str) -> Comment:
    comment = _get_comment(db, comment_id)
    if comment.author_id != actor_id:
        raise AuthorizationError(
            f"Not authorized to {action} this comment",
            comment_id=comment_id,
            actor_id=actor_id,
        )
    return comment


def _adjust_comments_count(db: Session, post_id: int, delta: int) -> None:
    if delta >= 0:
        new_value = Post.comments_count + delta
    else:
        # Never drive the counter below zero, even if it already drifted.
        new_value = case(
            (Post.comments_count + delta > 0, Post.comments_count + delta),
            else_=0,
        )
    result = db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(comments_count=new_value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("post", post_id)


def create_comment(
    db: Session,
    actor_id: int,
    post_id: int,
    content: str,
    parent_comment_id: int | None = None,
) -> Comment:
    """Create a comment on ``post_id``, optionally as a reply.

    Args:
        db: Database session.
        actor_id: Author of the new comment.
        post_id: Post being commented on.
        content: Comment body.
        parent_comment_id: Comment being replied to, if any.

    Returns:
        The persisted comment.

    Raises:
        NotFoundError: The actor, post, or parent comment does not exist.
        InvalidStateError: The parent belongs to another post or is deleted.
    """
    if db.get(User, actor_id) is None:
        raise NotFoundError("user", actor_id)
    _get_post(db, post_id)

    parent: Comment | None = None
    if parent_comment_id is not None:
        parent = db.get(Comment, parent_comment_id)
        if parent is None:
            raise NotFoundError("comment", parent_comment_id, "Parent comment not found")
        if parent.post_id != post_id:
            raise InvalidStateError(
                "Parent comment belongs to a different post",
                post_id=post_id,
                parent_comment_id=parent_comment_id,
                parent_post_id=parent.post_id,
            )
        if parent.is_deleted:
            raise InvalidStateError(
                "Cannot reply to a deleted comment",
                parent_comment_id=parent_comment_id,
            )

    comment = Comment(content=content, author_id=actor_id, post_id=post_id)
    db.add(comment)
    if parent is not None:
        parent.replies.append(comment)
    try:
        db.flush()
        _adjust_comments_count(db, post_id, 1)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise

    db.refresh(comment)
    logger.debug(
        "User %s commented %s on post %s (parent=%s)",
        actor_id,
        comment.id,
        post_id,
        parent_comment_id,
    )
    return comment


def update_comment(db: Session, actor_id: int, comment_id: int, content: str) -> Comment:
    """Replace the body of a live comment owned by ``actor_id``.

    Raises:
        NotFoundError: The comment does not exist.
        AuthorizationError: The actor is not the comment's author.
        InvalidStateError: The comment was deleted.
    """
    comment = _get_owned_comment(db, actor_id, comment_id, "update")
    if comment.is_deleted:
        raise InvalidStateError("Cannot update deleted comment", comment_id=comment_id)

    comment.content = content
    comment.is_edited = True
    comment.edited_at = utcnow()
    db.commit()
    db.refresh(comment)
    return comment


def soft_delete_comment(db: Session, actor_id: int, comment_id: int) -> None:
    """Tombstone a comment owned by ``actor_id``.

    The row stays in place, as does its slot in the parent's replies; replies
    to it are left untouched. The post's ``comments_count`` drops by one.

    Raises:
        NotFoundError: The comment does not exist.
        AuthorizationError: The actor is not the comment's author.
        InvalidStateError: The comment was already deleted.
    """
    comment = _get_owned_comment(db, actor_id, comment_id, "delete")
    if comment.is_deleted:
        raise InvalidStateError("Comment is already deleted", comment_id=comment_id)

    post_id = comment.post_id
    comment.mark_deleted()
    try:
        db.flush()
        _adjust_comments_count(db, post_id, -1)
        db.commit()
    except NotFoundError:
        db.rollback()
        raise
    logger.debug("User %s deleted comment %s on post %s", actor_id, comment_id, post_id)


def get_comment(db: Session, comment_id: int) -> Comment:
    """Return a comment with its replies loaded.

    Raises:
        NotFoundError: The comment or the post it belongs to no longer exists.
    """
    comment = db.scalar(
        select(Comment)
        .options(selectinload(Comment.replies))
        .where(Comment.id == comment_id)
    )
    if comment is None:
        raise NotFoundError("comment", comment_id)
    _get_post(db, comment.post_id)
    return comment


def list_post_comments(
    db: Session, post_id: int, *, page: int = 1, limit: int = 20
) -> tuple[Sequence[Comment], int]:
    """Return one page of a post's top-level comments, newest first.

    Deleted top-level comments are kept only while they still have replies,
    so threads under a tombstone stay reachable.
    """
    _get_post(db, post_id)

    reply = aliased(Comment)
    has_replies = select(reply.id).where(reply.parent_id == Comment.id).exists()
    live_or_threaded = or_(Comment.is_deleted.is_(False), has_replies)
    criteria = (Comment.post_id == post_id, Comment.parent_id.is_(None), live_or_threaded)

    total = db.scalar(select(func.count()).select_from(Comment).where(*criteria)) or 0
    comments = db.scalars(
        select(Comment)
        .options(selectinload(Comment.replies))
        .where(*criteria)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return comments, int(total)
