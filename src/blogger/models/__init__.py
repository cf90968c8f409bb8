"""SQLAlchemy models for the Blogger application."""

from .comment import COMMENT_TOMBSTONE, ActiveBody, Comment, CommentBody, DeletedBody
from .follow import Follow
from .like import CommentLike, PostLike
from .post import (
    POST_STATUS_ARCHIVED,
    POST_STATUS_DRAFT,
    POST_STATUS_PUBLISHED,
    POST_STATUSES,
    Post,
)
from .user import User

__all__ = [
    "ActiveBody", "Comment", "CommentBody", "COMMENT_TOMBSTONE", "DeletedBody",
    "Follow",
    "CommentLike", "PostLike",
    "Post", "POST_STATUSES", "POST_STATUS_ARCHIVED", "POST_STATUS_DRAFT",
    "POST_STATUS_PUBLISHED",
    "User",
]
