"""Comment-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from blogger.models import Comment, DeletedBody

from .common import APIModel, Pagination
from .user import UserSummary


class CommentCreate(APIModel):
    """Schema for creating a comment or a reply."""

    content: str = Field(..., min_length=1, max_length=1000)
    post_id: int
    parent_comment_id: int | None = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Reject bodies that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Comment content cannot be empty")
        return v


class CommentUpdate(APIModel):
    """Schema for replacing a comment body."""

    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Reject bodies that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Comment content cannot be empty")
        return v


def _comment_fields(comment: Comment) -> dict[str, object]:
    body = comment.body
    deleted = isinstance(body, DeletedBody)
    return {
        "id": comment.id,
        "content": body.text,
        "author": comment.author,
        "post_id": comment.post_id,
        "parent_comment_id": comment.parent_id,
        "likes_count": comment.likes_count,
        "is_edited": comment.is_edited and not deleted,
        "edited_at": comment.edited_at,
        "is_deleted": deleted,
        "created_at": comment.created_at,
        "reply_count": len(comment.replies),
    }


class CommentResponse(APIModel):
    """A comment as rendered to clients; deleted comments carry the tombstone."""

    id: int
    content: str
    author: UserSummary
    post_id: int
    parent_comment_id: int | None = None
    likes_count: int
    is_edited: bool
    edited_at: datetime | None
    is_deleted: bool
    created_at: datetime
    reply_count: int = 0

    @model_validator(mode="before")
    @classmethod
    def _from_comment(cls, data: object) -> object:
        if isinstance(data, Comment):
            return _comment_fields(data)
        return data


class CommentThread(CommentResponse):
    """A comment with its direct replies, oldest first."""

    replies: list[CommentResponse] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_comment(cls, data: object) -> object:
        if not isinstance(data, Comment):
            return data
        fields = _comment_fields(data)
        fields["replies"] = [CommentResponse.model_validate(reply) for reply in data.replies]
        return fields


class CommentListResponse(APIModel):
    """Paginated list of top-level comments."""

    comments: list[CommentThread]
    pagination: Pagination
