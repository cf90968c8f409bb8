"""SQLAlchemy models for threaded comments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogger.db.session import Base
from blogger.db.time import utcnow

from .user import User

COMMENT_TOMBSTONE = "[This comment has been deleted]"


@dataclass(frozen=True)
class ActiveBody:
    """Body of a live comment."""

    text: str


@dataclass(frozen=True)
class DeletedBody:
    """Placeholder left behind by a soft-deleted comment."""

    text: str = COMMENT_TOMBSTONE


CommentBody = ActiveBody | DeletedBody


class Comment(Base):
    """Comment on a post, optionally replying to another comment.

    Deleted comments keep their row and their slot in the parent's replies so
    the thread shape survives; only the body is replaced by a tombstone.
    """

    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_post_id_created_at", "post_id", "created_at"),
        Index("ix_comment_author_id", "author_id"),
        Index("ix_comment_parent_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Top-level comments have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        nullable=True,
    )

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    parent: Mapped[Comment | None] = relationship(
        "Comment",
        remote_side=[id],
        back_populates="replies",
    )
    # Creation order; ids are assigned monotonically.
    replies: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="parent",
        order_by="Comment.id",
    )

    @property
    def body(self) -> CommentBody:
        """Return the comment body as a tagged live/deleted state."""
        if self.is_deleted:
            return DeletedBody()
        return ActiveBody(self.content)

    def mark_deleted(self) -> None:
        """Tombstone the comment in place."""
        self.is_deleted = True
        self.content = COMMENT_TOMBSTONE
