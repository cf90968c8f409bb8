"""Per-user likes on posts and comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from blogger.db.session import Base
from blogger.db.time import utcnow


class PostLike(Base):
    """A user's like on a post, ordered by ``liked_at``."""

    __tablename__ = "post_like"
    __table_args__ = (
        Index("ix_post_like_user_id", "user_id"),
        Index("ix_post_like_post_id_liked_at", "post_id", "liked_at"),
    )

    # Composite primary key prevents duplicate likes from the same user.
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class CommentLike(Base):
    """A user's like on a comment, ordered by ``liked_at``."""

    __tablename__ = "comment_like"
    __table_args__ = (
        Index("ix_comment_like_user_id", "user_id"),
        Index("ix_comment_like_comment_id_liked_at", "comment_id", "liked_at"),
    )

    comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
