"""SQLAlchemy models for blog posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogger.db.session import Base
from blogger.db.time import utcnow

from .user import User

POST_STATUS_DRAFT = "draft"
POST_STATUS_PUBLISHED = "published"
POST_STATUS_ARCHIVED = "archived"
POST_STATUSES = (POST_STATUS_DRAFT, POST_STATUS_PUBLISHED, POST_STATUS_ARCHIVED)


class Post(Base):
    """Primary content entity produced by users.

    Only ``published`` posts accept likes. ``likes_count`` mirrors the number
    of ``post_like`` rows and ``comments_count`` the number of non-deleted
    comments on the post.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'archived')", name="ck_post_status"
        ),
        Index("ix_post_author_id_created_at", "author_id", "created_at"),
        Index("ix_post_status_published_at", "status", "published_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Lowercased, trimmed tag list.
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    featured_image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(Text, nullable=False, default=POST_STATUS_DRAFT)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Minutes, at 200 words per minute.
    reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")

    @property
    def is_published(self) -> bool:
        """Return True when the post is visible and likeable."""
        return self.status == POST_STATUS_PUBLISHED
