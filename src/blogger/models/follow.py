"""Directed follow edges between users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from blogger.db.session import Base
from blogger.db.time import utcnow


class Follow(Base):
    """``follower_id`` follows ``followee_id``.

    The composite primary key makes membership a set: the same pair can never
    be recorded twice.
    """

    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_follow_not_self"),
        Index("ix_follow_followee_id", "followee_id"),
    )

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
