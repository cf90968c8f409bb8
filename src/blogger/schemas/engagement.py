"""Schemas for follow and like toggles and engagement reads."""
from __future__ import annotations

from .common import APIModel
from .user import UserSummary


class FollowToggleResponse(APIModel):
    """Authoritative follow state after a toggle."""

    is_following: bool
    followers_count: int
    following_count: int


class FollowStatusResponse(APIModel):
    """Whether the viewer follows a user."""

    is_following: bool


class LikeToggleResponse(APIModel):
    """Authoritative like state after a toggle."""

    is_liked: bool
    likes_count: int


class LikersResponse(APIModel):
    """Users who liked a post or comment, in like order."""

    users: list[UserSummary]
    total: int


class LikesReceivedResponse(APIModel):
    """Likes received across a user's published posts."""

    user_id: int
    total_likes: int
