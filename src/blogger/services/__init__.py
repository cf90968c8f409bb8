"""Business logic services for the Blogger application."""

from .relationships import (
    FollowToggle,
    LikeToggle,
    RelationKind,
    ToggleResult,
    toggle,
    toggle_comment_like,
    toggle_follow,
    toggle_post_like,
)

__all__ = [
    "FollowToggle",
    "LikeToggle",
    "RelationKind",
    "ToggleResult",
    "toggle",
    "toggle_comment_like",
    "toggle_follow",
    "toggle_post_like",
]
