"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    comments_router,
    follows_router,
    likes_router,
    posts_router,
    users_router,
)
from .errors import register_error_handlers

__all__ = [
    "auth_router",
    "comments_router",
    "follows_router",
    "likes_router",
    "posts_router",
    "register_error_handlers",
    "users_router",
]
