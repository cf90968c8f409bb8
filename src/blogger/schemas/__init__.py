"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
Responses are emitted with camelCase keys.
"""

from .comment import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentThread,
    CommentUpdate,
)
from .common import Message, Pagination
from .engagement import (
    FollowStatusResponse,
    FollowToggleResponse,
    LikersResponse,
    LikesReceivedResponse,
    LikeToggleResponse,
)
from .post import PostCreate, PostListResponse, PostResponse, PostUpdate
from .user import (
    LoginRequest,
    PrivateUserResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
    UserListResponse,
    UserResponse,
    UserSummary,
)

__all__ = [
    "CommentCreate", "CommentListResponse", "CommentResponse", "CommentThread", "CommentUpdate",
    "Message", "Pagination",
    "FollowStatusResponse", "FollowToggleResponse", "LikersResponse", "LikesReceivedResponse",
    "LikeToggleResponse",
    "PostCreate", "PostListResponse", "PostResponse", "PostUpdate",
    "LoginRequest", "PrivateUserResponse", "ProfileUpdateRequest", "RegisterRequest",
    "TokenResponse", "UserListResponse", "UserResponse", "UserSummary",
]
