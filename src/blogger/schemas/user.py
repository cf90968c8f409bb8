"""User-related Pydantic schemas."""
from __future__ import annotations

import re
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from .common import APIModel, Pagination

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


class RegisterRequest(APIModel):
    """Schema for account registration."""

    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames may contain only letters, numbers and underscores."""
        if not _USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v


class LoginRequest(APIModel):
    """Schema for login submissions; ``identifier`` is a username or email."""

    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(APIModel):
    """Schema for updating user profile information."""

    full_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=500)
    avatar: str | None = None
    website: str | None = None
    location: str | None = Field(None, max_length=100)


class UserSummary(APIModel):
    """Compact user representation embedded in posts, comments and lists."""

    id: int
    username: str
    full_name: str
    avatar: str
    is_verified: bool


class UserResponse(UserSummary):
    """Public profile with counters."""

    bio: str
    website: str
    location: str
    followers_count: int
    following_count: int
    posts_count: int
    created_at: datetime
    is_following: bool | None = None


class PrivateUserResponse(UserResponse):
    """Profile returned to its owner."""

    email: str


class TokenResponse(APIModel):
    """Access token plus the authenticated user."""

    access_token: str
    token_type: str = "bearer"
    user: PrivateUserResponse


class UserListResponse(APIModel):
    """Paginated list of users."""

    users: list[UserSummary]
    pagination: Pagination
