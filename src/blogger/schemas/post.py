"""Post-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import APIModel, Pagination
from .user import UserSummary


class PostCreate(APIModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=50_000)
    tags: list[str] = Field(default_factory=list)
    status: Literal["draft", "published"] = "draft"
    excerpt: str | None = Field(None, max_length=300)
    featured_image: str | None = None


class PostUpdate(APIModel):
    """Schema for partial post updates; omitted fields are left alone."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1, max_length=50_000)
    tags: list[str] | None = None
    status: Literal["draft", "published", "archived"] | None = None
    excerpt: str | None = Field(None, max_length=300)
    featured_image: str | None = None


class PostResponse(APIModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    excerpt: str
    author: UserSummary
    tags: list[str]
    featured_image: str
    status: str
    published_at: datetime | None
    likes_count: int
    comments_count: int
    views: int
    reading_time: int
    created_at: datetime
    updated_at: datetime
    is_liked: bool | None = None


class PostListResponse(APIModel):
    """Paginated list of posts."""

    posts: list[PostResponse]
    pagination: Pagination
