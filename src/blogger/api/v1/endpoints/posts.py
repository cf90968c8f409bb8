"""Post endpoints for the Blogger API."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from fastapi import APIRouter, Query, status
from sqlalchemy.orm import Session

from blogger.models import Post, User
from blogger.schemas import (
    Message,
    Pagination,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from blogger.services import posts as post_service

from ..dependencies import CurrentUserDep, OptionalUserDep, PageDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


def _render(db: Session, posts: Sequence[Post], viewer: User | None) -> list[PostResponse]:
    liked = (
        post_service.liked_post_ids(db, viewer.id, [p.id for p in posts])
        if viewer is not None
        else set()
    )
    rendered = []
    for post in posts:
        item = PostResponse.model_validate(post)
        if viewer is not None:
            item.is_liked = post.id in liked
        rendered.append(item)
    return rendered


@router.get("/", response_model=PostListResponse)
async def list_posts(
    db: SessionDep,
    paging: PageDep,
    viewer: OptionalUserDep,
    tag: str | None = None,
    author: str | None = None,
    sort_by: Literal["published_at", "created_at", "likes_count", "views"] = Query(
        "published_at", alias="sortBy"
    ),
    order: Literal["asc", "desc"] = "desc",
) -> PostListResponse:
    """List published posts with optional tag and author filters."""
    posts, total = post_service.list_published(
        db,
        page=paging.page,
        limit=paging.limit,
        tag=tag,
        author=author,
        sort_by=sort_by,
        order=order,
    )
    return PostListResponse(
        posts=_render(db, posts, viewer),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/trending", response_model=list[PostResponse])
async def trending(
    db: SessionDep,
    viewer: OptionalUserDep,
    limit: int = Query(10, ge=1, le=50),
    timeframe: int | None = Query(None, ge=1, description="Window in days"),
) -> list[PostResponse]:
    """Return the most engaged posts published within ``timeframe`` days."""
    posts = post_service.list_trending(db, limit=limit, days=timeframe)
    return _render(db, posts, viewer)


@router.get("/feed", response_model=PostListResponse)
async def feed(db: SessionDep, paging: PageDep, current_user: CurrentUserDep) -> PostListResponse:
    """Return published posts from followed authors."""
    posts, total = post_service.list_feed(
        db, current_user.id, page=paging.page, limit=paging.limit
    )
    return PostListResponse(
        posts=_render(db, posts, current_user),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/user/{username}", response_model=PostListResponse)
async def user_posts(
    username: str,
    db: SessionDep,
    paging: PageDep,
    viewer: OptionalUserDep,
    post_status: Literal["draft", "published", "archived", "all"] = Query(
        "published", alias="status"
    ),
) -> PostListResponse:
    """List posts by ``username``, published ones by default."""
    posts, total = post_service.list_user_posts(
        db, username, status=post_status, page=paging.page, limit=paging.limit
    )
    return PostListResponse(
        posts=_render(db, posts, viewer),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: SessionDep, viewer: OptionalUserDep) -> PostResponse:
    """Return a single post and count the view."""
    post = post_service.view_post(db, post_id)
    return _render(db, [post], viewer)[0]


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate, current_user: CurrentUserDep, db: SessionDep
) -> PostResponse:
    """Create a post authored by the current user."""
    post = post_service.create_post(
        db,
        author_id=current_user.id,
        title=payload.title,
        content=payload.content,
        tags=payload.tags,
        status=payload.status,
        excerpt=payload.excerpt,
        featured_image=payload.featured_image,
    )
    return PostResponse.model_validate(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int, payload: PostUpdate, current_user: CurrentUserDep, db: SessionDep
) -> PostResponse:
    """Update a post owned by the current user."""
    post = post_service.update_post(
        db, current_user.id, post_id, payload.model_dump(exclude_unset=True)
    )
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=Message)
async def delete_post(post_id: int, current_user: CurrentUserDep, db: SessionDep) -> Message:
    """Delete a post owned by the current user, with its likes and comments."""
    post_service.delete_post(db, current_user.id, post_id)
    return Message(message="Post deleted successfully")
