"""Like endpoints for posts and comments."""

from __future__ import annotations

from fastapi import APIRouter

from blogger.schemas import (
    LikersResponse,
    LikesReceivedResponse,
    LikeToggleResponse,
    Pagination,
    PostListResponse,
    PostResponse,
    UserSummary,
)
from blogger.services import likes as like_service
from blogger.services.relationships import toggle_comment_like, toggle_post_like

from ..dependencies import CurrentUserDep, PageDep, SessionDep

router = APIRouter(prefix="/likes", tags=["likes"])


@router.post("/post/{post_id}", response_model=LikeToggleResponse)
async def like_post(
    post_id: int, current_user: CurrentUserDep, db: SessionDep
) -> LikeToggleResponse:
    """Like a published post, or unlike it if already liked."""
    result = toggle_post_like(db, current_user.id, post_id)
    return LikeToggleResponse(is_liked=result.is_liked, likes_count=result.likes_count)


@router.get("/post/{post_id}/users", response_model=LikersResponse)
async def post_likers(post_id: int, db: SessionDep) -> LikersResponse:
    """List users who liked a post, in like order."""
    users = like_service.post_likers(db, post_id)
    return LikersResponse(users=[UserSummary.model_validate(u) for u in users], total=len(users))


@router.post("/comment/{comment_id}", response_model=LikeToggleResponse)
async def like_comment(
    comment_id: int, current_user: CurrentUserDep, db: SessionDep
) -> LikeToggleResponse:
    """Like a comment, or unlike it if already liked."""
    result = toggle_comment_like(db, current_user.id, comment_id)
    return LikeToggleResponse(is_liked=result.is_liked, likes_count=result.likes_count)


@router.get("/comment/{comment_id}/users", response_model=LikersResponse)
async def comment_likers(comment_id: int, db: SessionDep) -> LikersResponse:
    """List users who liked a comment, in like order."""
    users = like_service.comment_likers(db, comment_id)
    return LikersResponse(users=[UserSummary.model_validate(u) for u in users], total=len(users))


@router.get("/user/{user_id}/posts", response_model=PostListResponse)
async def liked_posts(user_id: int, db: SessionDep, paging: PageDep) -> PostListResponse:
    """List published posts liked by ``user_id``."""
    posts, total = like_service.liked_posts(db, user_id, page=paging.page, limit=paging.limit)
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/user/{user_id}/count", response_model=LikesReceivedResponse)
async def likes_received(user_id: int, db: SessionDep) -> LikesReceivedResponse:
    """Return the likes received across ``user_id``'s published posts."""
    return LikesReceivedResponse(
        user_id=user_id, total_likes=like_service.total_likes_received(db, user_id)
    )
