"""Follow graph endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from blogger.schemas import (
    FollowStatusResponse,
    FollowToggleResponse,
    Pagination,
    UserListResponse,
    UserSummary,
)
from blogger.services import follows as follow_service
from blogger.services.relationships import toggle_follow

from ..dependencies import CurrentUserDep, PageDep, SessionDep

router = APIRouter(prefix="/follows", tags=["follows"])


@router.get("/suggestions", response_model=list[UserSummary])
async def get_suggestions(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(10, ge=1, le=50),
) -> list[UserSummary]:
    """Suggest popular accounts the viewer does not follow yet."""
    users = follow_service.suggestions(db, current_user.id, limit=limit)
    return [UserSummary.model_validate(u) for u in users]


@router.get("/mutual/{user_id}", response_model=list[UserSummary])
async def get_mutual(
    user_id: int, current_user: CurrentUserDep, db: SessionDep
) -> list[UserSummary]:
    """List the viewer's followers who also follow ``user_id``."""
    users = follow_service.mutual_followers(db, current_user.id, user_id)
    return [UserSummary.model_validate(u) for u in users]


@router.post("/{user_id}", response_model=FollowToggleResponse)
async def toggle(
    user_id: int, current_user: CurrentUserDep, db: SessionDep
) -> FollowToggleResponse:
    """Follow ``user_id``, or unfollow if already following."""
    result = toggle_follow(db, current_user.id, user_id)
    return FollowToggleResponse(
        is_following=result.is_following,
        followers_count=result.followers_count,
        following_count=result.following_count,
    )


@router.get("/{user_id}/status", response_model=FollowStatusResponse)
async def get_status(
    user_id: int, current_user: CurrentUserDep, db: SessionDep
) -> FollowStatusResponse:
    """Return whether the viewer follows ``user_id``."""
    return FollowStatusResponse(
        is_following=follow_service.is_following(db, current_user.id, user_id)
    )


@router.get("/{user_id}/followers", response_model=UserListResponse)
async def get_followers(user_id: int, db: SessionDep, paging: PageDep) -> UserListResponse:
    """List the accounts following ``user_id``."""
    users, total = follow_service.list_followers(db, user_id, page=paging.page, limit=paging.limit)
    return UserListResponse(
        users=[UserSummary.model_validate(u) for u in users],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/{user_id}/following", response_model=UserListResponse)
async def get_following(user_id: int, db: SessionDep, paging: PageDep) -> UserListResponse:
    """List the accounts ``user_id`` follows."""
    users, total = follow_service.list_following(db, user_id, page=paging.page, limit=paging.limit)
    return UserListResponse(
        users=[UserSummary.model_validate(u) for u in users],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )
