"""User profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from blogger.schemas import (
    Pagination,
    PrivateUserResponse,
    ProfileUpdateRequest,
    UserListResponse,
    UserResponse,
    UserSummary,
)
from blogger.services import follows as follow_service
from blogger.services import users as user_service

from ..dependencies import CurrentUserDep, OptionalUserDep, PageDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/profile", response_model=PrivateUserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PrivateUserResponse:
    """Update the authenticated user's profile fields."""
    user = user_service.update_profile(db, current_user, payload.model_dump(exclude_unset=True))
    return PrivateUserResponse.model_validate(user)


@router.get("/{username}", response_model=UserResponse)
async def get_profile(username: str, db: SessionDep, viewer: OptionalUserDep) -> UserResponse:
    """Return a public profile; ``isFollowing`` is set for authenticated viewers."""
    user = user_service.get_user_by_username(db, username)
    response = UserResponse.model_validate(user)
    if viewer is not None and viewer.id != user.id:
        response.is_following = follow_service.is_following(db, viewer.id, user.id)
    return response


@router.get("/{username}/followers", response_model=UserListResponse)
async def get_followers(username: str, db: SessionDep, paging: PageDep) -> UserListResponse:
    """List the accounts following ``username``."""
    user = user_service.get_user_by_username(db, username)
    users, total = follow_service.list_followers(db, user.id, page=paging.page, limit=paging.limit)
    return UserListResponse(
        users=[UserSummary.model_validate(u) for u in users],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/{username}/following", response_model=UserListResponse)
async def get_following(username: str, db: SessionDep, paging: PageDep) -> UserListResponse:
    """List the accounts ``username`` follows."""
    user = user_service.get_user_by_username(db, username)
    users, total = follow_service.list_following(db, user.id, page=paging.page, limit=paging.limit)
    return UserListResponse(
        users=[UserSummary.model_validate(u) for u in users],
        pagination=Pagination.build(paging.page, paging.limit, total),
    )
