"""Comment endpoints for the Blogger API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from blogger.schemas import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentThread,
    CommentUpdate,
    LikeToggleResponse,
    Message,
    Pagination,
)
from blogger.services import comments as comment_service
from blogger.services.relationships import toggle_comment_like

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}", response_model=CommentListResponse)
async def post_comments(
    post_id: int,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> CommentListResponse:
    """List a post's top-level comments, newest first, with their replies."""
    comments, total = comment_service.list_post_comments(db, post_id, page=page, limit=limit)
    return CommentListResponse(
        comments=[CommentThread.model_validate(c) for c in comments],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate, current_user: CurrentUserDep, db: SessionDep
) -> CommentResponse:
    """Comment on a post, or reply to one of its comments."""
    comment = comment_service.create_comment(
        db,
        current_user.id,
        payload.post_id,
        payload.content,
        payload.parent_comment_id,
    )
    return CommentResponse.model_validate(comment)


@router.get("/{comment_id}", response_model=CommentThread)
async def get_comment(comment_id: int, db: SessionDep) -> CommentThread:
    """Return a comment with its replies."""
    return CommentThread.model_validate(comment_service.get_comment(db, comment_id))


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int, payload: CommentUpdate, current_user: CurrentUserDep, db: SessionDep
) -> CommentResponse:
    """Edit a live comment owned by the current user."""
    comment = comment_service.update_comment(db, current_user.id, comment_id, payload.content)
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", response_model=Message)
async def delete_comment(comment_id: int, current_user: CurrentUserDep, db: SessionDep) -> Message:
    """Soft-delete a comment owned by the current user."""
    comment_service.soft_delete_comment(db, current_user.id, comment_id)
    return Message(message="Comment deleted successfully")


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
async def like_comment(
    comment_id: int, current_user: CurrentUserDep, db: SessionDep
) -> LikeToggleResponse:
    """Like a comment, or unlike it if already liked."""
    result = toggle_comment_like(db, current_user.id, comment_id)
    return LikeToggleResponse(is_liked=result.is_liked, likes_count=result.likes_count)
