"""Authentication endpoints for the Blogger API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from blogger.core.security import create_access_token
from blogger.schemas import LoginRequest, PrivateUserResponse, RegisterRequest, TokenResponse
from blogger.services import users as user_service

from ..dependencies import CurrentUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: SessionDep) -> TokenResponse:
    """Create an account and return an access token for it."""
    user = user_service.register_user(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
    )
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=PrivateUserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: SessionDep) -> TokenResponse:
    """Exchange a username or email and password for an access token."""
    user = user_service.authenticate(db, payload.identifier, payload.password)
    if user is None:
        logger.info("Failed login for %s", payload.identifier)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=PrivateUserResponse.model_validate(user),
    )


@router.get("/me", response_model=PrivateUserResponse)
async def me(current_user: CurrentUserDep) -> PrivateUserResponse:
    """Return the authenticated user's own profile."""
    return PrivateUserResponse.model_validate(current_user)
