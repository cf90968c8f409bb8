"""Main entry point for the Blogger application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from blogger.api.v1 import (
    auth_router,
    comments_router,
    follows_router,
    likes_router,
    posts_router,
    register_error_handlers,
    users_router,
)
from blogger.core.log import configure_logging
from blogger.core.settings import settings
from blogger.db.session import create_tables

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Social blogging API: posts, follows, likes and threaded comments",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_error_handlers(app)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(follows_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(likes_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    if settings.create_tables_on_startup:
        create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Social blogging API: posts, follows, likes and threaded comments",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("blogger.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
