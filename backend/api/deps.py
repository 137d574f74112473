"""Shared API dependencies: DB session, settings, content defaults, admin auth."""

from __future__ import annotations

import secrets
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import Settings
from backend.content.defaults import ContentDefaults
from backend.content.keys import Page
from backend.services.content_cache import ContentCache

security = HTTPBearer(auto_error=False)

ADMIN_IDENTITY = "admin"


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


def get_defaults(request: Request) -> ContentDefaults:
    """Get the default content table loaded at startup."""
    defaults: ContentDefaults = request.app.state.content_defaults
    return defaults


def get_content_cache(request: Request) -> ContentCache:
    cache: ContentCache = request.app.state.content_cache
    return cache


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


def get_page(page: str) -> Page:
    """Path parameter for a page id. Raises 404 for pages that do not exist."""
    try:
        return Page(page)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown page '{page}'"
        ) from None


async def require_admin(
    settings: Annotated[Settings, Depends(get_settings)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
) -> str:
    """Require the admin bearer token. Returns the identity recorded on writes."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not secrets.compare_digest(
        credentials.credentials.encode("utf-8"), settings.admin_token.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return ADMIN_IDENTITY
