"""Public page content endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_content_cache, get_defaults, get_page, get_session
from backend.content.composer import compose_page
from backend.content.defaults import ContentDefaults
from backend.content.keys import Page
from backend.schemas.content import PageContentResponse, PagePreviewResponse
from backend.services.content_cache import ContentCache, get_page_content

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/{page}", response_model=PageContentResponse)
async def get_content(
    page: Annotated[Page, Depends(get_page)],
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[ContentCache, Depends(get_content_cache)],
    defaults: Annotated[ContentDefaults, Depends(get_defaults)],
) -> PageContentResponse:
    """Resolved content for a page. Never fails for missing or broken overrides."""
    content = await get_page_content(session, cache, defaults, page)
    return PageContentResponse(page=page.value, content=content)


@router.get("/{page}/preview", response_model=PagePreviewResponse)
async def get_preview(
    page: Annotated[Page, Depends(get_page)],
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[ContentCache, Depends(get_content_cache)],
    defaults: Annotated[ContentDefaults, Depends(get_defaults)],
) -> PagePreviewResponse:
    """Static composition of the published page."""
    content = await get_page_content(session, cache, defaults, page)
    preview = compose_page(page, content, content, defaults)
    return PagePreviewResponse.from_preview(preview)
