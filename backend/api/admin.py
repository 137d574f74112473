"""Admin content management endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import (
    get_content_cache,
    get_defaults,
    get_page,
    get_session,
    require_admin,
)
from backend.content.composer import compose_page
from backend.content.defaults import ContentDefaults
from backend.content.keys import Page
from backend.schemas.content import (
    ContentItemInput,
    ContentItemResponse,
    ContentListResponse,
    ContentSaveResponse,
    DefaultsResponse,
    HistoryEntryResponse,
    HistoryListResponse,
    PagePreviewResponse,
    PreviewRequest,
    ReseedRequest,
    ReseedResponse,
    RollbackRequest,
    RollbackResponse,
)
from backend.services.content_cache import ContentCache
from backend.services.content_service import (
    create_content,
    list_content,
    list_history,
    reseed_content,
    rollback,
    save_content,
)
from backend.services.datetime_service import parse_datetime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/website-content", response_model=ContentListResponse)
async def get_website_content(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    _admin: Annotated[str, Depends(require_admin)],
    page: Page | None = None,
) -> ContentListResponse:
    """Stored content rows, optionally for one page."""
    rows = await list_content(session, page.value if page else None)
    response.headers["Cache-Control"] = "no-store"
    return ContentListResponse(items=[ContentItemResponse.model_validate(r) for r in rows])


@router.put("/website-content", response_model=ContentSaveResponse)
async def put_website_content(
    body: ContentItemInput | list[ContentItemInput],
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[ContentCache, Depends(get_content_cache)],
    admin: Annotated[str, Depends(require_admin)],
) -> ContentSaveResponse:
    """Save one item or a batch. Last writer wins."""
    items = body if isinstance(body, list) else [body]
    saved = await save_content(
        session, [item.as_row() for item in items], updated_by=admin, cache=cache
    )
    return ContentSaveResponse(
        saved=len(saved),
        items=[ContentItemResponse.model_validate(r) for r in saved],
    )


@router.post(
    "/website-content",
    response_model=ReseedResponse | ContentItemResponse,
)
async def post_website_content(
    body: ReseedRequest | ContentItemInput,
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[ContentCache, Depends(get_content_cache)],
    defaults: Annotated[ContentDefaults, Depends(get_defaults)],
    admin: Annotated[str, Depends(require_admin)],
) -> ReseedResponse | ContentItemResponse:
    """Reseed all content from defaults, or create a single missing item."""
    if isinstance(body, ReseedRequest):
        seeded = await reseed_content(session, defaults, updated_by=admin, cache=cache)
        return ReseedResponse(seeded=seeded)

    item = await create_content(session, body.as_row(), updated_by=admin, cache=cache)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Content '{body.page}.{body.section}.{body.content_key}' already exists",
        )
    response.status_code = status.HTTP_201_CREATED
    return ContentItemResponse.model_validate(item)


@router.get("/content-defaults", response_model=DefaultsResponse)
async def get_content_defaults(
    defaults: Annotated[ContentDefaults, Depends(get_defaults)],
    _admin: Annotated[str, Depends(require_admin)],
    page: Page | None = None,
) -> DefaultsResponse:
    """The default content table."""
    page_id = page.value if page else None
    return DefaultsResponse(page=page_id, content=defaults.flat(page_id))


@router.get("/content-history", response_model=HistoryListResponse)
async def get_content_history(
    session: Annotated[AsyncSession, Depends(get_session)],
    _admin: Annotated[str, Depends(require_admin)],
    page: Page | None = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    since: str | None = None,
) -> HistoryListResponse:
    """Change history, newest first."""
    since_dt = parse_datetime(since) if since else None
    entries, total = await list_history(
        session, page.value if page else None, limit=limit, offset=offset, since=since_dt
    )
    return HistoryListResponse(
        entries=[HistoryEntryResponse.model_validate(e) for e in entries],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/content-history", response_model=RollbackResponse)
async def rollback_content(
    body: RollbackRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[ContentCache, Depends(get_content_cache)],
    admin: Annotated[str, Depends(require_admin)],
) -> RollbackResponse:
    """Restore the value a history entry replaced."""
    item = await rollback(session, body.history_id, changed_by=admin, cache=cache)
    if item is None:
        raise HTTPException(status_code=404, detail="History entry not found")
    return RollbackResponse(
        history_id=body.history_id, item=ContentItemResponse.model_validate(item)
    )


@router.post("/preview/{page}", response_model=PagePreviewResponse)
async def preview_page(
    page: Annotated[Page, Depends(get_page)],
    body: PreviewRequest,
    defaults: Annotated[ContentDefaults, Depends(get_defaults)],
    _admin: Annotated[str, Depends(require_admin)],
) -> PagePreviewResponse:
    """Compose a page from an editor's working map, with modified flags."""
    preview = compose_page(
        page, body.content, body.original, defaults, editor_mode=body.editor_mode
    )
    logger.debug("Preview of %s has %d modified fields", page, len(preview.modified_keys()))
    return PagePreviewResponse.from_preview(preview)
