"""Content store: stored overrides, change history and rollback.

Writes are last-writer-wins; there is no version check between an editor's
snapshot and the stored row. Every value change is recorded in
``website_content_history``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select, update

from backend.content.keys import PAGE_IDS, make_key, parse_key
from backend.models.content import WebsiteContent, WebsiteContentHistory
from backend.services.datetime_service import format_datetime, timestamp

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

    from backend.content.defaults import ContentDefaults
    from backend.services.content_cache import ContentCache

logger = logging.getLogger(__name__)

# (page, section, field, value)
ContentRow = tuple[str, str, str, str]


class HistoryAction(StrEnum):
    UPDATE = "update"
    ROLLBACK = "rollback"


def validate_row(page: str, section: str, field: str) -> str:
    """Check a row's key parts and return the full content key.

    Raises ``ValueError`` for an unknown page or a malformed key.
    """
    if page not in PAGE_IDS:
        msg = f"Unknown page '{page}'"
        raise ValueError(msg)
    key = make_key(page, section, field)
    parsed = parse_key(key)
    if parsed.section != section:
        msg = f"Section '{section}' must not contain '.'"
        raise ValueError(msg)
    return key


def _invalidate(cache: ContentCache | None) -> None:
    if cache is not None:
        cache.clear()


async def _find(
    session: AsyncSession, page: str, section: str, field: str
) -> WebsiteContent | None:
    stmt = select(WebsiteContent).where(
        WebsiteContent.page == page,
        WebsiteContent.section == section,
        WebsiteContent.content_key == field,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def _history(
    row: WebsiteContent,
    old_value: str | None,
    new_value: str,
    changed_by: str | None,
    action: HistoryAction,
    changed_at: str,
) -> WebsiteContentHistory:
    return WebsiteContentHistory(
        content_id=row.id,
        page=row.page,
        section=row.section,
        content_key=row.content_key,
        old_value=old_value,
        new_value=new_value,
        changed_at=changed_at,
        changed_by=changed_by,
        action=action.value,
    )


async def list_content(session: AsyncSession, page: str | None = None) -> list[WebsiteContent]:
    """Stored rows ordered by page, section and key."""
    stmt = select(WebsiteContent)
    if page is not None:
        stmt = stmt.where(WebsiteContent.page == page)
    stmt = stmt.order_by(WebsiteContent.page, WebsiteContent.section, WebsiteContent.content_key)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_content_map(session: AsyncSession, page: str | None = None) -> dict[str, str]:
    """Flat key -> stored value map."""
    return {row.key: row.content_value for row in await list_content(session, page)}


async def save_content(
    session: AsyncSession,
    updates: Iterable[ContentRow],
    updated_by: str | None = None,
    cache: ContentCache | None = None,
) -> list[WebsiteContent]:
    """Upsert each row and record history for values that changed."""
    rows = list(updates)
    for page, section, field, _ in rows:
        validate_row(page, section, field)

    saved: list[WebsiteContent] = []
    changed = 0
    for page, section, field, value in rows:
        now = timestamp()
        existing = await _find(session, page, section, field)
        if existing is None:
            existing = WebsiteContent(
                page=page,
                section=section,
                content_key=field,
                content_value=value,
                updated_at=now,
                updated_by=updated_by,
            )
            session.add(existing)
            await session.flush()
            session.add(_history(existing, None, value, updated_by, HistoryAction.UPDATE, now))
            changed += 1
        else:
            if existing.content_value != value:
                session.add(
                    _history(
                        existing,
                        existing.content_value,
                        value,
                        updated_by,
                        HistoryAction.UPDATE,
                        now,
                    )
                )
                existing.content_value = value
                changed += 1
            existing.updated_at = now
            existing.updated_by = updated_by
        saved.append(existing)

    await session.commit()
    _invalidate(cache)
    logger.info("Saved %d content rows (%d changed) by %s", len(saved), changed, updated_by)
    return saved


async def create_content(
    session: AsyncSession,
    row: ContentRow,
    updated_by: str | None = None,
    cache: ContentCache | None = None,
) -> WebsiteContent | None:
    """Insert a row if its key is not stored yet; returns None when it already exists."""
    page, section, field, value = row
    validate_row(page, section, field)
    if await _find(session, page, section, field) is not None:
        return None
    item = WebsiteContent(
        page=page,
        section=section,
        content_key=field,
        content_value=value,
        updated_at=timestamp(),
        updated_by=updated_by,
    )
    session.add(item)
    await session.commit()
    _invalidate(cache)
    return item


async def reseed_content(
    session: AsyncSession,
    defaults: ContentDefaults,
    updated_by: str | None = None,
    cache: ContentCache | None = None,
) -> int:
    """Replace every stored row with the default table. History is kept."""
    await session.execute(update(WebsiteContentHistory).values(content_id=None))
    await session.execute(delete(WebsiteContent))
    now = timestamp()
    rows = defaults.rows()
    session.add_all(
        WebsiteContent(
            page=page,
            section=section,
            content_key=field,
            content_value=value,
            updated_at=now,
            updated_by=updated_by,
        )
        for page, section, field, value in rows
    )
    await session.commit()
    _invalidate(cache)
    logger.warning("Reseeded website content with %d default rows", len(rows))
    return len(rows)


async def seed_missing_defaults(
    session: AsyncSession,
    defaults: ContentDefaults,
    pages: Sequence[str] | None = None,
    cache: ContentCache | None = None,
) -> int:
    """Insert defaults for keys not stored yet; existing rows are left untouched."""
    target_pages = list(pages) if pages is not None else defaults.pages()
    stored = await get_content_map(session)
    now = timestamp()
    inserted = 0
    for page in target_pages:
        for row_page, section, field, value in defaults.rows(page):
            if make_key(row_page, section, field) in stored:
                continue
            session.add(
                WebsiteContent(
                    page=row_page,
                    section=section,
                    content_key=field,
                    content_value=value,
                    updated_at=now,
                    updated_by="system",
                )
            )
            inserted += 1
    if inserted:
        await session.commit()
        _invalidate(cache)
        logger.info("Seeded %d missing content defaults", inserted)
    return inserted


async def list_history(
    session: AsyncSession,
    page: str | None = None,
    limit: int = 50,
    offset: int = 0,
    since: datetime | None = None,
) -> tuple[list[WebsiteContentHistory], int]:
    """History entries newest first, plus the total matching count."""
    conditions = []
    if page is not None:
        conditions.append(WebsiteContentHistory.page == page)
    if since is not None:
        conditions.append(WebsiteContentHistory.changed_at >= format_datetime(since))

    count_stmt = select(func.count()).select_from(WebsiteContentHistory).where(*conditions)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(WebsiteContentHistory)
        .where(*conditions)
        .order_by(WebsiteContentHistory.changed_at.desc(), WebsiteContentHistory.id.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def rollback(
    session: AsyncSession,
    history_id: int,
    changed_by: str | None = None,
    cache: ContentCache | None = None,
) -> WebsiteContent | None:
    """Restore the value a history entry replaced.

    Returns None for an unknown entry. Raises ``ValueError`` when the entry
    recorded a first write and so has no previous value.
    """
    entry = await session.get(WebsiteContentHistory, history_id)
    if entry is None:
        return None
    if entry.old_value is None:
        msg = f"History entry {history_id} has no previous value to restore"
        raise ValueError(msg)

    now = timestamp()
    row = await _find(session, entry.page, entry.section, entry.content_key)
    if row is None:
        row = WebsiteContent(
            page=entry.page,
            section=entry.section,
            content_key=entry.content_key,
            content_value=entry.old_value,
            updated_at=now,
            updated_by=changed_by,
        )
        session.add(row)
        await session.flush()
        current: str | None = None
    else:
        current = row.content_value
        row.content_value = entry.old_value
        row.updated_at = now
        row.updated_by = changed_by

    session.add(
        _history(row, current, entry.old_value, changed_by, HistoryAction.ROLLBACK, now)
    )
    await session.commit()
    _invalidate(cache)
    logger.info("Rolled back %s to history entry %d", row.key, history_id)
    return row
