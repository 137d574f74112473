"""Time-limited in-memory cache of stored content overrides per page."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from backend.services.content_service import get_content_map

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from backend.content.defaults import ContentDefaults

logger = logging.getLogger(__name__)


class ContentCache:
    """Cache stored override maps with automatic expiry.

    Safe under asyncio's single-threaded model: reads and writes have no await
    points between check and mutation.
    """

    def __init__(
        self, ttl_seconds: float = 60, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[dict[str, str], float]] = {}

    def get(self, page: str) -> dict[str, str] | None:
        """Return a copy of the cached map for ``page``, or None if missing or expired."""
        entry = self._entries.get(page)
        if entry is None:
            return None
        mapping, stored_at = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[page]
            return None
        return dict(mapping)

    def put(self, page: str, mapping: Mapping[str, str]) -> None:
        self._entries[page] = (dict(mapping), self._clock())

    def clear(self) -> None:
        """Drop every cached page."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


async def get_stored_content(
    session: AsyncSession, cache: ContentCache, page: str
) -> dict[str, str]:
    """Stored overrides for ``page``, served from cache when fresh."""
    cached = cache.get(page)
    if cached is not None:
        return cached
    stored = await get_content_map(session, page)
    cache.put(page, stored)
    return stored


async def get_page_content(
    session: AsyncSession,
    cache: ContentCache,
    defaults: ContentDefaults,
    page: str,
) -> dict[str, str]:
    """Resolved content map for a page: stored values merged over defaults.

    Empty stored values fall back to the default. A database failure is
    logged and the defaults are served instead.
    """
    try:
        stored = await get_stored_content(session, cache, page)
    except SQLAlchemyError as exc:
        logger.error("Failed to load stored content for %s, serving defaults: %s", page, exc)
        stored = {}
    resolved = defaults.flat(page)
    for key, value in stored.items():
        if value:
            resolved[key] = value
    return resolved
