"""Modification tracking for an editing session.

The original snapshot is captured once when content is loaded and never
changes afterwards; edits produce a new content map each time. A key is
modified when its current raw text differs from the snapshot's, so two
encodings of the same list that differ only in formatting count as a change.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from backend.content.codec import codec_for
from backend.content.keys import parse_key

logger = logging.getLogger(__name__)


def is_modified(key: str, content: Mapping[str, str], original: Mapping[str, str]) -> bool:
    """True when the current value of ``key`` differs from the snapshot.

    A key absent from both maps is unmodified; a key present on only one side
    is modified.
    """
    return content.get(key) != original.get(key)


def modified_keys(content: Mapping[str, str], original: Mapping[str, str]) -> list[str]:
    """All keys whose value differs between the two maps, sorted."""
    keys = content.keys() | original.keys()
    return sorted(key for key in keys if is_modified(key, content, original))


class EditorSession:
    """Holds the working content map and the snapshot it is compared against."""

    def __init__(self, loaded: Mapping[str, str]) -> None:
        self._original: Mapping[str, str] = MappingProxyType(dict(loaded))
        self._content: Mapping[str, str] = MappingProxyType(dict(loaded))

    @property
    def original(self) -> Mapping[str, str]:
        return self._original

    @property
    def content(self) -> Mapping[str, str]:
        return self._content

    def on_content_change(self, key: str, value: str) -> None:
        """Record an edit by replacing the content map with an updated copy."""
        parse_key(key)
        self._content = MappingProxyType({**self._content, key: value})

    def set_list(self, key: str, items: Sequence[Any]) -> None:
        codec = codec_for(key)
        if codec is None:
            msg = f"'{key}' is not a list field"
            raise ValueError(msg)
        self.on_content_change(key, codec.encode(items))

    def get_list(self, key: str, fallback: Sequence[Any] = ()) -> list[Any]:
        codec = codec_for(key)
        if codec is None:
            msg = f"'{key}' is not a list field"
            raise ValueError(msg)
        return codec.decode(self._content.get(key), fallback)

    def is_modified(self, key: str) -> bool:
        return is_modified(key, self._content, self._original)

    def modified_keys(self) -> list[str]:
        return modified_keys(self._content, self._original)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.modified_keys())

    def pending_updates(self) -> list[tuple[str, str, str, str]]:
        """Changed keys as ``(page, section, field, value)`` rows ready to save.

        Keys removed from the working map have no value to save and are skipped.
        """
        rows: list[tuple[str, str, str, str]] = []
        for key in self.modified_keys():
            if key not in self._content:
                continue
            parsed = parse_key(key)
            rows.append((parsed.page, parsed.section, parsed.field, self._content[key]))
        return rows

    def discard(self) -> None:
        """Drop all edits, returning to the snapshot."""
        logger.debug("Discarding %d unsaved edits", len(self.modified_keys()))
        self._content = self._original

    def mark_saved(self) -> None:
        """Adopt the working map as the new snapshot after a successful save."""
        self._original = self._content
