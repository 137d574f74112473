"""Default content table: the fallback copy for every editable field.

The table is loaded once from ``defaults.toml`` (or an override file) and shared
read-only. List-valued fields are flattened to their stored JSON form so every
flat default is a string, exactly as an override would be stored.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from backend.content.codec import LIST_FIELDS, ContentValue, codec_for, read_value
from backend.content.keys import PAGE_IDS, make_key, parse_key

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).with_name("defaults.toml")


@dataclass(frozen=True)
class ContentDefaults:
    """Immutable flat key -> default value table."""

    table: Mapping[str, str]

    def __contains__(self, key: object) -> bool:
        return key in self.table

    def __len__(self) -> int:
        return len(self.table)

    def default_for(self, key: str) -> str:
        """Return the default for a key, or ``""`` for keys with no default."""
        return self.table.get(key, "")

    def fallback_for(self, key: str) -> list[Any]:
        """Decoded default list for a list-valued key (empty for other keys)."""
        codec = codec_for(key)
        if codec is None:
            return []
        return codec.decode(self.default_for(key), [])

    def resolve(self, key: str, content: Mapping[str, str]) -> str:
        """Stored value if present and non-empty, otherwise the default."""
        value = content.get(key)
        if value:
            return value
        return self.default_for(key)

    def value(self, key: str, content: Mapping[str, str]) -> ContentValue:
        return read_value(key, content, self)

    def keys(self, page: str | None = None) -> list[str]:
        if page is None:
            return list(self.table)
        prefix = f"{page}."
        return [key for key in self.table if key.startswith(prefix)]

    def flat(self, page: str | None = None) -> dict[str, str]:
        return {key: self.table[key] for key in self.keys(page)}

    def rows(self, page: str | None = None) -> list[tuple[str, str, str, str]]:
        """Default table as ``(page, section, field, value)`` rows, for seeding."""
        result: list[tuple[str, str, str, str]] = []
        for key in self.keys(page):
            parsed = parse_key(key)
            result.append((parsed.page, parsed.section, parsed.field, self.table[key]))
        return result

    def pages(self) -> list[str]:
        seen: dict[str, None] = {}
        for key in self.table:
            seen.setdefault(parse_key(key).page, None)
        return list(seen)


def _flatten_field(key: str, value: Any) -> str:
    codec = codec_for(key)
    if codec is not None:
        if not isinstance(value, list) or not value:
            msg = f"Default for list field '{key}' must be a non-empty array"
            raise ValueError(msg)
        return codec.encode(value)
    if isinstance(value, list):
        msg = f"Default for '{key}' is an array but the field is not list-valued"
        raise ValueError(msg)
    if not isinstance(value, str) or not value:
        msg = f"Default for '{key}' must be a non-empty string"
        raise ValueError(msg)
    return value


def build_defaults(data: Mapping[str, Any]) -> ContentDefaults:
    """Validate a parsed ``page > section > field`` document and flatten it.

    Raises ``ValueError`` for unknown pages, malformed tables, empty defaults or
    list fields whose shape does not match the list-field registry.
    """
    table: dict[str, str] = {}
    for page, sections in data.items():
        if page not in PAGE_IDS:
            msg = f"Unknown page '{page}' in content defaults"
            raise ValueError(msg)
        if not isinstance(sections, dict):
            msg = f"Page '{page}' must be a table of sections"
            raise ValueError(msg)
        for section, fields in sections.items():
            if not isinstance(fields, dict):
                msg = f"Section '{page}.{section}' must be a table of fields"
                raise ValueError(msg)
            for field_name, value in fields.items():
                key = make_key(page, section, field_name)
                table[key] = _flatten_field(key, value)

    missing = sorted(key for key in LIST_FIELDS if key not in table)
    if missing:
        msg = f"Content defaults missing list fields: {', '.join(missing)}"
        raise ValueError(msg)

    return ContentDefaults(table=MappingProxyType(table))


def load_defaults(path: Path | None = None) -> ContentDefaults:
    """Load the default content table from TOML.

    ``tomllib.TOMLDecodeError`` is a ``ValueError``, so a malformed file fails
    the same way as an invalid one.
    """
    source = path or DEFAULTS_PATH
    data = tomllib.loads(source.read_text(encoding="utf-8"))
    defaults = build_defaults(data)
    logger.info("Loaded %d content defaults from %s", len(defaults), source)
    return defaults
