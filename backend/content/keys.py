"""Content key schema: dot-namespaced ``<page>.<section>.<field>`` identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Page(StrEnum):
    """Editable site pages."""

    HOME = "home"
    SERVICES = "services"
    TEAM = "team"
    SPEAKERS = "speakers"
    WORKSHOPS = "workshops"
    CONTACT = "contact"
    FOOTER = "footer"


PAGE_IDS = frozenset(p.value for p in Page)


@dataclass(frozen=True, slots=True)
class ContentKey:
    """A parsed content key.

    ``field`` is everything after the second dot, so field names may themselves
    contain dots. Keys are stable identifiers; renaming one orphans stored
    overrides.
    """

    page: str
    section: str
    field: str

    @property
    def namespace(self) -> str:
        return f"{self.page}.{self.section}"

    def belongs_to(self, page: str) -> bool:
        return self.page == page

    def __str__(self) -> str:
        return f"{self.page}.{self.section}.{self.field}"


def parse_key(key: str) -> ContentKey:
    """Split a full key into page, section and field.

    Raises ``ValueError`` when any of the three parts is missing.
    """
    page, _, rest = key.partition(".")
    section, _, field = rest.partition(".")
    if not page or not section or not field:
        msg = f"Invalid content key '{key}': expected <page>.<section>.<field>"
        raise ValueError(msg)
    return ContentKey(page=page, section=section, field=field)


def make_key(page: str, section: str, field: str) -> str:
    """Join key parts into the flat string form."""
    return str(ContentKey(page=page, section=section, field=field))


def page_of(key: str) -> str:
    """Return the page segment of a key without full validation."""
    return key.split(".", 1)[0]
