"""Structured-list codec: JSON-encoded record lists stored under a single content key.

A list-valued field is stored as one JSON array string. Decoding is total: any
missing, unparsable or wrongly-shaped value yields the caller's fallback list,
so one malformed override can never break a rendered page.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from backend.content.defaults import ContentDefaults

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LogoItem:
    name: str = ""
    src: str = ""


@dataclass(frozen=True)
class TeamMember:
    id: str = ""
    name: str = ""
    title: str = ""
    image: str = ""
    bio: str = ""
    linkedin: str | None = None
    twitter: str | None = None
    website: str | None = None


@dataclass(frozen=True)
class FooterLink:
    text: str = ""
    url: str = ""


@dataclass(frozen=True)
class FAQEntry:
    question: str = ""
    answer: str = ""


@dataclass(frozen=True)
class BudgetRange:
    range: str = ""
    description: str = ""


@dataclass(frozen=True)
class DeliveryOption:
    title: str = ""
    description: str = ""


@dataclass(frozen=True)
class ServiceOffering:
    id: str = ""
    image: str = ""
    title: str = ""
    description: str = ""


def record_to_json(item: Any) -> Any:
    """Convert a record to its JSON-ready form; optional fields left unset are omitted."""
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return {k: v for k, v in dataclasses.asdict(item).items() if v is not None}
    return item


def _record_factory(cls: type[T]) -> Callable[[Any], T | None]:
    """Build a lenient dict -> record converter for a dataclass type."""
    fields = dataclasses.fields(cls)  # type: ignore[arg-type]

    def convert(data: Any) -> T | None:
        if not isinstance(data, Mapping):
            return None
        kwargs: dict[str, Any] = {}
        for f in fields:
            value = data.get(f.name)
            if value is None:
                continue
            kwargs[f.name] = value if isinstance(value, str) else str(value)
        return cls(**kwargs)

    return convert


def _text_item(data: Any) -> str | None:
    return data if isinstance(data, str) else None


@dataclass(frozen=True)
class ListCodec(Generic[T]):
    """Encode/decode one entity shape stored as a JSON array.

    ``require_non_empty`` makes an empty stored array fall back to the defaults,
    for lists where rendering nothing would leave a visibly broken block.
    """

    tag: str
    record: Callable[[Any], T | None]
    require_non_empty: bool = False

    def decode(self, raw: str | None, fallback: Sequence[Any]) -> list[Any]:
        """Return the stored array as-is, or ``fallback`` if it is unusable.

        Elements are not validated individually.
        """
        if not raw:
            return list(fallback)
        try:
            parsed = json.loads(raw)
        except (ValueError, TypeError, RecursionError):
            logger.debug("Unparsable %s list, using defaults", self.tag)
            return list(fallback)
        if not isinstance(parsed, list):
            logger.debug("Stored %s value is not a list, using defaults", self.tag)
            return list(fallback)
        if self.require_non_empty and not parsed:
            return list(fallback)
        return parsed

    def encode(self, items: Sequence[Any]) -> str:
        """Serialize records (dataclasses, dicts or strings) to compact JSON."""
        return json.dumps(
            [record_to_json(item) for item in items],
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def records(self, raw: str | None, fallback: Sequence[Any]) -> list[T]:
        """Typed view of a decoded list; elements of the wrong shape are skipped."""
        typed = [r for r in map(self.record, self.decode(raw, fallback)) if r is not None]
        if not typed and self.require_non_empty:
            return [r for r in map(self.record, fallback) if r is not None]
        return typed


LOGOS: ListCodec[LogoItem] = ListCodec("logo", _record_factory(LogoItem))
TEAM_MEMBERS: ListCodec[TeamMember] = ListCodec("team-member", _record_factory(TeamMember))
FOOTER_LINKS: ListCodec[FooterLink] = ListCodec(
    "footer-link", _record_factory(FooterLink), require_non_empty=True
)
FAQ_ENTRIES: ListCodec[FAQEntry] = ListCodec("faq", _record_factory(FAQEntry))
BUDGET_RANGES: ListCodec[BudgetRange] = ListCodec("budget-range", _record_factory(BudgetRange))
DELIVERY_OPTIONS: ListCodec[DeliveryOption] = ListCodec(
    "delivery-option", _record_factory(DeliveryOption)
)
SERVICE_OFFERINGS: ListCodec[ServiceOffering] = ListCodec(
    "service-offering", _record_factory(ServiceOffering)
)
TEXT_ITEMS: ListCodec[str] = ListCodec("text", _text_item)

CODECS: dict[str, ListCodec[Any]] = {
    codec.tag: codec
    for codec in (
        LOGOS,
        TEAM_MEMBERS,
        FOOTER_LINKS,
        FAQ_ENTRIES,
        BUDGET_RANGES,
        DELIVERY_OPTIONS,
        SERVICE_OFFERINGS,
        TEXT_ITEMS,
    )
}

# Content keys whose value is a JSON-encoded list rather than plain text.
LIST_FIELDS: dict[str, ListCodec[Any]] = {
    "home.client-logos.logos": LOGOS,
    "home.navigate.budget_ranges": BUDGET_RANGES,
    "home.navigate.audience_types": TEXT_ITEMS,
    "home.navigate.delivery_options": DELIVERY_OPTIONS,
    "home.seo-content.industries_list": TEXT_ITEMS,
    "home.seo-content.topics_list": TEXT_ITEMS,
    "services.offerings.list": SERVICE_OFFERINGS,
    "team.members.list": TEAM_MEMBERS,
    "footer.quick-links.links": FOOTER_LINKS,
    "footer.industries.links": FOOTER_LINKS,
    "footer.for-speakers.links": FOOTER_LINKS,
}


def codec_for(key: str) -> ListCodec[Any] | None:
    """Return the codec for a list-valued key, or None for plain text keys."""
    return LIST_FIELDS.get(key)


@dataclass(frozen=True)
class Scalar:
    """Plain text content value."""

    text: str


@dataclass(frozen=True)
class StructuredList:
    """Decoded list content value."""

    tag: str
    items: tuple[Any, ...]


ContentValue = Scalar | StructuredList


def read_value(key: str, content: Mapping[str, str], defaults: ContentDefaults) -> ContentValue:
    """Read a key from a content map as a typed value, falling back to its default."""
    codec = codec_for(key)
    if codec is None:
        return Scalar(defaults.resolve(key, content))
    items = codec.decode(content.get(key), defaults.fallback_for(key))
    return StructuredList(tag=codec.tag, items=tuple(items))
