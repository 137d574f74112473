"""Page preview composition.

Each page is an ordered tuple of section descriptors. A descriptor owns one or
more key namespaces (``<page>.<section>``) and a render function that lists the
section's fields in display order. Rendering only reads keys inside the
section's own namespaces, so sections never depend on each other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from backend.content.codec import FAQEntry, codec_for
from backend.content.defaults import ContentDefaults
from backend.content.keys import Page, parse_key
from backend.content.tracker import is_modified

logger = logging.getLogger(__name__)


class FieldKind(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    LINK = "link"
    LIST = "list"


@dataclass(frozen=True)
class FieldPreview:
    """One rendered field: resolved value plus edit state.

    ``value`` is the resolved string for scalar fields and a tuple of typed
    records for list fields.
    """

    key: str
    kind: FieldKind
    value: Any
    modified: bool
    editable: bool


@dataclass(frozen=True)
class SectionPreview:
    id: str
    namespaces: tuple[str, ...]
    fields: tuple[FieldPreview, ...]

    @property
    def modified(self) -> bool:
        return any(f.modified for f in self.fields)

    def field(self, key: str) -> FieldPreview:
        for f in self.fields:
            if f.key == key:
                return f
        msg = f"Field '{key}' is not rendered in section '{self.id}'"
        raise KeyError(msg)


class SectionReader:
    """Collects a section's fields, refusing keys outside its namespaces."""

    def __init__(
        self,
        namespaces: Sequence[str],
        content: Mapping[str, str],
        original: Mapping[str, str],
        resolver: ContentDefaults,
        editable: bool,
    ) -> None:
        self._namespaces = frozenset(namespaces)
        self._content = content
        self._original = original
        self._resolver = resolver
        self._editable = editable
        self.fields: list[FieldPreview] = []

    def _add(self, key: str, kind: FieldKind) -> None:
        if parse_key(key).namespace not in self._namespaces:
            msg = f"Key '{key}' is outside section namespaces {sorted(self._namespaces)}"
            raise ValueError(msg)
        if kind is FieldKind.LIST:
            codec = codec_for(key)
            if codec is None:
                msg = f"'{key}' is not a list field"
                raise ValueError(msg)
            value: Any = tuple(
                codec.records(self._content.get(key), self._resolver.fallback_for(key))
            )
        else:
            value = self._resolver.resolve(key, self._content)
        self.fields.append(
            FieldPreview(
                key=key,
                kind=kind,
                value=value,
                modified=is_modified(key, self._content, self._original),
                editable=self._editable,
            )
        )

    def text(self, *keys: str) -> None:
        for key in keys:
            self._add(key, FieldKind.TEXT)

    def image(self, *keys: str) -> None:
        for key in keys:
            self._add(key, FieldKind.IMAGE)

    def link(self, *keys: str) -> None:
        for key in keys:
            self._add(key, FieldKind.LINK)

    def list(self, *keys: str) -> None:
        for key in keys:
            self._add(key, FieldKind.LIST)


RenderFn = Callable[[SectionReader], None]


@dataclass(frozen=True)
class SectionDescriptor:
    id: str
    namespaces: tuple[str, ...]
    render: RenderFn = field(repr=False)


def _numbered(namespace: str, stem: str, count: int, *suffixes: str) -> list[str]:
    """Keys like ``<ns>.feature1_title, <ns>.feature1_description, ...``."""
    return [
        f"{namespace}.{stem}{n}_{suffix}" for n in range(1, count + 1) for suffix in suffixes
    ]


def _meta(namespace: str, *, og: bool = True) -> RenderFn:
    def render(r: SectionReader) -> None:
        r.text(f"{namespace}.title", f"{namespace}.description", f"{namespace}.keywords")
        if og:
            r.text(f"{namespace}.og_title", f"{namespace}.og_description")

    return render


# --- home ---


def _home_hero(r: SectionReader) -> None:
    r.text("home.hero.badge", "home.hero.title", "home.hero.subtitle")
    r.image("home.images.hero_image")
    r.text("home.images.hero_image_alt")


def _home_client_logos(r: SectionReader) -> None:
    r.text("home.client-logos.title", "home.client-logos.subtitle")
    r.list("home.client-logos.logos")
    r.text("home.client-logos.cta_text")
    r.link("home.client-logos.cta_link")


def _home_featured_speakers(r: SectionReader) -> None:
    r.text(
        "home.featured-speakers.title",
        "home.featured-speakers.subtitle",
        "home.featured-speakers.cta_text",
    )


def _home_why_choose_us(r: SectionReader) -> None:
    r.text("home.why-choose-us.section_title", "home.why-choose-us.section_subtitle")
    r.text(*_numbered("home.why-choose-us", "feature", 6, "title", "description"))


def _home_navigate(r: SectionReader) -> None:
    r.text("home.navigate.section_title", "home.navigate.section_subtitle")
    r.text("home.navigate.budget_title")
    r.list("home.navigate.budget_ranges")
    r.text("home.navigate.budget_disclaimer")
    r.text("home.navigate.audience_title")
    r.list("home.navigate.audience_types")
    r.text("home.navigate.global_title")
    r.list("home.navigate.delivery_options")


def _home_seo_content(r: SectionReader) -> None:
    r.text(
        "home.seo-content.main_heading",
        "home.seo-content.intro_paragraph",
        "home.seo-content.why_heading",
        "home.seo-content.why_paragraph",
        "home.seo-content.industries_heading",
    )
    r.list("home.seo-content.industries_list")
    r.text("home.seo-content.topics_heading")
    r.list("home.seo-content.topics_list")
    r.text(
        "home.seo-content.book_heading",
        "home.seo-content.book_paragraph",
        "home.seo-content.cta_button_text",
        "home.seo-content.closing_paragraph",
    )


def _home_seo_faq(r: SectionReader) -> None:
    r.text("home.seo-faq.section_title")
    r.text(*_numbered("home.seo-faq", "faq", 4, "question", "answer"))


def _home_booking_cta(r: SectionReader) -> None:
    r.text("home.booking-cta.title", "home.booking-cta.subtitle", "home.booking-cta.contact_info")
    r.text("home.booking-cta.primary_cta_text")
    r.link("home.booking-cta.primary_cta_link")
    r.text("home.booking-cta.secondary_cta_text")
    r.link("home.booking-cta.secondary_cta_link")
    r.text("home.booking-cta.whatsapp_number")
    r.link("home.booking-cta.whatsapp_link")
    r.text("home.booking-cta.email")


# --- services ---


def _services_hero(r: SectionReader) -> None:
    r.text("services.hero.badge", "services.hero.title", "services.hero.subtitle")


def _services_offerings(r: SectionReader) -> None:
    r.list("services.offerings.list")


def _services_process(r: SectionReader) -> None:
    r.text("services.process.section_title", "services.process.section_subtitle")
    r.text(*_numbered("services.process", "step", 3, "title", "description"))


def _services_events(r: SectionReader) -> None:
    r.text("services.events.section_title", "services.events.section_subtitle")
    r.text(
        "services.events.latest_event_title",
        "services.events.latest_event_description",
        "services.events.latest_event_cta",
    )
    r.image("services.events.event_image")
    r.text("services.events.newsletter_title", "services.events.newsletter_description")


def _services_faq(r: SectionReader) -> None:
    r.text("services.faq.section_title")
    r.text(*_numbered("services.faq", "faq", 4, "question", "answer"))


def _services_cta(r: SectionReader) -> None:
    r.text("services.cta.title", "services.cta.subtitle", "services.cta.button_text")
    r.text("services.cta.phone_number", "services.cta.email")
    r.text(*_numbered("services.cta", "stat", 3, "value", "label"))


# --- team ---


def _team_hero(r: SectionReader) -> None:
    r.text("team.hero.badge", "team.hero.title")
    r.text(*(f"team.hero.story_paragraph{n}" for n in range(1, 4)))


def _team_members(r: SectionReader) -> None:
    r.list("team.members.list")


def _team_cta(r: SectionReader) -> None:
    r.text("team.cta.title", "team.cta.subtitle", "team.cta.button_text", "team.cta.email")


# --- speakers / workshops directories ---


def _speakers_hero(r: SectionReader) -> None:
    r.text("speakers.hero.title", "speakers.hero.subtitle")


def _speakers_directory(r: SectionReader) -> None:
    r.text(
        "speakers.filters.search_placeholder",
        "speakers.filters.industry_label",
        "speakers.filters.all_industries",
        "speakers.filters.fee_label",
        "speakers.filters.all_fees",
        "speakers.filters.location_label",
        "speakers.filters.all_locations",
        "speakers.filters.showing_text",
    )
    r.text(
        "speakers.results.loading_text",
        "speakers.results.no_results",
        "speakers.results.clear_filters",
    )
    r.text("speakers.buttons.load_more")


def _workshops_hero(r: SectionReader) -> None:
    r.text("workshops.hero.title", "workshops.hero.subtitle")


def _workshops_directory(r: SectionReader) -> None:
    r.text(
        "workshops.filters.search_placeholder",
        "workshops.filters.show_filters",
        "workshops.filters.hide_filters",
        "workshops.filters.format_label",
        "workshops.filters.all_formats",
        "workshops.filters.length_label",
        "workshops.filters.all_lengths",
        "workshops.filters.short_length",
        "workshops.filters.medium_length",
        "workshops.filters.long_length",
        "workshops.filters.location_label",
        "workshops.filters.all_locations",
        "workshops.filters.audience_label",
        "workshops.filters.all_audiences",
        "workshops.filters.showing_text",
        "workshops.filters.clear_filters",
    )
    r.text("workshops.results.loading_text", "workshops.results.no_results")
    r.text("workshops.buttons.inquire", "workshops.buttons.view_details")


# --- contact ---


def _contact_header(r: SectionReader) -> None:
    r.text(
        "contact.header.keynote_title",
        "contact.header.workshop_title",
        "contact.header.keynote_subtitle",
        "contact.header.workshop_subtitle",
    )
    r.text("contact.tabs.keynote_label", "contact.tabs.workshop_label")


def _contact_form(r: SectionReader) -> None:
    r.text(
        "contact.form.title",
        "contact.form.description",
        "contact.form.contact_section_title",
        "contact.form.event_section_title",
        "contact.form.additional_section_title",
    )
    r.text(
        "contact.keynote.speaker_section_title",
        "contact.keynote.speaker_section_desc",
        "contact.keynote.no_speaker_text",
        "contact.keynote.budget_section_title",
    )
    r.text(
        "contact.workshop.workshop_section_title",
        "contact.workshop.workshop_section_desc",
        "contact.workshop.no_workshop_text",
        "contact.workshop.participants_title",
        "contact.workshop.skill_level_title",
        "contact.workshop.format_title",
    )
    r.text("contact.buttons.submit")


def _contact_success(r: SectionReader) -> None:
    r.text("contact.success.title", "contact.success.message")


def _contact_sidebar(r: SectionReader) -> None:
    r.text(
        "contact.help.title",
        "contact.help.call_label",
        "contact.help.phone",
        "contact.help.email_label",
        "contact.help.email",
    )
    r.text("contact.newsletter.title", "contact.newsletter.description")


# --- footer ---


def _footer_company(r: SectionReader) -> None:
    r.image("footer.company.logo")
    r.text("footer.company.logo_alt", "footer.company.description")
    r.text("footer.company.phone", "footer.company.email")


def _footer_link_columns(r: SectionReader) -> None:
    for column in ("quick-links", "industries", "for-speakers"):
        r.text(f"footer.{column}.title")
        r.list(f"footer.{column}.links")


def _footer_bottom(r: SectionReader) -> None:
    r.text("footer.bottom.copyright")
    r.link("footer.bottom.linkedin_url")


def _section(section_id: str, render: RenderFn, *namespaces: str) -> SectionDescriptor:
    return SectionDescriptor(id=section_id, namespaces=tuple(namespaces), render=render)


PAGE_LAYOUTS: Mapping[Page, tuple[SectionDescriptor, ...]] = {
    Page.HOME: (
        _section("hero", _home_hero, "home.hero", "home.images"),
        _section("client-logos", _home_client_logos, "home.client-logos"),
        _section("featured-speakers", _home_featured_speakers, "home.featured-speakers"),
        _section("why-choose-us", _home_why_choose_us, "home.why-choose-us"),
        _section("navigate", _home_navigate, "home.navigate"),
        _section("seo-content", _home_seo_content, "home.seo-content"),
        _section("seo-faq", _home_seo_faq, "home.seo-faq"),
        _section("booking-cta", _home_booking_cta, "home.booking-cta"),
        _section("meta", _meta("home.meta"), "home.meta"),
    ),
    Page.SERVICES: (
        _section("hero", _services_hero, "services.hero"),
        _section("offerings", _services_offerings, "services.offerings"),
        _section("process", _services_process, "services.process"),
        _section("events", _services_events, "services.events"),
        _section("faq", _services_faq, "services.faq"),
        _section("cta", _services_cta, "services.cta"),
        _section("meta", _meta("services.meta"), "services.meta"),
    ),
    Page.TEAM: (
        _section("hero", _team_hero, "team.hero"),
        _section("members", _team_members, "team.members"),
        _section("cta", _team_cta, "team.cta"),
        _section("meta", _meta("team.meta"), "team.meta"),
    ),
    Page.SPEAKERS: (
        _section("hero", _speakers_hero, "speakers.hero"),
        _section(
            "directory",
            _speakers_directory,
            "speakers.filters",
            "speakers.results",
            "speakers.buttons",
        ),
        _section("meta", _meta("speakers.meta", og=False), "speakers.meta"),
    ),
    Page.WORKSHOPS: (
        _section("hero", _workshops_hero, "workshops.hero"),
        _section(
            "directory",
            _workshops_directory,
            "workshops.filters",
            "workshops.results",
            "workshops.buttons",
        ),
        _section("meta", _meta("workshops.meta", og=False), "workshops.meta"),
    ),
    Page.CONTACT: (
        _section("header", _contact_header, "contact.header", "contact.tabs"),
        _section(
            "form",
            _contact_form,
            "contact.form",
            "contact.keynote",
            "contact.workshop",
            "contact.buttons",
        ),
        _section("success", _contact_success, "contact.success"),
        _section("sidebar", _contact_sidebar, "contact.help", "contact.newsletter"),
        _section("meta", _meta("contact.meta", og=False), "contact.meta"),
    ),
    Page.FOOTER: (
        _section("company", _footer_company, "footer.company"),
        _section(
            "link-columns",
            _footer_link_columns,
            "footer.quick-links",
            "footer.industries",
            "footer.for-speakers",
        ),
        _section("bottom", _footer_bottom, "footer.bottom"),
    ),
}


ContentChangeFn = Callable[[str, str], None]


@dataclass(frozen=True)
class PagePreview:
    """A composed page. In editor mode, edits are routed to ``on_content_change``."""

    page: Page
    sections: tuple[SectionPreview, ...]
    editor_mode: bool
    on_content_change: ContentChangeFn | None = field(default=None, repr=False, compare=False)

    def iter_fields(self) -> Iterator[FieldPreview]:
        for section in self.sections:
            yield from section.fields

    def keys(self) -> list[str]:
        return [f.key for f in self.iter_fields()]

    def section(self, section_id: str) -> SectionPreview:
        for section in self.sections:
            if section.id == section_id:
                return section
        msg = f"Page '{self.page}' has no section '{section_id}'"
        raise KeyError(msg)

    def field(self, key: str) -> FieldPreview:
        for f in self.iter_fields():
            if f.key == key:
                return f
        msg = f"Field '{key}' is not rendered on page '{self.page}'"
        raise KeyError(msg)

    def modified_keys(self) -> list[str]:
        return [f.key for f in self.iter_fields() if f.modified]

    def edit(self, key: str, value: str) -> None:
        """Route an inline edit of ``key`` to the change callback."""
        if not self.editor_mode or self.on_content_change is None:
            msg = "Page preview is not in editor mode"
            raise ValueError(msg)
        if key not in self.keys():
            msg = f"Field '{key}' is not rendered on page '{self.page}'"
            raise ValueError(msg)
        self.on_content_change(key, value)

    def edit_list(self, key: str, items: Sequence[Any]) -> None:
        codec = codec_for(key)
        if codec is None:
            msg = f"'{key}' is not a list field"
            raise ValueError(msg)
        self.edit(key, codec.encode(items))


def compose_page(
    page: str,
    content: Mapping[str, str],
    original: Mapping[str, str],
    resolver: ContentDefaults,
    editor_mode: bool = False,
    on_content_change: ContentChangeFn | None = None,
) -> PagePreview:
    """Render every section of ``page`` in layout order.

    Raises ``ValueError`` for an unknown page id.
    """
    page_id = Page(page)
    sections: list[SectionPreview] = []
    for descriptor in PAGE_LAYOUTS[page_id]:
        reader = SectionReader(descriptor.namespaces, content, original, resolver, editor_mode)
        descriptor.render(reader)
        sections.append(
            SectionPreview(
                id=descriptor.id,
                namespaces=descriptor.namespaces,
                fields=tuple(reader.fields),
            )
        )
    logger.debug("Composed %s preview with %d sections", page_id, len(sections))
    return PagePreview(
        page=page_id,
        sections=tuple(sections),
        editor_mode=editor_mode,
        on_content_change=on_content_change,
    )


def faq_entries(section: SectionPreview) -> list[FAQEntry]:
    """Pair a FAQ section's numbered question/answer fields into records."""
    values = {f.key.rsplit(".", 1)[1]: f.value for f in section.fields if f.kind is FieldKind.TEXT}
    entries: list[FAQEntry] = []
    n = 1
    while f"faq{n}_question" in values:
        entries.append(
            FAQEntry(question=values[f"faq{n}_question"], answer=values.get(f"faq{n}_answer", ""))
        )
        n += 1
    return entries
