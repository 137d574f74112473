"""Content request/response schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from backend.content.codec import record_to_json
from backend.content.composer import FieldKind, PagePreview, faq_entries
from backend.content.keys import PAGE_IDS, parse_key


class ContentItemInput(BaseModel):
    """A single stored value to write."""

    page: str
    section: str = Field(min_length=1, max_length=100, pattern=r"^[^.]+$")
    content_key: str = Field(min_length=1, max_length=200)
    content_value: str = Field(default="", max_length=500_000)

    @field_validator("page")
    @classmethod
    def page_must_exist(cls, value: str) -> str:
        if value not in PAGE_IDS:
            msg = f"Unknown page '{value}'"
            raise ValueError(msg)
        return value

    def as_row(self) -> tuple[str, str, str, str]:
        return (self.page, self.section, self.content_key, self.content_value)


class ReseedRequest(BaseModel):
    """Replace all stored content with the defaults."""

    action: Literal["reseed"]


class ContentItemResponse(BaseModel):
    """A stored content row."""

    model_config = {"from_attributes": True}

    id: int
    page: str
    section: str
    content_key: str
    content_value: str
    updated_at: str
    updated_by: str | None = None


class ContentListResponse(BaseModel):
    items: list[ContentItemResponse]


class ContentSaveResponse(BaseModel):
    saved: int
    items: list[ContentItemResponse]


class ReseedResponse(BaseModel):
    seeded: int


class PageContentResponse(BaseModel):
    """Resolved content map for a page: every default key, stored values applied."""

    page: str
    content: dict[str, str]


class DefaultsResponse(BaseModel):
    page: str | None = None
    content: dict[str, str]


class HistoryEntryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    content_id: int | None = None
    page: str
    section: str
    content_key: str
    old_value: str | None = None
    new_value: str
    changed_at: str
    changed_by: str | None = None
    action: str


class HistoryListResponse(BaseModel):
    entries: list[HistoryEntryResponse]
    total: int
    limit: int
    offset: int


class RollbackRequest(BaseModel):
    history_id: int = Field(ge=1)


class RollbackResponse(BaseModel):
    history_id: int
    item: ContentItemResponse


class PreviewRequest(BaseModel):
    """Working content map and the snapshot it is compared against."""

    content: dict[str, str] = Field(default_factory=dict)
    original: dict[str, str] = Field(default_factory=dict)
    editor_mode: bool = False

    @field_validator("content", "original")
    @classmethod
    def keys_must_parse(cls, value: dict[str, str]) -> dict[str, str]:
        for key in value:
            parse_key(key)
        return value


class FieldPreviewResponse(BaseModel):
    key: str
    kind: FieldKind
    value: str | list[Any]
    modified: bool
    editable: bool


class FAQEntryResponse(BaseModel):
    question: str
    answer: str


class SectionPreviewResponse(BaseModel):
    id: str
    namespaces: list[str]
    modified: bool
    fields: list[FieldPreviewResponse]
    faq: list[FAQEntryResponse] | None = None


class PagePreviewResponse(BaseModel):
    page: str
    editor_mode: bool
    sections: list[SectionPreviewResponse]
    modified_keys: list[str]

    @classmethod
    def from_preview(cls, preview: PagePreview) -> PagePreviewResponse:
        sections: list[SectionPreviewResponse] = []
        for section in preview.sections:
            faq = faq_entries(section)
            sections.append(
                SectionPreviewResponse(
                    id=section.id,
                    namespaces=list(section.namespaces),
                    modified=section.modified,
                    fields=[
                        FieldPreviewResponse(
                            key=f.key,
                            kind=f.kind,
                            value=(
                                [record_to_json(item) for item in f.value]
                                if f.kind is FieldKind.LIST
                                else f.value
                            ),
                            modified=f.modified,
                            editable=f.editable,
                        )
                        for f in section.fields
                    ],
                    faq=[FAQEntryResponse(question=e.question, answer=e.answer) for e in faq]
                    if faq
                    else None,
                )
            )
        return cls(
            page=preview.page.value,
            editor_mode=preview.editor_mode,
            sections=sections,
            modified_keys=preview.modified_keys(),
        )
