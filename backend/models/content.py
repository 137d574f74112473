"""Stored content overrides and their change history."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base


class WebsiteContent(Base):
    """One stored value for a ``<page>.<section>.<field>`` content key."""

    __tablename__ = "website_content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    page: Mapped[str] = mapped_column(String, nullable=False, index=True)
    section: Mapped[str] = mapped_column(String, nullable=False)
    content_key: Mapped[str] = mapped_column(String, nullable=False)
    content_value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (UniqueConstraint("page", "section", "content_key"),)

    @property
    def key(self) -> str:
        return f"{self.page}.{self.section}.{self.content_key}"


class WebsiteContentHistory(Base):
    """Audit entry for a changed or rolled-back content value."""

    __tablename__ = "website_content_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("website_content.id", ondelete="SET NULL"), nullable=True
    )
    page: Mapped[str] = mapped_column(String, nullable=False, index=True)
    section: Mapped[str] = mapped_column(String, nullable=False)
    content_key: Mapped[str] = mapped_column(String, nullable=False)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str] = mapped_column(Text, nullable=False)
    changed_at: Mapped[str] = mapped_column(Text, nullable=False)
    changed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    action: Mapped[str] = mapped_column(String, nullable=False, default="update")
