"""SQLAlchemy ORM models for the site content service."""

from backend.models.base import Base
from backend.models.content import WebsiteContent, WebsiteContentHistory

__all__ = [
    "Base",
    "WebsiteContent",
    "WebsiteContentHistory",
]
