"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.content.keys import Page

DEFAULT_ADMIN_TOKEN = "change-me-in-production"


class Settings(BaseSettings):
    """Site content service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    expose_docs: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///data/db/site-content.db"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # CORS
    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=list)

    # Admin API
    admin_token: str = DEFAULT_ADMIN_TOKEN

    # Content
    content_defaults_path: Path | None = None
    content_cache_ttl_seconds: float = Field(default=60, ge=0)
    # Pages whose missing defaults are inserted into the store at startup.
    content_seed_pages: list[Page] = Field(default_factory=list)

    # Response hardening
    security_headers_enabled: bool = True
    content_security_policy: str = (
        "default-src 'self'; "
        "img-src 'self' https: data:; "
        "style-src 'self' 'unsafe-inline'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'"
    )

    def validate_runtime_security(self) -> None:
        """Validate security-critical production settings."""
        if self.debug:
            return

        violations: list[str] = []
        if self.admin_token == DEFAULT_ADMIN_TOKEN or len(self.admin_token) < 32:
            violations.append(
                "ADMIN_TOKEN must be overridden with a high-entropy value (>=32 chars)"
            )
        if not self.trusted_hosts:
            violations.append("TRUSTED_HOSTS must be configured in production")

        if violations:
            joined = "; ".join(violations)
            raise ValueError(f"Insecure production configuration: {joined}")
