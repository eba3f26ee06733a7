"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_postgres_uri_from_env() -> str:
    """Build Postgres URI from component env vars if POSTGRES_URI is not set.

    If POSTGRES_URI is provided, it will override this default.
    """
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    host = os.getenv("POSTGRES_HOST", "postgres")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "notes")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{db}"


class Settings(BaseSettings):
    """Runtime settings for the application."""

    telegram_bot_token: str = Field(default="")
    # Empty secret disables the header check entirely
    telegram_webhook_secret: str = Field(default="")

    replicate_api_token: str = Field(default="")
    llm_model: str = Field(default="openai/gpt-5-structured")
    llm_max_output_tokens: int = Field(default=1024)
    llm_log_payloads: bool = Field(default=False)
    prompts_path: Optional[Path] = Field(default=None)

    postgres_uri: str = Field(default_factory=_default_postgres_uri_from_env)
    db_auto_create: bool = Field(default=True)

    supabase_url: str = Field(default="")
    supabase_service_role_key: str = Field(default="")
    storage_bucket: str = Field(default="assets")
    http_timeout: float = Field(default=20.0)

    public_url: str = Field(default="")
    vault_dir: Path = Field(default=Path("/tmp/vault"))

    language: str = Field(default="zh-tw")
    notes_page_size: int = Field(default=50)
    log_level: str = Field(default="INFO")
    service_name: str = Field(default="notes-inbox")
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Be lenient with env var names (e.g., POSTGRES_URI vs postgres_uri)
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return application settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
