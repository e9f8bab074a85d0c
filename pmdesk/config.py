"""Configuration settings using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MissingConfigurationError(RuntimeError):
    """Raised when required backend credentials are not configured."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Missing backend credentials: " + ", ".join(missing)
            + ". Set them in the environment or in .env."
        )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Hosted backend (PostgREST over Postgres with row-level security)
    supabase_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL", "supabase_url"),
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY", "supabase_anon_key"
        ),
    )
    supabase_schema: str = "public"
    request_timeout: float = 30.0

    # Document parsing
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MB
    max_text_length: int = 50_000

    # Application
    debug: bool = False
    log_level: str = "INFO"

    def require_backend(self) -> tuple[str, str]:
        """Return (url, anon_key) or raise if either is missing."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")
        if missing:
            raise MissingConfigurationError(missing)
        return self.supabase_url, self.supabase_anon_key


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
