"""
Contested - Configuration and settings.

Everything is optional so the wizard runs against a local API with no .env.
Supabase is only needed for DB-backed sessions.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ContestedSettings(BaseSettings):
    """Application settings, read from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    contested_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # External API hosting /api/chat/session and /api/personalized-onboarding
    contested_api_base_url: str = "http://localhost:5000"
    contested_request_timeout: float | None = None  # seconds; None waits forever

    # Supabase (optional)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    @property
    def is_development(self) -> bool:
        return self.contested_env == "development"

    @property
    def is_production(self) -> bool:
        return self.contested_env == "production"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> ContestedSettings:
    """Get cached settings instance."""
    return ContestedSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: ContestedSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
