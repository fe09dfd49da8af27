from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_API_FOOTBALL_BASE_URL = "https://v3.football.api-sports.io"

# Values shipped in the app's sample env file; treated as unset.
_PLACEHOLDERS = {"your-supabase-url", "your-supabase-anon-key", "your-api-football-key"}


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing. Fatal for every entry point."""


class Settings(BaseSettings):
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL"),
    )
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY"),
    )
    api_football_key: str = Field(
        default="",
        validation_alias=AliasChoices("API_FOOTBALL_KEY", "EXPO_PUBLIC_API_FOOTBALL_KEY"),
    )
    api_football_base_url: str = DEFAULT_API_FOOTBALL_BASE_URL
    app_env: str = "development"
    seed_sample_logs: bool = False
    sync_timezone: str = "UTC"
    http_timeout_seconds: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def missing_required(self) -> List[str]:
        """Names of required environment values that are absent or placeholders."""
        missing = []
        if _is_unset(self.supabase_url):
            missing.append("SUPABASE_URL")
        if _is_unset(self.supabase_key):
            missing.append("SUPABASE_KEY")
        return missing

    @property
    def has_api_football_key(self) -> bool:
        return not _is_unset(self.api_football_key)


def _is_unset(value: str) -> bool:
    return not value or value.strip() in _PLACEHOLDERS


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(settings: Optional[Settings] = None) -> Settings:
    """Return validated settings.

    Raises:
        ConfigurationError: if SUPABASE_URL or SUPABASE_KEY is missing. Callers
            must not open any network client before this succeeds.
    """
    settings = settings or get_settings()
    missing = settings.missing_required()
    if missing:
        raise ConfigurationError(
            "Missing required configuration: " + ", ".join(missing)
        )
    return settings
