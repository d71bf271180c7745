"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    oauth_provider: str = "google"
    oauth_redirect_uri: str = "foodlens://auth/callback"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Settings for the headless client core."""

    api_base_url: str = "http://localhost:3001"
    deep_link_scheme: str = "foodlens"
    storage_path: Path = Path.home() / ".foodlens" / "storage.json"
    request_timeout_seconds: float = 30.0
    login_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="FOODLENS_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
