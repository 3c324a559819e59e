# laundry_app/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "laundry-desk"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Identity provider ---
    identity_api_key: str = ""
    identity_base_url: str = "https://identitytoolkit.googleapis.com/v1"
    identity_timeout_seconds: float = Field(10.0, gt=0)

    # --- Document store ---
    document_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # --- Audit trail ---
    audit_sink: Literal["documents", "database"] = "documents"
    database_url: str = "sqlite+aiosqlite:///./audit_logs.db"

    # --- Credential policy ---
    password_change_cooldown_hours: int = Field(24, ge=0)
    recovery_session_ttl_seconds: int = Field(900, gt=0)
    # Longest time a bearer token is trusted from the session registry before the provider is asked again
    session_ttl_seconds: int = Field(300, gt=0)

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


# Singleton for direct import (e.g. in infrastructure clients)
settings = get_settings()
