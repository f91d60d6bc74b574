"""
Centralized configuration for the Cup of Sugar backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Cup of Sugar API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""

    # Storage backend: "memory" for local development, "supabase" for production
    storage_backend: Literal["memory", "supabase"] = "memory"

    # Frontend URLs (for invite links)
    frontend_url: str = "http://localhost:5173"

    # Default per-user limits, materialized on first access
    default_max_open_requests: int = 5
    default_max_groups_created: int = 3
    default_max_groups_joined: int = 5

    # Group and invite rules
    max_group_members: int = 20
    invite_ttl_days: int = 7
    max_pending_invitations: int = 10

    # Requests
    needed_by_grace_seconds: int = 5  # tolerated submission latency


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
