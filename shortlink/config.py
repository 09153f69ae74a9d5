"""Configuration management for the shortlink service.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching, so the settings object is built once
at process start and shared by every request.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Provide the admin secret**::
    export ADMIN_KEY="change-me"

**Step 2 — Get settings**::
    from shortlink.config import get_settings
    settings = get_settings()

**Step 3 — Access values**::
    print(f"Short links live under {settings.BASE_URL}")

Key Behaviours
===============
- Settings are cached after first access.
- Environment variables (or a .env file) override defaults.
- ADMIN_KEY has no default; a missing value raises ValidationError at startup.

Classes:
    Settings:  Pydantic model for all configuration values.
"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortlink.enums import StoreBackend


class Settings(BaseSettings):
    APP_NAME: str = "shortlink"
    APP_ENV: str = "development"
    BASE_URL: str = "http://localhost:8000"

    # Shared secret required to create links
    ADMIN_KEY: str

    # Short identifier generation
    SHORT_ID_LENGTH: int = Field(6, ge=1)
    SHORT_ID_MAX_ATTEMPTS: int = Field(5, ge=1)

    # Key-value store
    STORE_BACKEND: StoreBackend = StoreBackend.REDIS
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_KEY_PREFIX: str = "shortlink:"

    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
