# marketplace/core/config.py
# - Reads env vars from ".env" if available (pydantic-settings).
# - Every setting has a development default so the API boots without a .env file.

from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./data/marketplace.db"

    # JWT
    SECRET_KEY: str = "CHANGE_THIS_TO_RANDOM_SECRET"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Blob storage (local filesystem root)
    UPLOAD_DIR: str = "./uploads"

    # Prepended to image/document URLs in responses ("" = relative URLs)
    PUBLIC_BASE_URL: str = ""

    FRONTEND_URL: Optional[str] = None

    # DEV: create tables + seed categories/admin on startup.
    # In production, prefer Alembic migrations.
    RUN_CREATE_ALL: bool = True

    # Initial admin (only used when the users table is empty)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None

    # Login throttling (per client IP)
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_WINDOW_SECONDS: int = 15 * 60

    LOG_LEVEL: str = "INFO"

    # pydantic v2 config
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
