# app/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env):
      - DATABASE_URL (SQLite file by default, Postgres in deployments)
      - LOG_LEVEL

    Checkout tuning:
      - ORDER_NUMBER_PREFIX: first segment of generated order numbers
      - ORDER_NUMBER_MAX_ATTEMPTS: suffixes tried before giving up
      - ORDER_STATUS_POLICY: "permissive" accepts any status change,
        "strict" enforces the Pending -> Delivered lifecycle
    """

    PROJECT_NAME: str = "F1 Store API"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str = "sqlite:///./f1_store.db"
    DATABASE_ECHO: bool = False
    DATABASE_SSL_REQUIRED: bool = True

    LOG_LEVEL: str = "INFO"

    ORDER_NUMBER_PREFIX: str = "ORD"
    ORDER_NUMBER_MAX_ATTEMPTS: int = 20
    ORDER_STATUS_POLICY: Literal["permissive", "strict"] = "permissive"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
