# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
The remote store credentials have no defaults: startup fails if they are missing.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Remote store (Supabase) ───────────────────────────────────────────
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    QUEUE_TABLE: str = "fila"
    HISTORY_TABLE: str = "historico"
    STORE_TIMEOUT_SECONDS: float = 10.0

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None   # defaults to <repo>/logs

    @field_validator("SUPABASE_URL", "SUPABASE_ANON_KEY")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @property
    def REST_URL(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/rest/v1"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
