# health_monitor/core/config.py
from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Service account JSON for the Firebase Admin SDK
    FIREBASE_CREDENTIALS: str = "health_monitor/core/firebase_key.json"

    # Structured debug events (see services/logger.py)
    DEBUG_MODE: bool = False
    LOG_LEVEL: str = "INFO"

    # Comma separated list, "*" allows everything
    CORS_ORIGINS: str = "*"

    # Lifestyle risk tier refresh (workers/risk_tier_worker.py)
    ENABLE_RISK_WORKER: bool = False
    RISK_REFRESH_INTERVAL_SECONDS: int = 86400

    # Server-sent event streams end after this long; EventSource reconnects
    STREAM_MAX_SECONDS: float = 300.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
