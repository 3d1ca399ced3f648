# badger/config.py

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Project-wide configuration, read from environment variables.
    Pydantic v2 + pydantic-settings.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # --- Core ---
    ENVIRONMENT: str = Field("dev", description="Application environment (dev, test, prod)")
    BASE_URL: str = Field("http://localhost:8000", description="Public origin used to qualify badge and assertion URLs")

    # --- Database ---
    DATABASE_URL: str = Field(..., description="Async database connection URL (e.g., postgresql+asyncpg://...)")

    # --- Redis / Celery ---
    REDIS_URL: str = Field("redis://redis:6379/0", description="URL for Redis connection")
    CELERY_BROKER_URL: Optional[str] = Field(None, description="Celery broker URL (defaults to REDIS_URL)")
    CELERY_RESULT_BACKEND: Optional[str] = Field(None, description="Celery result backend URL (defaults to REDIS_URL)")

    # --- Claim codes ---
    PHRASE_GENERATOR: str = Field("words", description="Phrase generator used for claim codes ('words')")
    CLAIM_CODE_MAX_ATTEMPTS: int = Field(25, ge=1, description="Generation rounds before giving up on unique claim codes")

    # --- Notifications ---
    NOTIFIER: str = Field("log", description="Award notifier ('log', 'email')")
    SMTP_HOST: Optional[str] = Field(None, description="SMTP server; mail is only logged when unset")
    SMTP_PORT: int = Field(587, description="SMTP port (STARTTLS)")
    SMTP_USER: Optional[str] = Field(None)
    SMTP_PASSWORD: Optional[str] = Field(None)
    SMTP_FROM: str = Field("no-reply@badger.local", description="Sender address for award mail")

    @model_validator(mode='after')
    def set_celery_defaults(self) -> 'Settings':
        if self.CELERY_BROKER_URL is None:
            log.debug("Setting CELERY_BROKER_URL default from REDIS_URL")
            self.CELERY_BROKER_URL = self.REDIS_URL
        if self.CELERY_RESULT_BACKEND is None:
            log.debug("Setting CELERY_RESULT_BACKEND default from REDIS_URL")
            self.CELERY_RESULT_BACKEND = self.REDIS_URL
        return self

    def qualify_url(self, path: str) -> str:
        """Join ``path`` onto ``BASE_URL``."""
        return self.BASE_URL.rstrip("/") + "/" + path.lstrip("/")


try:
    settings = Settings()
    log.info("Settings loaded successfully for ENVIRONMENT=%s", settings.ENVIRONMENT)
    log.debug("Loaded settings: DB URL=%s..., Redis URL=%s, notifier=%s",
              str(settings.DATABASE_URL)[:25],
              settings.REDIS_URL,
              settings.NOTIFIER)
except Exception:
    log.exception("Failed to instantiate Settings.")
    raise
