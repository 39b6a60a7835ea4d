from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from krystal.errors import MissingApiKeyError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Runtime
    LOG_LEVEL: str = Field(default="WARNING")

    # Krystal Cloud API
    KRYSTAL_API_KEY: str | None = None
    KRYSTAL_BASE_URL: str = Field(default="https://cloud-api.krystal.app")
    KRYSTAL_TIMEOUT_SECONDS: float = Field(default=30.0)
    KRYSTAL_USER_AGENT: str = Field(default="krystal-cli/0.1.0")

    # Reject invalid queries before any network call
    STRICT_VALIDATION: bool = Field(default=True)

    # Retry defaults (opt-in wrapper, see krystal.utils.retry)
    RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BASE_DELAY_SECONDS: float = Field(default=0.5)
    RETRY_BACKOFF_MULTIPLIER: float = Field(default=2.0)
    RETRY_MAX_DELAY_SECONDS: float = Field(default=30.0)

    def require_api_key(self, explicit: str | None = None) -> str:
        key = explicit or self.KRYSTAL_API_KEY
        if not key:
            raise MissingApiKeyError("KRYSTAL_API_KEY")
        return key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
