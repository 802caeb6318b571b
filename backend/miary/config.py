# backend/miary/config.py
from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # environment: "dev" for running the service locally, "test" for pytest
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    APP_VERSION: str = "2.0.0"

    # --- Report engine defaults ---
    # IANA zone used when a request does not carry its own timezone.
    DEFAULT_TIMEZONE: str = "Europe/Berlin"
    # Anchor the weather lookup on the earliest pain entry of a day.
    PREFER_PAIN_AS_TARGET: bool = True

    # --- HTTP ---
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    @model_validator(mode="after")
    def _check_default_timezone(self):
        try:
            ZoneInfo(self.DEFAULT_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"DEFAULT_TIMEZONE {self.DEFAULT_TIMEZONE!r} is not a known IANA zone") from exc
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
