# app/settings.py
import logging
from functools import lru_cache
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PAGESPEED_API = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"


class Settings(BaseSettings):
    """
    Application settings for the single-page SEO audit service.
    Automatically loaded from environment variables and .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "seo-toolbot"
    LOG_LEVEL: str = Field(default="INFO")

    # Page fetch
    USER_AGENT: str = Field(default="seo-toolbot/1.0 (+https://example.com)", min_length=1)
    FETCH_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)
    FETCH_RETRIES: int = Field(default=1, ge=0)

    # PageSpeed Insights
    PSI_ENDPOINT: str = Field(default=PAGESPEED_API)
    PSI_API_KEY: str = Field(default="")
    PSI_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)
    PSI_STRATEGIES: Tuple[str, ...] = ("mobile", "desktop")

    # Per-IP rate gate
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=30, ge=1)
    RATE_LIMIT_WINDOW_SECONDS: float = Field(default=60.0, gt=0)

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("PSI_STRATEGIES")
    @classmethod
    def _known_strategies(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        unknown = [s for s in v if s not in ("mobile", "desktop")]
        if unknown:
            raise ValueError(f"Unknown PSI strategy: {unknown[0]}")
        if not v:
            raise ValueError("At least one PSI strategy is required")
        return v

    @field_validator("PSI_API_KEY", mode="before")
    @classmethod
    def _strip_key(cls, v):
        return (v or "").strip()


# Cached singleton to avoid repeated instantiation
@lru_cache()
def get_settings() -> Settings:
    return Settings()
