"""
Runtime configuration for Blurred Citadel.

Everything is read from environment variables (a local .env file is loaded first via python-dotenv).
The Settings object is built once by the caller (API factory, dashboard, scripts) and handed to
whatever needs it, so tests can construct their own Settings without touching the environment.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

NEWS_API_URL = "https://newsapi.org/v2/everything"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class Settings(BaseModel):
    news_api_key: Optional[str] = None
    news_api_url: str = NEWS_API_URL
    news_page_size: int = 20
    news_max_articles: int = 12
    news_timeout: float = 10.0

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_temperature: float = 0.3

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    max_upload_bytes: int = 10 * 1024 * 1024

    @property
    def news_configured(self) -> bool:
        return bool(self.news_api_key)

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None


def load_settings() -> Settings:
    """Build Settings from the process environment (after loading .env)."""
    load_dotenv()

    overrides = {
        "news_api_key": _env("NEWS_API_KEY"),
        "news_api_url": _env("NEWS_API_URL"),
        "news_page_size": _env("NEWS_PAGE_SIZE"),
        "news_max_articles": _env("NEWS_MAX_ARTICLES"),
        "news_timeout": _env("NEWS_TIMEOUT"),
        "openai_api_key": _env("OPENAI_API_KEY"),
        "openai_base_url": _env("OPENAI_BASE_URL"),
        "openai_model": _env("OPENAI_MODEL"),
        "openai_temperature": _env("OPENAI_TEMPERATURE"),
        # SUPABASE_ANON_KEY kept for parity with the old dashboard's .env files
        "supabase_url": _env("SUPABASE_URL"),
        "supabase_key": _env("SUPABASE_KEY") or _env("SUPABASE_ANON_KEY"),
        "max_upload_bytes": _env("MAX_UPLOAD_BYTES"),
    }
    # Unset variables fall back to the model defaults; pydantic coerces the numeric strings
    return Settings(**{key: value for key, value in overrides.items() if value is not None})
