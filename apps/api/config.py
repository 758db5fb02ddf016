"""
Application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


PLACEHOLDER_KEY_MARKERS = ("your_", "changeme", "change_me")
PLACEHOLDER_KEYS = {"", "test-key", "none", "null"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis (rate limiting)
    REDIS_URL: str = "redis://localhost:6379"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # AI providers
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    GOOGLE_API_KEY: str = ""
    GROK_API_KEY: str = ""

    OPENAI_MODEL: str = "gpt-4o-mini"
    CLAUDE_MODEL: str = "claude-3-5-sonnet-20240620"
    GEMINI_MODEL: str = "gemini-pro"
    GROK_MODEL: str = "grok-beta"

    OPENAI_ENDPOINT: str = "https://api.openai.com/v1/chat/completions"
    CLAUDE_ENDPOINT: str = "https://api.anthropic.com/v1/messages"
    GEMINI_ENDPOINT_BASE: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GROK_ENDPOINT: str = "https://api.x.ai/v1/chat/completions"
    ANTHROPIC_VERSION: str = "2023-06-01"

    AI_PROVIDER_TIMEOUT_SECONDS: float = 60.0
    AI_MAX_TOKENS: int = 1500
    AI_TEMPERATURE: float = 0.7
    DEFAULT_AI_PROVIDER: str = "openai"
    MAX_POSTS_PER_ANALYSIS: int = 5

    # Post sources
    YOUTUBE_API_KEY: str = ""
    TIKTOK_RAPIDAPI_KEY: str = ""
    TIKTOK_RAPIDAPI_HOST: str = "tiktok-api6.p.rapidapi.com"
    INSTAGRAM_ACCESS_TOKEN: str = ""
    LINKEDIN_API_KEY: str = ""
    SOURCE_TIMEOUT_SECONDS: float = 15.0
    DEMO_RANDOM_SEED: Optional[int] = None

    # Rate limits (requests per window, per client)
    ANALYZE_RATE_LIMIT: int = 5
    FETCH_RATE_LIMIT: int = 10
    SAVE_RATE_LIMIT: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Saved items
    SAVED_ITEM_TTL_DAYS: int = 7
    SAVED_ITEMS_MAX_PER_TYPE: int = 100

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


def is_placeholder_key(value: Optional[str]) -> bool:
    """True when a credential is missing or still holds a sample value."""
    key = (value or "").strip()
    if key.lower() in PLACEHOLDER_KEYS:
        return True
    lowered = key.lower()
    return any(marker in lowered for marker in PLACEHOLDER_KEY_MARKERS)

