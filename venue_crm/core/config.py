"""
Settings and environment management module for the venue CRM FastAPI backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development (the service starts with no .env at all)
- Singleton pattern via @lru_cache for efficient access
- Optional credentials for external services (Groq, Slack)

Environment Variables:
- GOOGLE_SHEET_ID: Source spreadsheet (default: the Arlington Estate call log)
- SHEET_CACHE_SECONDS: Per-tab cache lifetime (default: 60)
- SHEET_REQUEST_TIMEOUT: HTTP timeout for sheet downloads (default: 15.0)
- GROQ_API_KEY: Enables the AI text helpers (optional)
- AI_MODEL / AI_TEMPERATURE / AI_MAX_TOKENS: Text generation parameters
- SLACK_WEBHOOK_URL: Slack webhook for the manager digest (optional)
- VENUE_NAME: Venue name used in follow-up drafts and the digest header
- CORS_ORIGINS: Allowed browser origins (JSON list)
- LOG_LEVEL: Root logging level (default: INFO)

Usage:
    from venue_crm.core.config import get_settings

    settings = get_settings()
    sheet_id = settings.google_sheet_id
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Type validation and coercion
    - Default values for optional settings

    Attributes:
        google_sheet_id: Id of the Google Sheet holding the call log.
        sheet_cache_seconds: Seconds a downloaded sheet tab is reused.
        sheet_request_timeout: HTTP timeout in seconds for sheet downloads.
        groq_api_key: Groq API key. Without it the AI helpers return fallbacks.
        ai_model: Groq model name.
        ai_temperature: Sampling temperature for AI helpers.
        ai_max_tokens: Completion token budget for AI helpers.
        slack_webhook_url: Slack incoming webhook URL for the manager digest.
        venue_name: Display name of the venue.
        cors_origins: Origins allowed by the CORS middleware.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',  # Ignore extra environment variables not defined in this class
        case_sensitive=False,  # Allow GOOGLE_SHEET_ID or google_sheet_id
    )

    # =========================================================================
    # Google Sheet Data Source
    # =========================================================================

    # Public sheet exported through the gviz CSV endpoint
    google_sheet_id: str = '1mitXbIgnRfoWovu2eS5VUZcGnFjbvCFJU2pt36Ib9vM'

    # 0 disables caching
    sheet_cache_seconds: int = 60

    sheet_request_timeout: float = 15.0

    # =========================================================================
    # AI Text Generation (Optional)
    # =========================================================================

    groq_api_key: Optional[str] = None

    ai_model: str = 'llama-3.3-70b-versatile'

    ai_temperature: float = 0.4

    ai_max_tokens: int = 1024

    # =========================================================================
    # Slack Integration (Optional - for the manager digest)
    # =========================================================================

    # Format: https://hooks.slack.com/services/xxx/yyy/zzz
    slack_webhook_url: Optional[str] = None

    # =========================================================================
    # Presentation and Server
    # =========================================================================

    venue_name: str = 'Arlington Estate'

    cors_origins: List[str] = [
        'http://localhost:3000',  # Next.js dev server
        'http://127.0.0.1:3000',  # Alternative localhost
    ]

    log_level: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns a cached Settings instance so environment variables are only
    loaded once during the application lifecycle.

    Returns:
        Settings: The application settings instance with all configuration values.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid
            value (e.g., SHEET_CACHE_SECONDS=abc).

    Note:
        To refresh settings in tests, you can clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
