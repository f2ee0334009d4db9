from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # MongoDB Configuration
    # ==========================================================================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "ridetrust"

    # ==========================================================================
    # Admin API Configuration
    # ==========================================================================
    admin_api_secret: Optional[str] = None  # Unset means every admin call is refused

    # ==========================================================================
    # Telegram Alerts (optional)
    # ==========================================================================
    telegram_bot_token: Optional[str] = None
    telegram_alert_chat_id: str = ""

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    api_v1_str: str = "/api/v1"
    debug: bool = False
    cors_origins: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into list."""
        if self.cors_origins == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    # ==========================================================================
    # Reputation Policy
    # ==========================================================================
    late_cancellation_window_hours: float = 24.0
    recent_low_rating_days: int = 30
    hidden_rate_threshold: float = 0.20
    # Hidden ratings always count toward totalRatings; this only governs the average
    include_hidden_ratings_in_average: bool = False

    # ==========================================================================
    # Pagination
    # ==========================================================================
    default_page_size: int = 50

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading env vars on every request.
    """
    return Settings()


# Convenience export
settings = get_settings()
