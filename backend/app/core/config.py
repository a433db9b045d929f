"""
Application configuration settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Today Route Planner"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Local embedded store
    DATABASE_URL: str = "sqlite+aiosqlite:///./today.db"

    # External route optimization service (VROOM / OpenRouteService compatible).
    # Left empty, every optimization runs the offline nearest-neighbour fallback.
    OPTIMIZATION_URL: Optional[str] = None
    OPTIMIZATION_API_KEY: Optional[str] = None
    OPTIMIZATION_PROFILE: str = "driving-car"
    OPTIMIZATION_TIMEOUT_SECONDS: float = 15.0
    OPTIMIZATION_MAX_RETRIES: int = 2
    OPTIMIZATION_RETRY_BASE_DELAY: float = 0.5  # seconds

    # Fallback duration estimate
    AVERAGE_SPEED_MPH: float = 25.0

    # Geocoding (Nominatim usage policy: max 1 request per second)
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODER_USER_AGENT: str = "TodayRoutePlanner/1.0 (Route Planning App)"
    GEOCODER_MIN_INTERVAL_SECONDS: float = 1.1
    GEOCODER_TIMEOUT_SECONDS: float = 10.0

    # Reports
    REPORT_HISTORY_LIMIT: int = 30

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    def validate_production_settings(self) -> None:
        """Validate critical settings for production environment."""
        import logging
        import warnings

        logger = logging.getLogger(__name__)

        if self.ENVIRONMENT == "production":
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")

            if self.DATABASE_URL.endswith(":memory:"):
                raise ValueError("DATABASE_URL must point to a persistent database in production")

            insecure_origins = [o for o in self.CORS_ORIGINS if "localhost" in o or "127.0.0.1" in o]
            if insecure_origins:
                warnings.warn(
                    f"CORS_ORIGINS contains localhost entries: {insecure_origins}. "
                    "Consider removing for production.",
                    UserWarning,
                )

            if not self.OPTIMIZATION_URL:
                logger.warning("OPTIMIZATION_URL not configured. Route optimization runs offline only.")

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
