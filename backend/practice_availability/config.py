"""
Application Configuration
Uses pydantic-settings for environment variable management
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Practice Availability"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "practice_availability"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Scheduling defaults (used when an organisation has no settings document)
    DEFAULT_TIMEZONE: str = "UTC"
    DEFAULT_WEEK_START_DAY: str = "MONDAY"

    # Occupancy
    MAX_OCCUPANCY_BATCH: int = 500

    # Bookable windows
    DEFAULT_BOOKING_WINDOW_MINUTES: int = 30

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return not self.DEBUG

    def validate_production_settings(self) -> list[str]:
        """Validate that production-critical settings are configured"""
        errors = []
        if self.is_production():
            if "*" in self.CORS_ORIGINS:
                errors.append("CORS_ORIGINS should not be '*' in production")
        if self.DEFAULT_WEEK_START_DAY.upper() not in (
            "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY",
            "FRIDAY", "SATURDAY", "SUNDAY"
        ):
            errors.append(
                f"DEFAULT_WEEK_START_DAY '{self.DEFAULT_WEEK_START_DAY}' is not a weekday, falling back to MONDAY"
            )
        return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
