"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


BrowserEngine = Literal["chromium", "firefox", "webkit"]


class BrowserSettings(BaseSettings):
    """Browser automation configuration."""

    model_config = SettingsConfigDict(env_prefix="BROWSER_")

    engine: BrowserEngine = "chromium"
    headless: bool = True
    window_width: int = 1280
    window_height: int = 1024

    # Timeouts (milliseconds)
    navigation_timeout_ms: int = 30_000
    results_timeout_ms: int = 10_000

    user_agent: str | None = None


class AblisSettings(BaseSettings):
    """Australian Business Licence and Information Service endpoints."""

    model_config = SettingsConfigDict(env_prefix="ABLIS_")

    origin: str = "https://ablis.business.gov.au"
    activity_search_url: str = "https://ablis.business.gov.au/search/activity"
    lga_reference_url: str = (
        "https://www.abs.gov.au/statistics/standards/"
        "australian-statistical-geography-standard-asgs-edition-3/jul2021-jun2026/"
        "non-abs-structures/local-government-areas#lga-name-criteria"
    )


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5173,http://localhost:8080"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO

    # Service port
    port: int = Field(default=8787, alias="OBLIGATION_DISCOVERY_PORT")

    # Sections
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    ablis: AblisSettings = Field(default_factory=AblisSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
