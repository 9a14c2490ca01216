"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from shared.config import settings

    print(settings.environment)
    print(settings.browser.headless)
"""

from shared.config.settings import (
    AblisSettings,
    BrowserEngine,
    BrowserSettings,
    Environment,
    LogLevel,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "AblisSettings",
    "BrowserEngine",
    "BrowserSettings",
    "Environment",
    "LogLevel",
    "Settings",
    "get_settings",
    "settings",
]
