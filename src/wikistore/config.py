"""Configuration management for wikistore.

This module loads configuration from environment variables with sensible defaults.
It uses dotenv to load from .env files and provides a centralized config object.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///wiki.db"
DEFAULT_HOME_PAGE_NAME = "home-page"
DEFAULT_LISTING_CACHE_MINUTES = 30


class AppConfig(BaseModel):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(description="Database URL of the wiki store")
    home_page_name: str = Field(description="Name of the page that cannot be deleted")
    listing_cache_minutes: int = Field(
        description="Lifetime of the cached page listing in minutes"
    )
    log_level: str = Field(description="Logging level")

    @field_validator("home_page_name")
    @classmethod
    def validate_home_page_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("home_page_name cannot be empty")
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return level

    @field_validator("listing_cache_minutes")
    @classmethod
    def validate_listing_cache_minutes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("listing_cache_minutes must be positive")
        return v


def load_default_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    load_dotenv()

    database_url = os.getenv("WIKI_DATABASE_URL", DEFAULT_DATABASE_URL)
    logger.debug(f"Using wiki database at {database_url}")

    return AppConfig(
        database_url=database_url,
        home_page_name=os.getenv("WIKI_HOME_PAGE", DEFAULT_HOME_PAGE_NAME),
        listing_cache_minutes=int(
            os.getenv("WIKI_LISTING_CACHE_MINUTES", str(DEFAULT_LISTING_CACHE_MINUTES))
        ),
        log_level=os.getenv("LOG_LEVEL", "WARNING"),
    )


# Singleton config instance
_config: Optional[AppConfig] = None


def get_current_config() -> AppConfig:
    """Get the current application configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_default_config()
    return _config
