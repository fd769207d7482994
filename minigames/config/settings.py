"""
Minigame Engines - Application Settings

Loads configuration from environment variables (or a .env file) using
Pydantic Settings.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str
    supabase_anon_key: str

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Clock
    clock_interval: float = 1.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
