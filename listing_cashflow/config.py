"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./dev.db"

    # App settings
    app_name: str = "Listing Cashflow"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Display
    currency_code: str = "CAD"

    # Defaults applied when a listing does not carry its own estimates
    default_interest_rate: float = 5.5
    default_loan_term: int = 25
    default_property_management: float = 8.0
    default_maintenance_reserve: float = 5.0
    default_vacancy: float = 5.0
    default_cap_ex_reserve: float = 5.0

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
