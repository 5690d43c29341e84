"""
Findules - Configuration Settings

Settings are read from environment variables (or a local .env file) through
pydantic-settings. Import the module-level ``settings`` object.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Findules"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./findules.db"

    # JWT
    secret_key: str = "findules-secret-key-change-me-in-prod"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 8

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Business rules
    imprest_overdue_days: int = 30
    currency_code: str = "NGN"

    # Login throttling (per client IP)
    login_rate_limit_max: int = 5
    login_rate_limit_window_seconds: int = 15 * 60

    # Seed account created by findules.init_db
    admin_email: str = "admin@findules.com"
    admin_password: str = "admin123"


settings = Settings()
