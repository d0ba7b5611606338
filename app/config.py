from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Clinic Medication Stock Control"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./clinic_stock.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    ADMIN_API_KEY: Optional[str] = None
    API_KEYS: Optional[str] = None

    # ==============================
    # Stock control
    # ==============================
    EXPIRY_ALERT_DAYS: int = 30
    DEFAULT_MIN_STOCK_LEVEL: int = 10
    ADJUSTMENT_MAX_RETRIES: int = 1
    STOCK_TREND_DAYS: int = 30


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
