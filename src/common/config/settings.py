"""Application settings and environment variables."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


class Settings:
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "3306"))
    DB_DATABASE: str = os.getenv("DB_NAME", "inventory_db")
    DB_USER: str = os.getenv("DB_USER", "user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")

    CATALOG_API_BASE_URL: Optional[str] = os.getenv("CATALOG_API_BASE_URL")
    CATALOG_API_TOKEN: Optional[str] = os.getenv("CATALOG_API_TOKEN")
    CATALOG_API_TIMEOUT: int = int(os.getenv("CATALOG_API_TIMEOUT", "30"))

    # Defaults for records created from catalog events
    DEFAULT_MIN_STOCK_LEVEL: int = int(os.getenv("DEFAULT_MIN_STOCK_LEVEL", "0"))
    DEFAULT_MAX_STOCK_LEVEL: int = int(os.getenv("DEFAULT_MAX_STOCK_LEVEL", "1000"))
    PROVISIONING_BATCH_SIZE: int = int(os.getenv("PROVISIONING_BATCH_SIZE", "100"))

    # Daily low-stock report
    LOW_STOCK_REPORT_TIME: str = os.getenv("LOW_STOCK_REPORT_TIME", "07:00")
    REPORT_TIMEZONE: str = os.getenv("REPORT_TIMEZONE", "Europe/Berlin")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR, CRITICAL


settings = Settings()
