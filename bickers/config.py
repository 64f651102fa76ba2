"""Application configuration via environment variables."""

import json
from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings

from bickers.common.constants import (
    DEFAULT_ANNUAL_ALLOWANCE,
    DEFAULT_BANK_HOLIDAY_REGION,
    GOV_UK_BANK_HOLIDAYS_URL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:8081"]'

    # Holiday policy
    DEFAULT_ANNUAL_ALLOWANCE: Decimal = DEFAULT_ANNUAL_ALLOWANCE

    # Bank holidays (GOV.UK)
    BANK_HOLIDAYS_URL: str = GOV_UK_BANK_HOLIDAYS_URL
    BANK_HOLIDAY_REGION: str = DEFAULT_BANK_HOLIDAY_REGION
    BANK_HOLIDAYS_TIMEOUT_SECONDS: float = 10.0

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:8081"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
