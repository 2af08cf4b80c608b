"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Expense Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./expense_ledger.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Ledger
    # Retries after the first attempt when a commit hits a write conflict.
    LEDGER_MAX_RETRIES: int = int(os.getenv("LEDGER_MAX_RETRIES", "3"))
    LEDGER_COMMIT_TIMEOUT_SECONDS: float = float(
        os.getenv("LEDGER_COMMIT_TIMEOUT_SECONDS", "10")
    )
    LEDGER_RETRY_BACKOFF_SECONDS: float = float(
        os.getenv("LEDGER_RETRY_BACKOFF_SECONDS", "0.05")
    )
    SPLIT_TOLERANCE: Decimal = Decimal(os.getenv("SPLIT_TOLERANCE", "0.01"))
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₹")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_JSON: bool = os.getenv("LOG_JSON", "true").lower() == "true"


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused, so environment
    variables are read a single time per process.
    """
    return Settings()
