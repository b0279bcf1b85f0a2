"""
Application configuration.

Settings come from environment variables, optionally seeded from
a .env file in the working directory. Connection strings belong
in the environment, not in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Wallet settings read once from the environment."""

    APP_NAME: str = "Wallet Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = _flag("DEBUG")

    # Any SQLAlchemy URL; SQLite is fine for a single process
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wallet_ledger.db")
    SQL_ECHO: bool = _flag("SQL_ECHO")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON: bool = _flag("LOG_JSON", "true")


@lru_cache()
def get_settings() -> Settings:
    """Build the Settings on first use and hand back the same instance after."""
    return Settings()
