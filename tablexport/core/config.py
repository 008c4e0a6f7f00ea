import os
import tempfile
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application wide settings loaded from environment variables or .env file.
    Provides strict validation on startup to prevent silent failures.
    """

    APP_NAME: str = "Tablexport Engine"
    ENVIRONMENT: Literal["development", "production", "testing"] = "development"

    # Database Configuration
    DB_ENGINE: Literal["duckdb", "oracledb"] = "duckdb"

    # DuckDB Specifics
    DUCKDB_PATH: str = ":memory:"

    # Oracle Specifics
    ORACLE_USER: str = ""
    ORACLE_PASSWORD: str = ""
    ORACLE_DSN: str = ""
    ORACLE_MIN_POOL: int = int(os.getenv("ORACLE_MIN_POOL", "2"))
    ORACLE_MAX_POOL: int = int(os.getenv("ORACLE_MAX_POOL", "10"))

    # Export Engine
    EXPORT_PAGE_SIZE: int = 500
    EXPORT_OUTPUT_DIR: str = os.path.join(tempfile.gettempdir(), "tablexport")
    EXPORT_MAX_WORKERS: int = 4
    EXPORT_JOB_MAX_AGE_MINUTES: int = 30
    EXPORT_RATE_LIMIT: str = os.getenv("EXPORT_RATE_LIMIT", "5/minute")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"

    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars passed by system that aren't defined here
    )


@lru_cache()
def get_settings() -> Settings:
    """Cached singleton of application settings."""
    return Settings()
