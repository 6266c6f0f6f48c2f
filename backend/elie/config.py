"""
Configuration settings for the ELIE backend.
Uses pydantic-settings for environment variable support.
"""

from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "ELIE"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    # resolved relative to this config file (backend/elie/config.py -> backend/elie.db)
    _BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(_BASE_DIR, 'elie.db')}"

    # Remote assistant API
    OPENAI_API_BASE: str = "https://api.openai.com/"
    OPENAI_BETA_HEADER: str = "assistants=v2"
    REQUEST_TIMEOUT: float = 120.0

    # Run polling
    RUN_POLL_INTERVAL: float = 2.0
    RUN_POLL_TIMEOUT: Optional[float] = None  # None polls until the run completes

    # File ingestion
    UPLOAD_PURPOSE: str = "assistants"
    UPLOAD_CHUNK_SIZE: int = 64 * 1024
    MAX_UPLOAD_SIZE: int = 512 * 1024 * 1024  # 512MB, the provider's per-file limit
    FILE_READY_DELAY: float = 5.0

    # Connectivity probe
    CONNECTIVITY_CHECK_URL: str = "https://api.openai.com/"
    CONNECTIVITY_TIMEOUT: float = 5.0

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
