"""
Application configuration settings
"""
import os
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # App
    APP_NAME: str = "GSE Cognitive State API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")  # development, staging, production

    # CORS (overlay / dashboard front-end)
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:1420",
        "tauri://localhost",
    ]

    # Monitoring
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Keystroke feature extraction
    # The estimation core itself has no tunables: its matrices and
    # calibration thresholds live in adaptive.cognitive_state.constants.
    FEATURE_WINDOW_SECONDS: float = float(os.getenv("FEATURE_WINDOW_SECONDS", "30.0"))
    PAUSE_THRESHOLD_MS: float = float(os.getenv("PAUSE_THRESHOLD_MS", "2000.0"))
    MIN_FLIGHT_TIME_MS: float = float(os.getenv("MIN_FLIGHT_TIME_MS", "10.0"))

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


settings = Settings()
