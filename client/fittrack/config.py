"""
FitTrack Client Configuration
=============================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad backend URL or timeout fails on boot, not
halfway through somebody's workout.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables (FITTRACK_*) or a .env file."""

    # --- Remote fitness backend ---
    api_base_url: str = "http://localhost:5000"
    # Upper bound for any single backend call. A hung request surfaces as a
    # connection error instead of leaving a button stuck in "loading".
    request_timeout_seconds: float = 15.0

    # --- Student dashboard ---
    timer_tick_seconds: float = 1.0

    # --- Trainer dashboard ---
    success_banner_seconds: float = 3.0

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    model_config = {
        "env_prefix": "FITTRACK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
