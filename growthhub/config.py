"""
GrowthHub Core — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from growthhub/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Durable storage: "sqlite" | "none" (start in volatile mode)
    STORAGE_BACKEND: str = "sqlite"
    DATABASE_PATH: str = "data/brandportal.db"

    # Mirror cache for state snapshots; empty → memory only
    STATE_CACHE_PATH: str = "data/state_cache.json"

    # Kept short so a hanging backend can't freeze the app
    STORE_CONNECT_TIMEOUT_MS: int = 800

    # Content calendar
    SCHEDULE_MAX_DAYS: int = 365

    LOG_LEVEL: str = "INFO"

    @field_validator("STORE_CONNECT_TIMEOUT_MS", "SCHEDULE_MAX_DAYS", mode="before")
    @classmethod
    def parse_positive_int(cls, v: str | int) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError(f"must be a positive integer, got {value}")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        STORAGE_BACKEND=os.getenv("STORAGE_BACKEND", "sqlite"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/brandportal.db"),
        STATE_CACHE_PATH=os.getenv("STATE_CACHE_PATH", "data/state_cache.json"),
        STORE_CONNECT_TIMEOUT_MS=os.getenv("STORE_CONNECT_TIMEOUT_MS", "800"),
        SCHEDULE_MAX_DAYS=os.getenv("SCHEDULE_MAX_DAYS", "365"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from growthhub.config import settings
settings = _load_settings()
