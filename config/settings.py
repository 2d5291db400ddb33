"""Centralised configuration handling for PayCycle."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_PATH = Path("data") / "budget.json"
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """Runtime settings sourced from ``PAYCYCLE_*`` environment variables."""

    storage_path: Path = DEFAULT_STORAGE_PATH
    log_level: str = "INFO"
    day_check_interval_seconds: float = 60.0
    autosave: bool = True

    model_config = SettingsConfigDict(env_prefix="PAYCYCLE_", extra="ignore")

    @property
    def numeric_log_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level and format to the root logger."""

    settings = settings or get_settings()
    logging.basicConfig(level=settings.numeric_log_level, format=DEFAULT_LOG_FORMAT)
