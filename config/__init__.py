"""Application configuration utilities."""

from .settings import DEFAULT_STORAGE_PATH, Settings, configure_logging, get_settings

__all__ = [
    "DEFAULT_STORAGE_PATH",
    "Settings",
    "configure_logging",
    "get_settings",
]
