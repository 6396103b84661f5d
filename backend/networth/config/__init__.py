"""Configuration package for the net worth engine."""

from .settings import (
    DEFAULT_DISPLAY_CURRENCY,
    DEFAULT_PRICE_CACHE_TTL_MINUTES,
    DEFAULT_SNAPSHOT_STALE_AFTER_DAYS,
    AppSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "get_settings",
    "DEFAULT_DISPLAY_CURRENCY",
    "DEFAULT_PRICE_CACHE_TTL_MINUTES",
    "DEFAULT_SNAPSHOT_STALE_AFTER_DAYS",
]
