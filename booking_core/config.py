"""
Centralized configuration with environment variable overrides.

Slot granularity, locking and retry bounds, and validation limits are
configurable here. Scheduling and review logic read these values instead
of hardcoding them.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_core.logging_context import install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot discretization, booking lock and retry settings."""

    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "30")
    lock_timeout_sec: float = _safe_float("LOCK_TIMEOUT_SEC", "5.0")
    max_booking_retries: int = _safe_int("MAX_BOOKING_RETRIES", "3")
    max_notes_length: int = _safe_int("MAX_NOTES_LENGTH", "500")
    available_dates_window_days: int = _safe_int("AVAILABLE_DATES_WINDOW_DAYS", "14")


@dataclass(frozen=True)
class ReviewConfig:
    """Bounds for customer review ratings."""

    min_rating: int = _safe_int("MIN_RATING", "1")
    max_rating: int = _safe_int("MAX_RATING", "5")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    reviews: ReviewConfig = field(default_factory=ReviewConfig)
    default_page_size: int = _safe_int("DEFAULT_PAGE_SIZE", "10")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "booking-core")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    granularity = config.scheduling.slot_granularity_minutes
    if not 1 <= granularity <= 24 * 60:
        raise ValueError(
            f"SLOT_GRANULARITY_MINUTES must be between 1 and 1440, got {granularity}"
        )
    if config.scheduling.lock_timeout_sec <= 0:
        raise ValueError(
            f"LOCK_TIMEOUT_SEC must be > 0, got {config.scheduling.lock_timeout_sec}"
        )
    if config.scheduling.max_booking_retries < 0:
        raise ValueError(
            f"MAX_BOOKING_RETRIES must be >= 0, got {config.scheduling.max_booking_retries}"
        )
    if config.scheduling.max_notes_length < 1:
        raise ValueError(
            f"MAX_NOTES_LENGTH must be >= 1, got {config.scheduling.max_notes_length}"
        )
    if config.scheduling.available_dates_window_days < 1:
        raise ValueError(
            "AVAILABLE_DATES_WINDOW_DAYS must be >= 1, "
            f"got {config.scheduling.available_dates_window_days}"
        )
    if config.reviews.min_rating < 1:
        raise ValueError(f"MIN_RATING must be >= 1, got {config.reviews.min_rating}")
    if config.reviews.max_rating < config.reviews.min_rating:
        raise ValueError(
            f"MAX_RATING must be >= MIN_RATING, got {config.reviews.max_rating}"
        )
    if config.default_page_size < 1:
        raise ValueError(
            f"DEFAULT_PAGE_SIZE must be >= 1, got {config.default_page_size}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        install_request_id_filter(handler)
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
