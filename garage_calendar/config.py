"""
Centralized configuration with environment variable overrides.

Layout constants, slot search parameters, and the garage API location
are all configurable here. Nothing is hardcoded in calendar or tool logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from garage_calendar.logging_context import install_session_filter

load_dotenv()

logger = logging.getLogger(__name__)


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
class LayoutConfig:
    """Pixel geometry and detail thresholds for the calendar views."""

    pixels_per_minute: float = _safe_float("PIXELS_PER_MINUTE", "1.0")
    day_base_offset_px: int = _safe_int("DAY_BASE_OFFSET_PX", "10")
    week_base_offset_px: int = _safe_int("WEEK_BASE_OFFSET_PX", "5")
    overlap_shift_px: int = _safe_int("OVERLAP_SHIFT_PX", "10")
    day_width_percent: int = _safe_int("DAY_WIDTH_PERCENT", "97")
    week_width_percent: int = _safe_int("WEEK_WIDTH_PERCENT", "85")
    detail_threshold_minutes: int = _safe_int("DETAIL_THRESHOLD_MINUTES", "30")
    month_visible_bookings: int = _safe_int("MONTH_VISIBLE_BOOKINGS", "2")

    @property
    def pixels_per_hour(self) -> float:
        return self.pixels_per_minute * 60


@dataclass(frozen=True)
class SlotConfig:
    """Slot search and garage API settings."""

    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "30")
    default_open_time: str = os.getenv("DEFAULT_OPEN_TIME", "08:00")
    default_close_time: str = os.getenv("DEFAULT_CLOSE_TIME", "18:00")
    api_base_url: str = os.getenv("GARAGE_API_URL", "http://localhost:3000")
    api_timeout_sec: float = _safe_float("GARAGE_API_TIMEOUT", "10.0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    slots: SlotConfig = field(default_factory=SlotConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    garage_name: str = os.getenv("GARAGE_NAME", "Main Street Garage")


def _validate_hhmm(env_var: str, value: str) -> None:
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"{env_var} must be HH:MM, got {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"{env_var} must be HH:MM, got {value!r}")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.layout.pixels_per_minute <= 0:
        raise ValueError(
            f"PIXELS_PER_MINUTE must be > 0, got {config.layout.pixels_per_minute}"
        )
    if config.layout.overlap_shift_px < 0:
        raise ValueError(
            f"OVERLAP_SHIFT_PX must be >= 0, got {config.layout.overlap_shift_px}"
        )
    for name, value in [
        ("DAY_WIDTH_PERCENT", config.layout.day_width_percent),
        ("WEEK_WIDTH_PERCENT", config.layout.week_width_percent),
    ]:
        if not 1 <= value <= 100:
            raise ValueError(f"{name} must be between 1 and 100, got {value}")
    if config.layout.detail_threshold_minutes < 1:
        raise ValueError(
            "DETAIL_THRESHOLD_MINUTES must be >= 1, "
            f"got {config.layout.detail_threshold_minutes}"
        )
    if config.layout.month_visible_bookings < 1:
        raise ValueError(
            f"MONTH_VISIBLE_BOOKINGS must be >= 1, got {config.layout.month_visible_bookings}"
        )
    if config.slots.slot_step_minutes not in (5, 10, 15, 20, 30, 60):
        raise ValueError(
            "SLOT_STEP_MINUTES must be one of 5, 10, 15, 20, 30, 60, "
            f"got {config.slots.slot_step_minutes}"
        )
    if config.slots.api_timeout_sec <= 0:
        raise ValueError(
            f"GARAGE_API_TIMEOUT must be > 0, got {config.slots.api_timeout_sec}"
        )
    _validate_hhmm("DEFAULT_OPEN_TIME", config.slots.default_open_time)
    _validate_hhmm("DEFAULT_CLOSE_TIME", config.slots.default_close_time)


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_filter(logging.getLogger().handlers)
    logger.info("Configuration loaded for '%s'", config.garage_name)
    return config


# Singleton instance
settings = load_config()
