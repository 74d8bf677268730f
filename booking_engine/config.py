"""
Centralized configuration with environment variable overrides.

Business timezone, slot granularity, collaborator timeouts, and waitlist
behaviour are configurable here. Nothing is hardcoded in engine logic.
"""

import logging
import os
from dataclasses import dataclass, field

import pytz
from dotenv import load_dotenv

from booking_engine.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


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


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (true/false, yes/no, on/off, 1/0) from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Phace Skin Studio")


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation and booking commit settings."""

    business_timezone: str = os.getenv("BUSINESS_TIMEZONE", "UTC")
    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "15")
    lookup_timeout_sec: float = _safe_float("LOOKUP_TIMEOUT_SECONDS", "5.0")
    allow_past_dates: bool = _safe_bool("ALLOW_PAST_DATES", "false")

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.business_timezone)


@dataclass(frozen=True)
class WaitlistConfig:
    """Waitlist reconciliation settings."""

    auto_contact_on_cancel: bool = _safe_bool("WAITLIST_AUTO_CONTACT", "true")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    waitlist: WaitlistConfig = field(default_factory=WaitlistConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    engine_name: str = os.getenv("ENGINE_NAME", "booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        pytz.timezone(config.scheduling.business_timezone)
    except pytz.UnknownTimeZoneError:
        raise ValueError(
            f"BUSINESS_TIMEZONE is not a known timezone: {config.scheduling.business_timezone!r}"
        ) from None
    if not 1 <= config.scheduling.slot_granularity_minutes <= 1440:
        raise ValueError(
            "SLOT_GRANULARITY_MINUTES must be between 1 and 1440, "
            f"got {config.scheduling.slot_granularity_minutes}"
        )
    if config.scheduling.lookup_timeout_sec <= 0:
        raise ValueError(
            f"LOOKUP_TIMEOUT_SECONDS must be > 0, got {config.scheduling.lookup_timeout_sec}"
        )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    _configure_logging(config.log_level)
    logger.info(
        "Configuration loaded for '%s' (timezone=%s, granularity=%dmin)",
        config.business.name,
        config.scheduling.business_timezone,
        config.scheduling.slot_granularity_minutes,
    )
    return config


# Singleton instance
settings = load_config()
