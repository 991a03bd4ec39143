"""Configuration management"""
import logging
import os
from typing import Optional
from dotenv import load_dotenv

from progression_engine.exceptions import ConfigurationError

load_dotenv()


def _parse_int(value: str) -> Optional[int]:
    """Integer setting, or None when the text is not an integer"""
    try:
        return int(value)
    except ValueError:
        return None


# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar
# "Today" is resolved in this zone when the caller does not pass a date
DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")

# Activity recorded further ahead than this many days is ignored
# (one day of slack covers clients a timezone ahead of the server).
# A non-integer value falls back to 1 here and is rejected by validate_config().
MAX_FUTURE_DAYS_SETTING: str = os.getenv("MAX_FUTURE_DAYS", "1")
_max_future_days = _parse_int(MAX_FUTURE_DAYS_SETTING)
MAX_FUTURE_DAYS: int = 1 if _max_future_days is None else _max_future_days

# Weekly summaries and the perfect-week rule always look at 7 days
WEEK_LENGTH: int = 7


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        raise ConfigurationError(f"Unknown LOG_LEVEL '{LOG_LEVEL}'", config_key="LOG_LEVEL")
    if _parse_int(MAX_FUTURE_DAYS_SETTING) is None:
        raise ConfigurationError(
            f"MAX_FUTURE_DAYS must be an integer, got '{MAX_FUTURE_DAYS_SETTING}'",
            config_key="MAX_FUTURE_DAYS"
        )
    if MAX_FUTURE_DAYS < 0:
        raise ConfigurationError("MAX_FUTURE_DAYS must not be negative", config_key="MAX_FUTURE_DAYS")
    if not DEFAULT_TIMEZONE:
        raise ConfigurationError("DEFAULT_TIMEZONE is required", config_key="DEFAULT_TIMEZONE")


def configure_logging() -> None:
    """Configure root logging the same way for every entry point"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )
