"""Startup checks and quote-of-the-day preview"""
import logging
import sys
from datetime import date
from typing import Optional

from progression_engine.config import configure_logging, validate_config
from progression_engine.exceptions import ConfigurationError
from progression_engine.gamification.achievement_system import DEFAULT_ACHIEVEMENTS, load_achievement_catalog
from progression_engine.gamification.daily_content import DEFAULT_QUOTES, load_quote_catalog, quote_for
from progression_engine.utils.datetime_helpers import today_in_timezone

logger = logging.getLogger(__name__)


def main(today: Optional[date] = None) -> int:
    """
    Validate configuration and catalogs, then print today's quote

    Catalog problems surface here, at startup, never mid-session.

    Returns:
        Process exit code
    """
    configure_logging()

    try:
        logger.info("Validating configuration...")
        validate_config()

        logger.info("Validating catalogs...")
        achievements = load_achievement_catalog(DEFAULT_ACHIEVEMENTS)
        quotes = load_quote_catalog(DEFAULT_QUOTES.quotes)
    except ConfigurationError as e:
        logger.error(f"Startup failed: {e.message}")
        return 1

    today = today or today_in_timezone()
    quote = quote_for(today, quotes)

    logger.info(f"{len(achievements)} achievements, {len(quotes)} quotes ready")
    print(f"{today.isoformat()}: {quote.english_text} ({quote.source})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
