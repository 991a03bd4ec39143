"""
Daily Content Rotation

Deterministic date -> catalog index mapping for the quote-of-the-day card.

index = (day_of_year(date) - 1) mod catalog_size

Only the calendar date matters (no time of day, no timezone), so every client
showing the same date shows the same quote. Changing the catalog size
reshuffles selections from then on; already-served days are never
recomputed by the engine.
"""

from datetime import date
from typing import Iterable, Mapping, Union
import logging

from pydantic import ValidationError as PydanticValidationError

from progression_engine.exceptions import CatalogError
from progression_engine.models.quote import Quote, QuoteCatalog, QuoteCategory
from progression_engine.utils.datetime_helpers import day_of_year

logger = logging.getLogger(__name__)


def select_index(day: date, catalog_size: int) -> int:
    """
    Index into a catalog of `catalog_size` items for a date

    Raises:
        CatalogError: If catalog_size is not positive
    """
    if catalog_size <= 0:
        raise CatalogError(
            f"Cannot rotate through a catalog of size {catalog_size}",
            catalog_name="quotes"
        )
    return (day_of_year(day) - 1) % catalog_size


def quote_for(day: date, catalog: QuoteCatalog) -> Quote:
    """Quote of the day for a date"""
    return catalog[select_index(day, len(catalog))]


def load_quote_catalog(quotes: Iterable[Union[Quote, Mapping]]) -> QuoteCatalog:
    """
    Validate and freeze a quote catalog

    Raises:
        CatalogError: On an empty catalog or an invalid entry
    """
    try:
        catalog = QuoteCatalog(quotes=tuple(
            quote if isinstance(quote, Quote) else Quote.model_validate(quote)
            for quote in quotes
        ))
    except PydanticValidationError as e:
        raise CatalogError(
            f"Invalid quote: {e.errors()[0]['msg']}",
            catalog_name="quotes",
            cause=e
        ) from e

    if len(catalog) == 0:
        raise CatalogError("Quote catalog is empty", catalog_name="quotes")

    logger.info(f"Loaded quote catalog with {len(catalog)} quotes")
    return catalog


DEFAULT_QUOTES: QuoteCatalog = load_quote_catalog([
    Quote(
        id="q1",
        arabic_text="فَإِنَّ مَعَ الْعُسْرِ يُسْرًا",
        english_text="For indeed, with hardship comes ease.",
        source="Quran 94:5",
        category=QuoteCategory.QURAN,
    ),
    Quote(
        id="q2",
        arabic_text="وَاذْكُر رَّبَّكَ كَثِيرًا",
        english_text="And remember your Lord much.",
        source="Quran 3:41",
        category=QuoteCategory.QURAN,
    ),
    Quote(
        id="q3",
        english_text="The best among you are those who have the best manners and character.",
        source="Sahih Bukhari",
        category=QuoteCategory.HADITH,
    ),
    Quote(
        id="q4",
        arabic_text="مَن لَزِمَ الاستغفارَ جعل اللهُ له من كلِّ همٍّ فرجًا",
        english_text=(
            "Whoever remains constant in seeking forgiveness, "
            "Allah will grant them relief from every worry."
        ),
        source="Abu Dawud",
        category=QuoteCategory.HADITH,
    ),
    Quote(
        id="q5",
        english_text=(
            "Take benefit of five before five: your youth before your old age, "
            "your health before your sickness, your wealth before your poverty, "
            "your free time before your preoccupation, and your life before your death."
        ),
        source="Sahih Hadith",
        category=QuoteCategory.WISDOM,
    ),
    Quote(
        id="q6",
        arabic_text="الدُّعَاءُ هُوَ الْعِبَادَةُ",
        english_text="Dua is the essence of worship.",
        source="Tirmidhi",
        category=QuoteCategory.HADITH,
    ),
    Quote(
        id="q7",
        english_text="Be in this world as if you were a stranger or a traveler along a path.",
        source="Sahih Bukhari",
        category=QuoteCategory.WISDOM,
    ),
])
