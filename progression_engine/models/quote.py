"""Daily quote models"""
from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict


class QuoteCategory(str, Enum):
    """Quote source categories"""
    QURAN = "quran"
    HADITH = "hadith"
    WISDOM = "wisdom"

    @property
    def display_name(self) -> str:
        return {
            QuoteCategory.QURAN: "Quran",
            QuoteCategory.HADITH: "Hadith",
            QuoteCategory.WISDOM: "Wisdom",
        }[self]


class Quote(BaseModel):
    """Inspirational quote shown on the quote-of-the-day card"""
    model_config = ConfigDict(frozen=True)

    id: str
    arabic_text: Optional[str] = None
    english_text: str
    source: str
    category: QuoteCategory

    @property
    def has_arabic_text(self) -> bool:
        return bool(self.arabic_text)

    @property
    def accessibility_description(self) -> str:
        desc = f"{self.category.display_name} quote: {self.english_text} Source: {self.source}."
        if self.has_arabic_text:
            desc += " Arabic text available."
        return desc


class QuoteCatalog(BaseModel):
    """Ordered, immutable quote collection (never empty once loaded)"""
    model_config = ConfigDict(frozen=True)

    quotes: Tuple[Quote, ...]

    def __len__(self) -> int:
        return len(self.quotes)

    def __getitem__(self, index: int) -> Quote:
        return self.quotes[index]
