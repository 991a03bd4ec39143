"""Daily activity models"""
import datetime
from typing import List
from pydantic import BaseModel, Field


class ActivityRecord(BaseModel):
    """One user's completions for one calendar date"""
    date: datetime.date
    completed_count: int = Field(default=0, ge=0)
    total_count: int = Field(default=0, ge=0)  # 0 means no habits configured that day
    xp_earned: int = Field(default=0, ge=0)
    completed_item_ids: set[str] = Field(default_factory=set)
    is_placeholder: bool = False  # synthesized for a day with no stored record

    @classmethod
    def placeholder(cls, day: datetime.date) -> "ActivityRecord":
        """Empty stand-in for a day the ledger has no record of"""
        return cls(date=day, is_placeholder=True)

    @property
    def is_active(self) -> bool:
        return self.completed_count > 0

    @property
    def completion_ratio(self) -> float:
        if self.total_count <= 0:
            return 0.0
        return min(self.completed_count / self.total_count, 1.0)


class TodayProgress(BaseModel):
    """Same-day counters shown on the home screen"""
    completed: int
    total: int
    xp_earned: int


class WeeklySummary(BaseModel):
    """Aggregate of a fixed 7-day window ending today"""
    days: List[ActivityRecord]
    active_days: int
    total_xp_earned: int
    is_perfect_week: bool
    current_streak: int
