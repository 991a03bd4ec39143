"""Progression profile models"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, computed_field


class LevelProgress(BaseModel):
    """Position of a total XP value inside its level"""
    level: int
    current: int  # XP earned since the level started
    needed: int  # XP span of the whole level
    percentage: float  # 0.0-1.0
    xp_to_next_level: int


class ProgressionProfile(BaseModel):
    """
    Per-user progression state

    `level` is never stored: it is recomputed from `total_xp` on every read,
    so the two can't drift apart. Any `level` passed in is ignored.
    """
    user_id: str
    total_xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    last_active_date: Optional[date] = None

    @computed_field
    @property
    def level(self) -> int:
        from progression_engine.gamification.xp_system import calculate_level_from_xp
        return calculate_level_from_xp(self.total_xp)

    @property
    def level_progress(self) -> LevelProgress:
        from progression_engine.gamification.xp_system import calculate_level_progress
        return calculate_level_progress(self.total_xp)

    def reset(self) -> "ProgressionProfile":
        """Zero every field (explicit profile reset)"""
        self.total_xp = 0
        self.streak = 0
        self.last_active_date = None
        return self
