"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime


class AchievementCategory(str, Enum):
    """Achievement categories"""
    STREAK = "streak"
    PRACTICE = "practice"
    LEVEL = "level"
    SPECIAL = "special"

    @property
    def display_name(self) -> str:
        return {
            AchievementCategory.STREAK: "Consistency",
            AchievementCategory.PRACTICE: "Practice",
            AchievementCategory.LEVEL: "Milestone",
            AchievementCategory.SPECIAL: "Special",
        }[self]


class RequirementType(str, Enum):
    """What an achievement's requirement_value is compared against"""
    STREAK_DAYS = "streak_days"
    TOTAL_COMPLETIONS = "total_completions"
    LEVEL_REACHED = "level_reached"
    PERFECT_WEEK = "perfect_week"


class AchievementDefinition(BaseModel):
    """Static catalog entry"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    emoji: str = ""
    category: AchievementCategory
    requirement_type: RequirementType
    requirement_value: int
    xp_reward: int = Field(default=0, ge=0)

    @field_validator('requirement_value')
    @classmethod
    def positive_requirement(cls, v: int) -> int:
        """A zero requirement would divide by zero during evaluation"""
        if v <= 0:
            raise ValueError("requirement_value must be positive")
        return v


class AchievementState(BaseModel):
    """User's lock/unlock state for one definition"""
    definition_id: str
    unlocked_at: Optional[datetime] = None

    @property
    def is_unlocked(self) -> bool:
        return self.unlocked_at is not None


class EvaluationContext(BaseModel):
    """Current user stats needed to evaluate achievement progress"""
    current_streak: int = 0
    total_completions: int = 0
    current_level: int = 1
    perfect_week_count: int = 0


class AchievementProgress(BaseModel):
    """One tile of the achievement grid"""
    definition: AchievementDefinition
    progress: float
    unlocked: bool
    unlocked_at: Optional[datetime] = None
