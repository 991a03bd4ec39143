"""
Achievement System

Evaluates a static achievement catalog against a user's current stats.

Features:
- Fractional progress (0.0-1.0) for locked achievements
- Idempotent unlocking: an unlocked achievement keeps its original
  unlocked_at forever, so re-evaluating on every launch never re-fires rewards
- Catalog validation at load time (duplicate ids, non-positive requirements)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from pydantic import ValidationError as PydanticValidationError

from progression_engine.exceptions import CatalogError
from progression_engine.models.achievement import (
    AchievementCategory,
    AchievementDefinition,
    AchievementProgress,
    AchievementState,
    EvaluationContext,
    RequirementType,
)

logger = logging.getLogger(__name__)

AchievementCatalog = Tuple[AchievementDefinition, ...]


def load_achievement_catalog(
    definitions: Iterable[Union[AchievementDefinition, Mapping]]
) -> AchievementCatalog:
    """
    Validate and freeze an achievement catalog

    Args:
        definitions: AchievementDefinition instances or raw dicts
            (e.g., rows from the content store)

    Returns:
        Immutable tuple of definitions, in the given order

    Raises:
        CatalogError: On an invalid entry or a duplicate id
    """
    catalog: List[AchievementDefinition] = []
    seen_ids = set()

    for raw in definitions:
        entry_id = raw.get("id") if isinstance(raw, Mapping) else raw.id
        try:
            definition = (
                raw if isinstance(raw, AchievementDefinition)
                else AchievementDefinition.model_validate(raw)
            )
        except PydanticValidationError as e:
            raise CatalogError(
                f"Invalid achievement definition '{entry_id}': {e.errors()[0]['msg']}",
                catalog_name="achievements",
                entry_id=entry_id,
                cause=e
            ) from e

        if definition.id in seen_ids:
            raise CatalogError(
                f"Duplicate achievement id '{definition.id}'",
                catalog_name="achievements",
                entry_id=definition.id
            )

        seen_ids.add(definition.id)
        catalog.append(definition)

    logger.info(f"Loaded achievement catalog with {len(catalog)} definitions")
    return tuple(catalog)


def _current_value(requirement_type: RequirementType, context: EvaluationContext) -> int:
    if requirement_type is RequirementType.STREAK_DAYS:
        return context.current_streak
    if requirement_type is RequirementType.TOTAL_COMPLETIONS:
        return context.total_completions
    if requirement_type is RequirementType.LEVEL_REACHED:
        return context.current_level
    if requirement_type is RequirementType.PERFECT_WEEK:
        return context.perfect_week_count
    raise AssertionError(f"Unhandled requirement type: {requirement_type}")


def calculate_progress(definition: AchievementDefinition, context: EvaluationContext) -> float:
    """
    Progress towards an achievement (0.0 to 1.0)

    Over-completion is capped at 1.0; negative stats count as 0.
    """
    current = max(_current_value(definition.requirement_type, context), 0)
    return min(current / definition.requirement_value, 1.0)


def should_unlock(
    definition: AchievementDefinition,
    context: EvaluationContext,
    already_unlocked: bool
) -> bool:
    """True when the requirement is met and the achievement is still locked"""
    if already_unlocked:
        return False
    return calculate_progress(definition, context) >= 1.0


def unlock(
    definition: AchievementDefinition,
    state: Optional[AchievementState] = None,
    now: Optional[datetime] = None
) -> AchievementState:
    """
    Unlock an achievement

    Calling this on an already unlocked state returns it unchanged.

    Args:
        definition: Achievement to unlock
        state: The user's existing state for it, if any
        now: Unlock timestamp (defaults to the current UTC time)

    Returns:
        AchievementState with unlocked_at set
    """
    if state is not None and state.is_unlocked:
        logger.debug(f"Achievement {definition.id} already unlocked at {state.unlocked_at}")
        return state

    return AchievementState(
        definition_id=definition.id,
        unlocked_at=now or datetime.now(timezone.utc),
    )


@dataclass
class AchievementEvaluation:
    """Outcome of evaluating the whole catalog once"""
    newly_unlocked: List[AchievementDefinition] = field(default_factory=list)
    states: Dict[str, AchievementState] = field(default_factory=dict)

    @property
    def xp_reward(self) -> int:
        return sum(definition.xp_reward for definition in self.newly_unlocked)


def evaluate_achievements(
    catalog: Iterable[AchievementDefinition],
    states: Mapping[str, AchievementState],
    context: EvaluationContext,
    now: Optional[datetime] = None,
    user_id: Optional[str] = None
) -> AchievementEvaluation:
    """
    Check every definition and unlock the ones whose requirement is met

    Args:
        catalog: Achievement definitions
        states: Existing states keyed by definition id (not mutated)
        context: Current user stats
        now: Unlock timestamp for new unlocks
        user_id: For logging only

    Returns:
        AchievementEvaluation with the newly unlocked definitions and the
        full, updated state mapping
    """
    now = now or datetime.now(timezone.utc)
    result = AchievementEvaluation(states=dict(states))

    for definition in catalog:
        state = result.states.get(definition.id)
        already_unlocked = state is not None and state.is_unlocked

        if not should_unlock(definition, context, already_unlocked):
            continue

        result.states[definition.id] = unlock(definition, state, now)
        result.newly_unlocked.append(definition)

        logger.info(
            f"User {user_id} unlocked achievement: {definition.id} "
            f"({definition.name}) +{definition.xp_reward} XP"
        )

    return result


def achievement_grid(
    catalog: Iterable[AchievementDefinition],
    states: Mapping[str, AchievementState],
    context: EvaluationContext
) -> List[AchievementProgress]:
    """
    Catalog entries with progress for display

    Unlocked achievements always report 1.0, even if the stat that earned
    them has since dropped (e.g., a broken streak).
    """
    grid = []
    for definition in catalog:
        state = states.get(definition.id)
        unlocked = state is not None and state.is_unlocked
        grid.append(AchievementProgress(
            definition=definition,
            progress=1.0 if unlocked else calculate_progress(definition, context),
            unlocked=unlocked,
            unlocked_at=state.unlocked_at if unlocked else None,
        ))
    return grid


def next_achievement(grid: Iterable[AchievementProgress]) -> Optional[AchievementProgress]:
    """Closest locked achievement (highest progress, catalog order breaks ties)"""
    best = None
    for entry in grid:
        if entry.unlocked:
            continue
        if best is None or entry.progress > best.progress:
            best = entry
    return best


# Default achievements, ordered by expected unlock progression
DEFAULT_ACHIEVEMENTS: AchievementCatalog = load_achievement_catalog([
    AchievementDefinition(
        id="first-step",
        name="First Step",
        description="Complete your first dua",
        emoji="1",
        category=AchievementCategory.PRACTICE,
        requirement_type=RequirementType.TOTAL_COMPLETIONS,
        requirement_value=1,
        xp_reward=50,
    ),
    AchievementDefinition(
        id="getting-started",
        name="Getting Started",
        description="Maintain a 3-day streak",
        emoji="3",
        category=AchievementCategory.STREAK,
        requirement_type=RequirementType.STREAK_DAYS,
        requirement_value=3,
        xp_reward=75,
    ),
    AchievementDefinition(
        id="week-warrior",
        name="Week Warrior",
        description="Maintain a 7-day streak",
        emoji="7",
        category=AchievementCategory.STREAK,
        requirement_type=RequirementType.STREAK_DAYS,
        requirement_value=7,
        xp_reward=100,
    ),
    AchievementDefinition(
        id="fortnight-faithful",
        name="Fortnight Faithful",
        description="Maintain a 14-day streak",
        emoji="14",
        category=AchievementCategory.STREAK,
        requirement_type=RequirementType.STREAK_DAYS,
        requirement_value=14,
        xp_reward=200,
    ),
    AchievementDefinition(
        id="month-master",
        name="Month Master",
        description="Maintain a 30-day streak",
        emoji="30",
        category=AchievementCategory.STREAK,
        requirement_type=RequirementType.STREAK_DAYS,
        requirement_value=30,
        xp_reward=500,
    ),
    AchievementDefinition(
        id="level-5",
        name="Rising Star",
        description="Reach Level 5",
        emoji="5",
        category=AchievementCategory.LEVEL,
        requirement_type=RequirementType.LEVEL_REACHED,
        requirement_value=5,
        xp_reward=200,
    ),
    AchievementDefinition(
        id="perfect-week",
        name="Perfect Week",
        description="Be active on all 7 days of a week",
        emoji="W",
        category=AchievementCategory.SPECIAL,
        requirement_type=RequirementType.PERFECT_WEEK,
        requirement_value=1,
        xp_reward=300,
    ),
])
