"""
Progression & motivation engine

Deterministic computations shared by every client:
- XP and leveling (LevelMath)
- Per-day activity ledger with fixed-length windows
- Streak continuity, checked lazily on load
- Achievement progress and idempotent unlocks
- Motivation state for the home-screen call to action
- Day-keyed quote rotation

Everything here is synchronous and performs no I/O.
"""

from progression_engine.gamification.xp_system import (
    apply_xp,
    calculate_level_from_xp,
    calculate_level_progress,
    xp_threshold,
)
from progression_engine.gamification.streak_system import (
    current_streak_from_window,
    reconcile,
    update_streak,
)
from progression_engine.gamification.activity_ledger import ActivityLedger
from progression_engine.gamification.achievement_system import (
    DEFAULT_ACHIEVEMENTS,
    achievement_grid,
    calculate_progress,
    evaluate_achievements,
    load_achievement_catalog,
    should_unlock,
    unlock,
)
from progression_engine.gamification.motivation import classify
from progression_engine.gamification.daily_content import (
    DEFAULT_QUOTES,
    load_quote_catalog,
    quote_for,
    select_index,
)

__all__ = [
    "apply_xp",
    "calculate_level_from_xp",
    "calculate_level_progress",
    "xp_threshold",
    "current_streak_from_window",
    "reconcile",
    "update_streak",
    "ActivityLedger",
    "DEFAULT_ACHIEVEMENTS",
    "achievement_grid",
    "calculate_progress",
    "evaluate_achievements",
    "load_achievement_catalog",
    "should_unlock",
    "unlock",
    "classify",
    "DEFAULT_QUOTES",
    "load_quote_catalog",
    "quote_for",
    "select_index",
]
