"""
XP and Leveling System

Maps total XP to a level and the position inside that level, and applies
XP-earning events to a profile.

Leveling Curve:
- threshold(n) = 50*n^2 + 50*n XP to leave level n (threshold(0) = 0)
- Level 1: 0-99, Level 2: 100-299, Level 3: 300-599, Level 4: 600-999, ...

Nothing here raises: negative inputs are clamped to zero.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
import logging

from progression_engine.gamification.streak_system import update_streak
from progression_engine.models.profile import LevelProgress, ProgressionProfile

logger = logging.getLogger(__name__)


def xp_threshold(level: int) -> int:
    """Total XP at which `level` is completed (the next level starts)"""
    level = max(level, 0)
    return 50 * level * level + 50 * level


def calculate_level_from_xp(total_xp: int) -> int:
    """
    Calculate level from total XP

    Returns the largest L >= 1 with threshold(L - 1) <= total_xp.
    """
    total_xp = max(total_xp, 0)
    level = 1
    while xp_threshold(level) <= total_xp:
        level += 1
    return level


def calculate_level_progress(total_xp: int, level: Optional[int] = None) -> LevelProgress:
    """
    Calculate progress within a level

    Args:
        total_xp: User's total XP
        level: Level to measure against (defaults to the level total_xp is in)

    Returns:
        LevelProgress with current/needed XP and a 0.0-1.0 percentage
    """
    total_xp = max(total_xp, 0)
    if level is None:
        level = calculate_level_from_xp(total_xp)
    level = max(level, 1)

    level_start = xp_threshold(level - 1)
    level_end = xp_threshold(level)
    current = total_xp - level_start
    needed = level_end - level_start

    if needed <= 0:
        percentage = 0.0
    else:
        percentage = min(max(current / needed, 0.0), 1.0)

    return LevelProgress(
        level=level,
        current=current,
        needed=needed,
        percentage=percentage,
        xp_to_next_level=max(0, level_end - total_xp),
    )


@dataclass
class XPAward:
    """Outcome of applying XP to a profile"""
    xp_awarded: int
    old_total_xp: int
    new_total_xp: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def apply_xp(
    profile: ProgressionProfile,
    amount: int,
    today: date,
    counts_as_activity: bool = True
) -> XPAward:
    """
    Award XP to a profile

    A positive award is an XP-earning event: unless `counts_as_activity` is
    False (achievement rewards), it also runs the streak transition for
    `today`.

    Args:
        profile: Profile to mutate
        amount: XP to add (negative values are treated as 0)
        today: Current calendar date
        counts_as_activity: Whether the award extends the streak

    Returns:
        XPAward describing the change
    """
    amount = max(amount, 0)
    old_total_xp = profile.total_xp
    old_level = profile.level

    profile.total_xp = old_total_xp + amount

    if amount > 0 and counts_as_activity:
        update_streak(profile, today)

    award = XPAward(
        xp_awarded=amount,
        old_total_xp=old_total_xp,
        new_total_xp=profile.total_xp,
        old_level=old_level,
        new_level=profile.level,
    )

    logger.info(
        f"Awarded {amount} XP to user {profile.user_id}. "
        f"Total: {award.new_total_xp} XP, Level: {award.new_level}"
    )
    if award.leveled_up:
        logger.info(f"User {profile.user_id} leveled up from {old_level} to {award.new_level}!")

    return award
