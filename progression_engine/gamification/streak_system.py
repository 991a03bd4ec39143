"""
Streak Tracking System

A streak counts consecutive calendar days with at least one completion.

Two externally visible states:
- active: streak > 0 and last_active_date is today or yesterday
- broken: streak == 0

Validity is checked lazily: there is no background job. reconcile() runs when
a profile is loaded and zeroes a streak whose last active day is two or more
days back; update_streak() runs on each XP-earning event.

The same streak can be derived from an activity window
(current_streak_from_window); for a consistent profile/ledger pair both
derivations agree, capped at the window length.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence
import logging

from progression_engine.models.activity import ActivityRecord
from progression_engine.models.profile import ProgressionProfile

logger = logging.getLogger(__name__)


@dataclass
class StreakUpdate:
    """Result of an XP-event streak transition"""
    old_streak: int
    current_streak: int
    extended: bool  # active -> active, +1
    restarted: bool  # broken/never active -> 1

    @property
    def changed(self) -> bool:
        return self.current_streak != self.old_streak


def reconcile(profile: ProgressionProfile, today: date) -> ProgressionProfile:
    """
    Resolve a stale streak on load

    Logic:
    - Last active today or yesterday: streak still valid, no change
    - Last active in the future (clock skew): left untouched
    - Anything else (gap of 2+ days, or never active): streak = 0

    Args:
        profile: Profile to check (mutated in place)
        today: Current calendar date

    Returns:
        The same profile
    """
    last_date = profile.last_active_date
    yesterday = today - timedelta(days=1)

    if last_date is not None and last_date > today:
        logger.warning(
            f"User {profile.user_id} last active date {last_date} is after today {today}, "
            "leaving streak unchanged"
        )
        return profile

    if last_date in (today, yesterday):
        return profile

    if profile.streak != 0:
        logger.info(
            f"User {profile.user_id} streak broken. Was {profile.streak}, "
            f"last active {last_date}"
        )
        profile.streak = 0

    return profile


def update_streak(profile: ProgressionProfile, today: date) -> StreakUpdate:
    """
    Apply the streak transition for an XP-earning event today

    Logic:
    - Already active today: no change
    - Active yesterday: streak + 1
    - Gap of 2+ days or never active: restart at 1

    Args:
        profile: Profile to update (mutated in place)
        today: Calendar date of the event

    Returns:
        StreakUpdate describing the transition
    """
    old_streak = profile.streak
    last_date = profile.last_active_date
    extended = False
    restarted = False

    if last_date is not None and last_date >= today:
        if last_date > today:
            logger.warning(
                f"User {profile.user_id} last active date {last_date} is after today {today}, "
                "treating today as already counted"
            )
        # Already counted for today
        return StreakUpdate(old_streak, old_streak, extended, restarted)

    if last_date == today - timedelta(days=1):
        profile.streak = old_streak + 1
        extended = True
    else:
        profile.streak = 1
        restarted = True

    profile.last_active_date = today

    logger.info(
        f"Updated streak for user {profile.user_id}: "
        f"{old_streak} → {profile.streak} days"
    )

    return StreakUpdate(old_streak, profile.streak, extended, restarted)


def current_streak_from_window(window: Sequence[ActivityRecord]) -> int:
    """
    Count the streak ending at the last day of an activity window

    Walks backward from the final slot. The final slot is "today": when it
    has no completions yet it is skipped without breaking the streak. Any
    earlier day with no completions ends the count.

    Args:
        window: Consecutive days, oldest first (see ActivityLedger.window)

    Returns:
        Streak length, at most len(window)
    """
    streak = 0
    last_index = len(window) - 1

    for index in range(last_index, -1, -1):
        if window[index].completed_count > 0:
            streak += 1
        elif index == last_index:
            continue
        else:
            break

    return streak


def streak_message(streak: int) -> str:
    """Home-screen encouragement for a streak length"""
    if streak <= 0:
        return "Start your journey today!"
    if streak < 3:
        return "Great start! Keep going!"
    if streak < 7:
        return "You're building momentum!"
    if streak < 14:
        return "Amazing consistency!"
    if streak < 30:
        return "You're on fire!"
    return "Incredible dedication!"
