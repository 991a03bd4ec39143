"""
Motivation state model

Five closed kinds. Every copy table below is keyed by MotivationKind and
checked for completeness at import, so adding a kind without its copy fails
immediately instead of rendering an empty card.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MotivationKind(str, Enum):
    """Discrete classification of today's completion ratio"""
    NO_HABITS = "no_habits"
    NOT_STARTED = "not_started"
    LIGHT_DAY = "light_day"
    PRODUCTIVE_DAY = "productive_day"
    PERFECT_DAY = "perfect_day"


# Streak lengths at which the perfect-day copy switches to milestone teasers
WEEK_MILESTONE_STREAK = 6
MONTH_MILESTONE_STREAK = 29

_TITLES = {
    MotivationKind.NO_HABITS: "Start Your Journey",
    MotivationKind.NOT_STARTED: "Ready to Begin",
    MotivationKind.LIGHT_DAY: "Light Day",
    MotivationKind.PRODUCTIVE_DAY: "Making Progress",
    MotivationKind.PERFECT_DAY: "Perfect Day!",
}

_ACTIONS = {
    MotivationKind.NO_HABITS: "Browse Journeys",
    MotivationKind.NOT_STARTED: "Start First Habit",
    MotivationKind.LIGHT_DAY: "Continue Practice",
    MotivationKind.PRODUCTIVE_DAY: "Almost There!",
    MotivationKind.PERFECT_DAY: "",  # nothing left to do today
}

_ICONS = {
    MotivationKind.NO_HABITS: "leaf",
    MotivationKind.NOT_STARTED: "sunrise",
    MotivationKind.LIGHT_DAY: "leaf.fill",
    MotivationKind.PRODUCTIVE_DAY: "flame",
    MotivationKind.PERFECT_DAY: "checkmark.seal.fill",
}

for _table in (_TITLES, _ACTIONS, _ICONS):
    _missing = set(MotivationKind) - set(_table)
    if _missing:
        raise RuntimeError(f"Motivation copy missing for: {sorted(k.value for k in _missing)}")


@dataclass(frozen=True)
class MotivationState:
    """
    Transient home-screen state, recomputed on demand

    Only LIGHT_DAY carries data (how many habits were completed).
    """
    kind: MotivationKind
    habits_completed: int = 0

    @property
    def title(self) -> str:
        return _TITLES[self.kind]

    @property
    def action_text(self) -> str:
        """Call-to-action label; empty string means no action"""
        return _ACTIONS[self.kind]

    @property
    def has_action(self) -> bool:
        return bool(self.action_text)

    @property
    def icon_name(self) -> str:
        return _ICONS[self.kind]

    def message(self, streak: int = 0) -> str:
        """Body copy, parameterized by the current streak"""
        if self.kind is MotivationKind.NO_HABITS:
            return "Subscribe to a journey to start building your daily practice."

        if self.kind is MotivationKind.NOT_STARTED:
            if streak > 0:
                return f"You have a {streak}-day streak going! Don't break the chain."
            return "Your habits are waiting. Start your day with remembrance."

        if self.kind is MotivationKind.LIGHT_DAY:
            habit_word = "habit" if self.habits_completed == 1 else "habits"
            return (
                f"You've planted {self.habits_completed} {habit_word} today. "
                "Each small step strengthens your practice."
            )

        if self.kind is MotivationKind.PRODUCTIVE_DAY:
            return "Great momentum! You're more than halfway through your daily practice."

        if self.kind is MotivationKind.PERFECT_DAY:
            next_streak = streak + 1
            if streak >= MONTH_MILESTONE_STREAK:
                return (
                    "MashaAllah! You've completed all your habits. "
                    f"Tomorrow marks day {next_streak}, keep the blessing flowing!"
                )
            if streak >= WEEK_MILESTONE_STREAK:
                return (
                    "MashaAllah! You've completed all your habits. "
                    f"Return tomorrow to reach day {next_streak}!"
                )
            return "MashaAllah! You've completed all your habits today. Come back tomorrow to grow your streak!"

        raise AssertionError(f"Unhandled motivation kind: {self.kind}")

    def accessibility_description(self, streak: int = 0, next_achievement_name: Optional[str] = None) -> str:
        """Screen reader text combining title, message and action"""
        desc = f"{self.title}. {self.message(streak)}"
        if next_achievement_name:
            desc += f" Next achievement: {next_achievement_name}."
        if self.has_action:
            desc += f" Action: {self.action_text}."
        return desc
