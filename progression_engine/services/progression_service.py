"""
ProgressionService - Progression Business Logic

Runs the engine against a persistence collaborator. Applying a completion is
one read-modify-write per user:

    ledger.record -> streak update -> apply XP -> evaluate achievements
    (-> award achievement XP, re-evaluate until nothing new unlocks) -> save

Mutations for the same user are serialized with a per-user asyncio.Lock, so
two completions arriving together can't both extend the streak or both
unlock the same achievement.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import AsyncIterator, Dict, List, Optional, Tuple

from progression_engine.db.store import ProgressStore
from progression_engine.exceptions import ValidationError
from progression_engine.gamification.achievement_system import (
    DEFAULT_ACHIEVEMENTS,
    AchievementCatalog,
    achievement_grid,
    evaluate_achievements,
    next_achievement,
)
from progression_engine.gamification.activity_ledger import ActivityLedger
from progression_engine.gamification.daily_content import DEFAULT_QUOTES, quote_for
from progression_engine.gamification.motivation import classify
from progression_engine.gamification.streak_system import (
    StreakUpdate,
    reconcile,
    streak_message,
    update_streak,
)
from progression_engine.gamification.xp_system import apply_xp
from progression_engine.models.achievement import (
    AchievementDefinition,
    AchievementProgress,
    EvaluationContext,
)
from progression_engine.models.activity import ActivityRecord, TodayProgress, WeeklySummary
from progression_engine.models.motivation import MotivationState
from progression_engine.models.profile import ProgressionProfile
from progression_engine.models.quote import Quote, QuoteCatalog
from progression_engine.utils.datetime_helpers import today_in_timezone

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """What a single completion changed"""
    counted: bool  # False for a repeat of an item already done that day
    profile: ProgressionProfile
    record: ActivityRecord
    xp_awarded: int = 0  # completion XP plus achievement rewards
    old_level: int = 1
    new_level: int = 1
    streak: Optional[StreakUpdate] = None
    achievements_unlocked: List[AchievementDefinition] = field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


@dataclass
class HomeSummary:
    """Everything the home screen renders"""
    profile: ProgressionProfile
    today: TodayProgress
    motivation: MotivationState
    motivation_message: str
    streak_message: str
    week: WeeklySummary
    achievements: List[AchievementProgress]
    next_achievement: Optional[AchievementProgress]
    quote: Quote


class ProgressionService:
    """
    Service for progression features.

    Responsibilities:
    - Lazy streak validation when a profile is loaded
    - Applying completions atomically per user
    - Achievement unlocking and XP rewards
    - Assembling the home-screen summary
    """

    def __init__(
        self,
        store: ProgressStore,
        achievements: AchievementCatalog = DEFAULT_ACHIEVEMENTS,
        quotes: QuoteCatalog = DEFAULT_QUOTES,
        tz_name: Optional[str] = None
    ):
        """
        Initialize ProgressionService.

        Args:
            store: Persistence collaborator
            achievements: Validated achievement catalog
            quotes: Validated quote catalog
            tz_name: Timezone used to resolve "today" when not given
        """
        self.store = store
        self.achievements = achievements
        self.quotes = quotes
        self.tz_name = tz_name
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = defaultdict(int)  # holders + waiters
        logger.debug("ProgressionService initialized")

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; it is dropped once nobody holds or waits for it"""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if self._lock_users[user_id] == 0:
                del self._lock_users[user_id]
                del self._locks[user_id]

    def _today(self, today: Optional[date]) -> date:
        return today or today_in_timezone(self.tz_name)

    async def _load_reconciled(self, user_id: str, today: date) -> ProgressionProfile:
        """Load (or create) a profile and resolve a stale streak"""
        profile = await self.store.find_profile(user_id)
        if profile is None:
            logger.info(f"Creating progression profile for user {user_id}")
            profile = ProgressionProfile(user_id=user_id)
            await self.store.save_profile(profile)
            return profile

        old_streak = profile.streak
        reconcile(profile, today)
        if profile.streak != old_streak:
            await self.store.save_profile(profile)

        return profile

    async def _load_ledger(self, user_id: str) -> ActivityLedger:
        return ActivityLedger(await self.store.get_all_activity(user_id))

    @staticmethod
    def _context(profile: ProgressionProfile, ledger: ActivityLedger) -> EvaluationContext:
        return EvaluationContext(
            current_streak=profile.streak,
            total_completions=ledger.total_completions(),
            current_level=profile.level,
            perfect_week_count=ledger.perfect_week_count(),
        )

    async def load_profile(self, user_id: str, today: Optional[date] = None) -> ProgressionProfile:
        """
        Load a user's profile with the streak validity check applied

        Args:
            user_id: User ID
            today: Current date (defaults to today in the service timezone)

        Returns:
            Reconciled ProgressionProfile (persisted if the streak was reset)
        """
        today = self._today(today)
        async with self._user_lock(user_id):
            return await self._load_reconciled(user_id, today)

    async def complete_item(
        self,
        user_id: str,
        item_id: str,
        xp: int,
        today: Optional[date] = None,
        total_count: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> CompletionResult:
        """
        Apply one habit completion.

        Args:
            user_id: User ID
            item_id: Completed habit/dua identifier
            xp: XP value of the item
            today: Completion date (defaults to today in the service timezone)
            total_count: Habits configured for today, if known
            now: Timestamp for achievement unlocks

        Returns:
            CompletionResult; repeated items come back with counted=False
        """
        if not item_id:
            raise ValidationError("Item id must not be empty", field="item_id", value=item_id, user_id=user_id)

        today = self._today(today)
        now = now or datetime.now(timezone.utc)

        async with self._user_lock(user_id):
            profile = await self._load_reconciled(user_id, today)
            ledger = await self._load_ledger(user_id)
            old_level = profile.level

            existing = ledger.get(today)
            already_done = existing is not None and item_id in existing.completed_item_ids

            record = ledger.record(today, 1, xp, item_id, total_count=total_count, today=today)
            await self.store.save_activity(user_id, record)

            if already_done:
                logger.debug(f"User {user_id} repeated {item_id} on {today}, nothing awarded")
                return CompletionResult(
                    counted=False,
                    profile=profile,
                    record=record,
                    old_level=old_level,
                    new_level=old_level,
                )

            streak = update_streak(profile, today)
            xp_award = apply_xp(profile, xp, today, counts_as_activity=False)
            unlocked, reward_xp = await self._award_achievements(profile, ledger, today, now)

            await self.store.save_profile(profile)

            logger.info(
                f"User {user_id} completed {item_id}: +{xp_award.xp_awarded + reward_xp} XP, "
                f"streak {profile.streak}, level {profile.level}"
            )

            return CompletionResult(
                counted=True,
                profile=profile,
                record=record,
                xp_awarded=xp_award.xp_awarded + reward_xp,
                old_level=old_level,
                new_level=profile.level,
                streak=streak,
                achievements_unlocked=unlocked,
            )

    async def _award_achievements(
        self,
        profile: ProgressionProfile,
        ledger: ActivityLedger,
        today: date,
        now: datetime
    ) -> Tuple[List[AchievementDefinition], int]:
        """
        Unlock every achievement the profile now qualifies for

        Rewards can raise the level, which can unlock a level achievement,
        so evaluation repeats until a pass unlocks nothing. The catalog is
        finite and unlocks are one-way, so this terminates.
        """
        states = await self.store.get_achievement_states(profile.user_id)
        unlocked: List[AchievementDefinition] = []
        reward_xp = 0

        while True:
            evaluation = evaluate_achievements(
                self.achievements,
                states,
                self._context(profile, ledger),
                now=now,
                user_id=profile.user_id
            )
            states = evaluation.states
            if not evaluation.newly_unlocked:
                break

            unlocked.extend(evaluation.newly_unlocked)
            if evaluation.xp_reward:
                apply_xp(profile, evaluation.xp_reward, today, counts_as_activity=False)
                reward_xp += evaluation.xp_reward

        if unlocked:
            await self.store.save_achievement_states(profile.user_id, states)

        return unlocked, reward_xp

    async def home_summary(
        self,
        user_id: str,
        today: Optional[date] = None,
        total_habits: Optional[int] = None
    ) -> HomeSummary:
        """
        Build the home-screen summary.

        Args:
            user_id: User ID
            today: Current date (defaults to today in the service timezone)
            total_habits: Habits configured today; falls back to the stored
                count on today's record

        Returns:
            HomeSummary
        """
        today = self._today(today)

        async with self._user_lock(user_id):
            profile = await self._load_reconciled(user_id, today)
            ledger = await self._load_ledger(user_id)
            states = await self.store.get_achievement_states(user_id)

        progress = ledger.today_progress(today)
        if total_habits is not None:
            progress = TodayProgress(
                completed=progress.completed,
                total=max(total_habits, 0),
                xp_earned=progress.xp_earned,
            )

        motivation = classify(progress.completed, progress.total)
        grid = achievement_grid(self.achievements, states, self._context(profile, ledger))

        return HomeSummary(
            profile=profile,
            today=progress,
            motivation=motivation,
            motivation_message=motivation.message(profile.streak),
            streak_message=streak_message(profile.streak),
            week=ledger.weekly_summary(today),
            achievements=grid,
            next_achievement=next_achievement(grid),
            quote=quote_for(today, self.quotes),
        )

    async def reset_profile(self, user_id: str) -> ProgressionProfile:
        """Zero the profile and drop activity and achievement state"""
        async with self._user_lock(user_id):
            profile = await self.store.find_profile(user_id) or ProgressionProfile(user_id=user_id)
            profile.reset()
            await self.store.save_profile(profile)
            await self.store.delete_user_data(user_id)

        logger.info(f"Reset progression profile for user {user_id}")
        return profile
