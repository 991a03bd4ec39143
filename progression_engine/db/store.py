"""
Persistence seam for the progression service

The engine itself never does I/O. ProgressStore describes what the service
needs from a persistence layer (Postgres, Firestore, device storage, ...);
InMemoryProgressStore is a dict-backed implementation for tests and local
tooling. It is NOT persisted.
"""

from datetime import date
from typing import Dict, List, Optional, Protocol
import logging

from progression_engine.exceptions import RecordNotFoundError
from progression_engine.models.achievement import AchievementState
from progression_engine.models.activity import ActivityRecord
from progression_engine.models.profile import ProgressionProfile

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Async persistence operations used by ProgressionService"""

    async def find_profile(self, user_id: str) -> Optional[ProgressionProfile]:
        """None when the user has no profile yet"""
        ...

    async def get_profile(self, user_id: str) -> ProgressionProfile:
        """Raises RecordNotFoundError when the user has no profile"""
        ...

    async def save_profile(self, profile: ProgressionProfile) -> None:
        ...

    async def get_activity(self, user_id: str, start: date, end: date) -> List[ActivityRecord]:
        """Records with start <= date <= end"""
        ...

    async def get_all_activity(self, user_id: str) -> List[ActivityRecord]:
        ...

    async def save_activity(self, user_id: str, record: ActivityRecord) -> None:
        ...

    async def get_achievement_states(self, user_id: str) -> Dict[str, AchievementState]:
        ...

    async def save_achievement_states(self, user_id: str, states: Dict[str, AchievementState]) -> None:
        ...

    async def delete_user_data(self, user_id: str) -> None:
        """Drop activity and achievement state (profile reset)"""
        ...


class InMemoryProgressStore:
    """In-memory ProgressStore (not persisted)"""

    def __init__(self):
        self._profiles: Dict[str, ProgressionProfile] = {}
        self._activity: Dict[str, Dict[date, ActivityRecord]] = {}
        self._achievements: Dict[str, Dict[str, AchievementState]] = {}
        logger.debug("InMemoryProgressStore initialized")

    async def find_profile(self, user_id: str) -> Optional[ProgressionProfile]:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        # Hand out copies so callers can't mutate stored state without saving
        return profile.model_copy(deep=True)

    async def get_profile(self, user_id: str) -> ProgressionProfile:
        profile = await self.find_profile(user_id)
        if profile is None:
            raise RecordNotFoundError(
                f"No progression profile for user {user_id}",
                record_type="ProgressionProfile",
                record_id=user_id,
                user_id=user_id
            )
        return profile

    async def save_profile(self, profile: ProgressionProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)
        logger.debug(f"Saved profile for user {profile.user_id}")

    async def get_activity(self, user_id: str, start: date, end: date) -> List[ActivityRecord]:
        records = self._activity.get(user_id, {})
        return [
            records[day].model_copy(deep=True)
            for day in sorted(records)
            if start <= day <= end
        ]

    async def get_all_activity(self, user_id: str) -> List[ActivityRecord]:
        records = self._activity.get(user_id, {})
        return [records[day].model_copy(deep=True) for day in sorted(records)]

    async def save_activity(self, user_id: str, record: ActivityRecord) -> None:
        if record.is_placeholder:
            return
        self._activity.setdefault(user_id, {})[record.date] = record.model_copy(deep=True)

    async def get_achievement_states(self, user_id: str) -> Dict[str, AchievementState]:
        return {
            key: state.model_copy()
            for key, state in self._achievements.get(user_id, {}).items()
        }

    async def save_achievement_states(self, user_id: str, states: Dict[str, AchievementState]) -> None:
        self._achievements[user_id] = {key: state.model_copy() for key, state in states.items()}

    async def delete_user_data(self, user_id: str) -> None:
        self._activity.pop(user_id, None)
        self._achievements.pop(user_id, None)
        logger.info(f"Deleted activity and achievements for user {user_id}")
