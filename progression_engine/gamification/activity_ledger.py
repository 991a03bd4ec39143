"""
Activity Ledger

Per-day completion records for one user, keyed by calendar date.

Rules:
- A date's record is created on its first completion and grows additively
- Completing the same item twice on a date counts once (still succeeds)
- Dates that have fully passed are read-only; corrections belong to the
  persistence layer, which hydrates the ledger through load()
- Windows always contain exactly `length` days; days without a record are
  filled with placeholders so weekly aggregation sees a fixed-length sequence
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional
import logging

from progression_engine import config
from progression_engine.gamification.streak_system import current_streak_from_window
from progression_engine.models.activity import ActivityRecord, TodayProgress, WeeklySummary
from progression_engine.utils.datetime_helpers import date_range

logger = logging.getLogger(__name__)


class ActivityLedger:
    """Ordered-by-date collection of a user's ActivityRecords"""

    def __init__(self, records: Optional[Iterable[ActivityRecord]] = None):
        self._records: Dict[date, ActivityRecord] = {}
        if records:
            self.load(records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, day: date) -> bool:
        return day in self._records

    def load(self, records: Iterable[ActivityRecord]) -> None:
        """
        Hydrate from stored records

        Records for the same date are merged. Rows with disjoint item ids
        are partial rows and their counters add up; when one row's ids
        contain the other's it is a duplicate and counters take the larger
        value. Placeholders are skipped.
        """
        for record in records:
            if record.is_placeholder:
                continue

            existing = self._records.get(record.date)
            if existing is None:
                self._records[record.date] = record.model_copy(deep=True)
                continue

            if existing.completed_item_ids.isdisjoint(record.completed_item_ids):
                existing.completed_count += record.completed_count
                existing.xp_earned += record.xp_earned
            else:
                existing.completed_count = max(existing.completed_count, record.completed_count)
                existing.xp_earned = max(existing.xp_earned, record.xp_earned)

            existing.completed_item_ids |= record.completed_item_ids
            existing.completed_count = max(existing.completed_count, len(existing.completed_item_ids))
            existing.total_count = max(existing.total_count, record.total_count)

    def get(self, day: date) -> Optional[ActivityRecord]:
        return self._records.get(day)

    def records(self) -> List[ActivityRecord]:
        """All stored records, oldest first"""
        return [self._records[day] for day in sorted(self._records)]

    def total_completions(self) -> int:
        return sum(record.completed_count for record in self._records.values())

    def perfect_week_count(self) -> int:
        """
        Number of perfect weeks in the whole history

        Each maximal run of consecutive active days contributes
        run_length // WEEK_LENGTH, so weeks never overlap.
        """
        count = 0
        run = 0
        previous = None

        for day in sorted(d for d, record in self._records.items() if record.is_active):
            if previous is not None and day - previous == timedelta(days=1):
                run += 1
            else:
                count += run // config.WEEK_LENGTH
                run = 1
            previous = day

        return count + run // config.WEEK_LENGTH

    def record(
        self,
        day: date,
        completed_delta: int,
        xp_delta: int,
        item_id: str,
        *,
        total_count: Optional[int] = None,
        today: Optional[date] = None
    ) -> ActivityRecord:
        """
        Record a completion for a date

        Args:
            day: Calendar date of the completion
            completed_delta: Completions to add (negative treated as 0)
            xp_delta: XP earned by the completion (negative treated as 0)
            item_id: Completed habit/dua identifier
            total_count: Habits configured for the day, if known
            today: Current date for misuse checks (defaults to `day`)

        Returns:
            The date's record after the update. Ignored calls return the
            current record, or a placeholder when there is none.
        """
        if today is None:
            today = day

        if day < today:
            logger.warning(f"Ignoring completion of {item_id} for past date {day} (today is {today})")
            return self._records.get(day) or ActivityRecord.placeholder(day)

        if day > today + timedelta(days=config.MAX_FUTURE_DAYS):
            logger.warning(f"Ignoring completion of {item_id} for future date {day} (today is {today})")
            return self._records.get(day) or ActivityRecord.placeholder(day)

        record = self._records.get(day)
        if record is None:
            record = ActivityRecord(date=day)
            self._records[day] = record

        if total_count is not None:
            record.total_count = max(total_count, 0)

        if item_id in record.completed_item_ids:
            logger.debug(f"Item {item_id} already completed on {day}, not counted again")
            return record

        record.completed_item_ids.add(item_id)
        record.completed_count += max(completed_delta, 0)
        record.xp_earned += max(xp_delta, 0)

        return record

    def window(self, end_date: date, length: int) -> List[ActivityRecord]:
        """
        Exactly `length` consecutive days ending at end_date, oldest first

        Missing days are placeholders, never omitted.
        """
        return [
            self._records.get(day) or ActivityRecord.placeholder(day)
            for day in date_range(end_date, length)
        ]

    def today_progress(self, today: date) -> TodayProgress:
        record = self._records.get(today)
        if record is None:
            return TodayProgress(completed=0, total=0, xp_earned=0)
        return TodayProgress(
            completed=record.completed_count,
            total=record.total_count,
            xp_earned=record.xp_earned,
        )

    def weekly_summary(self, end_date: date) -> WeeklySummary:
        """
        Aggregate the WEEK_LENGTH-day window ending at end_date

        A perfect week needs every one of the days to be active.
        """
        days = self.window(end_date, config.WEEK_LENGTH)
        active_days = sum(1 for day in days if day.is_active)

        return WeeklySummary(
            days=days,
            active_days=active_days,
            total_xp_earned=sum(day.xp_earned for day in days),
            is_perfect_week=active_days == len(days),
            current_streak=current_streak_from_window(days),
        )
