"""Global test fixtures and utilities for progression engine tests"""
import pytest
from datetime import date, timedelta
from typing import Iterable

from progression_engine.db.store import InMemoryProgressStore
from progression_engine.gamification.activity_ledger import ActivityLedger
from progression_engine.models.activity import ActivityRecord
from progression_engine.models.profile import ProgressionProfile
from progression_engine.services.progression_service import ProgressionService


# ============================================================================
# Calendar Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Fixed 'today' so tests never depend on the wall clock"""
    return date(2024, 3, 15)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


# ============================================================================
# User & Profile Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def new_profile(test_user_id):
    """Profile of a user who never completed anything"""
    return ProgressionProfile(user_id=test_user_id)


# ============================================================================
# Ledger Helpers
# ============================================================================

def build_ledger(end: date, completed_per_day: Iterable[int], total_per_day: int = 5) -> ActivityLedger:
    """
    Ledger with one record per day ending at `end`, oldest first

    A count of 0 leaves the day without a record.
    """
    counts = list(completed_per_day)
    records = []
    for offset, completed in enumerate(counts):
        day = end - timedelta(days=len(counts) - 1 - offset)
        if completed <= 0:
            continue
        records.append(ActivityRecord(
            date=day,
            completed_count=completed,
            total_count=total_per_day,
            xp_earned=10 * completed,
            completed_item_ids={f"item-{n}" for n in range(completed)},
        ))
    return ActivityLedger(records)


@pytest.fixture
def ledger_builder():
    return build_ledger


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store per test"""
    return InMemoryProgressStore()


@pytest.fixture
def progression_service(store):
    """ProgressionService over the in-memory store with default catalogs"""
    return ProgressionService(store)
