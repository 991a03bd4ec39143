"""Unit tests for ProgressionService (progression_engine/services/progression_service.py)"""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone

from progression_engine.exceptions import RecordNotFoundError, ValidationError
from progression_engine.models.motivation import MotivationKind
from progression_engine.models.profile import ProgressionProfile

COMPLETED_AT = datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Load Tests
# ============================================================================

@pytest.mark.asyncio
async def test_load_profile_creates_new_profile(progression_service, store, test_user_id, today):
    """Test loading an unknown user creates and stores an empty profile"""
    profile = await progression_service.load_profile(test_user_id, today=today)

    assert profile.user_id == test_user_id
    assert profile.total_xp == 0
    assert profile.level == 1
    assert (await store.get_profile(test_user_id)).user_id == test_user_id


@pytest.mark.asyncio
async def test_load_profile_resets_stale_streak(progression_service, store, test_user_id, today):
    """Test a streak with a 2+ day gap is zeroed and persisted on load"""
    await store.save_profile(ProgressionProfile(
        user_id=test_user_id,
        total_xp=400,
        streak=5,
        last_active_date=today - timedelta(days=3)
    ))

    profile = await progression_service.load_profile(test_user_id, today=today)

    assert profile.streak == 0
    assert profile.total_xp == 400
    assert (await store.get_profile(test_user_id)).streak == 0


@pytest.mark.asyncio
async def test_load_profile_keeps_live_streak(progression_service, store, test_user_id, yesterday, today):
    """Test a streak last extended yesterday survives load"""
    await store.save_profile(ProgressionProfile(user_id=test_user_id, streak=5, last_active_date=yesterday))

    profile = await progression_service.load_profile(test_user_id, today=today)

    assert profile.streak == 5


# ============================================================================
# Completion Tests
# ============================================================================

@pytest.mark.asyncio
async def test_first_completion(progression_service, store, test_user_id, today):
    """Test the first completion starts a streak and unlocks First Step"""
    result = await progression_service.complete_item(
        test_user_id, "dua-1", 10, today=today, total_count=5, now=COMPLETED_AT
    )

    assert result.counted is True
    assert [d.id for d in result.achievements_unlocked] == ["first-step"]
    assert result.xp_awarded == 60  # 10 for the dua + 50 reward
    assert result.profile.total_xp == 60
    assert result.profile.streak == 1
    assert result.streak.restarted is True
    assert result.record.completed_count == 1
    assert result.record.total_count == 5

    stored = await store.get_profile(test_user_id)
    assert stored.total_xp == 60
    states = await store.get_achievement_states(test_user_id)
    assert states["first-step"].unlocked_at == COMPLETED_AT


@pytest.mark.asyncio
async def test_repeat_completion_not_counted(progression_service, store, test_user_id, today):
    """Test completing the same item twice on a day awards nothing the second time"""
    await progression_service.complete_item(test_user_id, "dua-1", 10, today=today)

    result = await progression_service.complete_item(test_user_id, "dua-1", 10, today=today)

    assert result.counted is False
    assert result.xp_awarded == 0
    assert result.record.completed_count == 1
    assert (await store.get_profile(test_user_id)).total_xp == 60


@pytest.mark.asyncio
async def test_completions_across_days_build_streak(progression_service, test_user_id, today):
    """Test three consecutive days unlock Getting Started"""
    start = today - timedelta(days=2)
    results = []
    for offset in range(3):
        results.append(await progression_service.complete_item(
            test_user_id, "dua-1", 10, today=start + timedelta(days=offset)
        ))

    assert [r.profile.streak for r in results] == [1, 2, 3]
    assert [d.id for d in results[2].achievements_unlocked] == ["getting-started"]
    assert results[2].profile.total_xp == 10 + 50 + 10 + 10 + 75


@pytest.mark.asyncio
async def test_completion_after_gap_restarts_streak(progression_service, store, test_user_id, today):
    """Test activity after a missed day restarts the streak at 1"""
    await store.save_profile(ProgressionProfile(
        user_id=test_user_id, total_xp=500, streak=9, last_active_date=today - timedelta(days=4)
    ))

    result = await progression_service.complete_item(test_user_id, "dua-1", 10, today=today)

    assert result.profile.streak == 1
    assert result.streak.restarted is True


@pytest.mark.asyncio
async def test_achievement_reward_cascades_into_level_achievement(progression_service, store, test_user_id, today):
    """Test reward XP that reaches level 5 also unlocks the level achievement"""
    await store.save_profile(ProgressionProfile(user_id=test_user_id, total_xp=950))

    result = await progression_service.complete_item(test_user_id, "dua-1", 10, today=today)

    # 950 + 10 + 50 (first step) = 1010 -> level 5 -> +200
    assert [d.id for d in result.achievements_unlocked] == ["first-step", "level-5"]
    assert result.profile.total_xp == 1210
    assert result.old_level == 4
    assert result.new_level == 5
    assert result.leveled_up is True


@pytest.mark.asyncio
async def test_zero_xp_completion_still_counts_for_streak(progression_service, test_user_id, today):
    """Test a completion worth no XP is still activity"""
    result = await progression_service.complete_item(test_user_id, "dua-1", 0, today=today)

    assert result.counted is True
    assert result.profile.streak == 1
    assert result.profile.total_xp == 50


@pytest.mark.asyncio
async def test_empty_item_id_rejected(progression_service, test_user_id, today):
    """Test an empty item id raises ValidationError"""
    with pytest.raises(ValidationError) as exc_info:
        await progression_service.complete_item(test_user_id, "", 10, today=today)

    assert exc_info.value.field == "item_id"


@pytest.mark.asyncio
async def test_concurrent_completions_are_serialized(progression_service, store, test_user_id, today):
    """Test simultaneous completions for one user neither lose updates nor double-unlock"""
    results = await asyncio.gather(*[
        progression_service.complete_item(test_user_id, f"dua-{n}", 10, today=today)
        for n in range(5)
    ])

    unlocked = [d.id for r in results for d in r.achievements_unlocked]
    assert unlocked == ["first-step"]

    profile = await store.get_profile(test_user_id)
    assert profile.total_xp == 5 * 10 + 50
    assert profile.streak == 1

    activity = await store.get_all_activity(test_user_id)
    assert len(activity) == 1
    assert activity[0].completed_count == 5


# ============================================================================
# Home Summary Tests
# ============================================================================

@pytest.mark.asyncio
async def test_home_summary_new_user(progression_service, test_user_id, today):
    """Test a brand-new user gets a complete, empty summary"""
    summary = await progression_service.home_summary(test_user_id, today=today)

    assert summary.profile.level == 1
    assert summary.motivation.kind is MotivationKind.NO_HABITS
    assert summary.streak_message == "Start your journey today!"
    assert len(summary.week.days) == 7
    assert summary.week.active_days == 0
    assert len(summary.achievements) == 7
    assert summary.next_achievement is not None
    # 2024-03-15 is day 75: (75 - 1) % 7 == 4
    assert summary.quote.id == "q5"


@pytest.mark.asyncio
async def test_home_summary_after_completions(progression_service, test_user_id, today):
    """Test summary reflects today's completions and the habit count"""
    await progression_service.complete_item(test_user_id, "dua-1", 10, today=today, total_count=5)
    await progression_service.complete_item(test_user_id, "dua-2", 10, today=today)

    summary = await progression_service.home_summary(test_user_id, today=today)

    assert summary.today.completed == 2
    assert summary.today.total == 5
    assert summary.motivation.kind is MotivationKind.LIGHT_DAY
    assert summary.motivation.habits_completed == 2
    assert summary.week.active_days == 1
    assert summary.week.current_streak == 1
    first_step = next(e for e in summary.achievements if e.definition.id == "first-step")
    assert first_step.unlocked is True


@pytest.mark.asyncio
async def test_home_summary_total_habits_override(progression_service, test_user_id, today):
    """Test an explicit habit count replaces the stored one"""
    await progression_service.complete_item(test_user_id, "dua-1", 10, today=today, total_count=5)

    summary = await progression_service.home_summary(test_user_id, today=today, total_habits=1)

    assert summary.motivation.kind is MotivationKind.PERFECT_DAY
    assert summary.motivation.has_action is False


# ============================================================================
# Reset Tests
# ============================================================================

@pytest.mark.asyncio
async def test_reset_profile(progression_service, store, test_user_id, today):
    """Test reset zeroes the profile and drops history and achievements"""
    await progression_service.complete_item(test_user_id, "dua-1", 10, today=today)

    profile = await progression_service.reset_profile(test_user_id)

    assert profile.total_xp == 0
    assert profile.streak == 0
    assert profile.last_active_date is None
    assert (await store.get_profile(test_user_id)).total_xp == 0
    assert await store.get_all_activity(test_user_id) == []
    assert await store.get_achievement_states(test_user_id) == {}


@pytest.mark.asyncio
async def test_reset_unknown_user(progression_service, store, test_user_id):
    """Test resetting a user without a profile creates an empty one"""
    profile = await progression_service.reset_profile(test_user_id)

    assert profile.level == 1
    assert (await store.get_profile(test_user_id)).user_id == test_user_id


# ============================================================================
# Housekeeping Tests
# ============================================================================

@pytest.mark.asyncio
async def test_new_user_does_not_log_errors(progression_service, test_user_id, today, caplog):
    """Test a first-time user is a normal path with no ERROR log records"""
    with caplog.at_level("INFO"):
        await progression_service.load_profile(test_user_id, today=today)
        await progression_service.home_summary("another-user", today=today)
        await progression_service.complete_item("third-user", "dua-1", 10, today=today)
        await progression_service.reset_profile("fourth-user")

    assert [r for r in caplog.records if r.levelname == "ERROR"] == []


@pytest.mark.asyncio
async def test_find_profile_and_get_profile(store, test_user_id):
    """Test the store distinguishes an expected miss from a required lookup"""
    assert await store.find_profile(test_user_id) is None
    with pytest.raises(RecordNotFoundError):
        await store.get_profile(test_user_id)

    await store.save_profile(ProgressionProfile(user_id=test_user_id, total_xp=40))

    assert (await store.find_profile(test_user_id)).total_xp == 40


@pytest.mark.asyncio
async def test_user_locks_released_after_use(progression_service, today):
    """Test per-user locks don't pile up for every user ever seen"""
    await asyncio.gather(*[
        progression_service.complete_item(f"user-{n}", "dua-1", 10, today=today)
        for n in range(50)
    ])
    await asyncio.gather(*[
        progression_service.complete_item("user-0", f"dua-{n}", 10, today=today)
        for n in range(2, 6)
    ])

    assert progression_service._locks == {}
    assert dict(progression_service._lock_users) == {}


@pytest.mark.asyncio
async def test_user_lock_survives_while_waiters_queue(progression_service, store, test_user_id, today):
    """Test a queued completion still runs under the same lock after the first releases"""
    first = asyncio.create_task(progression_service.complete_item(test_user_id, "dua-1", 10, today=today))
    second = asyncio.create_task(progression_service.complete_item(test_user_id, "dua-2", 10, today=today))
    await asyncio.gather(first, second)

    activity = await store.get_all_activity(test_user_id)
    assert activity[0].completed_count == 2
    assert (await store.get_profile(test_user_id)).total_xp == 70
