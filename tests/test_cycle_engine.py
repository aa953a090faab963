"""Tests for CycleEngine - pure moon cycle logic.

These tests verify:
- Day numbering, expiry and rollover of a 28-day cycle
- Daily stats keep the best value and grant the mood bonus once a day
- Feed/sleep/chat goals (play counts as a chat)
- Sleep scoring by duration
- Reward tiers at 24 and 28 mood days

No Home Assistant fixtures are needed - CycleEngine is pure.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from custom_components.petcare import const, data_builders as db
from custom_components.petcare.engines.cycle_engine import CycleEngine
from custom_components.petcare.type_defs import CurrentStats
from custom_components.petcare.utils import dt_utils

NOW = datetime(2025, 4, 7, 12, 0, tzinfo=UTC)
TODAY = "2025-04-07"


def stats(mood: int = 3, hunger: int = 3, energy: int = 3) -> CurrentStats:
    """Pet stats after an action."""
    return {"mood": mood, "hunger": hunger, "energy": energy}


def started_cycle(now: datetime = NOW) -> dict[str, Any]:
    """A cycle that started at `now`."""
    return dict(db.build_moon_cycle("mochi", now))


def add_mood_days(cycle: dict[str, Any], count: int, mood: int = 5) -> None:
    """Record `count` consecutive days from the start date with a given mood."""
    for offset in range(count):
        day = dt_utils.date_offset_iso(cycle[const.DATA_CYCLE_START_DATE], offset)
        CycleEngine.record_day(cycle, day, const.ACTION_CHAT, stats(mood=mood))


class TestCalendar:
    """Tests for day numbering and expiry."""

    def test_new_cycle_spans_28_days(self) -> None:
        """A started cycle runs from today through day 28."""
        cycle = started_cycle()
        assert cycle[const.DATA_CYCLE_START_DATE] == TODAY
        assert cycle[const.DATA_CYCLE_END_DATE] == "2025-05-04"
        assert cycle[const.DATA_CYCLE_CURRENT_DAY] == 1
        assert cycle[const.DATA_CYCLE_ID] == f"cycle_{int(NOW.timestamp() * 1000)}"

    @pytest.mark.parametrize(
        ("today", "expected"),
        [
            (TODAY, 1),
            ("2025-04-08", 2),
            ("2025-05-04", 28),
            ("2025-06-01", 28),
        ],
    )
    def test_current_day(self, today: str, expected: int) -> None:
        """Day 1 is the start date; the count stops at 28."""
        assert CycleEngine.calculate_current_day(TODAY, today) == expected

    def test_expiry_after_last_day(self) -> None:
        """The cycle expires the day after day 28."""
        cycle = started_cycle()
        assert not CycleEngine.is_expired(cycle, "2025-05-04")
        assert CycleEngine.is_expired(cycle, "2025-05-05")
        assert CycleEngine.needs_new_cycle(cycle, "2025-05-05")

    def test_unstarted_or_completed_needs_new_cycle(self) -> None:
        """A never-started or settled cycle is replaced on the next write."""
        assert CycleEngine.needs_new_cycle(dict(db.build_moon_cycle("mochi")), TODAY)
        cycle = started_cycle()
        assert not CycleEngine.needs_new_cycle(cycle, TODAY)
        CycleEngine.complete(cycle, NOW)
        assert CycleEngine.needs_new_cycle(cycle, TODAY)

    def test_ready_to_complete_on_day_28(self) -> None:
        """Completion opens on the last day."""
        cycle = started_cycle()
        assert not CycleEngine.is_ready_to_complete(cycle, "2025-05-03")
        assert CycleEngine.is_ready_to_complete(cycle, "2025-05-04")


class TestDailyStats:
    """Tests for record_day."""

    def test_first_action_creates_today(self) -> None:
        """Today's entry starts from the action's stats."""
        cycle = started_cycle()
        CycleEngine.record_day(cycle, TODAY, const.ACTION_FEED, stats(4, 2, 3))

        day = CycleEngine.get_day(cycle, TODAY)
        assert day is not None
        assert (day["mood"], day["hunger"], day["energy"]) == (4, 2, 3)
        assert day[const.DATA_DAY_FEED_ACTIONS] == 1

    def test_best_stats_are_kept(self) -> None:
        """A later, lower reading does not lower today's stats."""
        cycle = started_cycle()
        CycleEngine.record_day(cycle, TODAY, const.ACTION_CHAT, stats(mood=5))
        CycleEngine.record_day(cycle, TODAY, const.ACTION_CHAT, stats(mood=2))

        day = CycleEngine.get_day(cycle, TODAY)
        assert day is not None
        assert day["mood"] == 5
        assert day[const.DATA_DAY_CHAT_ACTIONS] == 2

    def test_feed_goal_needs_full_hunger(self) -> None:
        """Feeding to hunger 5 completes the feed goal and earns the bonus."""
        cycle = started_cycle()
        assert CycleEngine.record_day(
            cycle, TODAY, const.ACTION_FEED, stats(hunger=4)
        ) == (False, False)
        assert CycleEngine.record_day(
            cycle, TODAY, const.ACTION_FEED, stats(hunger=5)
        ) == (True, True)

    def test_mood_bonus_once_per_day(self) -> None:
        """Only the first completed goal of the day earns the mood bonus."""
        cycle = started_cycle()
        assert CycleEngine.record_day(cycle, TODAY, const.ACTION_CHAT, stats()) == (
            True,
            True,
        )
        assert CycleEngine.record_day(
            cycle, TODAY, const.ACTION_FEED, stats(hunger=5)
        ) == (True, False)

        tomorrow = "2025-04-08"
        assert CycleEngine.record_day(cycle, tomorrow, const.ACTION_CHAT, stats()) == (
            True,
            True,
        )

    def test_play_counts_as_chat(self) -> None:
        """Play fills the chat goal and counter."""
        cycle = started_cycle()
        goal, _ = CycleEngine.record_day(cycle, TODAY, const.ACTION_PLAY, stats())

        day = CycleEngine.get_day(cycle, TODAY)
        assert goal
        assert day is not None
        assert day[const.DATA_DAY_CHAT_COMPLETED]
        assert day[const.DATA_DAY_CHAT_ACTIONS] == 1

    @pytest.mark.parametrize(
        ("energy", "hours", "expected"),
        [
            (5, 8.5, True),
            (5, 8.0, False),
            (4, 9.0, False),
            (5, None, False),
        ],
    )
    def test_sleep_goal(self, energy: int, hours: float | None, expected: bool) -> None:
        """A sleep goal needs full energy and at least 8.5 hours."""
        assert (
            CycleEngine.is_goal_met(const.ACTION_SLEEP, stats(energy=energy), hours)
            is expected
        )

    def test_sleep_hours_stored(self) -> None:
        """The length of the recorded sleep is kept on the day."""
        cycle = started_cycle()
        CycleEngine.record_day(
            cycle, TODAY, const.ACTION_SLEEP, stats(energy=5), sleep_hours=9.25
        )
        day = CycleEngine.get_day(cycle, TODAY)
        assert day is not None
        assert day[const.DATA_DAY_SLEEP_HOURS] == 9.25
        assert day[const.DATA_DAY_SLEEP_COMPLETED]

    def test_mood_days_counted(self) -> None:
        """Only days whose best mood reached 5 count."""
        cycle = started_cycle()
        add_mood_days(cycle, 3)
        CycleEngine.record_day(cycle, "2025-04-10", const.ACTION_CHAT, stats(mood=4))

        assert cycle[const.DATA_CYCLE_MOOD_DAYS] == 3
        assert cycle[const.DATA_CYCLE_CURRENT_DAY] == 4


class TestSleep:
    """Tests for sleep sessions."""

    @pytest.mark.parametrize(
        ("hours", "stars"),
        [
            (0.5, 1),
            (3, 2),
            (4.9, 2),
            (5, 3),
            (7, 4),
            (8.49, 4),
            (8.5, 5),
            (11, 5),
        ],
    )
    def test_sleep_stars(self, hours: float, stars: int) -> None:
        """Energy gained follows the duration tiers."""
        assert CycleEngine.get_sleep_stars(hours) == stars

    def test_start_and_end_sleep(self) -> None:
        """A sleep across midnight is scored by its full length."""
        cycle = started_cycle()
        bedtime = datetime(2025, 4, 7, 22, 0, tzinfo=UTC)
        assert CycleEngine.start_sleep(cycle, bedtime)
        assert not CycleEngine.start_sleep(cycle, bedtime + timedelta(hours=1))

        wake = bedtime + timedelta(hours=9)
        assert CycleEngine.sleep_hours_so_far(cycle, wake) == 9
        assert CycleEngine.end_sleep(cycle, wake) == (9, 5)
        assert cycle[const.DATA_CYCLE_SLEEP_STARTED_AT] is None
        assert CycleEngine.end_sleep(cycle, wake) is None


class TestCompletion:
    """Tests for reward tiers."""

    @pytest.mark.parametrize(
        ("mood_days", "reward_type", "success", "star_fragments"),
        [
            (0, const.CYCLE_REWARD_BASIC, False, 100),
            (23, const.CYCLE_REWARD_BASIC, False, 100),
            (24, const.CYCLE_REWARD_GOOD, True, 500),
            (27, const.CYCLE_REWARD_GOOD, True, 500),
            (28, const.CYCLE_REWARD_PERFECT, True, 1000),
        ],
    )
    def test_reward_tiers(
        self, mood_days: int, reward_type: str, success: bool, star_fragments: int
    ) -> None:
        """24 mood days make a successful cycle; all 28 make it perfect."""
        reward = CycleEngine.determine_reward(mood_days, NOW)
        assert reward["reward_type"] == reward_type
        assert reward["success"] is success
        assert reward["star_fragments"] == star_fragments
        assert reward["badge"] == (const.CYCLE_SUCCESS_BADGE if success else None)

    def test_complete_marks_cycle(self) -> None:
        """Completion stores the reward on the cycle."""
        cycle = started_cycle()
        add_mood_days(cycle, 24)

        reward = CycleEngine.complete(cycle, NOW)

        assert reward["reward_type"] == const.CYCLE_REWARD_GOOD
        assert cycle[const.DATA_CYCLE_COMPLETED]
        assert cycle[const.DATA_CYCLE_FINAL_REWARD] == reward


class TestProgress:
    """Tests for get_progress."""

    def test_unstarted_cycle_reads_as_new(self) -> None:
        """Before the first write the progress is empty."""
        progress = CycleEngine.get_progress(
            dict(db.build_moon_cycle("mochi")), TODAY, NOW
        )
        assert progress["cycle_id"] is None
        assert progress["current_day"] == 0
        assert progress["days_remaining"] == const.CYCLE_LENGTH_DAYS
        assert not progress["sleeping"]

    def test_on_track_ratio(self) -> None:
        """Every day a mood day keeps the cycle on track; a miss can fall behind."""
        cycle = started_cycle()
        add_mood_days(cycle, 7)
        progress = CycleEngine.get_progress(cycle, "2025-04-13", NOW)
        assert progress["current_day"] == 7
        assert progress["mood_days_achieved"] == 7
        assert progress["on_track"]
        assert progress["today"]["chat"]

        behind = CycleEngine.get_progress(cycle, "2025-04-20", NOW)
        assert behind["current_day"] == 14
        assert not behind["on_track"]
        assert not behind["today"]["chat"]
