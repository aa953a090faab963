"""Cycle Engine - Pure logic for a pet's 28-day moon cycle.

This engine provides stateless, pure Python functions for:
- Cycle calendar (current day, expiry, rollover)
- Daily stats: best mood/hunger/energy, action counters, goals and the
  once-a-day mood bonus
- Mood days (days whose mood reached 5) and the on-track ratio
- Sleep sessions scored by duration
- Completion rewards: basic, good (24+ mood days) or perfect (28)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on the passed-in cycle dict
(MoonCycleData) and an explicit `now`/`today`. State management belongs in
CycleManager.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..utils import dt_utils

if TYPE_CHECKING:
    from ..type_defs import CurrentStats, CycleProgress, CycleRewardData


class CycleEngine:
    """Pure logic engine for moon cycles.

    All methods are static - no instance state. Dates are local ISO dates,
    timestamps ISO strings.
    """

    # =========================================================================
    # Calendar
    # =========================================================================

    @staticmethod
    def is_started(cycle: dict[str, Any]) -> bool:
        """True once the cycle has a start date."""
        return bool(cycle.get(const.DATA_CYCLE_START_DATE))

    @staticmethod
    def calculate_current_day(start_date: str, today: str) -> int:
        """Day number within the cycle: 1 on the start date, capped at 28."""
        day = dt_utils.days_between_iso(start_date, today) + 1
        return max(1, min(day, const.CYCLE_LENGTH_DAYS))

    @staticmethod
    def is_expired(cycle: dict[str, Any], today: str) -> bool:
        """True when today is past the cycle's last day."""
        end_date = cycle.get(const.DATA_CYCLE_END_DATE)
        return bool(end_date) and today > end_date

    @staticmethod
    def needs_new_cycle(cycle: dict[str, Any], today: str) -> bool:
        """True when a write should start a fresh cycle first."""
        return (
            not CycleEngine.is_started(cycle)
            or bool(cycle.get(const.DATA_CYCLE_COMPLETED))
            or CycleEngine.is_expired(cycle, today)
        )

    @staticmethod
    def is_ready_to_complete(cycle: dict[str, Any], today: str) -> bool:
        """True on (or after) the last day of a started, unsettled cycle."""
        if not CycleEngine.is_started(cycle) or cycle.get(const.DATA_CYCLE_COMPLETED):
            return False
        current_day = CycleEngine.calculate_current_day(
            cycle[const.DATA_CYCLE_START_DATE], today
        )
        return current_day >= const.CYCLE_LENGTH_DAYS

    # =========================================================================
    # Daily stats
    # =========================================================================

    @staticmethod
    def get_day(cycle: dict[str, Any], today: str) -> dict[str, Any] | None:
        """Return today's stats entry, if one was recorded."""
        for day in cycle.get(const.DATA_CYCLE_DAYS, []):
            if day.get(const.DATA_DAY_DATE) == today:
                return day
        return None

    @staticmethod
    def count_mood_days(cycle: dict[str, Any]) -> int:
        """Number of recorded days whose mood reached the threshold."""
        return sum(
            1
            for day in cycle.get(const.DATA_CYCLE_DAYS, [])
            if int(day.get(const.DATA_DAY_MOOD, 0)) >= const.CYCLE_MOOD_DAY_THRESHOLD
        )

    @staticmethod
    def is_goal_met(
        action_type: str, stats: CurrentStats, sleep_hours: float | None
    ) -> bool:
        """Whether one action hit its 5-star goal.

        Feed needs hunger at 5; sleep needs energy at 5 and at least 8.5
        hours; a chat always counts.
        """
        if action_type == const.ACTION_FEED:
            return stats["hunger"] >= const.CYCLE_GOAL_STAT
        if action_type == const.ACTION_SLEEP:
            return (
                stats["energy"] >= const.CYCLE_GOAL_STAT
                and (sleep_hours or 0) >= const.SLEEP_PERFECT_HOURS
            )
        return action_type == const.ACTION_CHAT

    @staticmethod
    def record_day(
        cycle: dict[str, Any],
        today: str,
        action_type: str,
        stats: CurrentStats,
        sleep_hours: float | None = None,
    ) -> tuple[bool, bool]:
        """Fold one action into today's stats. Modifies cycle in place.

        Today's mood/hunger/energy keep the best value seen. The mood bonus
        is earned at most once per day, by the first action whose goal is
        met.

        Returns:
            (goal_completed, mood_bonus_earned)
        """
        action = const.CYCLE_ACTION_ALIASES.get(action_type, action_type)
        counter_field, completed_field = const.CYCLE_DAY_ACTION_FIELDS[action]

        day = CycleEngine.get_day(cycle, today)
        if day is None:
            day = dict(
                db.build_cycle_day(
                    today, stats["mood"], stats["hunger"], stats["energy"]
                )
            )
            cycle[const.DATA_CYCLE_DAYS].append(day)

        for field, value in (
            (const.DATA_DAY_MOOD, stats["mood"]),
            (const.DATA_DAY_HUNGER, stats["hunger"]),
            (const.DATA_DAY_ENERGY, stats["energy"]),
        ):
            day[field] = max(int(day[field]), int(value))

        day[counter_field] = int(day.get(counter_field, 0)) + 1
        if action == const.ACTION_SLEEP and sleep_hours is not None:
            day[const.DATA_DAY_SLEEP_HOURS] = round(
                sleep_hours, const.DATA_FLOAT_PRECISION
            )

        goal_completed = CycleEngine.is_goal_met(action, stats, sleep_hours)
        if goal_completed:
            day[completed_field] = True

        mood_bonus_earned = False
        if day[completed_field] and not day[const.DATA_DAY_MOOD_BONUS_EARNED]:
            day[const.DATA_DAY_MOOD_BONUS_EARNED] = True
            mood_bonus_earned = True

        cycle[const.DATA_CYCLE_MOOD_DAYS] = CycleEngine.count_mood_days(cycle)
        cycle[const.DATA_CYCLE_CURRENT_DAY] = CycleEngine.calculate_current_day(
            cycle[const.DATA_CYCLE_START_DATE], today
        )
        return goal_completed, mood_bonus_earned

    # =========================================================================
    # Sleep
    # =========================================================================

    @staticmethod
    def get_sleep_stars(hours: float) -> int:
        """Energy (and stars) earned by a sleep of the given length."""
        for min_hours, stars in const.SLEEP_ENERGY_TIERS:
            if hours >= min_hours:
                return stars
        return const.STAT_MIN

    @staticmethod
    def sleep_hours_so_far(cycle: dict[str, Any], now: datetime) -> float | None:
        """Hours since the sleep started, or None while awake."""
        started = dt_utils.dt_parse(cycle.get(const.DATA_CYCLE_SLEEP_STARTED_AT))
        if started is None:
            return None
        return max(0.0, dt_utils.hours_between(started, now))

    @staticmethod
    def start_sleep(cycle: dict[str, Any], now: datetime) -> bool:
        """Mark the pet asleep. False when it is already sleeping."""
        if cycle.get(const.DATA_CYCLE_SLEEP_STARTED_AT):
            return False
        cycle[const.DATA_CYCLE_SLEEP_STARTED_AT] = dt_utils.dt_to_iso(now)
        return True

    @staticmethod
    def end_sleep(cycle: dict[str, Any], now: datetime) -> tuple[float, int] | None:
        """Wake the pet. Modifies cycle in place.

        Returns:
            (hours slept, stars), or None when the pet was not sleeping.
        """
        hours = CycleEngine.sleep_hours_so_far(cycle, now)
        if hours is None:
            return None
        cycle[const.DATA_CYCLE_SLEEP_STARTED_AT] = None
        return hours, CycleEngine.get_sleep_stars(hours)

    # =========================================================================
    # Completion
    # =========================================================================

    @staticmethod
    def determine_reward(mood_days: int, now: datetime) -> CycleRewardData:
        """Reward tier for the number of mood days achieved."""
        reward_type = const.CYCLE_REWARD_BASIC
        for min_days, tier in const.CYCLE_REWARD_THRESHOLDS:
            if mood_days >= min_days:
                reward_type = tier
                break
        success = mood_days >= const.CYCLE_SUCCESS_MOOD_DAYS
        reward = const.CYCLE_REWARDS[reward_type]
        return {
            "reward_type": reward_type,
            "success": success,
            "mood_days_achieved": mood_days,
            "items": list(reward[const.DATA_CYCLE_REWARD_ITEMS]),
            "star_fragments": int(reward[const.DATA_CYCLE_REWARD_STAR_FRAGMENTS]),
            "badge": const.CYCLE_SUCCESS_BADGE if success else None,
            "settled_at": dt_utils.dt_to_iso(now),
        }

    @staticmethod
    def complete(cycle: dict[str, Any], now: datetime) -> CycleRewardData:
        """Settle the cycle's reward and mark it completed. Modifies cycle."""
        reward = CycleEngine.determine_reward(
            CycleEngine.count_mood_days(cycle), now
        )
        cycle[const.DATA_CYCLE_COMPLETED] = True
        cycle[const.DATA_CYCLE_CURRENT_DAY] = const.CYCLE_LENGTH_DAYS
        cycle[const.DATA_CYCLE_FINAL_REWARD] = dict(reward)
        return reward

    # =========================================================================
    # Progress
    # =========================================================================

    @staticmethod
    def get_progress(
        cycle: dict[str, Any], today: str, now: datetime
    ) -> CycleProgress:
        """Progress view at `today`; a completed or unstarted cycle reads as new.

        On track means mood days keep pace with the 24-of-28 ratio.
        """
        sleeping = CycleEngine.sleep_hours_so_far(cycle, now) is not None
        if not CycleEngine.is_started(cycle) or cycle.get(const.DATA_CYCLE_COMPLETED):
            return {
                "cycle_id": None,
                "current_day": 0,
                "days_remaining": const.CYCLE_LENGTH_DAYS,
                "mood_days_achieved": 0,
                "mood_days_needed": const.CYCLE_SUCCESS_MOOD_DAYS,
                "on_track": True,
                "ready_to_complete": False,
                "sleeping": sleeping,
                "today": {
                    "feed": False,
                    "sleep": False,
                    "chat": False,
                    "mood_bonus": False,
                },
            }

        current_day = CycleEngine.calculate_current_day(
            cycle[const.DATA_CYCLE_START_DATE], today
        )
        mood_days = CycleEngine.count_mood_days(cycle)
        day = CycleEngine.get_day(cycle, today) or {}
        ratio = const.CYCLE_SUCCESS_MOOD_DAYS / const.CYCLE_LENGTH_DAYS
        return {
            "cycle_id": cycle[const.DATA_CYCLE_ID],
            "current_day": current_day,
            "days_remaining": const.CYCLE_LENGTH_DAYS - current_day,
            "mood_days_achieved": mood_days,
            "mood_days_needed": const.CYCLE_SUCCESS_MOOD_DAYS,
            "on_track": mood_days >= current_day * ratio,
            "ready_to_complete": CycleEngine.is_ready_to_complete(cycle, today),
            "sleeping": sleeping,
            "today": {
                "feed": bool(day.get(const.DATA_DAY_FEED_COMPLETED)),
                "sleep": bool(day.get(const.DATA_DAY_SLEEP_COMPLETED)),
                "chat": bool(day.get(const.DATA_DAY_CHAT_COMPLETED)),
                "mood_bonus": bool(day.get(const.DATA_DAY_MOOD_BONUS_EARNED)),
            },
        }
