"""Stat Engine - Pure logic for time-based pet stat decay.

This engine provides stateless, pure Python functions for:
- Mood state machine keyed on hours since the last interaction
- Combo mood loss from neglected needs (feed, sleep, play, chat)
- Energy decay in 6-hour blocks
- Applying an action's stat boost with the daily mood cap

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and an
explicit `now`. State management belongs in InteractionManager.
"""

from __future__ import annotations

from datetime import datetime
import math
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp

if TYPE_CHECKING:
    from ..type_defs import StatBoost, StatSnapshot


class StatEngine:
    """Pure logic engine for pet stat derivation.

    All methods are static - no instance state. Timers are the stored
    PetTimersData dict; timestamps are ISO strings.
    """

    @staticmethod
    def clamp_stat(value: float) -> int:
        """Clamp a stat to [STAT_MIN, STAT_MAX]."""
        return int(clamp(value, const.STAT_MIN, const.STAT_MAX))

    @staticmethod
    def hours_since(timestamp: str | None, now: datetime) -> float:
        """Hours elapsed since a stored timestamp (0 if missing/unparseable)."""
        parsed = dt_utils.dt_parse(timestamp)
        if parsed is None:
            return 0.0
        return max(0.0, dt_utils.hours_between(parsed, now))

    # =========================================================================
    # Mood
    # =========================================================================

    @staticmethod
    def get_mood_state(hours: float) -> tuple[str, int]:
        """Return (state, base penalty) for hours since last interaction.

        Lower bounds are inclusive:
            < 3 happy, [3,10) relaxed, [10,15) bored, [15,21) sad, >= 21 angry.
        """
        for lower_bound, state, penalty in const.MOOD_STATE_THRESHOLDS:
            if hours >= lower_bound:
                return state, penalty
        return const.MOOD_STATE_HAPPY, 0

    @staticmethod
    def calculate_combo_loss(timers: dict[str, Any], now: datetime) -> int:
        """Sum threshold indices crossed by each need timer, capped.

        Each of the four need timers contributes 1 at 3h, +2 at 9h, +3 at 15h
        and +4 at 21h. The total is capped at COMBO_PENALTY_MAX.
        """
        loss = 0
        for field in const.ACTION_TIMER_FIELDS.values():
            hours = StatEngine.hours_since(timers.get(field), now)
            for index, threshold in enumerate(
                const.COMBO_PENALTY_THRESHOLDS_HOURS, start=1
            ):
                if hours >= threshold:
                    loss += index
        return min(loss, const.COMBO_PENALTY_MAX)

    @staticmethod
    def describe_mood_state(state: str) -> str:
        """Return the display sentence for a mood state."""
        return const.MOOD_STATE_DESCRIPTIONS.get(
            state, const.MOOD_STATE_DESCRIPTIONS[const.MOOD_STATE_HAPPY]
        )

    # =========================================================================
    # Energy
    # =========================================================================

    @staticmethod
    def calculate_energy(timers: dict[str, Any], now: datetime) -> int:
        """Subtract one point per full 6h block since the energy checkpoint."""
        hours = StatEngine.hours_since(
            timers.get(const.DATA_PET_ENERGY_DECAY_TIMESTAMP), now
        )
        blocks = math.floor(hours / const.ENERGY_DECAY_INTERVAL_HOURS)
        current = int(timers.get(const.DATA_PET_CURRENT_ENERGY, const.DEFAULT_BASE_STAT))
        return max(const.STAT_MIN, current - blocks)

    # =========================================================================
    # Snapshot
    # =========================================================================

    @staticmethod
    def compute_snapshot(timers: dict[str, Any], now: datetime) -> StatSnapshot:
        """Derive current stats from stored timers at `now`.

        Pure: the caller decides whether to persist the result.
        """
        stored_mood = int(
            timers.get(const.DATA_PET_CURRENT_MOOD, const.DEFAULT_BASE_STAT)
        )
        stored_energy = int(
            timers.get(const.DATA_PET_CURRENT_ENERGY, const.DEFAULT_BASE_STAT)
        )
        hunger = int(timers.get(const.DATA_PET_CURRENT_HUNGER, const.DEFAULT_BASE_STAT))

        hours = StatEngine.hours_since(timers.get(const.DATA_PET_LAST_INTERACTION), now)
        state, penalty = StatEngine.get_mood_state(hours)
        state_mood = max(const.STAT_MIN, stored_mood - penalty)
        combo_loss = StatEngine.calculate_combo_loss(timers, now)
        mood = StatEngine.clamp_stat(state_mood - combo_loss)
        energy = StatEngine.calculate_energy(timers, now)

        return {
            const.SNAPSHOT_MOOD: mood,
            const.SNAPSHOT_HUNGER: hunger,
            const.SNAPSHOT_ENERGY: energy,
            const.SNAPSHOT_MOOD_STATE: state,
            const.SNAPSHOT_HOURS_IN_STATE: round(hours, const.DATA_FLOAT_PRECISION),
            const.SNAPSHOT_DECAY: {
                const.SNAPSHOT_DECAY_MOOD: stored_mood - mood,
                const.SNAPSHOT_DECAY_COMBO: combo_loss,
                const.SNAPSHOT_DECAY_ENERGY: stored_energy - energy,
            },
        }  # type: ignore[return-value]

    @staticmethod
    def apply_decay(
        timers: dict[str, Any], snapshot: StatSnapshot, now: datetime
    ) -> None:
        """Write a snapshot back into timers and reset the energy checkpoint.

        Modifies timers in place.
        """
        timers[const.DATA_PET_CURRENT_MOOD] = snapshot[const.SNAPSHOT_MOOD]
        timers[const.DATA_PET_CURRENT_HUNGER] = snapshot[const.SNAPSHOT_HUNGER]
        timers[const.DATA_PET_CURRENT_ENERGY] = snapshot[const.SNAPSHOT_ENERGY]
        timers[const.DATA_PET_ENERGY_DECAY_TIMESTAMP] = dt_utils.dt_to_iso(now)

    # =========================================================================
    # Actions
    # =========================================================================

    @staticmethod
    def reset_daily_counters(timers: dict[str, Any], today: str) -> None:
        """Reset mood/feed counters independently when their date is stale."""
        if timers.get(const.DATA_PET_LAST_MOOD_ACTION_DATE) != today:
            timers[const.DATA_PET_MOOD_ACTIONS_TODAY] = 0
            timers[const.DATA_PET_LAST_MOOD_ACTION_DATE] = today
        if timers.get(const.DATA_PET_LAST_FEED_ACTION_DATE) != today:
            timers[const.DATA_PET_FEED_ACTIONS_TODAY] = 0
            timers[const.DATA_PET_LAST_FEED_ACTION_DATE] = today

    @staticmethod
    def can_feed(timers: dict[str, Any]) -> bool:
        """True while today's feed count is below the daily cap."""
        return (
            int(timers.get(const.DATA_PET_FEED_ACTIONS_TODAY, 0))
            < const.MAX_FEEDS_PER_DAY
        )

    @staticmethod
    def can_gain_mood(timers: dict[str, Any]) -> bool:
        """True while today's mood gain has not been consumed."""
        return (
            int(timers.get(const.DATA_PET_MOOD_ACTIONS_TODAY, 0))
            < const.MAX_MOOD_ACTIONS_PER_DAY
        )

    @staticmethod
    def apply_action(
        timers: dict[str, Any],
        action_type: str,
        stat_boost: StatBoost | None,
        now: datetime,
    ) -> int:
        """Apply one action to timers (counters must already be reset).

        Returns:
            Mood points gained (0 or 1).
        """
        stat_boost = stat_boost or {}
        now_iso = dt_utils.dt_to_iso(now)

        mood_gained = 0
        mood_boost = int(stat_boost.get(const.STAT_BOOST_MOOD, 0))
        if StatEngine.can_gain_mood(timers) and mood_boost > 0:
            mood_gained = min(const.MAX_MOOD_GAIN_PER_DAY, mood_boost)
            timers[const.DATA_PET_MOOD_ACTIONS_TODAY] = (
                int(timers.get(const.DATA_PET_MOOD_ACTIONS_TODAY, 0)) + 1
            )

        timers[const.DATA_PET_LAST_INTERACTION] = now_iso
        timers[const.ACTION_TIMER_FIELDS[action_type]] = now_iso

        if action_type == const.ACTION_FEED:
            timers[const.DATA_PET_FEED_ACTIONS_TODAY] = (
                int(timers.get(const.DATA_PET_FEED_ACTIONS_TODAY, 0)) + 1
            )
            timers[const.DATA_PET_CURRENT_HUNGER] = StatEngine.clamp_stat(
                int(timers[const.DATA_PET_CURRENT_HUNGER])
                + int(stat_boost.get(const.STAT_BOOST_HUNGER, 0))
            )
        elif action_type == const.ACTION_SLEEP:
            timers[const.DATA_PET_CURRENT_ENERGY] = StatEngine.clamp_stat(
                int(timers[const.DATA_PET_CURRENT_ENERGY])
                + int(stat_boost.get(const.STAT_BOOST_ENERGY, 0))
            )

        timers[const.DATA_PET_CURRENT_MOOD] = StatEngine.clamp_stat(
            int(timers[const.DATA_PET_CURRENT_MOOD]) + mood_gained
        )
        return mood_gained

