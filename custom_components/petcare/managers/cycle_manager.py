"""Cycle Manager - Per-pet moon cycles, sleep sessions and cycle rewards.

Each pet has one cycle document (`cycle.<pet_id>`). Nothing is stored until
the first write; a write that finds the cycle completed or past its last
day starts a fresh one. An expired cycle that was never checked is settled
on that rollover, so its reward is not lost. A sleep in progress carries
over into the new cycle.

Settled rewards go out as CYCLE_COMPLETED; EconomyManager credits the Star
Fragments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.cycle_engine import CycleEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import (
        CurrentStats,
        CycleDayResult,
        CycleProgress,
        CycleRewardData,
        SleepResult,
    )


class CycleManager(BaseManager):
    """Manager for moon cycles and sleep."""

    def __init__(self, hass: HomeAssistant, session: PetCareSession) -> None:
        """Initialize the CycleManager."""
        super().__init__(hass, session)

    async def async_setup(self) -> None:
        """Set up the CycleManager (no subscriptions)."""

    @staticmethod
    def get_cycle_scope(pet_id: str) -> str:
        """Document scope holding a pet's moon cycle."""
        return f"{const.DOC_CYCLE_PREFIX}.{pet_id}"

    # =========================================================================
    # Loading
    # =========================================================================

    async def _async_load_cycle(self, pet_id: str) -> dict[str, Any]:
        return await self.store.async_load(
            self.get_cycle_scope(pet_id),
            lambda raw: db.hydrate_moon_cycle(raw, pet_id),
        )

    def _roll_over(
        self, cycle: dict[str, Any], pet_id: str, now: datetime
    ) -> tuple[dict[str, Any], CycleRewardData | None]:
        """Return the cycle to write into, settling an expired one first."""
        today = dt_utils.local_date_iso(now)
        if not CycleEngine.needs_new_cycle(cycle, today):
            return cycle, None

        settled = None
        if CycleEngine.is_started(cycle) and not cycle[const.DATA_CYCLE_COMPLETED]:
            settled = CycleEngine.complete(cycle, now)
            const.LOGGER.info(
                "INFO: Settled expired moon cycle %s for pet %s (%s)",
                cycle[const.DATA_CYCLE_ID],
                pet_id,
                settled["reward_type"],
            )
        fresh = dict(db.build_moon_cycle(pet_id, now))
        fresh[const.DATA_CYCLE_SLEEP_STARTED_AT] = cycle.get(
            const.DATA_CYCLE_SLEEP_STARTED_AT
        )
        return fresh, settled

    def _emit_completed(
        self, pet_id: str, cycle_id: str, reward: CycleRewardData
    ) -> None:
        self.emit(
            const.SIGNAL_SUFFIX_CYCLE_COMPLETED,
            pet_id=pet_id,
            cycle_id=cycle_id,
            reward_type=reward["reward_type"],
            success=reward["success"],
            mood_days=reward["mood_days_achieved"],
            star_fragments=reward["star_fragments"],
            badge=reward["badge"],
        )

    async def _async_write(
        self,
        pet_id: str,
        now: datetime,
        mutate: Callable[[dict[str, Any]], Any],
    ) -> tuple[Any, dict[str, Any]] | None:
        """Load, roll over, mutate and save a pet's cycle under its lock.

        `mutate(cycle)` returns the operation's outcome, or None to skip the
        save. Returns (outcome, cycle), or None when the save failed.
        """
        scope = self.get_cycle_scope(pet_id)
        async with self.store.lock(scope):
            stored = await self._async_load_cycle(pet_id)
            expired_id = stored.get(const.DATA_CYCLE_ID)
            cycle, settled = self._roll_over(stored, pet_id, now)
            outcome = mutate(cycle)
            if outcome is None and settled is None:
                return None, cycle
            if not await self.store.async_save(scope, cycle):
                return None
        if settled is not None:
            self._emit_completed(pet_id, str(expired_id), settled)
        return outcome, cycle

    # =========================================================================
    # Daily stats
    # =========================================================================

    async def async_record_day(
        self,
        pet_id: str,
        action_type: str,
        stats: CurrentStats,
        sleep_hours: float | None = None,
    ) -> CycleDayResult:
        """Record an action's resulting stats on today's cycle entry.

        Args:
            pet_id: Pet the action was performed on
            action_type: One of const.ACTION_TYPES (play counts as chat)
            stats: The pet's stats after the action
            sleep_hours: Length of the sleep that just ended, for sleep
        """
        now = dt_utils.dt_now_utc()
        today = dt_utils.local_date_iso(now)
        written = await self._async_write(
            pet_id,
            now,
            lambda cycle: CycleEngine.record_day(
                cycle, today, action_type, stats, sleep_hours
            ),
        )
        if written is None:
            return {
                "success": False,
                "message": const.MSG_STORAGE_UNAVAILABLE,
                "goal_completed": False,
                "mood_bonus_earned": False,
                "current_day": 0,
                "mood_days": 0,
            }

        (goal_completed, mood_bonus_earned), cycle = written
        day = CycleEngine.get_day(cycle, today) or {}
        action_label = action_type.capitalize()
        if mood_bonus_earned:
            message = const.MSG_CYCLE_MOOD_BONUS.format(action=action_label)
        elif day.get(const.DATA_DAY_MOOD_BONUS_EARNED):
            message = const.MSG_CYCLE_MOOD_BONUS_CLAIMED
        else:
            message = const.MSG_CYCLE_ACTION_RECORDED.format(action=action_label)

        const.LOGGER.debug(
            "DEBUG: CycleManager.record_day: pet=%s, action=%s, day=%d, "
            "goal=%s, bonus=%s, mood_days=%d",
            pet_id,
            action_type,
            cycle[const.DATA_CYCLE_CURRENT_DAY],
            goal_completed,
            mood_bonus_earned,
            cycle[const.DATA_CYCLE_MOOD_DAYS],
        )
        return {
            "success": True,
            "message": message,
            "goal_completed": goal_completed,
            "mood_bonus_earned": mood_bonus_earned,
            "current_day": cycle[const.DATA_CYCLE_CURRENT_DAY],
            "mood_days": cycle[const.DATA_CYCLE_MOOD_DAYS],
        }

    # =========================================================================
    # Sleep
    # =========================================================================

    async def async_start_sleep(self, pet_id: str) -> SleepResult:
        """Put a pet to sleep; rejected while it is already asleep."""
        now = dt_utils.dt_now_utc()
        written = await self._async_write(
            pet_id,
            now,
            lambda cycle: True if CycleEngine.start_sleep(cycle, now) else None,
        )
        if written is None:
            return self._sleep_result(False, const.MSG_STORAGE_UNAVAILABLE)
        if written[0] is None:
            return self._sleep_result(False, const.MSG_SLEEP_ALREADY_SLEEPING)

        const.LOGGER.debug("DEBUG: Pet %s fell asleep", pet_id)
        return self._sleep_result(
            True, const.MSG_SLEEP_STARTED.format(hours=const.SLEEP_PERFECT_HOURS)
        )

    async def async_end_sleep(self, pet_id: str) -> SleepResult:
        """Wake a pet and score the sleep by its length.

        Returns:
            SleepResult with the hours slept and the energy (= stars)
            earned; success=False when the pet was not sleeping.
        """
        now = dt_utils.dt_now_utc()
        written = await self._async_write(
            pet_id, now, lambda cycle: CycleEngine.end_sleep(cycle, now)
        )
        if written is None:
            return self._sleep_result(False, const.MSG_STORAGE_UNAVAILABLE)
        if written[0] is None:
            return self._sleep_result(False, const.MSG_SLEEP_NOT_SLEEPING)

        hours, stars = written[0]
        if hours >= const.SLEEP_PERFECT_HOURS:
            message = const.MSG_SLEEP_PERFECT.format(hours=hours)
        else:
            message = const.MSG_SLEEP_ENDED.format(
                hours=hours, stars=stars, perfect=const.SLEEP_PERFECT_HOURS
            )
        const.LOGGER.debug(
            "DEBUG: Pet %s woke up after %.2f hours (%d stars)", pet_id, hours, stars
        )
        return self._sleep_result(
            True,
            message,
            hours=round(hours, const.DATA_FLOAT_PRECISION),
            energy_gained=stars,
            stars=stars,
        )

    @staticmethod
    def _sleep_result(
        success: bool,
        message: str,
        *,
        hours: float = 0.0,
        energy_gained: int = 0,
        stars: int = 0,
    ) -> SleepResult:
        return {
            "success": success,
            "message": message,
            "hours": hours,
            "energy_gained": energy_gained,
            "stars": stars,
        }

    async def async_get_sleep_status(self, pet_id: str) -> dict[str, Any]:
        """Whether the pet is asleep and for how long (no writes)."""
        cycle = await self._async_load_cycle(pet_id)
        hours = CycleEngine.sleep_hours_so_far(cycle, dt_utils.dt_now_utc())
        if hours is None:
            return {
                "sleeping": False,
                "sleep_started_at": None,
                "hours": 0.0,
                "message": const.MSG_SLEEP_READY,
            }
        return {
            "sleeping": True,
            "sleep_started_at": cycle[const.DATA_CYCLE_SLEEP_STARTED_AT],
            "hours": round(hours, const.DATA_FLOAT_PRECISION),
            "message": const.MSG_SLEEP_IN_PROGRESS.format(
                hours=hours, perfect=const.SLEEP_PERFECT_HOURS
            ),
        }

    # =========================================================================
    # Completion
    # =========================================================================

    async def async_check_completion(self, pet_id: str) -> dict[str, Any]:
        """Settle the cycle once its last day has been reached.

        Returns:
            {success, message, reward}; success=False (reward None) before
            day 28, or with the stored reward when already settled.
        """
        now = dt_utils.dt_now_utc()
        today = dt_utils.local_date_iso(now)
        scope = self.get_cycle_scope(pet_id)
        async with self.store.lock(scope):
            cycle = await self._async_load_cycle(pet_id)
            if cycle[const.DATA_CYCLE_COMPLETED]:
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_CYCLE_ALREADY_SETTLED,
                    "reward": cycle[const.DATA_CYCLE_FINAL_REWARD],
                }
            if not CycleEngine.is_ready_to_complete(cycle, today):
                current_day = (
                    CycleEngine.calculate_current_day(
                        cycle[const.DATA_CYCLE_START_DATE], today
                    )
                    if CycleEngine.is_started(cycle)
                    else 0
                )
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_CYCLE_NOT_FINISHED.format(
                        length=const.CYCLE_LENGTH_DAYS, day=current_day
                    ),
                    "reward": None,
                }

            reward = CycleEngine.complete(cycle, now)
            if not await self.store.async_save(scope, cycle):
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_STORAGE_UNAVAILABLE,
                    "reward": None,
                }

        self._emit_completed(pet_id, cycle[const.DATA_CYCLE_ID], reward)
        const.LOGGER.info(
            "INFO: Moon cycle %s completed for pet %s: %s (%d mood days)",
            cycle[const.DATA_CYCLE_ID],
            pet_id,
            reward["reward_type"],
            reward["mood_days_achieved"],
        )
        return {
            const.RESULT_SUCCESS: True,
            const.RESULT_MESSAGE: const.MSG_CYCLE_COMPLETED.format(
                reward_type=reward["reward_type"],
                mood_days=reward["mood_days_achieved"],
            ),
            "reward": reward,
        }

    # =========================================================================
    # Reads
    # =========================================================================

    async def async_get_progress(self, pet_id: str) -> CycleProgress:
        """Current day, mood days and today's goals (no writes)."""
        now = dt_utils.dt_now_utc()
        cycle = await self._async_load_cycle(pet_id)
        return CycleEngine.get_progress(cycle, dt_utils.local_date_iso(now), now)

    async def async_get_cycle(self, pet_id: str) -> dict[str, Any]:
        """The stored cycle document (copy)."""
        return await self._async_load_cycle(pet_id)
