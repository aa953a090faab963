"""Interaction Manager - Pet timers, care actions and daily caps.

Each pet has its own timers document (`pet.<pet_id>`); the `pets` index
lists adopted pet ids. Timers are created on adoption, or lazily on the
first action with base stats.

Recording an action:
1. Resets the daily mood/feed counters when their date is stale
2. Rejects a feed beyond MAX_FEEDS_PER_DAY without writing anything
3. Persists the decay computed by StatEngine (energy checkpoint resets)
4. Applies the action (mood gain at most once per day, hunger/energy boosts)

Display reads (async_get_current_stats) never write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.stat_engine import StatEngine
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import ActionResult, CurrentStats, StatBoost, StatSnapshot


class InteractionManager(BaseManager):
    """Manager for pet timers and care actions."""

    def __init__(self, hass: HomeAssistant, session: PetCareSession) -> None:
        """Initialize the InteractionManager."""
        super().__init__(hass, session)

    async def async_setup(self) -> None:
        """Set up the InteractionManager (no subscriptions)."""

    @staticmethod
    def get_pet_scope(pet_id: str) -> str:
        """Document scope holding a pet's timers."""
        return f"{const.DOC_PET_PREFIX}.{pet_id}"

    # =========================================================================
    # Loading
    # =========================================================================

    async def _async_load_index(self) -> dict[str, Any]:
        return await self.store.async_load(const.DOC_PETS, db.hydrate_pet_index)

    async def _async_load_timers(self, pet_id: str, now: datetime) -> dict[str, Any]:
        return await self.store.async_load(
            self.get_pet_scope(pet_id),
            lambda raw: db.hydrate_pet_timers(raw, pet_id, now),
        )

    async def async_get_pet_ids(self) -> list[str]:
        """Return the ids of all adopted pets."""
        index = await self._async_load_index()
        return list(index[const.DATA_PET_INDEX_IDS])

    async def _async_register_pet(self, pet_id: str) -> bool | None:
        """Add a pet to the index.

        Returns:
            True if added, False if already present, None if the save failed.
        """
        async with self.store.lock(const.DOC_PETS):
            index = await self._async_load_index()
            if pet_id in index[const.DATA_PET_INDEX_IDS]:
                return False
            index[const.DATA_PET_INDEX_IDS].append(pet_id)
            if not await self.store.async_save(const.DOC_PETS, index):
                return None
        return True

    # =========================================================================
    # Adoption
    # =========================================================================

    async def async_adopt_pet(
        self, pet_id: str, name: str | None = None
    ) -> dict[str, Any]:
        """Create timers for a new pet with base stats.

        Returns:
            {success, message, pet_id}; success=False if the pet already exists.
        """
        display_name = name or pet_id
        registered = await self._async_register_pet(pet_id)
        if registered is None:
            return {
                const.RESULT_SUCCESS: False,
                const.RESULT_MESSAGE: const.MSG_STORAGE_UNAVAILABLE,
                const.FIELD_PET_ID: pet_id,
            }
        if not registered:
            return {
                const.RESULT_SUCCESS: False,
                const.RESULT_MESSAGE: const.MSG_PET_ALREADY_ADOPTED.format(
                    name=display_name
                ),
                const.FIELD_PET_ID: pet_id,
            }

        scope = self.get_pet_scope(pet_id)
        async with self.store.lock(scope):
            timers = dict(
                db.build_pet_timers(pet_id, dt_utils.dt_now_utc(), display_name)
            )
            saved = await self.store.async_save(scope, timers)

        if saved:
            const.LOGGER.info("INFO: Adopted pet '%s' (%s)", display_name, pet_id)
        return {
            const.RESULT_SUCCESS: saved,
            const.RESULT_MESSAGE: const.MSG_PET_ADOPTED.format(name=display_name)
            if saved
            else const.MSG_STORAGE_UNAVAILABLE,
            const.FIELD_PET_ID: pet_id,
        }

    # =========================================================================
    # Actions
    # =========================================================================

    async def async_record_action(
        self,
        pet_id: str,
        action_type: str,
        stat_boost: StatBoost | None = None,
    ) -> ActionResult:
        """Apply a care action to a pet.

        Args:
            pet_id: Target pet (created with base stats if unknown)
            action_type: One of const.ACTION_TYPES
            stat_boost: Requested mood/hunger/energy deltas

        Returns:
            ActionResult. success=False for an unknown action, the daily feed
            limit, or a failed save; nothing is persisted in those cases.
        """
        if action_type not in const.ACTION_TYPES:
            return self._failure(const.MSG_UNKNOWN_ACTION.format(action=action_type))

        now = dt_utils.dt_now_utc()
        today = dt_utils.local_date_iso(now)
        if await self._async_register_pet(pet_id) is None:
            return self._failure(const.MSG_STORAGE_UNAVAILABLE)

        scope = self.get_pet_scope(pet_id)
        async with self.store.lock(scope):
            timers = await self._async_load_timers(pet_id, now)
            StatEngine.reset_daily_counters(timers, today)

            if action_type == const.ACTION_FEED and not StatEngine.can_feed(timers):
                const.LOGGER.debug(
                    "DEBUG: Feed rejected for pet %s: daily limit reached", pet_id
                )
                return self._failure(
                    const.MSG_FEED_LIMIT_REACHED.format(limit=const.MAX_FEEDS_PER_DAY),
                    can_gain_mood=StatEngine.can_gain_mood(timers),
                )

            snapshot = StatEngine.compute_snapshot(timers, now)
            StatEngine.apply_decay(timers, snapshot, now)
            can_gain_mood = StatEngine.can_gain_mood(timers)
            mood_gained = StatEngine.apply_action(timers, action_type, stat_boost, now)

            if not await self.store.async_save(scope, timers):
                return self._failure(const.MSG_STORAGE_UNAVAILABLE)

        new_stats: CurrentStats = {
            "mood": timers[const.DATA_PET_CURRENT_MOOD],
            "hunger": timers[const.DATA_PET_CURRENT_HUNGER],
            "energy": timers[const.DATA_PET_CURRENT_ENERGY],
        }
        action_label = action_type.capitalize()
        message = (
            const.MSG_ACTION_MOOD_GAINED.format(action=action_label, mood=mood_gained)
            if mood_gained
            else const.MSG_ACTION_NO_MOOD.format(action=action_label)
        )

        self.emit(
            const.SIGNAL_SUFFIX_ACTION_RECORDED,
            pet_id=pet_id,
            action_type=action_type,
            mood_gained=mood_gained,
            new_stats=dict(new_stats),
            decay=dict(snapshot[const.SNAPSHOT_DECAY]),
        )
        const.LOGGER.debug(
            "DEBUG: InteractionManager.record_action: pet=%s, action=%s, "
            "mood_gained=%d, stats=%s, decay=%s",
            pet_id,
            action_type,
            mood_gained,
            new_stats,
            snapshot[const.SNAPSHOT_DECAY],
        )
        return {
            "success": True,
            "can_gain_mood": can_gain_mood,
            "mood_gained": mood_gained,
            "message": message,
            "new_stats": new_stats,
        }

    @staticmethod
    def _failure(message: str, *, can_gain_mood: bool = False) -> ActionResult:
        return {
            "success": False,
            "can_gain_mood": can_gain_mood,
            "mood_gained": 0,
            "message": message,
            "new_stats": None,
        }

    # =========================================================================
    # Reads
    # =========================================================================

    async def async_get_current_stats(self, pet_id: str) -> StatSnapshot | None:
        """Derive a pet's stats at now without writing anything.

        Returns:
            StatSnapshot, or None if the pet was never adopted or cared for.
        """
        if pet_id not in await self.async_get_pet_ids():
            return None
        now = dt_utils.dt_now_utc()
        timers = await self._async_load_timers(pet_id, now)
        return StatEngine.compute_snapshot(timers, now)

    async def async_get_all_current_stats(self) -> dict[str, StatSnapshot]:
        """Snapshots for every adopted pet (display refresh)."""
        snapshots: dict[str, StatSnapshot] = {}
        for pet_id in await self.async_get_pet_ids():
            snapshot = await self.async_get_current_stats(pet_id)
            if snapshot is not None:
                snapshots[pet_id] = snapshot
        return snapshots

    async def async_get_state_description(self, pet_id: str) -> str | None:
        """Display sentence for a pet's current mood state."""
        snapshot = await self.async_get_current_stats(pet_id)
        if snapshot is None:
            return None
        return StatEngine.describe_mood_state(snapshot[const.SNAPSHOT_MOOD_STATE])

    async def async_get_pet_name(self, pet_id: str) -> str:
        """Display name stored with the pet's timers."""
        timers = await self._async_load_timers(pet_id, dt_utils.dt_now_utc())
        return str(timers.get(const.DATA_PET_NAME) or pet_id)

    async def async_get_pet_scopes(self) -> list[str]:
        """Timer document scopes of every adopted pet."""
        return [self.get_pet_scope(pet_id) for pet_id in await self.async_get_pet_ids()]
