# File: session.py
"""Player session for the PetCare integration.

One PetCareSession exists per config entry (player). It owns the store, the
random source and every manager, and orchestrates operations that span
several managers:

- async_perform_action: stats -> moon cycle -> points -> achievements -> missions
- async_discover: discovery -> inventory -> rewards -> achievements -> missions
- async_check_daily_login: login bonus -> missions
- async_record_craft: inventory -> reward -> achievements
- async_end_sleep: sleep score -> sleep action (as async_perform_action)

Mutating entry points are serialized with one asyncio.Lock; managers also
lock each document around its read-modify-write, so event handlers running
as separate tasks never interleave with a write.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
import random
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)
from homeassistant.helpers.event import async_track_time_interval

from . import const
from .helpers import flow_helpers as fh
from .helpers.event_helpers import get_event_signal
from .managers import (
    AchievementManager,
    CycleManager,
    DiscoveryManager,
    EconomyManager,
    InteractionManager,
    InventoryManager,
    MissionManager,
)
from .store import PetCareStore
from .utils import dt_utils

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .managers.base_manager import BaseManager
    from .type_defs import ResourceEntry, StatBoost, StatSnapshot


class PetCareSession:
    """Context object owning one player's managers and storage."""

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        *,
        rng: random.Random | None = None,
        pools: dict[str, list[ResourceEntry]] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            hass: Home Assistant instance
            config_entry: The player's config entry
            rng: Random source for discovery rolls and generated ids
            pools: Rarity -> resource entries for discovery
        """
        self.hass = hass
        self.config_entry = config_entry
        self.player_id = config_entry.entry_id
        self.player_name = config_entry.data.get(
            const.CONF_PLAYER_NAME, const.PETCARE_TITLE
        )
        self.store = PetCareStore(hass, self.player_id)
        self.rng = rng or random.Random()
        self._lock = asyncio.Lock()

        self.interaction_manager = InteractionManager(hass, self)
        self.economy_manager = EconomyManager(
            hass,
            self,
            starting_balance=int(
                config_entry.data.get(
                    const.CONF_STARTING_BALANCE, const.DEFAULT_STARTING_BALANCE
                )
            ),
        )
        self.discovery_manager = DiscoveryManager(
            hass,
            self,
            rng=self.rng,
            pools=pools,
            settings_overrides=fh.build_discovery_overrides(
                dict(config_entry.options)
            ),
        )
        self.mission_manager = MissionManager(hass, self)
        self.achievement_manager = AchievementManager(hass, self)
        self.inventory_manager = InventoryManager(hass, self)
        self.cycle_manager = CycleManager(hass, self)

    @property
    def managers(self) -> list[BaseManager]:
        """All managers, in setup order."""
        return [
            self.interaction_manager,
            self.economy_manager,
            self.discovery_manager,
            self.mission_manager,
            self.achievement_manager,
            self.inventory_manager,
            self.cycle_manager,
        ]

    async def async_setup(self) -> None:
        """Set up every manager (subscriptions, first-load bookkeeping)."""
        for manager in self.managers:
            await manager.async_setup()
        const.LOGGER.debug(
            "DEBUG: Session ready for player '%s' (%s)",
            self.player_name,
            self.player_id,
        )

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(
        self, suffix: str, listener: Callable[[dict[str, Any]], Any]
    ) -> Callable[[], None]:
        """Listen to one of this player's signals.

        Returns:
            Callable that removes the listener.
        """
        return async_dispatcher_connect(
            self.hass, get_event_signal(self.player_id, suffix), listener
        )

    def async_start_refresh(self, interval: timedelta) -> None:
        """Recompute display stats periodically until the entry unloads."""
        unsub = async_track_time_interval(
            self.hass, self.async_refresh_stats, interval
        )
        self.config_entry.async_on_unload(unsub)

    async def async_refresh_stats(
        self, _now: datetime | None = None
    ) -> dict[str, StatSnapshot]:
        """Recompute every pet's stats without writing, then notify."""
        snapshots = await self.interaction_manager.async_get_all_current_stats()
        async_dispatcher_send(
            self.hass,
            get_event_signal(self.player_id, const.SIGNAL_SUFFIX_STATS_REFRESHED),
            {"snapshots": snapshots},
        )
        return snapshots

    # =========================================================================
    # Orchestrated operations
    # =========================================================================

    async def async_perform_action(
        self,
        pet_id: str,
        action_type: str,
        stat_boost: StatBoost | None = None,
        achieved_goal: bool = False,
        pet_name: str | None = None,
    ) -> dict[str, Any]:
        """Record a care action and everything that follows from it.

        Returns:
            Dict with success/message from the action plus the `action`,
            `cycle`, `points`, `achievements` and `missions` results. Nothing
            after the action runs when the action itself fails.
        """
        async with self._lock:
            return await self._async_run_action(
                pet_id, action_type, stat_boost, achieved_goal, pet_name
            )

    async def _async_run_action(
        self,
        pet_id: str,
        action_type: str,
        stat_boost: StatBoost | None,
        achieved_goal: bool,
        pet_name: str | None = None,
        sleep_hours: float | None = None,
    ) -> dict[str, Any]:
        """Action pipeline; the caller holds the session lock."""
        action = await self.interaction_manager.async_record_action(
            pet_id, action_type, stat_boost
        )
        result: dict[str, Any] = {
            const.RESULT_SUCCESS: action["success"],
            const.RESULT_MESSAGE: action["message"],
            "action": action,
            "cycle": None,
            "points": None,
            "achievements": [],
            "missions": [],
        }
        if not action["success"] or action["new_stats"] is None:
            return result

        result["cycle"] = await self.cycle_manager.async_record_day(
            pet_id, action_type, action["new_stats"], sleep_hours
        )
        if pet_name is None:
            pet_name = await self.interaction_manager.async_get_pet_name(pet_id)
        points = await self.economy_manager.async_award_interaction_points(
            pet_id, action_type, achieved_goal, pet_name
        )
        result["points"] = points
        if points["success"]:
            result["achievements"] = (
                await self.achievement_manager.async_check_interaction_achievements(
                    await self.economy_manager.async_get_interaction_count()
                )
            )
        result["missions"] = await self.mission_manager.async_record_activity(
            action_type
        )
        return result

    async def async_start_sleep(self, pet_id: str) -> dict[str, Any]:
        """Put an adopted pet to sleep."""
        async with self._lock:
            if pet_id not in await self.interaction_manager.async_get_pet_ids():
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_PET_NOT_FOUND.format(
                        pet_id=pet_id
                    ),
                }
            return dict(await self.cycle_manager.async_start_sleep(pet_id))

    async def async_end_sleep(
        self, pet_id: str, pet_name: str | None = None
    ) -> dict[str, Any]:
        """Wake a pet and record the sleep as a care action.

        The energy boost equals the stars earned by the sleep's length; a
        perfect sleep (8.5h or more) counts as an achieved goal.

        Returns:
            The action pipeline result plus `sleep` (SleepResult). Nothing
            else runs when the pet was not sleeping.
        """
        async with self._lock:
            sleep = await self.cycle_manager.async_end_sleep(pet_id)
            if not sleep["success"]:
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: sleep["message"],
                    "sleep": sleep,
                    "action": None,
                }
            result = await self._async_run_action(
                pet_id,
                const.ACTION_SLEEP,
                {const.STAT_BOOST_ENERGY: sleep["energy_gained"]},
                achieved_goal=sleep["stars"] >= const.CYCLE_GOAL_STAT,
                pet_name=pet_name,
                sleep_hours=sleep["hours"],
            )
        result["sleep"] = sleep
        if result[const.RESULT_SUCCESS]:
            result[const.RESULT_MESSAGE] = sleep["message"]
        return result

    async def async_check_moon_cycle(self, pet_id: str) -> dict[str, Any]:
        """Settle a pet's moon cycle once it has reached its last day."""
        async with self._lock:
            return await self.cycle_manager.async_check_completion(pet_id)

    async def async_discover(self) -> dict[str, Any]:
        """Attempt a discovery and credit what was found.

        Found items go to the inventory (which re-runs the inventory
        achievements), each record pays DISCOVERY_REWARD Star Fragments,
        then the discovery achievements and missions advance.
        """
        async with self._lock:
            discovery = await self.discovery_manager.async_discover()
            result: dict[str, Any] = {
                **discovery,
                "rewards": [],
                "achievements": [],
                "missions": [],
            }
            records = discovery["discoveries"]
            if not records:
                return result

            await self.inventory_manager.async_add_discoveries(records)
            for record in records:
                name = record[const.DATA_RECORD_RESOURCE_NAME]
                reward = await self.economy_manager.async_earn(
                    const.DISCOVERY_REWARD,
                    source=const.CURRENCY_SOURCE_DISCOVERY,
                    description=f"Discovery reward: {name}",
                    reference_id=record[const.DATA_RECORD_ID],
                )
                result["rewards"].append(reward)
            result["achievements"] = (
                await self.achievement_manager.async_check_discovery_achievements(
                    discovery["total_discovered"]
                )
            )
            result["missions"] = await self.mission_manager.async_record_activity(
                const.MISSION_REQUIREMENT_DISCOVERY, len(records)
            )
        return result

    async def async_check_daily_login(self) -> dict[str, Any]:
        """Claim today's login bonus and advance login missions."""
        async with self._lock:
            login = await self.economy_manager.async_check_daily_login()
            result: dict[str, Any] = {**login, "missions": []}
            if login["success"]:
                result["missions"] = await self.mission_manager.async_record_activity(
                    const.MISSION_REQUIREMENT_LOGIN
                )
        return result

    async def async_record_craft(
        self,
        recipe_stars: int | None = None,
        outputs: list[dict[str, Any]] | None = None,
        recipe_id: str | None = None,
    ) -> dict[str, Any]:
        """Count a crafted recipe, add its outputs and run crafting checks.

        Every craft pays CRAFTING_REWARD Star Fragments.

        Args:
            recipe_stars: Star rating of the crafted recipe (Star Chef check)
            outputs: Optional quantity deltas ({item_id, quantity, rarity})
            recipe_id: Optional recipe id, kept as the reward's reference
        """
        async with self._lock:
            crafted = await self.inventory_manager.async_record_craft()
            if crafted is None:
                return {
                    const.RESULT_SUCCESS: False,
                    const.RESULT_MESSAGE: const.MSG_STORAGE_UNAVAILABLE,
                    "reward": None,
                    "achievements": [],
                }
            if outputs:
                await self.inventory_manager.async_apply_deltas(
                    outputs, source=const.INVENTORY_SOURCE_CRAFTING
                )
            reward = await self.economy_manager.async_earn(
                const.CRAFTING_REWARD,
                source=const.CURRENCY_SOURCE_CRAFTING,
                description=f"Crafting reward: {recipe_id or 'recipe'}",
                reference_id=recipe_id,
            )
            achievements = (
                await self.achievement_manager.async_check_crafting_achievements(
                    crafted, recipe_stars
                )
            )
        return {
            const.RESULT_SUCCESS: True,
            const.RESULT_MESSAGE: "",
            "crafted_count": crafted,
            "reward": reward,
            "achievements": achievements,
        }

    # =========================================================================
    # Single-manager operations (serialized with the orchestrated ones)
    # =========================================================================

    async def async_adopt_pet(
        self, pet_id: str, name: str | None = None
    ) -> dict[str, Any]:
        """Adopt a pet with base stats."""
        async with self._lock:
            return await self.interaction_manager.async_adopt_pet(pet_id, name)

    async def async_complete_mission(self, mission_id: str) -> dict[str, Any]:
        """Claim a mission for the current window."""
        async with self._lock:
            return dict(await self.mission_manager.async_complete_mission(mission_id))

    async def async_update_achievement_progress(
        self, achievement_id: str, value: int
    ) -> dict[str, Any]:
        """Set an achievement's progress."""
        async with self._lock:
            return dict(
                await self.achievement_manager.async_update_progress(
                    achievement_id, value
                )
            )

    async def async_spend_currency(
        self,
        amount: int,
        description: str = "",
        reference_id: str | None = None,
    ) -> dict[str, Any]:
        """Spend Star Fragments (rejected when the balance is too low)."""
        async with self._lock:
            return dict(
                await self.economy_manager.async_spend(
                    amount, description, reference_id=reference_id
                )
            )

    async def async_add_custom_achievement(
        self, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Add a player-defined achievement."""
        async with self._lock:
            return await self.achievement_manager.async_add_custom_achievement(data)

    async def async_remove_custom_achievement(
        self, achievement_id: str
    ) -> dict[str, Any]:
        """Remove a player-defined achievement."""
        async with self._lock:
            return await self.achievement_manager.async_remove_custom_achievement(
                achievement_id
            )

    async def async_update_discovery_settings(
        self, updates: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge a partial discovery settings update."""
        async with self._lock:
            return dict(await self.discovery_manager.async_update_settings(updates))

    # =========================================================================
    # Summary / lifecycle
    # =========================================================================

    async def async_get_summary(self) -> dict[str, Any]:
        """Snapshot of the player's state (diagnostics)."""
        pet_ids = await self.interaction_manager.async_get_pet_ids()
        return {
            "player_name": self.player_name,
            "pets": await self.interaction_manager.async_get_all_current_stats(),
            "moon_cycles": {
                pet_id: await self.cycle_manager.async_get_progress(pet_id)
                for pet_id in pet_ids
            },
            "daily_stats": await self.economy_manager.async_get_daily_stats(),
            "progress": await self.mission_manager.async_get_player_progress(),
            "achievements": (
                await self.achievement_manager.async_get_overall_completion()
            ),
            "discovery": {
                "settings": await self.discovery_manager.async_get_settings(),
                "daily_progress": (
                    await self.discovery_manager.async_get_daily_progress()
                ),
                "total_discovered": (
                    await self.discovery_manager.async_get_total_discovered()
                ),
                "next_discovery_in": dt_utils.format_countdown(
                    await self.discovery_manager.async_get_time_until_next_discovery()
                ),
            },
            "inventory": {
                "total_items": await self.inventory_manager.async_get_total_items(),
                "rarities": await self.inventory_manager.async_get_rarities(),
                "crafted_count": (
                    await self.inventory_manager.async_get_crafted_count()
                ),
            },
        }

    async def async_delete_all_data(self) -> None:
        """Delete every stored document of this player."""
        pet_ids = await self.interaction_manager.async_get_pet_ids()
        scopes = [
            *await self.interaction_manager.async_get_pet_scopes(),
            *(self.cycle_manager.get_cycle_scope(pet_id) for pet_id in pet_ids),
            *const.PLAYER_DOCUMENT_SCOPES,
        ]
        await self.store.async_delete_storage(scopes)
