"""Tests for PetCareSession - operations spanning several managers."""

from __future__ import annotations

import copy
from typing import Any

from freezegun.api import FrozenDateTimeFactory
from homeassistant.core import HomeAssistant, callback

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession
from custom_components.petcare.store import PetCareStore

FEED = {const.STAT_BOOST_MOOD: 1, const.STAT_BOOST_HUNGER: 1}


async def test_perform_action_pipeline(session: PetCareSession) -> None:
    """A feed updates stats, awards points and advances missions."""
    result = await session.async_perform_action(
        "mochi", const.ACTION_FEED, FEED, achieved_goal=True, pet_name="Mochi"
    )

    assert result[const.RESULT_SUCCESS]
    assert result["action"]["mood_gained"] == 1
    # 10 base + 5 goal bonus + 1 streak
    assert result["points"]["points_earned"] == 16
    mission_ids = {update[const.FIELD_MISSION_ID] for update in result["missions"]}
    assert "daily_feed" in mission_ids


async def test_failed_action_stops_pipeline(session: PetCareSession) -> None:
    """Nothing after a rejected feed runs."""
    for _ in range(const.MAX_FEEDS_PER_DAY):
        await session.async_perform_action("mochi", const.ACTION_FEED, FEED)
    account_before = await session.economy_manager.async_get_points_account()

    result = await session.async_perform_action("mochi", const.ACTION_FEED, FEED)

    assert not result[const.RESULT_SUCCESS]
    assert result["points"] is None
    assert result["missions"] == []
    account_after = await session.economy_manager.async_get_points_account()
    assert account_after == account_before


async def test_play_updates_stats_without_points(session: PetCareSession) -> None:
    """Play is recorded but earns nothing."""
    result = await session.async_perform_action("mochi", const.ACTION_PLAY, {})
    assert result[const.RESULT_SUCCESS]
    assert not result["points"]["success"]
    assert result["achievements"] == []


async def test_record_craft_star_chef(
    hass: HomeAssistant, session: PetCareSession
) -> None:
    """A 4-star craft completes First Craft and Star Chef."""
    result = await session.async_record_craft(
        recipe_stars=4,
        outputs=[
            {"item_id": "moon-cake", "quantity": 1, "rarity": const.RARITY_RARE}
        ],
        recipe_id="moon-cake-recipe",
    )
    await hass.async_block_till_done()

    assert result[const.RESULT_SUCCESS]
    assert result["crafted_count"] == 1
    completed = {
        update["achievement"][const.DATA_ACHIEVEMENT_ID]
        for update in result["achievements"]
        if update["status"] == const.ACHIEVEMENT_STATUS_COMPLETED
    }
    assert completed == {"first_craft", "star_chef"}
    assert await session.inventory_manager.async_get_total_items() == 1
    # craft 25 + first_craft 15 + star_chef 100 + first_ingredient 10
    assert await session.economy_manager.async_get_balance() == 150


async def test_record_craft_pays_crafting_reward(session: PetCareSession) -> None:
    """Each craft credits CRAFTING_REWARD with the recipe as reference."""
    result = await session.async_record_craft(recipe_id="sweet-bun-recipe")

    reward = result["reward"]
    assert reward["success"]
    transaction = reward["transaction"]
    assert transaction[const.DATA_TRANSACTION_AMOUNT] == const.CRAFTING_REWARD
    assert transaction[const.DATA_TRANSACTION_SOURCE] == (
        const.CURRENCY_SOURCE_CRAFTING
    )
    assert transaction[const.DATA_TRANSACTION_REFERENCE_ID] == "sweet-bun-recipe"


async def test_low_star_craft_skips_star_chef(session: PetCareSession) -> None:
    """A 3-star craft leaves Star Chef untouched."""
    result = await session.async_record_craft(recipe_stars=3)
    ids = {u["achievement"][const.DATA_ACHIEVEMENT_ID] for u in result["achievements"]}
    assert "star_chef" not in ids


async def test_spend_through_session(session: PetCareSession) -> None:
    """Spending is rejected when the balance is too low."""
    result = await session.async_spend_currency(5, "Treat")
    assert not result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_INSUFFICIENT_FUNDS


async def test_refresh_stats_does_not_write(
    hass: HomeAssistant,
    session: PetCareSession,
    hass_storage: dict[str, Any],
    freezer: FrozenDateTimeFactory,
) -> None:
    """The display refresh notifies without touching storage."""
    freezer.move_to("2025-04-07 08:00:00+00:00")
    await session.async_adopt_pet("mochi", "Mochi")
    key = PetCareStore.get_storage_key(
        session.player_id, session.interaction_manager.get_pet_scope("mochi")
    )
    stored_before = copy.deepcopy(hass_storage[key])
    received: list[dict[str, Any]] = []

    @callback
    def _on_refresh(payload: dict[str, Any]) -> None:
        received.append(payload)

    unsub = session.subscribe(const.SIGNAL_SUFFIX_STATS_REFRESHED, _on_refresh)
    # Late enough for energy to decay in the snapshot
    freezer.move_to("2025-04-07 20:00:00+00:00")
    snapshots = await session.async_refresh_stats()
    await hass.async_block_till_done()
    unsub()

    assert set(snapshots) == {"mochi"}
    assert snapshots["mochi"]["energy"] < const.DEFAULT_BASE_STAT
    assert hass_storage[key] == stored_before
    assert len(received) == 1
    assert set(received[0]["snapshots"]) == {"mochi"}


async def test_summary(session: PetCareSession) -> None:
    """The summary covers every subsystem."""
    await session.async_adopt_pet("mochi", "Mochi")
    await session.async_perform_action("mochi", const.ACTION_CHAT, {})

    summary: dict[str, Any] = await session.async_get_summary()

    assert summary["player_name"] == "Luna"
    assert set(summary["pets"]) == {"mochi"}
    assert summary["daily_stats"]["daily_points"] == 6
    assert summary["progress"]["level"] == 1
    assert summary["achievements"]["total"] == len(
        const.DEFAULT_ACHIEVEMENT_TEMPLATES
    )
    assert summary["discovery"]["total_discovered"] == 0
    assert summary["discovery"]["next_discovery_in"] in ("4h", "3h 59m")
    assert summary["inventory"]["total_items"] == 0


async def test_delete_all_data(
    session: PetCareSession, hass_storage: dict[str, Any]
) -> None:
    """Every stored document of the player is removed."""
    await session.async_adopt_pet("mochi", "Mochi")
    await session.async_perform_action("mochi", const.ACTION_FEED, FEED)
    prefix = f"petcare.{session.player_id}."
    assert any(key.startswith(prefix) for key in hass_storage)

    await session.async_delete_all_data()

    assert not any(key.startswith(prefix) for key in hass_storage)
