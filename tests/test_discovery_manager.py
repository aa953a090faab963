"""Tests for DiscoveryManager and the discovery pipeline.

These tests verify:
- A fresh player must wait out the cooldown
- A closed gate or an empty roll leaves the gate state unchanged
- Successful discoveries consume the gate and land in the inventory
- Settings updates are validated
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
import random
from unittest.mock import MagicMock

from freezegun.api import FrozenDateTimeFactory
from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession

from tests.conftest import TEST_SEED, get_emitted

START = "2025-04-07 08:00:00+00:00"
FULL_POOLS = {
    rarity: [{"id": f"{rarity}-gem", "name": f"{rarity.title()} Gem"}]
    for rarity in const.RARITIES
}


@pytest.fixture(autouse=True)
def frozen_start(freezer: FrozenDateTimeFactory) -> None:
    """Start every test at a fixed moment."""
    freezer.move_to(START)


@pytest.fixture
async def stocked_session(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> AsyncGenerator[PetCareSession]:
    """Session whose every rarity pool has an item, with chance 1."""
    mock_config_entry.add_to_hass(hass)
    player_session = PetCareSession(
        hass, mock_config_entry, rng=random.Random(TEST_SEED), pools=FULL_POOLS
    )
    await player_session.async_setup()
    result = await player_session.async_update_discovery_settings(
        {const.DATA_DISCOVERY_CHANCE: 1.0}
    )
    assert result["success"]
    yield player_session
    await hass.async_block_till_done()


async def test_new_player_waits_for_cooldown(session: PetCareSession) -> None:
    """The first discovery opens after interval_hours."""
    manager = session.discovery_manager
    assert not await manager.async_should_discover()

    result = await session.async_discover()
    assert not result["success"]
    assert result["message"] == const.MSG_DISCOVERY_NOT_READY
    assert result["discoveries"] == []
    remaining = await manager.async_get_time_until_next_discovery()
    assert remaining.total_seconds() == const.DEFAULT_DISCOVERY_INTERVAL_HOURS * 3600


async def test_closed_gate_changes_nothing(session: PetCareSession) -> None:
    """A rejected attempt keeps settings and inventory as they were."""
    before = await session.discovery_manager.async_get_settings()
    await session.async_discover()
    assert await session.discovery_manager.async_get_settings() == before
    assert await session.inventory_manager.async_get_total_items() == 0


async def test_zero_chance_finds_nothing(session: PetCareSession) -> None:
    """With chance 0 and no cooldown the roll is always empty."""
    await session.async_update_discovery_settings(
        {const.DATA_DISCOVERY_CHANCE: 0, const.DATA_DISCOVERY_INTERVAL_HOURS: 0}
    )
    before = await session.discovery_manager.async_get_settings()

    for _ in range(10):
        result = await session.async_discover()
        assert not result["success"]
        assert result["message"] == const.MSG_DISCOVERY_NOTHING_FOUND
        assert result["discoveries"] == []

    after = await session.discovery_manager.async_get_settings()
    assert after[const.DATA_DISCOVERY_DAILY_COUNT] == 0
    assert after[const.DATA_DISCOVERY_LAST_TIME] == before[
        const.DATA_DISCOVERY_LAST_TIME
    ]
    assert await session.inventory_manager.async_get_total_items() == 0
    assert await session.discovery_manager.async_get_total_discovered() == 0
    assert await session.economy_manager.async_get_balance() == 0


async def test_discovery_after_cooldown(
    hass: HomeAssistant,
    stocked_session: PetCareSession,
    freezer: FrozenDateTimeFactory,
) -> None:
    """After the cooldown, found items reach the inventory and history."""
    freezer.move_to("2025-04-07 12:30:00+00:00")
    result = await stocked_session.async_discover()
    await hass.async_block_till_done()

    assert result["success"]
    records = result["discoveries"]
    assert 1 <= len(records) <= const.DISCOVERY_COUNT_MAX
    assert result["total_discovered"] == len(records)

    quantity = sum(record[const.DATA_RECORD_QUANTITY] for record in records)
    assert await stocked_session.inventory_manager.async_get_total_items() == quantity
    history = await stocked_session.discovery_manager.async_get_history()
    assert history == records
    recent = await stocked_session.discovery_manager.async_get_recent_notifications()
    assert len(recent) == len(records)

    progress = await stocked_session.discovery_manager.async_get_daily_progress()
    assert progress["current"] == len(records)
    # Cooldown starts over
    assert not await stocked_session.discovery_manager.async_should_discover()


async def test_discovery_advances_achievements_and_missions(
    hass: HomeAssistant,
    stocked_session: PetCareSession,
    freezer: FrozenDateTimeFactory,
) -> None:
    """A discovery unlocks First Discovery and counts toward Forager."""
    freezer.move_to("2025-04-07 12:30:00+00:00")
    result = await stocked_session.async_discover()
    await hass.async_block_till_done()

    unlocked = [
        update["achievement"][const.DATA_ACHIEVEMENT_ID]
        for update in result["achievements"]
        if update["status"] == const.ACHIEVEMENT_STATUS_COMPLETED
    ]
    assert "first_discovery" in unlocked
    mission_ids = [update[const.FIELD_MISSION_ID] for update in result["missions"]]
    assert "weekly_discovery" in mission_ids
    # 20 for First Discovery, 10 for First Ingredient, 10 per record found
    assert await stocked_session.economy_manager.async_get_balance() >= 40


async def test_discovery_pays_star_fragments(
    stocked_session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """Every discovered record is credited with its own transaction."""
    freezer.move_to("2025-04-07 12:30:00+00:00")
    result = await stocked_session.async_discover()

    records = result["discoveries"]
    assert len(result["rewards"]) == len(records)
    assert all(reward["success"] for reward in result["rewards"])
    transactions = await stocked_session.economy_manager.async_get_recent_transactions(
        limit=const.MAX_TRANSACTIONS
    )
    discovery_credits = [
        t
        for t in transactions
        if t[const.DATA_TRANSACTION_SOURCE] == const.CURRENCY_SOURCE_DISCOVERY
    ]
    assert len(discovery_credits) == len(records)
    assert {t[const.DATA_TRANSACTION_AMOUNT] for t in discovery_credits} == {
        const.DISCOVERY_REWARD
    }
    assert {t[const.DATA_TRANSACTION_REFERENCE_ID] for t in discovery_credits} == {
        record[const.DATA_RECORD_ID] for record in records
    }


async def test_daily_cap(
    stocked_session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """The daily cap closes the gate until the next day."""
    await stocked_session.async_update_discovery_settings(
        {
            const.DATA_DISCOVERY_INTERVAL_HOURS: 0,
            const.DATA_DISCOVERY_MAX_PER_DAY: 1,
        }
    )
    assert (await stocked_session.async_discover())["success"]
    assert not await stocked_session.discovery_manager.async_should_discover()

    freezer.move_to("2025-04-08 08:00:00+00:00")
    assert await stocked_session.discovery_manager.async_should_discover()


async def test_discovery_made_event(
    stocked_session: PetCareSession,
    freezer: FrozenDateTimeFactory,
    mock_dispatcher_send: MagicMock,
) -> None:
    """discovery_made carries the records and running total."""
    freezer.move_to("2025-04-07 12:30:00+00:00")
    result = await stocked_session.async_discover()
    payloads = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_DISCOVERY_MADE)
    assert len(payloads) == 1
    assert payloads[0]["count"] == len(result["discoveries"])
    assert payloads[0]["total_discovered"] == len(result["discoveries"])


async def test_invalid_settings_rejected(session: PetCareSession) -> None:
    """Out-of-range settings are not applied."""
    before = await session.discovery_manager.async_get_settings()
    result = await session.async_update_discovery_settings(
        {const.DATA_DISCOVERY_CHANCE: 2}
    )
    assert not result["success"]
    assert await session.discovery_manager.async_get_settings() == before
