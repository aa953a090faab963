"""Tests for CycleManager - moon cycles and sleep through the session.

These tests verify:
- The first care action starts the pet's cycle and earns the mood bonus
- Sleep sessions survive midnight and are scored by their length
- Completion is only possible on day 28 and credits Star Fragments
- An expired cycle is settled when the next one starts
- Reads never write the cycle document
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

from freezegun.api import FrozenDateTimeFactory
from homeassistant.core import HomeAssistant

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession
from custom_components.petcare.store import PetCareStore

from tests.conftest import get_emitted

START = "2025-04-07 12:00:00+00:00"


async def test_first_action_starts_cycle(
    session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """A chat starts the cycle on day 1 and earns today's mood bonus once."""
    freezer.move_to(START)
    await session.async_adopt_pet("mochi", "Mochi")

    first = await session.async_perform_action("mochi", const.ACTION_CHAT)
    second = await session.async_perform_action("mochi", const.ACTION_PLAY)

    assert first["cycle"]["success"]
    assert first["cycle"]["mood_bonus_earned"]
    assert first["cycle"]["current_day"] == 1
    assert first["cycle"]["message"] == const.MSG_CYCLE_MOOD_BONUS.format(
        action="Chat"
    )
    assert not second["cycle"]["mood_bonus_earned"]
    assert second["cycle"]["message"] == const.MSG_CYCLE_MOOD_BONUS_CLAIMED

    progress = await session.cycle_manager.async_get_progress("mochi")
    assert progress["current_day"] == 1
    assert progress["today"]["chat"]
    assert progress["today"]["mood_bonus"]


async def test_failed_action_skips_cycle(session: PetCareSession) -> None:
    """An unsupported action never reaches the cycle."""
    result = await session.async_perform_action("mochi", "dance")

    assert not result[const.RESULT_SUCCESS]
    assert result["cycle"] is None


async def test_sleep_across_midnight(
    session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """Nine hours of sleep give five stars, full energy and the sleep goal."""
    freezer.move_to("2025-04-07 22:00:00+00:00")
    await session.async_adopt_pet("mochi", "Mochi")

    started = await session.async_start_sleep("mochi")
    assert started[const.RESULT_SUCCESS]
    assert started[const.RESULT_MESSAGE] == const.MSG_SLEEP_STARTED.format(
        hours=const.SLEEP_PERFECT_HOURS
    )
    again = await session.async_start_sleep("mochi")
    assert not again[const.RESULT_SUCCESS]
    assert again[const.RESULT_MESSAGE] == const.MSG_SLEEP_ALREADY_SLEEPING

    status = await session.cycle_manager.async_get_sleep_status("mochi")
    assert status["sleeping"]

    freezer.move_to("2025-04-08 07:00:00+00:00")
    result = await session.async_end_sleep("mochi")

    assert result[const.RESULT_SUCCESS]
    assert result["sleep"]["hours"] == 9.0
    assert result["sleep"]["stars"] == 5
    assert result[const.RESULT_MESSAGE] == const.MSG_SLEEP_PERFECT.format(hours=9.0)
    assert result["action"]["new_stats"]["energy"] == const.STAT_MAX
    assert result["cycle"]["goal_completed"]

    progress = await session.cycle_manager.async_get_progress("mochi")
    assert progress["today"]["sleep"]
    assert not progress["sleeping"]


async def test_short_sleep_misses_goal(
    session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """A short sleep still counts as an action but not as a goal."""
    freezer.move_to(START)
    await session.async_adopt_pet("mochi", "Mochi")
    await session.async_start_sleep("mochi")

    freezer.move_to("2025-04-07 17:30:00+00:00")
    result = await session.async_end_sleep("mochi")

    assert result[const.RESULT_SUCCESS]
    assert result["sleep"]["stars"] == 3
    assert result[const.RESULT_MESSAGE] == const.MSG_SLEEP_ENDED.format(
        hours=5.5, stars=3, perfect=const.SLEEP_PERFECT_HOURS
    )
    assert not result["cycle"]["goal_completed"]


async def test_end_sleep_when_awake(session: PetCareSession) -> None:
    """Waking a pet that is not asleep does nothing."""
    await session.async_adopt_pet("mochi", "Mochi")
    result = await session.async_end_sleep("mochi")

    assert not result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_SLEEP_NOT_SLEEPING
    assert result["action"] is None


async def test_start_sleep_unknown_pet(session: PetCareSession) -> None:
    """Only adopted pets can be put to sleep."""
    result = await session.async_start_sleep("ghost")

    assert not result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_PET_NOT_FOUND.format(
        pet_id="ghost"
    )


async def test_check_before_last_day(
    session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """The cycle cannot be settled before day 28."""
    freezer.move_to(START)
    await session.async_perform_action("mochi", const.ACTION_CHAT)
    freezer.move_to("2025-04-16 12:00:00+00:00")

    result = await session.async_check_moon_cycle("mochi")

    assert not result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_CYCLE_NOT_FINISHED.format(
        length=const.CYCLE_LENGTH_DAYS, day=10
    )
    assert result["reward"] is None


async def test_completion_credits_star_fragments(
    hass: HomeAssistant, session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """On day 28 the cycle settles once and its reward reaches the wallet."""
    freezer.move_to(START)
    await session.async_perform_action("mochi", const.ACTION_CHAT)
    cycle = await session.cycle_manager.async_get_cycle("mochi")
    freezer.move_to("2025-05-04 12:00:00+00:00")

    result = await session.async_check_moon_cycle("mochi")
    await hass.async_block_till_done()

    assert result[const.RESULT_SUCCESS]
    reward = result["reward"]
    assert reward["reward_type"] == const.CYCLE_REWARD_BASIC
    assert reward["star_fragments"] == 100
    assert reward["badge"] is None

    transactions = await session.economy_manager.async_get_recent_transactions()
    cycle_txns = [
        txn
        for txn in transactions
        if txn[const.DATA_TRANSACTION_SOURCE] == const.CURRENCY_SOURCE_MOON_CYCLE
    ]
    assert len(cycle_txns) == 1
    assert cycle_txns[0][const.DATA_TRANSACTION_AMOUNT] == 100
    assert cycle_txns[0][const.DATA_TRANSACTION_REFERENCE_ID] == (
        cycle[const.DATA_CYCLE_ID]
    )

    again = await session.async_check_moon_cycle("mochi")
    assert not again[const.RESULT_SUCCESS]
    assert again[const.RESULT_MESSAGE] == const.MSG_CYCLE_ALREADY_SETTLED
    assert again["reward"]["reward_type"] == const.CYCLE_REWARD_BASIC


async def test_completion_emits_event(
    session: PetCareSession,
    freezer: FrozenDateTimeFactory,
    mock_dispatcher_send: MagicMock,
) -> None:
    """cycle_completed carries the cycle id and the reward."""
    freezer.move_to(START)
    await session.async_perform_action("mochi", const.ACTION_CHAT)
    cycle = await session.cycle_manager.async_get_cycle("mochi")
    freezer.move_to("2025-05-04 12:00:00+00:00")

    await session.async_check_moon_cycle("mochi")

    events = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_CYCLE_COMPLETED)
    assert len(events) == 1
    assert events[0]["pet_id"] == "mochi"
    assert events[0]["cycle_id"] == cycle[const.DATA_CYCLE_ID]
    assert events[0]["reward_type"] == const.CYCLE_REWARD_BASIC
    assert events[0]["star_fragments"] == 100


async def test_expired_cycle_settled_on_rollover(
    session: PetCareSession,
    freezer: FrozenDateTimeFactory,
    mock_dispatcher_send: MagicMock,
) -> None:
    """An unchecked cycle is settled when the next action starts a new one."""
    freezer.move_to(START)
    await session.async_perform_action("mochi", const.ACTION_CHAT)
    old = await session.cycle_manager.async_get_cycle("mochi")

    freezer.move_to("2025-05-10 12:00:00+00:00")
    result = await session.async_perform_action("mochi", const.ACTION_CHAT)

    assert result["cycle"]["current_day"] == 1
    new = await session.cycle_manager.async_get_cycle("mochi")
    assert new[const.DATA_CYCLE_ID] != old[const.DATA_CYCLE_ID]
    assert new[const.DATA_CYCLE_START_DATE] == "2025-05-10"

    events = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_CYCLE_COMPLETED)
    assert [event["cycle_id"] for event in events] == [old[const.DATA_CYCLE_ID]]


async def test_reads_do_not_write(
    session: PetCareSession,
    hass_storage: dict[str, Any],
    freezer: FrozenDateTimeFactory,
) -> None:
    """Progress, sleep status and checks leave an unstarted cycle unstored."""
    freezer.move_to(START)
    await session.async_adopt_pet("mochi", "Mochi")
    key = PetCareStore.get_storage_key(
        session.player_id, session.cycle_manager.get_cycle_scope("mochi")
    )

    progress = await session.cycle_manager.async_get_progress("mochi")
    await session.cycle_manager.async_get_sleep_status("mochi")
    checked = await session.async_check_moon_cycle("mochi")
    summary = await session.async_get_summary()

    assert progress["cycle_id"] is None
    assert not checked[const.RESULT_SUCCESS]
    assert summary["moon_cycles"]["mochi"]["current_day"] == 0
    assert key not in hass_storage


async def test_delete_all_data_removes_cycle(
    session: PetCareSession,
    hass_storage: dict[str, Any],
    freezer: FrozenDateTimeFactory,
) -> None:
    """Deleting a player's data also removes the pets' cycles."""
    freezer.move_to(START)
    await session.async_perform_action("mochi", const.ACTION_CHAT)
    key = PetCareStore.get_storage_key(
        session.player_id, session.cycle_manager.get_cycle_scope("mochi")
    )
    assert key in hass_storage

    await session.async_delete_all_data()

    assert key not in hass_storage
