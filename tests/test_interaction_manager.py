"""Tests for InteractionManager - adoption, care actions and daily caps.

These tests verify:
- Adoption creates base stats and rejects duplicates
- Unknown pets are registered on their first action
- The daily feed limit rejects the fifth feed without writing
- Mood is gained at most once per day
- action_recorded events carry the new stats
"""

from __future__ import annotations

from unittest.mock import MagicMock

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession

from tests.conftest import get_emitted

FEED = {const.STAT_BOOST_MOOD: 1, const.STAT_BOOST_HUNGER: 1}


async def test_adopt_pet(session: PetCareSession) -> None:
    """A new pet starts with base stats."""
    manager = session.interaction_manager
    result = await manager.async_adopt_pet("mochi", "Mochi")

    assert result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_PET_ADOPTED.format(name="Mochi")
    assert await manager.async_get_pet_ids() == ["mochi"]
    assert await manager.async_get_pet_name("mochi") == "Mochi"

    snapshot = await manager.async_get_current_stats("mochi")
    assert snapshot is not None
    assert snapshot[const.SNAPSHOT_HUNGER] == const.DEFAULT_BASE_STAT
    assert snapshot[const.SNAPSHOT_ENERGY] == const.DEFAULT_BASE_STAT


async def test_adopt_duplicate_fails(session: PetCareSession) -> None:
    """Adopting an existing pet is rejected."""
    manager = session.interaction_manager
    await manager.async_adopt_pet("mochi", "Mochi")
    result = await manager.async_adopt_pet("mochi", "Mochi")

    assert not result[const.RESULT_SUCCESS]
    assert result[const.RESULT_MESSAGE] == const.MSG_PET_ALREADY_ADOPTED.format(
        name="Mochi"
    )
    assert await manager.async_get_pet_ids() == ["mochi"]


async def test_unknown_pet_is_registered_on_action(session: PetCareSession) -> None:
    """The first action on an unknown pet creates it."""
    manager = session.interaction_manager
    assert await manager.async_get_current_stats("pixel") is None

    result = await manager.async_record_action("pixel", const.ACTION_CHAT, {})
    assert result["success"]
    assert await manager.async_get_pet_ids() == ["pixel"]


async def test_unknown_action_type(session: PetCareSession) -> None:
    """Unsupported actions fail without creating the pet."""
    manager = session.interaction_manager
    result = await manager.async_record_action("mochi", "dance", {})

    assert not result["success"]
    assert result["message"] == const.MSG_UNKNOWN_ACTION.format(action="dance")
    assert await manager.async_get_pet_ids() == []


async def test_mood_gained_once_per_day(session: PetCareSession) -> None:
    """Only the first mood-boosting action of the day gains mood."""
    manager = session.interaction_manager
    first = await manager.async_record_action("mochi", const.ACTION_FEED, FEED)
    second = await manager.async_record_action("mochi", const.ACTION_FEED, FEED)

    assert first["can_gain_mood"]
    assert first["mood_gained"] == 1
    assert first["new_stats"]["hunger"] == const.DEFAULT_BASE_STAT + 1
    assert not second["can_gain_mood"]
    assert second["mood_gained"] == 0
    assert second["message"] == const.MSG_ACTION_NO_MOOD.format(action="Feed")


async def test_fifth_feed_is_rejected(session: PetCareSession) -> None:
    """Four feeds succeed; the fifth fails and changes nothing."""
    manager = session.interaction_manager
    for _ in range(const.MAX_FEEDS_PER_DAY):
        result = await manager.async_record_action("mochi", const.ACTION_FEED, FEED)
        assert result["success"]

    before = await session.store.async_load(
        manager.get_pet_scope("mochi"), lambda raw: raw or {}
    )
    fifth = await manager.async_record_action("mochi", const.ACTION_FEED, FEED)
    after = await session.store.async_load(
        manager.get_pet_scope("mochi"), lambda raw: raw or {}
    )

    assert not fifth["success"]
    assert fifth["message"] == const.MSG_FEED_LIMIT_REACHED.format(limit=4)
    assert fifth["new_stats"] is None
    assert after == before
    assert after[const.DATA_PET_FEED_ACTIONS_TODAY] == const.MAX_FEEDS_PER_DAY


async def test_other_actions_ignore_feed_limit(session: PetCareSession) -> None:
    """Sleeping still works after the feed limit is reached."""
    manager = session.interaction_manager
    for _ in range(const.MAX_FEEDS_PER_DAY):
        await manager.async_record_action("mochi", const.ACTION_FEED, FEED)

    result = await manager.async_record_action(
        "mochi", const.ACTION_SLEEP, {const.STAT_BOOST_ENERGY: 1}
    )
    assert result["success"]
    assert result["new_stats"]["energy"] == const.DEFAULT_BASE_STAT + 1


async def test_action_recorded_event(
    session: PetCareSession, mock_dispatcher_send: MagicMock
) -> None:
    """A successful action emits action_recorded with the new stats."""
    await session.interaction_manager.async_record_action(
        "mochi", const.ACTION_FEED, FEED
    )
    payloads = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_ACTION_RECORDED)

    assert len(payloads) == 1
    assert payloads[0]["pet_id"] == "mochi"
    assert payloads[0]["action_type"] == const.ACTION_FEED
    assert payloads[0]["mood_gained"] == 1
    assert payloads[0]["new_stats"]["hunger"] == const.DEFAULT_BASE_STAT + 1


async def test_rejected_action_emits_nothing(
    session: PetCareSession, mock_dispatcher_send: MagicMock
) -> None:
    """Failed actions do not notify listeners."""
    await session.interaction_manager.async_record_action("mochi", "dance", {})
    assert not get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_ACTION_RECORDED)
