"""Tests for EconomyManager - interaction points and the Star Fragment ledger.

These tests verify:
- Points awards with multi-pet multiplier, goal bonus and streak bonus
- Earn/spend with NSF rejection and the transaction ledger
- Starting balance credited once
- Daily login bonus once per day
- Event emission for point and balance changes
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from freezegun.api import FrozenDateTimeFactory
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petcare import const
from custom_components.petcare.session import PetCareSession

from tests.conftest import get_emitted

# ============================================================================
# Interaction points
# ============================================================================


async def test_three_pets_feed_with_goal(session: PetCareSession) -> None:
    """Third pet fed with goal: 10 x 1.2 + 6 goal bonus + 3 streak = 21."""
    economy = session.economy_manager
    await economy.async_award_interaction_points("mochi", const.ACTION_CHAT)
    await economy.async_award_interaction_points("pixel", const.ACTION_CHAT)

    result = await economy.async_award_interaction_points(
        "nova", const.ACTION_FEED, achieved_goal=True, pet_name="Nova"
    )

    assert result["success"]
    assert result["bonus_multiplier"] == 1.2
    assert result["goal_bonus"] == 6
    assert result["streak_bonus"] == 3
    assert result["points_earned"] == 21
    assert result["source"] == const.POINTS_SOURCE_INTERACTION
    assert "20% multi-pet bonus" in result["description"]


async def test_play_earns_nothing(session: PetCareSession) -> None:
    """Play is not in the base points table."""
    result = await session.economy_manager.async_award_interaction_points(
        "mochi", const.ACTION_PLAY
    )
    assert not result["success"]
    assert result["points_earned"] == 0
    assert await session.economy_manager.async_get_interaction_count() == 0


async def test_points_accumulate_on_account(session: PetCareSession) -> None:
    """Daily and total points include the streak bonus."""
    economy = session.economy_manager
    await economy.async_award_interaction_points("mochi", const.ACTION_SLEEP)
    await economy.async_award_interaction_points("mochi", const.ACTION_CHAT)

    account = await economy.async_get_points_account()
    assert account[const.DATA_POINTS_DAILY] == (15 + 1) + (5 + 2)
    assert account[const.DATA_POINTS_TOTAL] == 23
    assert account[const.DATA_POINTS_CURRENT_STREAK] == 2
    assert await economy.async_get_interaction_count() == 2


async def test_same_day_feeds_extend_streak(
    session: PetCareSession, freezer: FrozenDateTimeFactory
) -> None:
    """Each award on the same day adds one streak point."""
    freezer.move_to("2025-04-07 12:00:00+00:00")
    economy = session.economy_manager

    first = await economy.async_award_interaction_points("mochi", const.ACTION_FEED)
    second = await economy.async_award_interaction_points("mochi", const.ACTION_FEED)

    assert first["streak_bonus"] == 1
    assert second["streak_bonus"] == 2
    assert second["points_earned"] == 12


async def test_reset_daily_points(session: PetCareSession) -> None:
    """Resetting zeroes daily points but keeps the total."""
    economy = session.economy_manager
    await economy.async_award_interaction_points("mochi", const.ACTION_FEED)

    assert await economy.async_reset_daily_points()
    account = await economy.async_get_points_account()
    assert account[const.DATA_POINTS_DAILY] == 0
    assert account[const.DATA_POINTS_TOTAL] == 11


async def test_daily_points_potential(session: PetCareSession) -> None:
    """Potential uses at least one pet."""
    potential = await session.economy_manager.async_get_daily_points_potential()
    assert potential["max_daily_points"] == 45


async def test_points_awarded_event(
    session: PetCareSession, mock_dispatcher_send: MagicMock
) -> None:
    """points_awarded carries the earned total and streak."""
    await session.economy_manager.async_award_interaction_points(
        "mochi", const.ACTION_FEED
    )
    payloads = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_POINTS_AWARDED)
    assert len(payloads) == 1
    assert payloads[0]["points_earned"] == 11
    assert payloads[0]["current_streak"] == 1


# ============================================================================
# Currency
# ============================================================================


async def test_earn_and_spend(session: PetCareSession) -> None:
    """Earning and spending move the balance and record transactions."""
    economy = session.economy_manager
    earned = await economy.async_earn(
        50, source=const.CURRENCY_SOURCE_MISSION, description="Mission"
    )
    assert earned["success"]
    assert earned["balance"] == 50

    spent = await economy.async_spend(20, "Treat")
    assert spent["success"]
    assert spent["balance"] == 30
    assert spent["transaction"][const.DATA_TRANSACTION_AMOUNT] == 20
    assert spent["transaction"][const.DATA_TRANSACTION_TYPE] == (
        const.TRANSACTION_TYPE_SPENT
    )

    recent = await economy.async_get_recent_transactions()
    assert [t[const.DATA_TRANSACTION_TYPE] for t in recent] == [
        const.TRANSACTION_TYPE_SPENT,
        const.TRANSACTION_TYPE_EARNED,
    ]
    stats = await economy.async_get_spending_stats()
    assert stats["total_earned"] == 50
    assert stats["total_spent"] == 20


async def test_spend_insufficient_funds(session: PetCareSession) -> None:
    """Spending more than the balance is rejected without a transaction."""
    economy = session.economy_manager
    await economy.async_earn(10, source=const.CURRENCY_SOURCE_MISSION)

    result = await economy.async_spend(25, "Too expensive")
    assert not result["success"]
    assert result["message"] == const.MSG_INSUFFICIENT_FUNDS
    assert result["balance"] == 10
    assert await economy.async_get_balance() == 10
    assert len(await economy.async_get_recent_transactions()) == 1


async def test_non_positive_amounts_rejected(session: PetCareSession) -> None:
    """Zero and negative amounts are invalid."""
    economy = session.economy_manager
    assert not (await economy.async_earn(0, source=const.CURRENCY_SOURCE_MISSION))[
        "success"
    ]
    result = await economy.async_spend(-5)
    assert result["message"] == const.MSG_INVALID_AMOUNT


async def test_failed_save_keeps_balance(session: PetCareSession) -> None:
    """A storage failure leaves the balance unchanged."""
    economy = session.economy_manager
    with patch.object(session.store, "async_save", return_value=False):
        result = await economy.async_earn(40, source=const.CURRENCY_SOURCE_MISSION)
    assert not result["success"]
    assert result["message"] == const.MSG_STORAGE_UNAVAILABLE
    assert await economy.async_get_balance() == 0


async def test_starting_balance_credited_once(hass: HomeAssistant) -> None:
    """The starting balance is credited on the first setup only."""
    entry = MockConfigEntry(
        domain=const.DOMAIN,
        title="Kai",
        data={const.CONF_PLAYER_NAME: "Kai", const.CONF_STARTING_BALANCE: 100},
        entry_id="kai_entry",
        unique_id="kai",
    )
    entry.add_to_hass(hass)

    first = PetCareSession(hass, entry)
    await first.async_setup()
    assert await first.economy_manager.async_get_balance() == 100

    second = PetCareSession(hass, entry)
    await second.async_setup()
    assert await second.economy_manager.async_get_balance() == 100
    transactions = await second.economy_manager.async_get_recent_transactions()
    assert len(transactions) == 1
    assert transactions[0][const.DATA_TRANSACTION_SOURCE] == (
        const.CURRENCY_SOURCE_STARTING_BALANCE
    )


async def test_daily_login_once_per_day(session: PetCareSession) -> None:
    """The first login of the day pays 10; the second is rejected."""
    economy = session.economy_manager
    first = await economy.async_check_daily_login()
    second = await economy.async_check_daily_login()

    assert first["success"]
    assert first["login_streak"] == 1
    assert first["balance"] == 10
    assert not second["success"]
    assert second["message"] == const.MSG_DAILY_LOGIN_ALREADY_CLAIMED
    assert second["login_streak"] == 1
    assert await economy.async_get_balance() == 10


async def test_currency_changed_event(
    session: PetCareSession, mock_dispatcher_send: MagicMock
) -> None:
    """currency_changed reports old/new balance and delta."""
    await session.economy_manager.async_earn(
        15, source=const.CURRENCY_SOURCE_MISSION, reference_id="daily_feed"
    )
    payloads = get_emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_CURRENCY_CHANGED)
    assert len(payloads) == 1
    assert payloads[0]["old_balance"] == 0
    assert payloads[0]["new_balance"] == 15
    assert payloads[0]["delta"] == 15
    assert payloads[0]["reference_id"] == "daily_feed"


async def test_daily_stats(session: PetCareSession) -> None:
    """Daily stats combine points and currency movement."""
    economy = session.economy_manager
    await economy.async_award_interaction_points("mochi", const.ACTION_FEED)
    await economy.async_earn(20, source=const.CURRENCY_SOURCE_MISSION)

    stats = await economy.async_get_daily_stats()
    assert stats["daily_points"] == 11
    assert stats["balance"] == 20
    assert stats["today_earned"] == 20
    assert stats["week_spent"] == 0
