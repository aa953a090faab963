"""Economy Manager - Interaction points and the Star Fragment ledger.

This manager handles all reward-related state:
- Interaction points (base points, multi-pet bonus, goal bonus, streaks)
- Currency credits and debits (with NSF checks)
- Ledger management (transaction history)
- Daily login bonus
- Event emission for point and balance changes

ARCHITECTURE:
- EconomyManager = "The Bank" (STATEFUL point and currency operations)
- EconomyEngine = Pure math and ledger logic (STATELESS)
- AchievementManager, MissionManager and CycleManager emit ACHIEVEMENT_UNLOCKED,
  LEVEL_UP and CYCLE_COMPLETED; this manager listens and credits the rewards
  (Event Bus coupling)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.economy_engine import EconomyEngine, InsufficientFundsError
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..session import PetCareSession
    from ..type_defs import (
        CurrencyResult,
        PointsAwardResult,
        SpendingStats,
        TransactionData,
    )


# Re-export exception for external use
__all__ = ["EconomyManager", "InsufficientFundsError"]


class EconomyManager(BaseManager):
    """Manager for interaction points and currency transactions.

    Responsibilities:
    - Award interaction points and maintain the calendar-day streak
    - Execute currency credits and debits
    - Maintain the transaction ledger (pruned to MAX_TRANSACTIONS)
    - Emit SIGNAL_SUFFIX_POINTS_AWARDED and SIGNAL_SUFFIX_CURRENCY_CHANGED

    NOT responsible for:
    - Deciding when achievements or missions pay out (their managers emit)
    - The shop catalog (spend() only debits)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: PetCareSession,
        *,
        starting_balance: int = const.DEFAULT_STARTING_BALANCE,
    ) -> None:
        """Initialize the EconomyManager.

        Args:
            hass: Home Assistant instance
            session: The player session
            starting_balance: Star Fragments credited on first load
        """
        super().__init__(hass, session)
        self._starting_balance = int(starting_balance)

    async def async_setup(self) -> None:
        """Set up the EconomyManager.

        Subscribe to reward events and credit the starting balance once.
        """
        self.listen(
            const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED,
            self._on_achievement_unlocked,
        )
        self.listen(
            const.SIGNAL_SUFFIX_LEVEL_UP,
            self._on_level_up,
        )
        self.listen(
            const.SIGNAL_SUFFIX_CYCLE_COMPLETED,
            self._on_cycle_completed,
        )
        await self._async_credit_starting_balance()

    async def _async_credit_starting_balance(self) -> None:
        """Credit the configured starting balance to a brand-new ledger."""
        if self._starting_balance <= 0:
            return
        ledger = await self._async_load_ledger()
        if ledger[const.DATA_CURRENCY_TRANSACTIONS] or ledger[
            const.DATA_CURRENCY_TOTAL_EARNED
        ]:
            return
        await self.async_earn(
            self._starting_balance,
            source=const.CURRENCY_SOURCE_STARTING_BALANCE,
            description="Starting balance",
        )

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_achievement_unlocked(self, payload: dict[str, Any]) -> None:
        """Credit an unlocked achievement's Star Fragment reward.

        Args:
            payload: Event data containing achievement_id, name, reward_type
                and reward_amount
        """
        amount = int(payload.get("reward_amount") or 0)
        if payload.get("reward_type") != const.REWARD_TYPE_STAR_FRAGMENTS or amount <= 0:
            return
        await self.async_earn(
            amount,
            source=const.CURRENCY_SOURCE_ACHIEVEMENT,
            description=const.MSG_ACHIEVEMENT_UNLOCKED.format(
                name=payload.get("name", "")
            ),
            reference_id=payload.get("achievement_id"),
        )

    async def _on_level_up(self, payload: dict[str, Any]) -> None:
        """Credit the level-up bonus.

        Args:
            payload: Event data containing old_level, new_level and bonus
        """
        bonus = int(payload.get("bonus") or 0)
        if bonus <= 0:
            return
        await self.async_earn(
            bonus,
            source=const.CURRENCY_SOURCE_LEVEL_UP,
            description=const.MSG_LEVEL_UP.format(level=payload.get("new_level")),
            reference_id=payload.get("mission_id"),
        )

    async def _on_cycle_completed(self, payload: dict[str, Any]) -> None:
        """Credit a settled moon cycle.

        Args:
            payload: Event data containing pet_id, cycle_id, reward_type,
                mood_days and star_fragments
        """
        amount = int(payload.get("star_fragments") or 0)
        if amount <= 0:
            return
        await self.async_earn(
            amount,
            source=const.CURRENCY_SOURCE_MOON_CYCLE,
            description=const.MSG_CYCLE_COMPLETED.format(
                reward_type=payload.get("reward_type"),
                mood_days=payload.get("mood_days"),
            ),
            reference_id=payload.get("cycle_id"),
        )

    # =========================================================================
    # Loading
    # =========================================================================

    async def _async_load_account(self, now: datetime | None = None) -> dict[str, Any]:
        now = now or dt_utils.dt_now_utc()
        return await self.store.async_load(
            const.DOC_POINTS,
            lambda raw: db.hydrate_points_account(raw, self.entry_id, now),
        )

    async def _async_load_ledger(self) -> dict[str, Any]:
        return await self.store.async_load(
            const.DOC_CURRENCY, db.hydrate_currency_ledger
        )

    # =========================================================================
    # Interaction points
    # =========================================================================

    async def async_award_interaction_points(
        self,
        pet_id: str,
        action_type: str,
        achieved_goal: bool = False,
        pet_name: str | None = None,
    ) -> PointsAwardResult:
        """Award points for a care action.

        Args:
            pet_id: Pet that received the action
            action_type: One of const.ACTION_TYPES
            achieved_goal: Whether the action completed the player's goal
            pet_name: Optional display name recorded on first sight of the pet

        Returns:
            PointsAwardResult with the breakdown. success=False when the
            action earns no points or the account could not be saved.
        """
        base = EconomyEngine.get_base_points(action_type)
        if base is None:
            return self._points_failure(
                const.MSG_NO_POINTS_FOR_ACTION.format(action=action_type)
            )

        now = dt_utils.dt_now_utc()
        today = dt_utils.local_date_iso(now)

        async with self.store.lock(const.DOC_POINTS):
            account = await self._async_load_account(now)
            EconomyEngine.reset_daily_points_if_needed(account, today)

            pets = account[const.DATA_POINTS_PETS]
            pet = pets.get(pet_id)
            if pet is None:
                pet = dict(db.build_pet_points(pet_name or pet_id))
                pets[pet_id] = pet
            elif pet_name:
                pet[const.DATA_PET_POINTS_NAME] = pet_name
            pet_count = len(pets)

            points, multiplier, goal_bonus = EconomyEngine.calculate_interaction_points(
                base, pet_count, achieved_goal
            )
            streak = EconomyEngine.update_streak(account, today)
            streak_bonus = EconomyEngine.calculate_streak_bonus(streak)
            earned = points + streak_bonus

            for key in (const.DATA_PET_POINTS_DAILY, const.DATA_PET_POINTS_TOTAL):
                pet[key] = int(pet[key]) + earned
            pet[const.DATA_PET_POINTS_INTERACTION_COUNT] = (
                int(pet[const.DATA_PET_POINTS_INTERACTION_COUNT]) + 1
            )
            pet[const.DATA_PET_POINTS_MOOD_BONUS] = (
                int(pet[const.DATA_PET_POINTS_MOOD_BONUS]) + goal_bonus
            )
            pet[const.DATA_PET_POINTS_STREAK_DAYS] = streak
            pet[const.DATA_PET_POINTS_LAST_INTERACTION_DATE] = today

            for key in (const.DATA_POINTS_DAILY, const.DATA_POINTS_TOTAL):
                account[key] = int(account[key]) + earned
            account[const.DATA_POINTS_LAST_UPDATED] = dt_utils.dt_to_iso(now)

            if not await self.store.async_save(const.DOC_POINTS, account):
                return self._points_failure(const.MSG_STORAGE_UNAVAILABLE)

        description = EconomyEngine.build_points_description(
            action_type, pet_count, multiplier, achieved_goal
        )
        result: PointsAwardResult = {
            "success": True,
            "points_earned": earned,
            "bonus_multiplier": multiplier,
            "goal_bonus": goal_bonus,
            "streak_bonus": streak_bonus,
            "source": const.POINTS_SOURCE_INTERACTION,
            "description": description,
        }
        self.emit(
            const.SIGNAL_SUFFIX_POINTS_AWARDED,
            pet_id=pet_id,
            action_type=action_type,
            points_earned=earned,
            bonus_multiplier=multiplier,
            goal_bonus=goal_bonus,
            streak_bonus=streak_bonus,
            current_streak=streak,
            total_points=account[const.DATA_POINTS_TOTAL],
        )
        const.LOGGER.debug(
            "DEBUG: EconomyManager.award_points: pet=%s, action=%s, base=%d, "
            "pets=%d, goal_bonus=%d, streak_bonus=%d, earned=%d",
            pet_id,
            action_type,
            base,
            pet_count,
            goal_bonus,
            streak_bonus,
            earned,
        )
        return result

    @staticmethod
    def _points_failure(message: str) -> PointsAwardResult:
        return {
            "success": False,
            "points_earned": 0,
            "bonus_multiplier": 1.0,
            "goal_bonus": 0,
            "streak_bonus": 0,
            "source": const.POINTS_SOURCE_INTERACTION,
            "description": message,
        }

    async def async_get_points_account(self) -> dict[str, Any]:
        """Return the points account, with today's daily reset applied."""
        account = await self._async_load_account()
        EconomyEngine.reset_daily_points_if_needed(account, dt_utils.dt_today_iso())
        return account

    async def async_get_interaction_count(self) -> int:
        """Point-earning interactions across all pets."""
        account = await self._async_load_account()
        return sum(
            int(pet.get(const.DATA_PET_POINTS_INTERACTION_COUNT, 0))
            for pet in account[const.DATA_POINTS_PETS].values()
        )

    async def async_get_daily_points_potential(self) -> dict[str, Any]:
        """Maximum daily points with the pets the player has cared for."""
        account = await self._async_load_account()
        pet_count = max(1, len(account[const.DATA_POINTS_PETS]))
        return EconomyEngine.calculate_daily_potential(pet_count)

    async def async_reset_daily_points(self) -> bool:
        """Zero today's points (global and per pet).

        Returns:
            True if the account was saved.
        """
        async with self.store.lock(const.DOC_POINTS):
            account = await self._async_load_account()
            EconomyEngine.reset_daily_points(account)
            account[const.DATA_POINTS_LAST_DAILY_RESET] = dt_utils.dt_today_iso()
            saved = await self.store.async_save(const.DOC_POINTS, account)
        if saved:
            const.LOGGER.info("INFO: Daily points reset for player %s", self.entry_id)
        return saved

    # =========================================================================
    # Currency
    # =========================================================================

    async def async_get_balance(self) -> int:
        """Return the current Star Fragment balance."""
        ledger = await self._async_load_ledger()
        return int(ledger[const.DATA_CURRENCY_BALANCE])

    async def async_can_afford(self, amount: int) -> bool:
        """Return True if the balance covers `amount`."""
        return EconomyEngine.validate_sufficient_funds(
            await self.async_get_balance(), int(amount)
        )

    @staticmethod
    def _credit(
        ledger: dict[str, Any],
        amount: int,
        source: str,
        description: str,
        now: datetime,
        reference_id: str | None,
    ) -> TransactionData:
        """Credit the ledger in place and return the new transaction."""
        new_balance = int(ledger[const.DATA_CURRENCY_BALANCE]) + amount
        transaction = EconomyEngine.create_transaction(
            new_balance,
            amount,
            const.TRANSACTION_TYPE_EARNED,
            source,
            description,
            now,
            reference_id,
        )
        ledger[const.DATA_CURRENCY_BALANCE] = new_balance
        ledger[const.DATA_CURRENCY_TOTAL_EARNED] = (
            int(ledger[const.DATA_CURRENCY_TOTAL_EARNED]) + amount
        )
        ledger[const.DATA_CURRENCY_TRANSACTIONS].append(transaction)
        EconomyEngine.prune_transactions(ledger[const.DATA_CURRENCY_TRANSACTIONS])
        return transaction

    async def async_earn(
        self,
        amount: int,
        *,
        source: str,
        description: str = "",
        reference_id: str | None = None,
    ) -> CurrencyResult:
        """Add Star Fragments to the balance.

        Args:
            amount: Amount to add (must be positive)
            source: Transaction source (CURRENCY_SOURCE_*)
            description: Human-readable ledger description
            reference_id: Optional related id (mission, achievement, ...)

        Returns:
            CurrencyResult; success=False for a non-positive amount or a
            failed save (balance unchanged).
        """
        amount = int(amount)
        if amount <= 0:
            return self._currency_result(
                False, const.MSG_INVALID_AMOUNT, await self.async_get_balance()
            )

        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_CURRENCY):
            ledger = await self._async_load_ledger()
            old_balance = int(ledger[const.DATA_CURRENCY_BALANCE])
            transaction = self._credit(
                ledger, amount, source, description, now, reference_id
            )
            if not await self.store.async_save(const.DOC_CURRENCY, ledger):
                return self._currency_result(
                    False, const.MSG_STORAGE_UNAVAILABLE, old_balance
                )

        new_balance = ledger[const.DATA_CURRENCY_BALANCE]
        self._emit_currency_changed(old_balance, new_balance, transaction)
        const.LOGGER.debug(
            "DEBUG: EconomyManager.earn: amount=%d, old=%d, new=%d, source=%s",
            amount,
            old_balance,
            new_balance,
            source,
        )
        return self._currency_result(
            True,
            const.MSG_CURRENCY_EARNED.format(amount=amount),
            new_balance,
            transaction,
        )

    async def async_spend(
        self,
        amount: int,
        description: str = "",
        source: str = const.CURRENCY_SOURCE_PURCHASE,
        reference_id: str | None = None,
    ) -> CurrencyResult:
        """Remove Star Fragments from the balance with NSF check.

        Returns:
            CurrencyResult; success=False for a non-positive amount, an
            amount above the balance, or a failed save.
        """
        amount = int(amount)
        if amount <= 0:
            return self._currency_result(
                False, const.MSG_INVALID_AMOUNT, await self.async_get_balance()
            )

        now = dt_utils.dt_now_utc()
        async with self.store.lock(const.DOC_CURRENCY):
            ledger = await self._async_load_ledger()
            old_balance = int(ledger[const.DATA_CURRENCY_BALANCE])
            try:
                EconomyEngine.ensure_sufficient_funds(old_balance, amount)
            except InsufficientFundsError as err:
                const.LOGGER.debug(
                    "DEBUG: EconomyManager.spend rejected: %s (shortfall=%d)",
                    err,
                    err.shortfall,
                )
                return self._currency_result(
                    False, const.MSG_INSUFFICIENT_FUNDS, old_balance
                )

            new_balance = old_balance - amount
            transaction = EconomyEngine.create_transaction(
                new_balance,
                amount,
                const.TRANSACTION_TYPE_SPENT,
                source,
                description,
                now,
                reference_id,
            )
            ledger[const.DATA_CURRENCY_BALANCE] = new_balance
            ledger[const.DATA_CURRENCY_TRANSACTIONS].append(transaction)
            EconomyEngine.prune_transactions(ledger[const.DATA_CURRENCY_TRANSACTIONS])

            if not await self.store.async_save(const.DOC_CURRENCY, ledger):
                return self._currency_result(
                    False, const.MSG_STORAGE_UNAVAILABLE, old_balance
                )

        self._emit_currency_changed(old_balance, new_balance, transaction)
        const.LOGGER.debug(
            "DEBUG: EconomyManager.spend: amount=%d, old=%d, new=%d, source=%s",
            amount,
            old_balance,
            new_balance,
            source,
        )
        return self._currency_result(
            True,
            const.MSG_CURRENCY_SPENT.format(amount=amount),
            new_balance,
            transaction,
        )

    async def async_check_daily_login(self) -> CurrencyResult:
        """Award the daily login bonus once per calendar day.

        Returns:
            CurrencyResult with `login_streak`; success=False when today's
            bonus was already claimed.
        """
        now = dt_utils.dt_now_utc()
        today = dt_utils.local_date_iso(now)

        async with self.store.lock(const.DOC_CURRENCY):
            ledger = await self._async_load_ledger()
            old_balance = int(ledger[const.DATA_CURRENCY_BALANCE])
            streak = EconomyEngine.update_login_streak(ledger, today)
            if streak is None:
                result = self._currency_result(
                    False, const.MSG_DAILY_LOGIN_ALREADY_CLAIMED, old_balance
                )
                result["login_streak"] = int(ledger[const.DATA_CURRENCY_LOGIN_STREAK])
                return result

            bonus = EconomyEngine.calculate_login_bonus(streak)
            transaction = self._credit(
                ledger,
                bonus,
                const.CURRENCY_SOURCE_DAILY_LOGIN,
                f"Daily login (day {streak})",
                now,
                today,
            )
            if not await self.store.async_save(const.DOC_CURRENCY, ledger):
                return self._currency_result(
                    False, const.MSG_STORAGE_UNAVAILABLE, old_balance
                )

        new_balance = ledger[const.DATA_CURRENCY_BALANCE]
        self._emit_currency_changed(old_balance, new_balance, transaction)
        const.LOGGER.info(
            "INFO: Daily login bonus of %d awarded (streak %d)", bonus, streak
        )
        result = self._currency_result(
            True,
            const.MSG_DAILY_LOGIN_CLAIMED.format(amount=bonus, streak=streak),
            new_balance,
            transaction,
        )
        result["login_streak"] = streak
        return result

    def _emit_currency_changed(
        self, old_balance: int, new_balance: int, transaction: TransactionData
    ) -> None:
        self.emit(
            const.SIGNAL_SUFFIX_CURRENCY_CHANGED,
            old_balance=old_balance,
            new_balance=new_balance,
            delta=new_balance - old_balance,
            source=transaction[const.DATA_TRANSACTION_SOURCE],
            transaction_id=transaction[const.DATA_TRANSACTION_ID],
            reference_id=transaction[const.DATA_TRANSACTION_REFERENCE_ID],
        )

    @staticmethod
    def _currency_result(
        success: bool,
        message: str,
        balance: int,
        transaction: TransactionData | None = None,
    ) -> CurrencyResult:
        result: dict[str, Any] = {
            "success": success,
            "message": message,
            "balance": balance,
        }
        if transaction is not None:
            result["transaction"] = transaction
        return result  # type: ignore[return-value]

    # =========================================================================
    # Ledger queries
    # =========================================================================

    async def async_get_recent_transactions(
        self, limit: int = const.DEFAULT_RECENT_TRANSACTIONS
    ) -> list[TransactionData]:
        """Return the newest transactions, newest first."""
        ledger = await self._async_load_ledger()
        transactions = ledger[const.DATA_CURRENCY_TRANSACTIONS]
        return list(reversed(transactions[-limit:])) if limit > 0 else []

    async def async_get_spending_stats(self) -> SpendingStats:
        """Aggregate earned/spent totals overall and by source."""
        ledger = await self._async_load_ledger()
        return EconomyEngine.calculate_spending_stats(
            ledger[const.DATA_CURRENCY_TRANSACTIONS],
            int(ledger[const.DATA_CURRENCY_BALANCE]),
        )

    async def async_get_daily_stats(self) -> dict[str, Any]:
        """Today's points and streaks plus 24h/7d currency movement."""
        now = dt_utils.dt_now_utc()
        account = await self._async_load_account(now)
        EconomyEngine.reset_daily_points_if_needed(
            account, dt_utils.local_date_iso(now)
        )
        ledger = await self._async_load_ledger()
        stats: dict[str, Any] = {
            "daily_points": int(account[const.DATA_POINTS_DAILY]),
            "total_points": int(account[const.DATA_POINTS_TOTAL]),
            "current_streak": int(account[const.DATA_POINTS_CURRENT_STREAK]),
            "longest_streak": int(account[const.DATA_POINTS_LONGEST_STREAK]),
            "balance": int(ledger[const.DATA_CURRENCY_BALANCE]),
            "login_streak": int(ledger[const.DATA_CURRENCY_LOGIN_STREAK]),
        }
        stats.update(
            EconomyEngine.calculate_period_stats(
                ledger[const.DATA_CURRENCY_TRANSACTIONS], now
            )
        )
        return stats
