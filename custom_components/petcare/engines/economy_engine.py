"""Economy Engine - Pure logic for interaction points and currency ledger.

This engine provides stateless, pure Python functions for:
- Interaction point arithmetic (base points, multi-pet multiplier, goal bonus)
- Calendar-day streak tracking and streak bonus
- Currency ledger entry creation and pruning
- Sufficient funds validation (NSF checks)
- Daily login bonus and spending statistics

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in EconomyManager.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
import uuid

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import floor_points, round_points

if TYPE_CHECKING:
    from ..type_defs import SpendingStats, TransactionData


class InsufficientFundsError(Exception):
    """Raised when a spend would result in a negative balance.

    Attributes:
        current_balance: Current currency balance
        requested_amount: Amount attempted to spend
        shortfall: How much more is needed (requested - current)
    """

    def __init__(self, current_balance: int, requested_amount: int) -> None:
        """Initialize InsufficientFundsError."""
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        self.shortfall = requested_amount - current_balance
        super().__init__(
            f"Insufficient funds: balance={current_balance}, "
            f"requested={requested_amount}, shortfall={self.shortfall}"
        )


class EconomyEngine:
    """Pure logic engine for points and currency calculations.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.

    Transaction Sources (for ledger entries):
        Uses CURRENCY_SOURCE_* constants from const.py:
        - CURRENCY_SOURCE_MISSION / CURRENCY_SOURCE_LEVEL_UP: Mission rewards
        - CURRENCY_SOURCE_ACHIEVEMENT: Achievement unlock rewards
        - CURRENCY_SOURCE_DAILY_LOGIN: Daily login bonus
        - CURRENCY_SOURCE_PURCHASE: Shop spending
        - CURRENCY_SOURCE_STARTING_BALANCE: Initial credit on first load
    """

    # =========================================================================
    # Interaction Points
    # =========================================================================

    @staticmethod
    def get_base_points(
        action_type: str, base_points: dict[str, int] | None = None
    ) -> int | None:
        """Return base points for an action, or None when it earns nothing."""
        table = base_points if base_points is not None else const.DEFAULT_BASE_POINTS
        return table.get(action_type)

    @staticmethod
    def calculate_multiplier(pet_count: int) -> float:
        """Multi-pet multiplier: +10% per pet beyond the first.

        Examples:
            1 → 1.0, 2 → 1.1, 3 → 1.2, 5 → 1.4
        """
        if pet_count <= 1:
            return 1.0
        return round_points(1 + const.MULTI_PET_BONUS_STEP * (pet_count - 1))

    @staticmethod
    def calculate_interaction_points(
        base: int, pet_count: int, achieved_goal: bool
    ) -> tuple[int, float, int]:
        """Compute points before the streak bonus.

        Returns:
            (points including goal bonus, multiplier, goal bonus)

        Example:
            base=10, pet_count=3, achieved_goal=True → (18, 1.2, 6)
        """
        multiplier = EconomyEngine.calculate_multiplier(pet_count)
        points = floor_points(base * multiplier) if pet_count > 1 else base
        goal_bonus = 0
        if achieved_goal:
            goal_bonus = floor_points(points * const.GOAL_BONUS_RATE)
        return points + goal_bonus, multiplier, goal_bonus

    @staticmethod
    def update_streak(account: dict[str, Any], today: str) -> int:
        """Advance the interaction streak. Modifies account in place.

        Every award extends the streak by one while the previous interaction
        was today or yesterday; a longer gap resets it to 1. The longest
        streak is kept current.

        Returns:
            The current streak after the update.
        """
        last_date = account.get(const.DATA_POINTS_LAST_STREAK_DATE) or ""
        current = int(account.get(const.DATA_POINTS_CURRENT_STREAK, 0))

        if last_date in (today, dt_utils.previous_date_iso(today)):
            current += 1
        else:
            current = 1

        account[const.DATA_POINTS_CURRENT_STREAK] = current
        account[const.DATA_POINTS_LAST_STREAK_DATE] = today
        account[const.DATA_POINTS_LONGEST_STREAK] = max(
            int(account.get(const.DATA_POINTS_LONGEST_STREAK, 0)), current
        )
        return current

    @staticmethod
    def calculate_streak_bonus(streak: int) -> int:
        """One point per streak day, capped."""
        return min(streak, const.STREAK_BONUS_CAP)

    @staticmethod
    def build_points_description(
        action_type: str, pet_count: int, multiplier: float, achieved_goal: bool
    ) -> str:
        """Human-readable summary of an award.

        Example:
            "+feed points (20% multi-pet bonus!) +50% goal bonus!"
        """
        description = f"+{action_type} points"
        if pet_count > 1:
            description += f" ({round((multiplier - 1) * 100)}% multi-pet bonus!)"
        if achieved_goal:
            description += " +50% goal bonus!"
        return description

    @staticmethod
    def reset_daily_points_if_needed(account: dict[str, Any], today: str) -> bool:
        """Zero daily points (global and per pet) once per calendar day.

        Returns:
            True if a reset happened.
        """
        if account.get(const.DATA_POINTS_LAST_DAILY_RESET) == today:
            return False
        EconomyEngine.reset_daily_points(account)
        account[const.DATA_POINTS_LAST_DAILY_RESET] = today
        return True

    @staticmethod
    def reset_daily_points(account: dict[str, Any]) -> None:
        """Zero daily points (global and per pet). Modifies account in place."""
        account[const.DATA_POINTS_DAILY] = 0
        for pet in account.get(const.DATA_POINTS_PETS, {}).values():
            pet[const.DATA_PET_POINTS_DAILY] = 0

    @staticmethod
    def calculate_daily_potential(pet_count: int) -> dict[str, Any]:
        """Maximum daily points with the current number of pets."""
        per_pet = sum(const.DEFAULT_BASE_POINTS.values()) + (
            const.DAILY_POTENTIAL_BONUS_PER_PET
        )
        multiplier = EconomyEngine.calculate_multiplier(pet_count)
        max_daily = floor_points(per_pet * pet_count * multiplier)
        bonus_pct = round((multiplier - 1) * 100)
        streak_preview = min(const.STREAK_BONUS_CAP, const.DAILY_POTENTIAL_STREAK_PREVIEW)
        return {
            "max_daily_points": max_daily,
            "current_pets": pet_count,
            "bonus_multiplier": multiplier,
            "breakdown": [
                f"{pet_count} pets x {per_pet} base points = {pet_count * per_pet}",
                f"Multi-pet bonus: {bonus_pct}%",
                f"Potential streak bonus: up to +{streak_preview} points",
                f"Total potential: {max_daily} points/day",
            ],
        }

    # =========================================================================
    # Currency
    # =========================================================================

    @staticmethod
    def validate_sufficient_funds(balance: int, cost: int) -> bool:
        """Return True if balance >= cost."""
        return balance >= cost

    @staticmethod
    def ensure_sufficient_funds(balance: int, cost: int) -> None:
        """Raise InsufficientFundsError when balance < cost."""
        if not EconomyEngine.validate_sufficient_funds(balance, cost):
            raise InsufficientFundsError(balance, cost)

    @staticmethod
    def create_transaction(
        balance_after: int,
        amount: int,
        transaction_type: str,
        source: str,
        description: str,
        now: datetime,
        reference_id: str | None = None,
    ) -> TransactionData:
        """Create an immutable ledger entry. `amount` is always positive."""
        epoch_ms = int(dt_utils.as_utc(now).timestamp() * 1000)
        return {
            const.DATA_TRANSACTION_ID: f"sf_{epoch_ms}_{uuid.uuid4().hex[:9]}",
            const.DATA_TRANSACTION_TYPE: transaction_type,
            const.DATA_TRANSACTION_AMOUNT: amount,
            const.DATA_TRANSACTION_BALANCE_AFTER: balance_after,
            const.DATA_TRANSACTION_SOURCE: source,
            const.DATA_TRANSACTION_DESCRIPTION: description,
            const.DATA_TRANSACTION_REFERENCE_ID: reference_id,
            const.DATA_TRANSACTION_TIMESTAMP: dt_utils.dt_to_iso(now),
        }  # type: ignore[return-value]

    @staticmethod
    def prune_transactions(
        transactions: list[TransactionData],
        max_entries: int = const.MAX_TRANSACTIONS,
    ) -> list[TransactionData]:
        """Trim to the most recent max_entries (newest are at the END).

        Modifies the list in place and returns it for convenience.
        """
        if len(transactions) > max_entries:
            del transactions[: len(transactions) - max_entries]
        return transactions

    @staticmethod
    def calculate_spending_stats(
        transactions: list[TransactionData], balance: int
    ) -> SpendingStats:
        """Aggregate ledger totals overall and by source."""
        total_earned = 0
        total_spent = 0
        earned_by_source: dict[str, int] = {}
        spent_by_source: dict[str, int] = {}

        for transaction in transactions:
            amount = int(transaction[const.DATA_TRANSACTION_AMOUNT])
            source = transaction[const.DATA_TRANSACTION_SOURCE]
            if transaction[const.DATA_TRANSACTION_TYPE] == const.TRANSACTION_TYPE_SPENT:
                total_spent += amount
                spent_by_source[source] = spent_by_source.get(source, 0) + amount
            else:
                total_earned += amount
                earned_by_source[source] = earned_by_source.get(source, 0) + amount

        return {
            "total_earned": total_earned,
            "total_spent": total_spent,
            "balance": balance,
            "transaction_count": len(transactions),
            "spent_by_source": spent_by_source,
            "earned_by_source": earned_by_source,
        }

    @staticmethod
    def calculate_period_stats(
        transactions: list[TransactionData], now: datetime
    ) -> dict[str, int]:
        """Earned/spent over the last 24 hours and the last 7 days."""
        now_utc = dt_utils.as_utc(now)
        day_cutoff = now_utc - timedelta(days=1)
        week_cutoff = now_utc - timedelta(days=7)
        stats = {"today_earned": 0, "today_spent": 0, "week_earned": 0, "week_spent": 0}

        for transaction in transactions:
            timestamp = dt_utils.dt_parse(transaction.get(const.DATA_TRANSACTION_TIMESTAMP))
            if timestamp is None or timestamp < week_cutoff:
                continue
            amount = int(transaction[const.DATA_TRANSACTION_AMOUNT])
            spent = transaction[const.DATA_TRANSACTION_TYPE] == const.TRANSACTION_TYPE_SPENT
            stats["week_spent" if spent else "week_earned"] += amount
            if timestamp >= day_cutoff:
                stats["today_spent" if spent else "today_earned"] += amount

        return stats

    # =========================================================================
    # Daily login
    # =========================================================================

    @staticmethod
    def update_login_streak(ledger: dict[str, Any], today: str) -> int | None:
        """Advance the login streak once per day. Modifies ledger in place.

        Returns:
            The new login streak, or None if today's login was already counted.
        """
        last_login = ledger.get(const.DATA_CURRENCY_LAST_LOGIN_DATE) or ""
        if last_login == today:
            return None

        streak = int(ledger.get(const.DATA_CURRENCY_LOGIN_STREAK, 0))
        if last_login and last_login == dt_utils.previous_date_iso(today):
            streak += 1
        else:
            streak = 1

        ledger[const.DATA_CURRENCY_LOGIN_STREAK] = streak
        ledger[const.DATA_CURRENCY_LAST_LOGIN_DATE] = today
        return streak

    @staticmethod
    def calculate_login_bonus(login_streak: int) -> int:
        """Daily login reward plus a capped bonus for consecutive days.

        Examples:
            1 → 10, 2 → 12, 11+ → 30
        """
        streak_bonus = min(
            max(login_streak - 1, 0) * const.DAILY_LOGIN_STREAK_BONUS_PER_DAY,
            const.DAILY_LOGIN_STREAK_BONUS_CAP,
        )
        return const.DAILY_LOGIN_REWARD + streak_bonus
