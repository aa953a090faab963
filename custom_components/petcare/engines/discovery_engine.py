"""Discovery Engine - Pure logic for gated, probabilistic resource discovery.

This engine provides stateless, pure Python functions for:
- Gate evaluation (enabled, cooldown, daily cap) and daily counter reset
- Item-count, success, rarity and quantity rolls against an injected RNG
- Applying results to the discovery document
- History queries and retention pruning

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All randomness comes from the `random.Random` passed in, so a seeded RNG
replays the exact same discoveries. State management belongs in
DiscoveryManager.
"""

from __future__ import annotations

from datetime import datetime, timedelta
import logging
import random
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from ..type_defs import DailyProgress, DiscoveryRecord, ResourceEntry

_LOGGER = logging.getLogger(__name__)


class DiscoveryEngine:
    """Pure logic engine for resource discovery.

    All methods are static - no instance state. `settings` is the stored
    DiscoverySettingsData dict; `pools` maps rarity to a list of
    ResourceEntry dicts.
    """

    # =========================================================================
    # Gate
    # =========================================================================

    @staticmethod
    def reset_daily_if_needed(settings: dict[str, Any], today: str) -> bool:
        """Reset the daily counter when the stored reset date is not today.

        Returns:
            True if a reset happened (caller should persist).
        """
        if settings.get(const.DATA_DISCOVERY_LAST_RESET) == today:
            return False
        settings[const.DATA_DISCOVERY_DAILY_COUNT] = 0
        settings[const.DATA_DISCOVERY_LAST_RESET] = today
        return True

    @staticmethod
    def should_discover(settings: dict[str, Any], now: datetime) -> bool:
        """True iff enabled, the cooldown has elapsed and the cap is not hit."""
        if not settings.get(const.DATA_DISCOVERY_ENABLED, False):
            return False

        last = dt_utils.dt_parse(settings.get(const.DATA_DISCOVERY_LAST_TIME))
        hours = dt_utils.hours_between(last, now) if last else float("inf")

        return hours >= float(settings[const.DATA_DISCOVERY_INTERVAL_HOURS]) and int(
            settings[const.DATA_DISCOVERY_DAILY_COUNT]
        ) < int(settings[const.DATA_DISCOVERY_MAX_PER_DAY])

    @staticmethod
    def get_time_until_next(settings: dict[str, Any], now: datetime) -> timedelta:
        """Time left before the cooldown elapses (zero when disabled or ready)."""
        if not settings.get(const.DATA_DISCOVERY_ENABLED, False):
            return timedelta()
        last = dt_utils.dt_parse(settings.get(const.DATA_DISCOVERY_LAST_TIME))
        if last is None:
            return timedelta()
        next_time = last + timedelta(
            hours=float(settings[const.DATA_DISCOVERY_INTERVAL_HOURS])
        )
        return max(timedelta(), next_time - dt_utils.as_utc(now))

    @staticmethod
    def get_daily_progress(settings: dict[str, Any]) -> DailyProgress:
        """Return today's discovery count against the cap."""
        current = int(settings.get(const.DATA_DISCOVERY_DAILY_COUNT, 0))
        maximum = int(settings.get(const.DATA_DISCOVERY_MAX_PER_DAY, 0))
        return {
            "current": current,
            "max": maximum,
            "percentage": calculate_percentage(current, maximum),
        }

    # =========================================================================
    # Rolls
    # =========================================================================

    @staticmethod
    def roll_item_count(rng: random.Random) -> int:
        """Draw how many items to attempt: 60% one, 20% two, 20% three."""
        roll = rng.random()
        for upper_bound, count in const.DISCOVERY_COUNT_DISTRIBUTION:
            if roll < upper_bound:
                return count
        return const.DISCOVERY_COUNT_MAX

    @staticmethod
    def roll_rarity(rng: random.Random) -> str:
        """Draw a rarity tier from the cumulative distribution."""
        roll = rng.random()
        for upper_bound, rarity in const.RARITY_CUMULATIVE_DISTRIBUTION:
            if roll < upper_bound:
                return rarity
        return const.RARITY_LEGENDARY

    @staticmethod
    def roll_quantity(rarity: str, rng: random.Random) -> int:
        """Draw a quantity for the tier (inclusive range)."""
        low, high = const.RARITY_QUANTITY_RANGES.get(rarity, (1, 1))
        if low == high:
            return low
        return rng.randint(low, high)

    @staticmethod
    def pick_message(rarity: str, resource_name: str, rng: random.Random) -> str:
        """Pick a flavor message for the tier."""
        templates = const.DISCOVERY_MESSAGES.get(
            rarity, const.DISCOVERY_MESSAGES[const.RARITY_COMMON]
        )
        return rng.choice(templates).format(name=resource_name)

    @staticmethod
    def build_record(
        resource: ResourceEntry,
        rarity: str,
        now: datetime,
        rng: random.Random,
    ) -> DiscoveryRecord:
        """Build one immutable discovery record."""
        epoch_ms = int(dt_utils.as_utc(now).timestamp() * 1000)
        return {
            const.DATA_RECORD_ID: f"discovery_{epoch_ms}_{rng.getrandbits(36):09x}",
            const.DATA_RECORD_RESOURCE_ID: resource["id"],
            const.DATA_RECORD_RESOURCE_NAME: resource["name"],
            const.DATA_RECORD_QUANTITY: DiscoveryEngine.roll_quantity(rarity, rng),
            const.DATA_RECORD_RARITY: rarity,
            const.DATA_RECORD_DISCOVERED_AT: dt_utils.dt_to_iso(now),
            const.DATA_RECORD_MESSAGE: DiscoveryEngine.pick_message(
                rarity, resource["name"], rng
            ),
        }  # type: ignore[return-value]

    @staticmethod
    def roll_discoveries(
        chance: float,
        pools: dict[str, list[ResourceEntry]],
        now: datetime,
        rng: random.Random,
    ) -> list[DiscoveryRecord]:
        """Roll one discovery attempt (gate is the caller's responsibility).

        A draw succeeds only when rng.random() < chance, so a chance of 0
        never yields. Draws landing on an empty rarity pool are skipped.
        """
        records: list[DiscoveryRecord] = []
        for _ in range(DiscoveryEngine.roll_item_count(rng)):
            if rng.random() >= chance:
                continue
            rarity = DiscoveryEngine.roll_rarity(rng)
            pool = pools.get(rarity) or []
            if not pool:
                _LOGGER.debug("DEBUG: Empty resource pool for rarity '%s'", rarity)
                continue
            resource = rng.choice(pool)
            records.append(DiscoveryEngine.build_record(resource, rarity, now, rng))
        return records

    # =========================================================================
    # Document updates
    # =========================================================================

    @staticmethod
    def apply_discoveries(
        document: dict[str, Any], records: list[DiscoveryRecord], now: datetime
    ) -> None:
        """Record a non-empty result: cooldown, daily count, history, total.

        Modifies document in place. An empty result is a no-op so a miss does
        not consume the gate.
        """
        if not records:
            return
        settings = document[const.DATA_DISCOVERY_SETTINGS]
        settings[const.DATA_DISCOVERY_LAST_TIME] = dt_utils.dt_to_iso(now)
        settings[const.DATA_DISCOVERY_DAILY_COUNT] = int(
            settings[const.DATA_DISCOVERY_DAILY_COUNT]
        ) + len(records)
        document[const.DATA_DISCOVERY_HISTORY].extend(records)
        document[const.DATA_DISCOVERY_TOTAL] = int(
            document.get(const.DATA_DISCOVERY_TOTAL, 0)
        ) + len(records)

    @staticmethod
    def get_recent(
        history: list[DiscoveryRecord],
        now: datetime,
        hours: float = const.DISCOVERY_NOTIFICATION_WINDOW_HOURS,
    ) -> list[DiscoveryRecord]:
        """Records discovered within the last `hours`, oldest first."""
        cutoff = dt_utils.as_utc(now) - timedelta(hours=hours)
        recent = []
        for record in history:
            discovered_at = dt_utils.dt_parse(
                record.get(const.DATA_RECORD_DISCOVERED_AT)
            )
            if discovered_at is not None and discovered_at > cutoff:
                recent.append(record)
        return recent

    @staticmethod
    def prune_history(
        history: list[DiscoveryRecord],
        now: datetime,
        max_age_days: int = const.DISCOVERY_HISTORY_RETENTION_DAYS,
    ) -> int:
        """Drop records older than max_age_days. Modifies history in place.

        Returns:
            Number of records removed.
        """
        cutoff = dt_utils.as_utc(now) - timedelta(days=max_age_days)
        kept = []
        for record in history:
            discovered_at = dt_utils.dt_parse(
                record.get(const.DATA_RECORD_DISCOVERED_AT)
            )
            if discovered_at is not None and discovered_at >= cutoff:
                kept.append(record)
        removed = len(history) - len(kept)
        history[:] = kept
        return removed

    # =========================================================================
    # Settings validation
    # =========================================================================

    @staticmethod
    def validate_settings(updates: dict[str, Any]) -> dict[str, Any]:
        """Normalize a partial settings update.

        Raises:
            ValueError: On unknown keys or out-of-range values.
        """
        normalized: dict[str, Any] = {}
        for key, value in updates.items():
            if key not in const.DISCOVERY_EDITABLE_SETTINGS:
                raise ValueError(const.MSG_INVALID_SETTING.format(setting=key))
            if key == const.DATA_DISCOVERY_ENABLED:
                normalized[key] = bool(value)
            elif key == const.DATA_DISCOVERY_CHANCE:
                chance = float(value)
                if not 0.0 <= chance <= 1.0:
                    raise ValueError(const.MSG_INVALID_SETTING.format(setting=key))
                normalized[key] = chance
            elif key == const.DATA_DISCOVERY_INTERVAL_HOURS:
                interval = float(value)
                if interval < 0:
                    raise ValueError(const.MSG_INVALID_SETTING.format(setting=key))
                normalized[key] = interval
            else:
                maximum = int(value)
                if maximum < 0:
                    raise ValueError(const.MSG_INVALID_SETTING.format(setting=key))
                normalized[key] = maximum
        return normalized
