"""Document builders and hydration for PetCare storage.

This module is the SINGLE SOURCE OF TRUTH for:
- Document field defaults
- Hydration of stored JSON (missing keys filled from defaults)
- Custom achievement validation and building

### Build Functions
Each document has a `build_<document>()` function that returns a complete
default structure, stamped with `schema_version`.

### Hydrate Functions
Each document has a `hydrate_<document>(raw)` function that merges stored
data over the defaults. Keys that are unknown to the current schema are
kept untouched so older/newer data round-trips without loss.

Consumers:
- store.py (passed as the hydrate callable on first load)
- managers/* (document defaults, custom achievements)
"""

from __future__ import annotations

from datetime import datetime
import random
from typing import Any

from . import const
from .type_defs import (
    AchievementsDocument,
    CurrencyLedgerData,
    CycleDayData,
    DiscoveryDocument,
    DiscoverySettingsData,
    InventoryDocument,
    MissionsDocument,
    MoonCycleData,
    PetPointsData,
    PetTimersData,
    PointsAccountData,
)
from .utils import dt_utils

# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _hydrate(raw: dict[str, Any] | None, defaults: dict[str, Any]) -> dict[str, Any]:
    """Merge stored data over defaults, keeping unknown keys.

    Nested dict defaults are merged one level deep so a partially stored
    sub-structure (e.g. discovery settings) still gets its missing fields.
    """
    if not isinstance(raw, dict):
        return defaults

    result = dict(defaults)
    for key, value in raw.items():
        default_value = defaults.get(key)
        if isinstance(default_value, dict) and isinstance(value, dict):
            merged = dict(default_value)
            merged.update(value)
            result[key] = merged
        elif value is None and default_value is not None:
            continue
        else:
            result[key] = value

    result[const.DATA_SCHEMA_VERSION] = const.SCHEMA_VERSION
    return result


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The FIELD_* constant identifying the input that failed
        translation_key: The TRANS_KEY_* constant for the error message
    """

    def __init__(self, field: str, translation_key: str) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        super().__init__(translation_key)


# ==============================================================================
# PETS
# ==============================================================================


def build_pet_timers(
    pet_id: str, now: datetime, name: str | None = None
) -> PetTimersData:
    """Build fresh timers for a pet: base stats, all timers at `now`."""
    now_iso = dt_utils.dt_to_iso(now)
    today = dt_utils.local_date_iso(now)
    return PetTimersData(
        pet_id=pet_id,
        name=name or pet_id,
        last_interaction=now_iso,
        last_feed=now_iso,
        last_sleep=now_iso,
        last_play=now_iso,
        last_chat=now_iso,
        current_mood=const.DEFAULT_BASE_STAT,
        current_hunger=const.DEFAULT_BASE_STAT,
        current_energy=const.DEFAULT_BASE_STAT,
        mood_actions_today=const.DEFAULT_ZERO,
        feed_actions_today=const.DEFAULT_ZERO,
        last_mood_action_date=today,
        last_feed_action_date=today,
        energy_decay_timestamp=now_iso,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_pet_timers(
    raw: dict[str, Any] | None, pet_id: str, now: datetime
) -> dict[str, Any]:
    """Hydrate stored pet timers."""
    return _hydrate(raw, dict(build_pet_timers(pet_id, now)))


def build_pet_index() -> dict[str, Any]:
    """Build the adopted-pets index document."""
    return {
        const.DATA_PET_INDEX_IDS: [],
        const.DATA_SCHEMA_VERSION: const.SCHEMA_VERSION,
    }


def hydrate_pet_index(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Hydrate the adopted-pets index."""
    return _hydrate(raw, build_pet_index())


# ==============================================================================
# POINTS
# ==============================================================================


def build_points_account(player_id: str, now: datetime) -> PointsAccountData:
    """Build an empty points account."""
    return PointsAccountData(
        player_id=player_id,
        total_points=const.DEFAULT_ZERO,
        daily_points=const.DEFAULT_ZERO,
        current_streak=const.DEFAULT_ZERO,
        longest_streak=const.DEFAULT_ZERO,
        last_streak_date="",
        last_daily_reset=dt_utils.local_date_iso(now),
        pets={},
        last_updated=dt_utils.dt_to_iso(now),
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_points_account(
    raw: dict[str, Any] | None, player_id: str, now: datetime
) -> dict[str, Any]:
    """Hydrate the points account."""
    return _hydrate(raw, dict(build_points_account(player_id, now)))


def build_pet_points(name: str) -> PetPointsData:
    """Build an empty per-pet points record."""
    return PetPointsData(
        name=name,
        daily_points=const.DEFAULT_ZERO,
        total_points=const.DEFAULT_ZERO,
        interaction_count=const.DEFAULT_ZERO,
        mood_bonus_points=const.DEFAULT_ZERO,
        streak_days=const.DEFAULT_ZERO,
        last_interaction_date="",
    )


# ==============================================================================
# CURRENCY
# ==============================================================================


def build_currency_ledger() -> CurrencyLedgerData:
    """Build an empty currency ledger.

    The starting balance is credited as a transaction by the economy manager
    so the ledger stays consistent with the balance.
    """
    return CurrencyLedgerData(
        balance=const.DEFAULT_ZERO,
        total_earned=const.DEFAULT_ZERO,
        transactions=[],
        last_login_date="",
        login_streak=const.DEFAULT_ZERO,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_currency_ledger(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Hydrate the currency ledger."""
    return _hydrate(raw, dict(build_currency_ledger()))


# ==============================================================================
# DISCOVERY
# ==============================================================================


def build_discovery_settings(
    now: datetime, overrides: dict[str, Any] | None = None
) -> DiscoverySettingsData:
    """Build default discovery settings, optionally overridden (options flow)."""
    overrides = overrides or {}
    return DiscoverySettingsData(
        enabled=bool(
            overrides.get(const.DATA_DISCOVERY_ENABLED, const.DEFAULT_DISCOVERY_ENABLED)
        ),
        interval_hours=float(
            overrides.get(
                const.DATA_DISCOVERY_INTERVAL_HOURS,
                const.DEFAULT_DISCOVERY_INTERVAL_HOURS,
            )
        ),
        last_discovery_time=dt_utils.dt_to_iso(now),
        discovery_chance=float(
            overrides.get(const.DATA_DISCOVERY_CHANCE, const.DEFAULT_DISCOVERY_CHANCE)
        ),
        max_per_day=int(
            overrides.get(
                const.DATA_DISCOVERY_MAX_PER_DAY, const.DEFAULT_DISCOVERY_MAX_PER_DAY
            )
        ),
        daily_count=const.DEFAULT_ZERO,
        last_daily_reset=dt_utils.local_date_iso(now),
    )


def build_discovery_document(
    now: datetime, overrides: dict[str, Any] | None = None
) -> DiscoveryDocument:
    """Build an empty discovery document."""
    return DiscoveryDocument(
        settings=build_discovery_settings(now, overrides),
        history=[],
        total_discovered=const.DEFAULT_ZERO,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_discovery_document(
    raw: dict[str, Any] | None,
    now: datetime,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Hydrate the discovery document."""
    return _hydrate(raw, dict(build_discovery_document(now, overrides)))


# ==============================================================================
# MISSIONS
# ==============================================================================


def build_missions_document() -> MissionsDocument:
    """Build an empty missions document (level 1, no experience)."""
    return MissionsDocument(
        progress={},
        completed_keys=[],
        experience=const.DEFAULT_ZERO,
        level=1,
        total_earned=const.DEFAULT_ZERO,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_missions_document(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Hydrate the missions document."""
    return _hydrate(raw, dict(build_missions_document()))


# ==============================================================================
# ACHIEVEMENTS
# ==============================================================================


def build_achievements_document() -> AchievementsDocument:
    """Build an empty achievements document."""
    return AchievementsDocument(
        progress={},
        custom=[],
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_achievements_document(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Hydrate the achievements document."""
    return _hydrate(raw, dict(build_achievements_document()))


def validate_custom_achievement_data(data: dict[str, Any]) -> dict[str, str]:
    """Validate a custom achievement definition.

    Returns:
        Dict of errors: {field: translation_key}. Empty means valid.
    """
    errors: dict[str, str] = {}

    name = str(data.get(const.DATA_ACHIEVEMENT_NAME) or "").strip()
    if not name:
        errors[const.FIELD_NAME] = const.TRANS_KEY_ERROR_INVALID_ACHIEVEMENT_NAME
        return errors

    if data.get(const.DATA_ACHIEVEMENT_CATEGORY) not in const.ACHIEVEMENT_CATEGORIES:
        errors[const.FIELD_CATEGORY] = const.TRANS_KEY_ERROR_INVALID_CATEGORY
        return errors

    requirement = data.get(const.DATA_ACHIEVEMENT_REQUIREMENT) or {}
    if requirement.get(const.DATA_REQUIREMENT_TYPE) not in (
        const.ACHIEVEMENT_REQUIREMENT_TYPES
    ):
        errors[const.FIELD_REQUIREMENT_TYPE] = (
            const.TRANS_KEY_ERROR_INVALID_REQUIREMENT_TYPE
        )
        return errors

    try:
        if int(requirement.get(const.DATA_REQUIREMENT_TARGET, 0)) < 1:
            errors[const.FIELD_TARGET] = const.TRANS_KEY_ERROR_INVALID_TARGET
    except (TypeError, ValueError):
        errors[const.FIELD_TARGET] = const.TRANS_KEY_ERROR_INVALID_TARGET

    return errors


def generate_custom_achievement_id(now: datetime, rng: random.Random) -> str:
    """Return an id of the form custom_<epoch ms>_<9 hex chars>."""
    epoch_ms = int(dt_utils.as_utc(now).timestamp() * 1000)
    return f"{const.CUSTOM_ACHIEVEMENT_ID_PREFIX}{epoch_ms}_{rng.getrandbits(36):09x}"


def build_custom_achievement(
    data: dict[str, Any], now: datetime, rng: random.Random
) -> dict[str, Any]:
    """Build a custom achievement definition.

    Raises:
        EntityValidationError: If validation fails.
    """
    errors = validate_custom_achievement_data(data)
    if errors:
        field, translation_key = next(iter(errors.items()))
        raise EntityValidationError(field=field, translation_key=translation_key)

    requirement = dict(data[const.DATA_ACHIEVEMENT_REQUIREMENT])
    requirement[const.DATA_REQUIREMENT_TARGET] = int(
        requirement[const.DATA_REQUIREMENT_TARGET]
    )
    reward = dict(
        data.get(const.DATA_ACHIEVEMENT_REWARD)
        or {
            const.DATA_REWARD_TYPE: const.REWARD_TYPE_STAR_FRAGMENTS,
            const.DATA_REWARD_AMOUNT: const.DEFAULT_ZERO,
        }
    )

    return {
        const.DATA_ACHIEVEMENT_ID: generate_custom_achievement_id(now, rng),
        const.DATA_ACHIEVEMENT_NAME: str(data[const.DATA_ACHIEVEMENT_NAME]).strip(),
        const.DATA_ACHIEVEMENT_DESCRIPTION: str(
            data.get(const.DATA_ACHIEVEMENT_DESCRIPTION) or ""
        ),
        const.DATA_ACHIEVEMENT_CATEGORY: data[const.DATA_ACHIEVEMENT_CATEGORY],
        const.DATA_ACHIEVEMENT_REQUIREMENT: requirement,
        const.DATA_ACHIEVEMENT_REWARD: reward,
    }


# ==============================================================================
# INVENTORY
# ==============================================================================


def build_inventory_document() -> InventoryDocument:
    """Build an empty inventory document."""
    return InventoryDocument(
        items={},
        crafted_count=const.DEFAULT_ZERO,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_inventory_document(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Hydrate the inventory document."""
    return _hydrate(raw, dict(build_inventory_document()))


# ==============================================================================
# MOON CYCLE
# ==============================================================================


def build_moon_cycle(pet_id: str, now: datetime | None = None) -> MoonCycleData:
    """Build a pet's moon cycle.

    Without `now` the cycle is not started yet (empty dates, day 0); it
    starts on the first write. A started cycle runs from today through
    CYCLE_LENGTH_DAYS - 1 days later.
    """
    cycle_id = ""
    start_date = ""
    end_date = ""
    current_day = const.DEFAULT_ZERO
    if now is not None:
        cycle_id = f"cycle_{int(now.timestamp() * 1000)}"
        start_date = dt_utils.local_date_iso(now)
        end_date = dt_utils.date_offset_iso(start_date, const.CYCLE_LENGTH_DAYS - 1)
        current_day = 1
    return MoonCycleData(
        cycle_id=cycle_id,
        pet_id=pet_id,
        start_date=start_date,
        end_date=end_date,
        current_day=current_day,
        daily_stats=[],
        mood_days=const.DEFAULT_ZERO,
        completed=False,
        final_reward=None,
        sleep_started_at=None,
        schema_version=const.SCHEMA_VERSION,
    )


def hydrate_moon_cycle(raw: dict[str, Any] | None, pet_id: str) -> dict[str, Any]:
    """Hydrate a stored moon cycle."""
    return _hydrate(raw, dict(build_moon_cycle(pet_id)))


def build_cycle_day(
    date_iso: str,
    mood: int = const.CYCLE_DEFAULT_DAY_STAT,
    hunger: int = const.CYCLE_DEFAULT_DAY_STAT,
    energy: int = const.CYCLE_DEFAULT_DAY_STAT,
) -> CycleDayData:
    """Build the stats entry of one cycle day."""
    return CycleDayData(
        date=date_iso,
        mood=mood,
        hunger=hunger,
        energy=energy,
        feed_completed=False,
        sleep_completed=False,
        chat_completed=False,
        mood_bonus_earned=False,
        sleep_hours=None,
        feed_actions=const.DEFAULT_ZERO,
        sleep_actions=const.DEFAULT_ZERO,
        chat_actions=const.DEFAULT_ZERO,
    )
