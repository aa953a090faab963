"""Type definitions for PetCare data structures.

HYBRID APPROACH (TypedDict + dict[str, Any])
============================================

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   - Stored documents: PetTimersData, PointsAccountData, MoonCycleData, ...
   - Operation results and event payloads: ActionResult, PointsAwardResult, ...

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   - Per-pet point records keyed by pet id
   - Mission progress keyed by window key, then mission id
   - Achievement progress keyed by achievement id

IMPORTANT: This file must NOT import from session.py, managers, or helpers to
avoid circular dependencies. Only import from typing.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Hydration in data_builders.py is what
guarantees keys at runtime.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

PetId = str
PlayerId = str
MissionId = str
AchievementId = str
ItemId = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Stats / Interactions
# =============================================================================


class StatBoost(TypedDict, total=False):
    """Requested stat deltas for one action (all optional)."""

    mood: int
    hunger: int
    energy: int


class PetTimersData(TypedDict):
    """Persisted per-pet timers and stats (document `pet.<pet_id>`)."""

    pet_id: PetId
    name: str
    last_interaction: ISODatetime
    last_feed: ISODatetime
    last_sleep: ISODatetime
    last_play: ISODatetime
    last_chat: ISODatetime
    current_mood: int
    current_hunger: int
    current_energy: int
    mood_actions_today: int
    feed_actions_today: int
    last_mood_action_date: ISODate
    last_feed_action_date: ISODate
    energy_decay_timestamp: ISODatetime
    schema_version: int


class StatDecay(TypedDict):
    """Breakdown of the decay applied in one recomputation."""

    mood_decay: int
    combo_loss: int
    energy_decay: int


class StatSnapshot(TypedDict):
    """Derived stat values at a given moment."""

    mood: int
    hunger: int
    energy: int
    mood_state: str
    hours_in_state: float
    decay: StatDecay


class CurrentStats(TypedDict):
    """Stored stat values after an action."""

    mood: int
    hunger: int
    energy: int


class ActionResult(TypedDict):
    """Result of InteractionManager.async_record_action."""

    success: bool
    can_gain_mood: bool
    mood_gained: int
    message: str
    new_stats: CurrentStats | None


# =============================================================================
# Discovery
# =============================================================================


class DiscoverySettingsData(TypedDict):
    """Discovery gate settings and daily counter."""

    enabled: bool
    interval_hours: float
    last_discovery_time: ISODatetime
    discovery_chance: float
    max_per_day: int
    daily_count: int
    last_daily_reset: ISODate


class DiscoveryRecord(TypedDict):
    """Immutable record of one discovered resource."""

    id: str
    resource_id: str
    resource_name: str
    quantity: int
    rarity: str
    discovered_at: ISODatetime
    message: str


class DiscoveryDocument(TypedDict):
    """Persisted discovery document."""

    settings: DiscoverySettingsData
    history: list[DiscoveryRecord]
    total_discovered: int
    schema_version: int


class ResourceEntry(TypedDict):
    """Catalog entry in a rarity pool."""

    id: str
    name: str


class DailyProgress(TypedDict):
    """Discovery daily progress summary."""

    current: int
    max: int
    percentage: float


class DiscoveryResult(TypedDict):
    """Result of DiscoveryManager.async_discover."""

    success: bool
    message: str
    discoveries: list[DiscoveryRecord]
    total_discovered: int


# =============================================================================
# Rewards Economy
# =============================================================================


class PetPointsData(TypedDict):
    """Per-pet points record inside the points account."""

    name: str
    daily_points: int
    total_points: int
    interaction_count: int
    mood_bonus_points: int
    streak_days: int
    last_interaction_date: ISODate


class PointsAccountData(TypedDict):
    """Persisted points account (document `points`)."""

    player_id: PlayerId
    total_points: int
    daily_points: int
    current_streak: int
    longest_streak: int
    last_streak_date: ISODate
    last_daily_reset: ISODate
    # Dynamic: pet_id -> PetPointsData
    pets: dict[str, Any]
    last_updated: ISODatetime
    schema_version: int


class PointsAwardResult(TypedDict):
    """Result of EconomyManager.async_award_interaction_points."""

    success: bool
    points_earned: int
    bonus_multiplier: float
    goal_bonus: int
    streak_bonus: int
    source: str
    description: str


class TransactionData(TypedDict):
    """One currency ledger entry."""

    id: str
    type: str
    amount: int
    balance_after: int
    source: str
    description: str
    reference_id: str | None
    timestamp: ISODatetime


class CurrencyLedgerData(TypedDict):
    """Persisted currency ledger (document `currency`)."""

    balance: int
    total_earned: int
    transactions: list[TransactionData]
    last_login_date: ISODate
    login_streak: int
    schema_version: int


class CurrencyResult(TypedDict):
    """Result of a currency earn/spend."""

    success: bool
    message: str
    balance: int
    transaction: NotRequired[TransactionData]
    login_streak: NotRequired[int]


class SpendingStats(TypedDict):
    """Aggregated currency statistics."""

    total_earned: int
    total_spent: int
    balance: int
    transaction_count: int
    spent_by_source: dict[str, int]
    earned_by_source: dict[str, int]


# =============================================================================
# Missions
# =============================================================================


class RequirementData(TypedDict):
    """Mission or achievement requirement."""

    type: str
    target: int
    metadata: NotRequired[dict[str, Any]]


class RewardData(TypedDict):
    """Mission or achievement reward."""

    type: str
    amount: int
    item_id: NotRequired[str]


class MissionData(TypedDict):
    """Mission as returned to callers (template merged with window progress)."""

    id: MissionId
    name: str
    description: str
    scope: str
    difficulty: str
    requirement: RequirementData
    rewards: list[RewardData]
    progress: int
    completed: bool
    expires_at: ISODatetime


class MissionsDocument(TypedDict):
    """Persisted mission state (document `missions`)."""

    # Dynamic: window_key -> {mission_id: progress}
    progress: dict[str, Any]
    completed_keys: list[str]
    experience: int
    level: int
    total_earned: int
    schema_version: int


class MissionResult(TypedDict):
    """Result of MissionManager.async_complete_mission."""

    success: bool
    message: str
    star_fragments: int
    experience: int
    level_up: bool
    new_level: int


class PlayerProgress(TypedDict):
    """Mission-driven player progression summary."""

    level: int
    experience: int
    experience_to_next_level: int
    total_earned: int
    completed_missions: int


# =============================================================================
# Achievements
# =============================================================================


class AchievementData(TypedDict):
    """Achievement as returned to callers (template merged with progress)."""

    id: AchievementId
    name: str
    description: str
    category: str
    requirement: RequirementData
    reward: RewardData
    progress: int
    completed: bool
    date_completed: ISODatetime | None


class AchievementProgressData(TypedDict):
    """Stored progress for one achievement."""

    progress: int
    completed: bool
    date_completed: ISODatetime | None


class AchievementsDocument(TypedDict):
    """Persisted achievements document."""

    # Dynamic: achievement_id -> AchievementProgressData
    progress: dict[str, Any]
    custom: list[dict[str, Any]]
    schema_version: int


class AchievementUpdateResult(TypedDict):
    """Result of AchievementManager.async_update_progress."""

    success: bool
    status: str
    message: str
    achievement: AchievementData | None


class AchievementProgressSummary(TypedDict):
    """Progress of one achievement toward its target."""

    current: int
    target: int
    percentage: float
    completed: bool


class OverallCompletion(TypedDict):
    """Completion summary across all achievements."""

    completed: int
    total: int
    percentage: float


# =============================================================================
# Inventory
# =============================================================================


class InventoryItemData(TypedDict):
    """One inventory line."""

    quantity: int
    rarity: str
    source: str
    date_added: ISODatetime


class InventoryDocument(TypedDict):
    """Persisted inventory (document `inventory`)."""

    # Dynamic: item_id -> InventoryItemData
    items: dict[str, Any]
    crafted_count: int
    schema_version: int


# =============================================================================
# Moon cycle
# =============================================================================


class CycleDayData(TypedDict):
    """One calendar day of a moon cycle (best stats seen, goals met)."""

    date: ISODate
    mood: int
    hunger: int
    energy: int
    feed_completed: bool
    sleep_completed: bool
    chat_completed: bool
    mood_bonus_earned: bool
    sleep_hours: float | None
    feed_actions: int
    sleep_actions: int
    chat_actions: int


class CycleRewardData(TypedDict):
    """Settled reward of a finished cycle."""

    reward_type: str
    success: bool
    mood_days_achieved: int
    items: list[str]
    star_fragments: int
    badge: str | None
    settled_at: ISODatetime


class MoonCycleData(TypedDict):
    """Persisted moon cycle of one pet (document `cycle.<pet_id>`).

    An empty start_date means no cycle has started yet.
    """

    cycle_id: str
    pet_id: PetId
    start_date: ISODate
    end_date: ISODate
    current_day: int
    daily_stats: list[CycleDayData]
    mood_days: int
    completed: bool
    final_reward: CycleRewardData | None
    sleep_started_at: ISODatetime | None
    schema_version: int


class CycleDayResult(TypedDict):
    """Result of recording an action on the day's cycle stats."""

    success: bool
    message: str
    goal_completed: bool
    mood_bonus_earned: bool
    current_day: int
    mood_days: int


class SleepResult(TypedDict):
    """Result of starting or ending a sleep."""

    success: bool
    message: str
    hours: float
    energy_gained: int
    stars: int


class CycleTodayData(TypedDict):
    """Which daily goals are met today."""

    feed: bool
    sleep: bool
    chat: bool
    mood_bonus: bool


class CycleProgress(TypedDict):
    """Read-only view of a pet's current cycle."""

    cycle_id: str | None
    current_day: int
    days_remaining: int
    mood_days_achieved: int
    mood_days_needed: int
    on_track: bool
    ready_to_complete: bool
    sleeping: bool
    today: CycleTodayData


# =============================================================================
# Generic result
# =============================================================================


class OperationResult(TypedDict):
    """Generic success/message result."""

    success: bool
    message: str
