# File: const.py
"""Constants for the PetCare integration.

This file centralizes configuration keys, defaults, storage field names,
signal suffixes, and the static mission/achievement templates so every
engine and manager reads the same values.
"""

import logging
from typing import Any

import homeassistant.util.dt as dt_util

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)
    if DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(DEFAULT_TIME_ZONE)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
PETCARE_TITLE = "PetCare"

DOMAIN = "petcare"

LOGGER = logging.getLogger(__package__)

# No entity platforms; the integration exposes services and signals only
PLATFORMS: list[str] = []

SESSION = "session"

# Storage and Versioning
STORAGE_KEY_PREFIX = DOMAIN
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_PLAYER_NAME = "player_name"
CONF_STARTING_BALANCE = "starting_balance"
CONF_REFRESH_INTERVAL = "refresh_interval"
CONF_DISCOVERY_INTERVAL_HOURS = "discovery_interval_hours"
CONF_DISCOVERY_CHANCE = "discovery_chance"
CONF_DISCOVERY_MAX_PER_DAY = "discovery_max_per_day"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_ZERO = 0
DEFAULT_STARTING_BALANCE = 0
DEFAULT_REFRESH_INTERVAL = 1  # minutes; display-only stat recompute

# Stats
STAT_MIN = 1
STAT_MAX = 5
DEFAULT_BASE_STAT = 3

# ------------------------------------------------------------------------------------------------
# Storage document scopes (one JSON document per scope)
# ------------------------------------------------------------------------------------------------
DOC_PETS = "pets"
DOC_PET_PREFIX = "pet"
DOC_CYCLE_PREFIX = "cycle"
DOC_POINTS = "points"
DOC_CURRENCY = "currency"
DOC_DISCOVERY = "discovery"
DOC_MISSIONS = "missions"
DOC_ACHIEVEMENTS = "achievements"
DOC_INVENTORY = "inventory"

# Player-level documents (per-pet timer and cycle documents follow the pets index)
PLAYER_DOCUMENT_SCOPES = [
    DOC_PETS,
    DOC_POINTS,
    DOC_CURRENCY,
    DOC_DISCOVERY,
    DOC_MISSIONS,
    DOC_ACHIEVEMENTS,
    DOC_INVENTORY,
]

DATA_SCHEMA_VERSION = "schema_version"

# ------------------------------------------------------------------------------------------------
# Actions
# ------------------------------------------------------------------------------------------------
ACTION_FEED = "feed"
ACTION_SLEEP = "sleep"
ACTION_PLAY = "play"
ACTION_CHAT = "chat"
ACTION_TYPES = [ACTION_FEED, ACTION_SLEEP, ACTION_PLAY, ACTION_CHAT]

STAT_BOOST_MOOD = "mood"
STAT_BOOST_HUNGER = "hunger"
STAT_BOOST_ENERGY = "energy"

# Daily caps
MAX_MOOD_GAIN_PER_DAY = 1
MAX_MOOD_ACTIONS_PER_DAY = 1
MAX_FEEDS_PER_DAY = 4

# ------------------------------------------------------------------------------------------------
# PetTimers fields
# ------------------------------------------------------------------------------------------------
DATA_PET_ID = "pet_id"
DATA_PET_NAME = "name"
DATA_PET_LAST_INTERACTION = "last_interaction"
DATA_PET_LAST_FEED = "last_feed"
DATA_PET_LAST_SLEEP = "last_sleep"
DATA_PET_LAST_PLAY = "last_play"
DATA_PET_LAST_CHAT = "last_chat"
DATA_PET_CURRENT_MOOD = "current_mood"
DATA_PET_CURRENT_HUNGER = "current_hunger"
DATA_PET_CURRENT_ENERGY = "current_energy"
DATA_PET_MOOD_ACTIONS_TODAY = "mood_actions_today"
DATA_PET_FEED_ACTIONS_TODAY = "feed_actions_today"
DATA_PET_LAST_MOOD_ACTION_DATE = "last_mood_action_date"
DATA_PET_LAST_FEED_ACTION_DATE = "last_feed_action_date"
DATA_PET_ENERGY_DECAY_TIMESTAMP = "energy_decay_timestamp"

DATA_PET_INDEX_IDS = "pet_ids"

# Timer field per action type
ACTION_TIMER_FIELDS = {
    ACTION_FEED: DATA_PET_LAST_FEED,
    ACTION_SLEEP: DATA_PET_LAST_SLEEP,
    ACTION_PLAY: DATA_PET_LAST_PLAY,
    ACTION_CHAT: DATA_PET_LAST_CHAT,
}

# ------------------------------------------------------------------------------------------------
# StatClock
# ------------------------------------------------------------------------------------------------
MOOD_STATE_HAPPY = "happy"
MOOD_STATE_RELAXED = "relaxed"
MOOD_STATE_BORED = "bored"
MOOD_STATE_SAD = "sad"
MOOD_STATE_ANGRY = "angry"

# (lower bound hours, state, penalty), checked from the top down
MOOD_STATE_THRESHOLDS: list[tuple[float, str, int]] = [
    (21, MOOD_STATE_ANGRY, 3),
    (15, MOOD_STATE_SAD, 2),
    (10, MOOD_STATE_BORED, 1),
    (3, MOOD_STATE_RELAXED, 0),
]

MOOD_STATE_DESCRIPTIONS = {
    MOOD_STATE_HAPPY: "😊 Your pet is happy and content!",
    MOOD_STATE_RELAXED: "😌 Your pet is feeling relaxed after some time.",
    MOOD_STATE_BORED: "😐 Your pet is getting bored and needs attention.",
    MOOD_STATE_SAD: "😢 Your pet is feeling sad and neglected.",
    MOOD_STATE_ANGRY: "😠 Your pet is angry from being ignored too long!",
}

# Penalty index = position + 1
COMBO_PENALTY_THRESHOLDS_HOURS = [3, 9, 15, 21]
COMBO_PENALTY_MAX = 4

ENERGY_DECAY_INTERVAL_HOURS = 6

# Snapshot keys
SNAPSHOT_MOOD = "mood"
SNAPSHOT_HUNGER = "hunger"
SNAPSHOT_ENERGY = "energy"
SNAPSHOT_MOOD_STATE = "mood_state"
SNAPSHOT_HOURS_IN_STATE = "hours_in_state"
SNAPSHOT_DECAY = "decay"
SNAPSHOT_DECAY_MOOD = "mood_decay"
SNAPSHOT_DECAY_COMBO = "combo_loss"
SNAPSHOT_DECAY_ENERGY = "energy_decay"

# ------------------------------------------------------------------------------------------------
# Discovery
# ------------------------------------------------------------------------------------------------
RARITY_COMMON = "common"
RARITY_UNCOMMON = "uncommon"
RARITY_RARE = "rare"
RARITY_EPIC = "epic"
RARITY_LEGENDARY = "legendary"
RARITIES = [
    RARITY_COMMON,
    RARITY_UNCOMMON,
    RARITY_RARE,
    RARITY_EPIC,
    RARITY_LEGENDARY,
]

# Cumulative upper bounds; anything above the last bound is legendary
RARITY_CUMULATIVE_DISTRIBUTION: list[tuple[float, str]] = [
    (0.60, RARITY_COMMON),
    (0.85, RARITY_UNCOMMON),
    (0.95, RARITY_RARE),
    (0.99, RARITY_EPIC),
]

# Cumulative upper bounds for the per-discovery item count
DISCOVERY_COUNT_DISTRIBUTION: list[tuple[float, int]] = [
    (0.60, 1),
    (0.80, 2),
]
DISCOVERY_COUNT_MAX = 3

# Inclusive (min, max) quantity per rarity
RARITY_QUANTITY_RANGES: dict[str, tuple[int, int]] = {
    RARITY_COMMON: (1, 3),
    RARITY_UNCOMMON: (1, 2),
    RARITY_RARE: (1, 1),
    RARITY_EPIC: (1, 1),
    RARITY_LEGENDARY: (1, 1),
}

DISCOVERY_MESSAGES: dict[str, list[str]] = {
    RARITY_COMMON: [
        "Hey! I found some {name}!",
        "Look what I discovered - {name}!",
        "I stumbled upon some {name}!",
        "Found {name} while exploring!",
    ],
    RARITY_UNCOMMON: [
        "Wow! I found some rare {name}!",
        "This is exciting - I discovered {name}!",
        "I can't believe I found {name}!",
        "What a lucky find - {name}!",
    ],
    RARITY_RARE: [
        "Incredible! I found legendary {name}!",
        "This is amazing - I discovered {name}!",
        "I'm so excited - I found {name}!",
        "What a treasure - {name}!",
    ],
    RARITY_EPIC: [
        "MAGNIFICENT! I found epic {name}!",
        "This is extraordinary - {name}!",
        "I'm speechless - I found {name}!",
        "What an incredible discovery - {name}!",
    ],
    RARITY_LEGENDARY: [
        "LEGENDARY DISCOVERY! I found {name}!",
        "This is the find of a lifetime - {name}!",
        "I'm in awe - I found {name}!",
        "What a mythical discovery - {name}!",
    ],
}

# Minimal resource pool so discovery works without an injected catalog
DEFAULT_RESOURCE_POOLS: dict[str, list[dict[str, str]]] = {
    RARITY_COMMON: [
        {"id": "pink-sugar", "name": "Pink Sugar"},
        {"id": "nova-egg", "name": "Nova Egg"},
        {"id": "mira-berry", "name": "Mira Berry"},
    ],
    RARITY_UNCOMMON: [],
    RARITY_RARE: [],
    RARITY_EPIC: [],
    RARITY_LEGENDARY: [],
}

DEFAULT_DISCOVERY_ENABLED = True
DEFAULT_DISCOVERY_INTERVAL_HOURS = 4
DEFAULT_DISCOVERY_CHANCE = 0.8
DEFAULT_DISCOVERY_MAX_PER_DAY = 6
DISCOVERY_HISTORY_RETENTION_DAYS = 7
DISCOVERY_NOTIFICATION_WINDOW_HOURS = 24

DATA_DISCOVERY_SETTINGS = "settings"
DATA_DISCOVERY_HISTORY = "history"
DATA_DISCOVERY_TOTAL = "total_discovered"
DATA_DISCOVERY_ENABLED = "enabled"
DATA_DISCOVERY_INTERVAL_HOURS = "interval_hours"
DATA_DISCOVERY_LAST_TIME = "last_discovery_time"
DATA_DISCOVERY_CHANCE = "discovery_chance"
DATA_DISCOVERY_MAX_PER_DAY = "max_per_day"
DATA_DISCOVERY_DAILY_COUNT = "daily_count"
DATA_DISCOVERY_LAST_RESET = "last_daily_reset"

DATA_RECORD_ID = "id"
DATA_RECORD_RESOURCE_ID = "resource_id"
DATA_RECORD_RESOURCE_NAME = "resource_name"
DATA_RECORD_QUANTITY = "quantity"
DATA_RECORD_RARITY = "rarity"
DATA_RECORD_DISCOVERED_AT = "discovered_at"
DATA_RECORD_MESSAGE = "message"

# Settings that callers may change through async_update_settings
DISCOVERY_EDITABLE_SETTINGS = [
    DATA_DISCOVERY_ENABLED,
    DATA_DISCOVERY_INTERVAL_HOURS,
    DATA_DISCOVERY_CHANCE,
    DATA_DISCOVERY_MAX_PER_DAY,
]

# ------------------------------------------------------------------------------------------------
# Rewards economy: points
# ------------------------------------------------------------------------------------------------
DEFAULT_BASE_POINTS: dict[str, int] = {
    ACTION_FEED: 10,
    ACTION_SLEEP: 15,
    ACTION_CHAT: 5,
}
MULTI_PET_BONUS_STEP = 0.1
GOAL_BONUS_RATE = 0.5
STREAK_BONUS_CAP = 50
DATA_FLOAT_PRECISION = 2

POINTS_SOURCE_INTERACTION = "interaction"

DATA_POINTS_PLAYER_ID = "player_id"
DATA_POINTS_TOTAL = "total_points"
DATA_POINTS_DAILY = "daily_points"
DATA_POINTS_CURRENT_STREAK = "current_streak"
DATA_POINTS_LONGEST_STREAK = "longest_streak"
DATA_POINTS_LAST_STREAK_DATE = "last_streak_date"
DATA_POINTS_LAST_DAILY_RESET = "last_daily_reset"
DATA_POINTS_PETS = "pets"
DATA_POINTS_LAST_UPDATED = "last_updated"

DATA_PET_POINTS_NAME = "name"
DATA_PET_POINTS_DAILY = "daily_points"
DATA_PET_POINTS_TOTAL = "total_points"
DATA_PET_POINTS_INTERACTION_COUNT = "interaction_count"
DATA_PET_POINTS_MOOD_BONUS = "mood_bonus_points"
DATA_PET_POINTS_STREAK_DAYS = "streak_days"
DATA_PET_POINTS_LAST_INTERACTION_DATE = "last_interaction_date"

# Daily potential: feed + sleep + chat + max goal bonus per pet
DAILY_POTENTIAL_BONUS_PER_PET = 15
DAILY_POTENTIAL_STREAK_PREVIEW = 7

# ------------------------------------------------------------------------------------------------
# Rewards economy: currency (Star Fragments)
# ------------------------------------------------------------------------------------------------
CURRENCY_LABEL = "Star Fragments"
TRANSACTION_TYPE_EARNED = "earned"
TRANSACTION_TYPE_SPENT = "spent"

CURRENCY_SOURCE_MISSION = "mission"
CURRENCY_SOURCE_LEVEL_UP = "level_up"
CURRENCY_SOURCE_ACHIEVEMENT = "achievement"
CURRENCY_SOURCE_DISCOVERY = "discovery"
CURRENCY_SOURCE_CRAFTING = "crafting"
CURRENCY_SOURCE_MOON_CYCLE = "moon_cycle"
CURRENCY_SOURCE_DAILY_LOGIN = "daily_login"
CURRENCY_SOURCE_PURCHASE = "purchase"
CURRENCY_SOURCE_STARTING_BALANCE = "starting_balance"

DISCOVERY_REWARD = 10
CRAFTING_REWARD = 25

MAX_TRANSACTIONS = 1000
DEFAULT_RECENT_TRANSACTIONS = 10

DAILY_LOGIN_REWARD = 10
DAILY_LOGIN_STREAK_BONUS_PER_DAY = 2
DAILY_LOGIN_STREAK_BONUS_CAP = 20

DATA_CURRENCY_BALANCE = "balance"
DATA_CURRENCY_TOTAL_EARNED = "total_earned"
DATA_CURRENCY_TRANSACTIONS = "transactions"
DATA_CURRENCY_LAST_LOGIN_DATE = "last_login_date"
DATA_CURRENCY_LOGIN_STREAK = "login_streak"

DATA_TRANSACTION_ID = "id"
DATA_TRANSACTION_TYPE = "type"
DATA_TRANSACTION_AMOUNT = "amount"
DATA_TRANSACTION_BALANCE_AFTER = "balance_after"
DATA_TRANSACTION_SOURCE = "source"
DATA_TRANSACTION_DESCRIPTION = "description"
DATA_TRANSACTION_REFERENCE_ID = "reference_id"
DATA_TRANSACTION_TIMESTAMP = "timestamp"

# ------------------------------------------------------------------------------------------------
# Missions
# ------------------------------------------------------------------------------------------------
MISSION_SCOPE_DAILY = "daily"
MISSION_SCOPE_WEEKLY = "weekly"
MISSION_SCOPE_SEASON = "season"
MISSION_SCOPES = [MISSION_SCOPE_DAILY, MISSION_SCOPE_WEEKLY, MISSION_SCOPE_SEASON]

MISSION_REQUIREMENT_INTERACTION = "interaction"
MISSION_REQUIREMENT_DISCOVERY = "discovery"
MISSION_REQUIREMENT_LOGIN = "login"

REWARD_TYPE_STAR_FRAGMENTS = "star_fragments"
REWARD_TYPE_EXPERIENCE = "experience"

EXPERIENCE_PER_LEVEL = 1000
LEVEL_UP_BONUS_PER_LEVEL = 50

DATA_MISSION_ID = "id"
DATA_MISSION_NAME = "name"
DATA_MISSION_DESCRIPTION = "description"
DATA_MISSION_SCOPE = "scope"
DATA_MISSION_DIFFICULTY = "difficulty"
DATA_MISSION_REQUIREMENT = "requirement"
DATA_MISSION_REWARDS = "rewards"
DATA_MISSION_PROGRESS = "progress"
DATA_MISSION_COMPLETED = "completed"
DATA_MISSION_EXPIRES_AT = "expires_at"

DATA_REQUIREMENT_TYPE = "type"
DATA_REQUIREMENT_TARGET = "target"
DATA_REQUIREMENT_METADATA = "metadata"

DATA_REWARD_TYPE = "type"
DATA_REWARD_AMOUNT = "amount"
DATA_REWARD_ITEM_ID = "item_id"

DATA_MISSIONS_PROGRESS = "progress"
DATA_MISSIONS_COMPLETED_KEYS = "completed_keys"
DATA_MISSIONS_EXPERIENCE = "experience"
DATA_MISSIONS_LEVEL = "level"
DATA_MISSIONS_TOTAL_EARNED = "total_earned"

MISSION_DIFFICULTY_EASY = "easy"
MISSION_DIFFICULTY_MEDIUM = "medium"
MISSION_DIFFICULTY_HARD = "hard"
MISSION_DIFFICULTY_LEGENDARY = "legendary"


def _mission(
    mission_id: str,
    name: str,
    description: str,
    scope: str,
    difficulty: str,
    requirement_type: str,
    target: int,
    fragments: int,
    experience: int,
) -> dict[str, Any]:
    """Build a static mission template."""
    return {
        DATA_MISSION_ID: mission_id,
        DATA_MISSION_NAME: name,
        DATA_MISSION_DESCRIPTION: description,
        DATA_MISSION_SCOPE: scope,
        DATA_MISSION_DIFFICULTY: difficulty,
        DATA_MISSION_REQUIREMENT: {
            DATA_REQUIREMENT_TYPE: requirement_type,
            DATA_REQUIREMENT_TARGET: target,
        },
        DATA_MISSION_REWARDS: [
            {DATA_REWARD_TYPE: REWARD_TYPE_STAR_FRAGMENTS, DATA_REWARD_AMOUNT: fragments},
            {DATA_REWARD_TYPE: REWARD_TYPE_EXPERIENCE, DATA_REWARD_AMOUNT: experience},
        ],
    }


DEFAULT_MISSION_TEMPLATES: list[dict[str, Any]] = [
    # Daily
    _mission(
        "daily_feed",
        "Hearty Meals",
        "Feed your pet 3 times today",
        MISSION_SCOPE_DAILY,
        MISSION_DIFFICULTY_EASY,
        ACTION_FEED,
        3,
        15,
        100,
    ),
    _mission(
        "daily_chat",
        "Good Company",
        "Chat with your pet twice today",
        MISSION_SCOPE_DAILY,
        MISSION_DIFFICULTY_EASY,
        ACTION_CHAT,
        2,
        10,
        75,
    ),
    _mission(
        "daily_care",
        "Attentive Keeper",
        "Interact with your pets 5 times today",
        MISSION_SCOPE_DAILY,
        MISSION_DIFFICULTY_MEDIUM,
        MISSION_REQUIREMENT_INTERACTION,
        5,
        20,
        150,
    ),
    _mission(
        "daily_login",
        "Daily Visit",
        "Check in with your pets today",
        MISSION_SCOPE_DAILY,
        MISSION_DIFFICULTY_EASY,
        MISSION_REQUIREMENT_LOGIN,
        1,
        5,
        50,
    ),
    # Weekly
    _mission(
        "weekly_sleep",
        "Well Rested",
        "Put your pet to sleep 7 times this week",
        MISSION_SCOPE_WEEKLY,
        MISSION_DIFFICULTY_MEDIUM,
        ACTION_SLEEP,
        7,
        50,
        400,
    ),
    _mission(
        "weekly_discovery",
        "Forager",
        "Discover 5 resources this week",
        MISSION_SCOPE_WEEKLY,
        MISSION_DIFFICULTY_MEDIUM,
        MISSION_REQUIREMENT_DISCOVERY,
        5,
        60,
        500,
    ),
    _mission(
        "weekly_care",
        "Devoted Keeper",
        "Interact with your pets 30 times this week",
        MISSION_SCOPE_WEEKLY,
        MISSION_DIFFICULTY_HARD,
        MISSION_REQUIREMENT_INTERACTION,
        30,
        100,
        800,
    ),
    # Season
    _mission(
        "season_care",
        "Season of Care",
        "Interact with your pets 300 times this season",
        MISSION_SCOPE_SEASON,
        MISSION_DIFFICULTY_LEGENDARY,
        MISSION_REQUIREMENT_INTERACTION,
        300,
        500,
        3000,
    ),
    _mission(
        "season_explorer",
        "Seasoned Explorer",
        "Discover 50 resources this season",
        MISSION_SCOPE_SEASON,
        MISSION_DIFFICULTY_HARD,
        MISSION_REQUIREMENT_DISCOVERY,
        50,
        300,
        2000,
    ),
]

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
ACHIEVEMENT_CATEGORY_INVENTORY = "inventory"
ACHIEVEMENT_CATEGORY_CRAFTING = "crafting"
ACHIEVEMENT_CATEGORY_DISCOVERY = "discovery"
ACHIEVEMENT_CATEGORY_GENERAL = "general"
ACHIEVEMENT_CATEGORIES = [
    ACHIEVEMENT_CATEGORY_INVENTORY,
    ACHIEVEMENT_CATEGORY_CRAFTING,
    ACHIEVEMENT_CATEGORY_DISCOVERY,
    ACHIEVEMENT_CATEGORY_GENERAL,
]

REQUIREMENT_ITEM_COUNT = "item_count"
REQUIREMENT_RECIPE_CRAFTED = "recipe_crafted"
REQUIREMENT_DISCOVERY_COUNT = "discovery_count"
REQUIREMENT_RARITY_COLLECTED = "rarity_collected"
REQUIREMENT_CUSTOM = "custom"
ACHIEVEMENT_REQUIREMENT_TYPES = [
    REQUIREMENT_ITEM_COUNT,
    REQUIREMENT_RECIPE_CRAFTED,
    REQUIREMENT_DISCOVERY_COUNT,
    REQUIREMENT_RARITY_COLLECTED,
    REQUIREMENT_CUSTOM,
]

CUSTOM_ACTION_CRAFT_4_STAR = "craft_4_star_recipe"
CUSTOM_ACTION_INTERACTION = "interaction"
CUSTOM_ACTION_KEY = "action"
RARITIES_METADATA_KEY = "rarities"

ACHIEVEMENT_REWARD_INGREDIENT = "ingredient"
ACHIEVEMENT_REWARD_SPECIAL_ITEM = "special_item"

ACHIEVEMENT_STATUS_COMPLETED = "completed"
ACHIEVEMENT_STATUS_PROGRESS_UPDATED = "progress_updated"
ACHIEVEMENT_STATUS_UNCHANGED = "unchanged"
ACHIEVEMENT_STATUS_NOT_FOUND = "not_found"

CUSTOM_ACHIEVEMENT_ID_PREFIX = "custom_"

DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_NAME = "name"
DATA_ACHIEVEMENT_DESCRIPTION = "description"
DATA_ACHIEVEMENT_CATEGORY = "category"
DATA_ACHIEVEMENT_REQUIREMENT = "requirement"
DATA_ACHIEVEMENT_REWARD = "reward"
DATA_ACHIEVEMENT_PROGRESS = "progress"
DATA_ACHIEVEMENT_COMPLETED = "completed"
DATA_ACHIEVEMENT_DATE_COMPLETED = "date_completed"
DATA_ACHIEVEMENT_ICON = "icon"

DATA_ACHIEVEMENTS_PROGRESS = "progress"
DATA_ACHIEVEMENTS_CUSTOM = "custom"


def _achievement(
    achievement_id: str,
    name: str,
    description: str,
    category: str,
    requirement_type: str,
    target: int,
    fragments: int,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a static achievement template."""
    requirement: dict[str, Any] = {
        DATA_REQUIREMENT_TYPE: requirement_type,
        DATA_REQUIREMENT_TARGET: target,
    }
    if metadata:
        requirement[DATA_REQUIREMENT_METADATA] = metadata
    return {
        DATA_ACHIEVEMENT_ID: achievement_id,
        DATA_ACHIEVEMENT_NAME: name,
        DATA_ACHIEVEMENT_DESCRIPTION: description,
        DATA_ACHIEVEMENT_CATEGORY: category,
        DATA_ACHIEVEMENT_REQUIREMENT: requirement,
        DATA_ACHIEVEMENT_REWARD: {
            DATA_REWARD_TYPE: REWARD_TYPE_STAR_FRAGMENTS,
            DATA_REWARD_AMOUNT: fragments,
        },
    }


DEFAULT_ACHIEVEMENT_TEMPLATES: list[dict[str, Any]] = [
    # Inventory
    _achievement(
        "first_ingredient",
        "First Ingredient",
        "Collect your first ingredient",
        ACHIEVEMENT_CATEGORY_INVENTORY,
        REQUIREMENT_ITEM_COUNT,
        1,
        10,
    ),
    _achievement(
        "ingredient_collector",
        "Ingredient Collector",
        "Collect 10 ingredients",
        ACHIEVEMENT_CATEGORY_INVENTORY,
        REQUIREMENT_ITEM_COUNT,
        10,
        25,
    ),
    _achievement(
        "master_collector",
        "Master Collector",
        "Collect 50 ingredients",
        ACHIEVEMENT_CATEGORY_INVENTORY,
        REQUIREMENT_ITEM_COUNT,
        50,
        100,
    ),
    _achievement(
        "rarity_hunter",
        "Rarity Hunter",
        "Collect ingredients of all rarities",
        ACHIEVEMENT_CATEGORY_INVENTORY,
        REQUIREMENT_RARITY_COLLECTED,
        4,
        50,
        {RARITIES_METADATA_KEY: [RARITY_COMMON, RARITY_UNCOMMON, RARITY_RARE, RARITY_EPIC]},
    ),
    # Crafting
    _achievement(
        "first_craft",
        "First Craft",
        "Craft your first recipe",
        ACHIEVEMENT_CATEGORY_CRAFTING,
        REQUIREMENT_RECIPE_CRAFTED,
        1,
        15,
    ),
    _achievement(
        "apprentice_crafter",
        "Apprentice Crafter",
        "Craft 5 recipes",
        ACHIEVEMENT_CATEGORY_CRAFTING,
        REQUIREMENT_RECIPE_CRAFTED,
        5,
        30,
    ),
    _achievement(
        "master_crafter",
        "Master Crafter",
        "Craft 20 recipes",
        ACHIEVEMENT_CATEGORY_CRAFTING,
        REQUIREMENT_RECIPE_CRAFTED,
        20,
        75,
    ),
    _achievement(
        "star_chef",
        "Star Chef",
        "Craft a 4-star recipe",
        ACHIEVEMENT_CATEGORY_CRAFTING,
        REQUIREMENT_CUSTOM,
        1,
        100,
        {CUSTOM_ACTION_KEY: CUSTOM_ACTION_CRAFT_4_STAR},
    ),
    # Discovery
    _achievement(
        "first_discovery",
        "First Discovery",
        "Discover your first ingredient",
        ACHIEVEMENT_CATEGORY_DISCOVERY,
        REQUIREMENT_DISCOVERY_COUNT,
        1,
        20,
    ),
    _achievement(
        "explorer",
        "Explorer",
        "Discover 10 ingredients",
        ACHIEVEMENT_CATEGORY_DISCOVERY,
        REQUIREMENT_DISCOVERY_COUNT,
        10,
        40,
    ),
    _achievement(
        "treasure_hunter",
        "Treasure Hunter",
        "Discover 25 ingredients",
        ACHIEVEMENT_CATEGORY_DISCOVERY,
        REQUIREMENT_DISCOVERY_COUNT,
        25,
        75,
    ),
]

STAR_CHEF_MIN_RECIPE_STARS = 4

# ------------------------------------------------------------------------------------------------
# Moon cycle
# ------------------------------------------------------------------------------------------------
CYCLE_LENGTH_DAYS = 28
# A day counts toward the cycle when the pet's mood reached this value
CYCLE_MOOD_DAY_THRESHOLD = 5
# A care goal (fed to 5, slept to 5) needs the stat at this value
CYCLE_GOAL_STAT = 5
CYCLE_DEFAULT_DAY_STAT = 3

CYCLE_REWARD_BASIC = "basic"
CYCLE_REWARD_GOOD = "good"
CYCLE_REWARD_PERFECT = "perfect"

# Mood days needed for a successful cycle (24 of 28)
CYCLE_SUCCESS_MOOD_DAYS = 24

# (minimum mood days, reward type), checked from the top down
CYCLE_REWARD_THRESHOLDS = (
    (CYCLE_LENGTH_DAYS, CYCLE_REWARD_PERFECT),
    (CYCLE_SUCCESS_MOOD_DAYS, CYCLE_REWARD_GOOD),
    (0, CYCLE_REWARD_BASIC),
)

DATA_CYCLE_REWARD_ITEMS = "items"
DATA_CYCLE_REWARD_STAR_FRAGMENTS = "star_fragments"

CYCLE_REWARDS: dict[str, dict[str, Any]] = {
    CYCLE_REWARD_BASIC: {
        DATA_CYCLE_REWARD_STAR_FRAGMENTS: 100,
        DATA_CYCLE_REWARD_ITEMS: [
            "Participation Achievement",
            "Basic Ingredient Pack",
        ],
    },
    CYCLE_REWARD_GOOD: {
        DATA_CYCLE_REWARD_STAR_FRAGMENTS: 500,
        DATA_CYCLE_REWARD_ITEMS: [
            "Cycle Completion Achievement",
            "Epic Ingredient Pack",
        ],
    },
    CYCLE_REWARD_PERFECT: {
        DATA_CYCLE_REWARD_STAR_FRAGMENTS: 1000,
        DATA_CYCLE_REWARD_ITEMS: [
            "Perfect Cycle Achievement",
            "Legendary Ingredient Pack",
            "Collection Bonus",
        ],
    },
}
CYCLE_SUCCESS_BADGE = "Moonlight Guardian Badge"

# Sleep: (minimum hours, energy and stars), checked from the top down
SLEEP_PERFECT_HOURS = 8.5
SLEEP_ENERGY_TIERS = (
    (SLEEP_PERFECT_HOURS, 5),
    (7.0, 4),
    (5.0, 3),
    (3.0, 2),
    (0.0, 1),
)

# Play counts as a chat for the cycle's daily goals
CYCLE_ACTION_ALIASES = {ACTION_PLAY: ACTION_CHAT}

DATA_CYCLE_ID = "cycle_id"
DATA_CYCLE_START_DATE = "start_date"
DATA_CYCLE_END_DATE = "end_date"
DATA_CYCLE_CURRENT_DAY = "current_day"
DATA_CYCLE_DAYS = "daily_stats"
DATA_CYCLE_MOOD_DAYS = "mood_days"
DATA_CYCLE_COMPLETED = "completed"
DATA_CYCLE_FINAL_REWARD = "final_reward"
DATA_CYCLE_SLEEP_STARTED_AT = "sleep_started_at"

DATA_DAY_DATE = "date"
DATA_DAY_MOOD = "mood"
DATA_DAY_HUNGER = "hunger"
DATA_DAY_ENERGY = "energy"
DATA_DAY_FEED_COMPLETED = "feed_completed"
DATA_DAY_SLEEP_COMPLETED = "sleep_completed"
DATA_DAY_CHAT_COMPLETED = "chat_completed"
DATA_DAY_MOOD_BONUS_EARNED = "mood_bonus_earned"
DATA_DAY_SLEEP_HOURS = "sleep_hours"
DATA_DAY_FEED_ACTIONS = "feed_actions"
DATA_DAY_SLEEP_ACTIONS = "sleep_actions"
DATA_DAY_CHAT_ACTIONS = "chat_actions"

# Per action type: (actions counter, completed flag)
CYCLE_DAY_ACTION_FIELDS = {
    ACTION_FEED: (DATA_DAY_FEED_ACTIONS, DATA_DAY_FEED_COMPLETED),
    ACTION_SLEEP: (DATA_DAY_SLEEP_ACTIONS, DATA_DAY_SLEEP_COMPLETED),
    ACTION_CHAT: (DATA_DAY_CHAT_ACTIONS, DATA_DAY_CHAT_COMPLETED),
}

# ------------------------------------------------------------------------------------------------
# Inventory
# ------------------------------------------------------------------------------------------------
INVENTORY_SOURCE_PURCHASE = "purchase"
INVENTORY_SOURCE_DISCOVERY = "discovery"
INVENTORY_SOURCE_CRAFTING = "crafting"
INVENTORY_SOURCE_REWARD = "reward"

DATA_INVENTORY_ITEMS = "items"
DATA_INVENTORY_CRAFTED_COUNT = "crafted_count"
DATA_ITEM_QUANTITY = "quantity"
DATA_ITEM_RARITY = "rarity"
DATA_ITEM_SOURCE = "source"
DATA_ITEM_DATE_ADDED = "date_added"

# ------------------------------------------------------------------------------------------------
# Result keys (structured results; domain violations never raise)
# ------------------------------------------------------------------------------------------------
RESULT_SUCCESS = "success"
RESULT_MESSAGE = "message"

# ------------------------------------------------------------------------------------------------
# Event Signals (entry-scoped dispatcher suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_ACTION_RECORDED = "action_recorded"
SIGNAL_SUFFIX_POINTS_AWARDED = "points_awarded"
SIGNAL_SUFFIX_CURRENCY_CHANGED = "currency_changed"
SIGNAL_SUFFIX_DISCOVERY_MADE = "discovery_made"
SIGNAL_SUFFIX_INVENTORY_CHANGED = "inventory_changed"
SIGNAL_SUFFIX_ACHIEVEMENT_PROGRESS = "achievement_progress"
SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
SIGNAL_SUFFIX_MISSION_PROGRESS = "mission_progress"
SIGNAL_SUFFIX_MISSION_COMPLETED = "mission_completed"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_STATS_REFRESHED = "stats_refreshed"
SIGNAL_SUFFIX_CYCLE_COMPLETED = "cycle_completed"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADOPT_PET = "adopt_pet"
SERVICE_RECORD_ACTION = "record_action"
SERVICE_DISCOVER = "discover"
SERVICE_COMPLETE_MISSION = "complete_mission"
SERVICE_UPDATE_ACHIEVEMENT_PROGRESS = "update_achievement_progress"
SERVICE_SPEND_CURRENCY = "spend_currency"
SERVICE_ADD_CUSTOM_ACHIEVEMENT = "add_custom_achievement"
SERVICE_REMOVE_CUSTOM_ACHIEVEMENT = "remove_custom_achievement"
SERVICE_CLAIM_DAILY_LOGIN = "claim_daily_login"
SERVICE_RECORD_CRAFT = "record_craft"
SERVICE_START_SLEEP = "start_sleep"
SERVICE_END_SLEEP = "end_sleep"
SERVICE_CHECK_MOON_CYCLE = "check_moon_cycle"

FIELD_CONFIG_ENTRY_ID = "config_entry_id"
FIELD_PET_ID = "pet_id"
FIELD_PET_NAME = "pet_name"
FIELD_ACTION_TYPE = "action_type"
FIELD_MOOD_BOOST = "mood_boost"
FIELD_HUNGER_BOOST = "hunger_boost"
FIELD_ENERGY_BOOST = "energy_boost"
FIELD_ACHIEVED_GOAL = "achieved_goal"
FIELD_MISSION_ID = "mission_id"
FIELD_ACHIEVEMENT_ID = "achievement_id"
FIELD_VALUE = "value"
FIELD_AMOUNT = "amount"
FIELD_DESCRIPTION = "description"
FIELD_NAME = "name"
FIELD_CATEGORY = "category"
FIELD_REQUIREMENT_TYPE = "requirement_type"
FIELD_TARGET = "target"
FIELD_REWARD_AMOUNT = "reward_amount"
FIELD_REQUIREMENT_ACTION = "requirement_action"
FIELD_RECIPE_ID = "recipe_id"
FIELD_RECIPE_STARS = "recipe_stars"
FIELD_ITEM_ID = "item_id"
FIELD_QUANTITY = "quantity"
FIELD_RARITY = "rarity"

# ------------------------------------------------------------------------------------------------
# Config / Options flow
# ------------------------------------------------------------------------------------------------
CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"
MAX_STARTING_BALANCE = 100000
MIN_REFRESH_INTERVAL = 1
MAX_REFRESH_INTERVAL = 60

# ------------------------------------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------------------------------------
MSG_NO_ENTRY_FOUND = "No PetCare entry found"
MSG_FEED_LIMIT_REACHED = "Daily feeding limit reached ({limit} feeds per day)"
MSG_ACTION_MOOD_GAINED = "✨ {action} completed! +{mood} mood point gained today!"
MSG_ACTION_NO_MOOD = "{action} completed! (Already earned today's mood bonus)"
MSG_UNKNOWN_ACTION = "Unknown action type: {action}"
MSG_STORAGE_UNAVAILABLE = "Storage unavailable, no changes were saved"
MSG_NO_POINTS_FOR_ACTION = "No points are awarded for {action}"
MSG_INSUFFICIENT_FUNDS = "Insufficient Star Fragments"
MSG_INVALID_AMOUNT = "Amount must be greater than zero"
MSG_CURRENCY_EARNED = "+{amount} Star Fragments"
MSG_CURRENCY_SPENT = "-{amount} Star Fragments"
MSG_DAILY_LOGIN_CLAIMED = "Daily login bonus: +{amount} Star Fragments (day {streak})"
MSG_MISSION_COMPLETED = "Mission complete: {name}"
MSG_ACHIEVEMENT_UNLOCKED = "Achievement unlocked: {name}"
MSG_ACHIEVEMENT_PROGRESS = "Progress updated: {progress}/{target}"
MSG_ACHIEVEMENT_REMOVED = "Achievement removed"
MSG_ACHIEVEMENT_ADDED = "Achievement added: {name}"
MSG_LEVEL_UP = "Reached level {level}"
MSG_DISCOVERY_FOUND = "Discovered {count} item(s)"
MSG_SETTINGS_UPDATED = "Discovery settings updated"
MSG_PET_ADOPTED = "{name} joined the family"
MSG_PET_ALREADY_ADOPTED = "{name} is already part of the family"
MSG_PET_NOT_FOUND = "Pet not found: {pet_id}"
MSG_DAILY_POINTS_RESET = "Daily points reset"
MSG_MISSION_NOT_FOUND = "Mission not found"
MSG_MISSION_ALREADY_COMPLETED = "Mission already completed"
MSG_MISSION_NOT_READY = "Mission requirements not met ({progress}/{target})"
MSG_ACHIEVEMENT_NOT_FOUND = "Achievement not found"
MSG_ACHIEVEMENT_ALREADY_COMPLETED = "Achievement already completed"
MSG_ACHIEVEMENT_NOT_CUSTOM = "Only custom achievements can be removed"
MSG_DISCOVERY_NOT_READY = "Your pet is not ready to explore yet"
MSG_DISCOVERY_NOTHING_FOUND = "Your pet came back empty-handed"
MSG_DAILY_LOGIN_ALREADY_CLAIMED = "Daily login bonus already claimed"
MSG_INVALID_SETTING = "Invalid discovery setting: {setting}"
MSG_CYCLE_MOOD_BONUS = "✨ Mood bonus earned! {action} completed with 5 stars!"
MSG_CYCLE_MOOD_BONUS_CLAIMED = "💫 Already earned today's mood bonus!"
MSG_CYCLE_ACTION_RECORDED = "🌟 {action} completed! Reach 5 stars to earn the mood bonus."
MSG_CYCLE_NOT_FINISHED = "The moon cycle ends on day {length} (day {day} now)"
MSG_CYCLE_COMPLETED = "Moon cycle complete: {reward_type} reward ({mood_days} mood days)"
MSG_CYCLE_ALREADY_SETTLED = "Moon cycle already completed"
MSG_SLEEP_STARTED = "😴 Sleep started! Rest for at least {hours} hours to get 5 stars!"
MSG_SLEEP_ALREADY_SLEEPING = "Already sleeping! Wake up first."
MSG_SLEEP_NOT_SLEEPING = "Not currently sleeping!"
MSG_SLEEP_PERFECT = "🌟 Perfect sleep! {hours:.1f} hours = 5 stars! Energy fully restored!"
MSG_SLEEP_ENDED = "😴 Slept for {hours:.1f} hours = {stars} stars. Need {perfect}+ hours for 5 stars!"
MSG_SLEEP_READY = "Ready to sleep"
MSG_SLEEP_IN_PROGRESS = "Sleeping for {hours:.1f} hours. Need {perfect}+ for 5 stars!"

# ------------------------------------------------------------------------------------------------
# Translation keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_INVALID_PLAYER_NAME = "invalid_player_name"
TRANS_KEY_ERROR_INVALID_BALANCE = "invalid_starting_balance"
TRANS_KEY_ERROR_NO_ENTRY = "no_entry_found"
TRANS_KEY_ERROR_INVALID_DISCOVERY_CHANCE = "invalid_discovery_chance"
TRANS_KEY_ERROR_INVALID_INTERVAL = "invalid_interval"
TRANS_KEY_ERROR_INVALID_ACHIEVEMENT_NAME = "invalid_achievement_name"
TRANS_KEY_ERROR_INVALID_CATEGORY = "invalid_category"
TRANS_KEY_ERROR_INVALID_REQUIREMENT_TYPE = "invalid_requirement_type"
TRANS_KEY_ERROR_INVALID_TARGET = "invalid_target"
TRANS_KEY_ERROR_INVALID_MAX_PER_DAY = "invalid_max_per_day"
TRANS_KEY_ERROR_INVALID_REFRESH_INTERVAL = "invalid_refresh_interval"
