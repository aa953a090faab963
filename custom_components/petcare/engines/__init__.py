"""Engine modules for PetCare integration.

Contains pure computation engines (no Home Assistant imports):
- stat_engine: Mood state machine, combo loss, energy decay, action effects
- discovery_engine: Discovery gate, rolls and history
- economy_engine: Interaction points, streaks and currency ledger
- mission_engine: Mission windows, progress and rewards
- achievement_engine: Achievement progress and summaries
- cycle_engine: Moon cycle days, sleep scoring and cycle rewards
"""

# Use relative imports within package to avoid mypy module resolution issues
from .achievement_engine import AchievementEngine
from .cycle_engine import CycleEngine
from .discovery_engine import DiscoveryEngine
from .economy_engine import EconomyEngine, InsufficientFundsError
from .mission_engine import MissionEngine
from .stat_engine import StatEngine

__all__ = [
    "AchievementEngine",
    "CycleEngine",
    "DiscoveryEngine",
    "EconomyEngine",
    "InsufficientFundsError",
    "MissionEngine",
    "StatEngine",
]
