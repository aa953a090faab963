"""Manager modules for PetCare integration.

Managers own the storage documents and coordinate between engines.
They are stateful, event-aware, and emit entry-scoped dispatcher signals.
"""

from .achievement_manager import AchievementManager
from .base_manager import BaseManager
from .cycle_manager import CycleManager
from .discovery_manager import DiscoveryManager
from .economy_manager import EconomyManager
from .interaction_manager import InteractionManager
from .inventory_manager import InventoryManager
from .mission_manager import MissionManager

__all__ = [
    "AchievementManager",
    "BaseManager",
    "CycleManager",
    "DiscoveryManager",
    "EconomyManager",
    "InteractionManager",
    "InventoryManager",
    "MissionManager",
]
