# File: helpers/event_helpers.py
"""Dispatcher signal helpers for PetCare.

Signals are scoped to a config entry so that several players (one entry
each) can run side by side without cross-talk.
"""

from __future__ import annotations

from .. import const

# ==============================================================================
# Event Signals
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'petcare_{entry_id}_{suffix}'

    Multi-instance example:
        - Player 1 (entry_id="abc123"):
          get_event_signal("abc123", "points_awarded") → "petcare_abc123_points_awarded"
        - Player 2 (entry_id="xyz789"):
          get_event_signal("xyz789", "points_awarded") → "petcare_xyz789_points_awarded"

    Args:
        entry_id: ConfigEntry.entry_id of the player
        suffix: Signal suffix constant from const.py (e.g., SIGNAL_SUFFIX_POINTS_AWARDED)

    Returns:
        Fully qualified signal name scoped to this player
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"
