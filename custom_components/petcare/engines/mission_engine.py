"""Mission Engine - Pure logic for time-boxed missions.

This engine provides stateless, pure Python functions for:
- Reset windows (daily date, ISO week, calendar quarter) and their expiry
- Completion keys that make each mission claimable once per window
- Progress accumulation by requirement type, capped at target
- Reward totals and experience-to-level conversion

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and an
explicit `now`. State management belongs in MissionManager.
"""

from __future__ import annotations

from datetime import datetime
import math
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils

if TYPE_CHECKING:
    from ..type_defs import MissionData


class MissionEngine:
    """Pure logic engine for mission windows, progress and rewards.

    Templates are the static dicts from const.DEFAULT_MISSION_TEMPLATES.
    `document` is the stored MissionsDocument dict.
    """

    # =========================================================================
    # Windows
    # =========================================================================

    @staticmethod
    def get_window_key(scope: str, now: datetime) -> str:
        """Key of the reset window containing `now`.

        Examples:
            daily → "2025-04-07", weekly → "2025-W15", season → "2025-Q2"
        """
        if scope == const.MISSION_SCOPE_WEEKLY:
            return dt_utils.week_key(now)
        if scope == const.MISSION_SCOPE_SEASON:
            return dt_utils.season_key(now)
        return dt_utils.local_date_iso(now)

    @staticmethod
    def get_completion_key(mission_id: str, scope: str, now: datetime) -> str:
        """Completion key: `<id>_<date>`, `<id>_<week>` or `<id>` (season).

        Season completions are keyed by id alone: a season mission is
        claimable once.
        """
        if scope == const.MISSION_SCOPE_SEASON:
            return mission_id
        return f"{mission_id}_{MissionEngine.get_window_key(scope, now)}"

    @staticmethod
    def get_expiry(scope: str, now: datetime) -> str:
        """ISO timestamp at which the mission's window ends."""
        return dt_utils.dt_to_iso(dt_utils.dt_window_end(now, scope))

    @staticmethod
    def prune_stale_windows(
        document: dict[str, Any], templates: list[dict[str, Any]], now: datetime
    ) -> bool:
        """Drop progress buckets and completion keys of past windows.

        Returns:
            True if anything was removed.
        """
        current = {
            MissionEngine.get_window_key(scope, now) for scope in const.MISSION_SCOPES
        }
        progress = document[const.DATA_MISSIONS_PROGRESS]
        stale = [key for key in progress if key not in current]
        for key in stale:
            del progress[key]

        live_keys = {
            MissionEngine.get_completion_key(
                template[const.DATA_MISSION_ID], template[const.DATA_MISSION_SCOPE], now
            )
            for template in templates
        }
        completed = document[const.DATA_MISSIONS_COMPLETED_KEYS]
        kept = [key for key in completed if key in live_keys]
        removed_keys = len(completed) - len(kept)
        completed[:] = kept

        return bool(stale) or removed_keys > 0

    # =========================================================================
    # Reads
    # =========================================================================

    @staticmethod
    def get_progress(
        document: dict[str, Any], template: dict[str, Any], now: datetime
    ) -> int:
        """Progress of a mission in the current window."""
        window = MissionEngine.get_window_key(template[const.DATA_MISSION_SCOPE], now)
        bucket = document[const.DATA_MISSIONS_PROGRESS].get(window, {})
        return int(bucket.get(template[const.DATA_MISSION_ID], 0))

    @staticmethod
    def is_completed(
        document: dict[str, Any], template: dict[str, Any], now: datetime
    ) -> bool:
        """True if the mission's completion key for this window is recorded."""
        key = MissionEngine.get_completion_key(
            template[const.DATA_MISSION_ID], template[const.DATA_MISSION_SCOPE], now
        )
        return key in document[const.DATA_MISSIONS_COMPLETED_KEYS]

    @staticmethod
    def build_mission(
        document: dict[str, Any], template: dict[str, Any], now: datetime
    ) -> MissionData:
        """Merge a template with its current-window state."""
        mission = dict(template)
        mission[const.DATA_MISSION_PROGRESS] = MissionEngine.get_progress(
            document, template, now
        )
        mission[const.DATA_MISSION_COMPLETED] = MissionEngine.is_completed(
            document, template, now
        )
        mission[const.DATA_MISSION_EXPIRES_AT] = MissionEngine.get_expiry(
            template[const.DATA_MISSION_SCOPE], now
        )
        return mission  # type: ignore[return-value]

    # =========================================================================
    # Progress
    # =========================================================================

    @staticmethod
    def matches_activity(requirement_type: str, activity_type: str) -> bool:
        """True if an activity counts toward a requirement type.

        Every care action also counts as a generic `interaction`.
        """
        if requirement_type == activity_type:
            return True
        return (
            requirement_type == const.MISSION_REQUIREMENT_INTERACTION
            and activity_type in const.ACTION_TYPES
        )

    @staticmethod
    def record_activity(
        document: dict[str, Any],
        templates: list[dict[str, Any]],
        activity_type: str,
        amount: int,
        now: datetime,
    ) -> list[dict[str, Any]]:
        """Increment matching missions in their current window, capped at target.

        Modifies document in place. Completed missions are left alone.

        Returns:
            List of {mission_id, progress, target} for missions that changed.
        """
        changed: list[dict[str, Any]] = []
        if amount <= 0:
            return changed

        for template in templates:
            requirement = template[const.DATA_MISSION_REQUIREMENT]
            if not MissionEngine.matches_activity(
                requirement[const.DATA_REQUIREMENT_TYPE], activity_type
            ):
                continue
            if MissionEngine.is_completed(document, template, now):
                continue

            target = int(requirement[const.DATA_REQUIREMENT_TARGET])
            window = MissionEngine.get_window_key(
                template[const.DATA_MISSION_SCOPE], now
            )
            bucket = document[const.DATA_MISSIONS_PROGRESS].setdefault(window, {})
            mission_id = template[const.DATA_MISSION_ID]
            current = int(bucket.get(mission_id, 0))
            updated = min(current + amount, target)
            if updated == current:
                continue
            bucket[mission_id] = updated
            changed.append(
                {
                    const.FIELD_MISSION_ID: mission_id,
                    const.DATA_MISSION_PROGRESS: updated,
                    const.DATA_REQUIREMENT_TARGET: target,
                }
            )
        return changed

    # =========================================================================
    # Completion
    # =========================================================================

    @staticmethod
    def validate_completion(
        document: dict[str, Any], template: dict[str, Any] | None, now: datetime
    ) -> str | None:
        """Return a failure message, or None if the mission can be claimed."""
        if template is None:
            return const.MSG_MISSION_NOT_FOUND
        if MissionEngine.is_completed(document, template, now):
            return const.MSG_MISSION_ALREADY_COMPLETED
        progress = MissionEngine.get_progress(document, template, now)
        requirement = template[const.DATA_MISSION_REQUIREMENT]
        target = int(requirement[const.DATA_REQUIREMENT_TARGET])
        if progress < target:
            return const.MSG_MISSION_NOT_READY.format(progress=progress, target=target)
        return None

    @staticmethod
    def sum_rewards(rewards: list[dict[str, Any]], reward_type: str) -> int:
        """Sum reward amounts of one type."""
        return sum(
            int(reward.get(const.DATA_REWARD_AMOUNT, 0))
            for reward in rewards
            if reward.get(const.DATA_REWARD_TYPE) == reward_type
        )

    @staticmethod
    def calculate_level(experience: int) -> int:
        """Level 1 at 0 XP, +1 per EXPERIENCE_PER_LEVEL."""
        return math.floor(max(experience, 0) / const.EXPERIENCE_PER_LEVEL) + 1

    @staticmethod
    def calculate_level_up_bonus(new_level: int) -> int:
        """Currency bonus granted on reaching `new_level`."""
        return new_level * const.LEVEL_UP_BONUS_PER_LEVEL

    @staticmethod
    def apply_completion(
        document: dict[str, Any], template: dict[str, Any], now: datetime
    ) -> dict[str, int]:
        """Record a validated completion. Modifies document in place.

        Returns:
            Dict with star_fragments, experience, old_level, new_level.
        """
        rewards = template[const.DATA_MISSION_REWARDS]
        fragments = MissionEngine.sum_rewards(rewards, const.REWARD_TYPE_STAR_FRAGMENTS)
        experience = MissionEngine.sum_rewards(rewards, const.REWARD_TYPE_EXPERIENCE)

        old_level = int(document.get(const.DATA_MISSIONS_LEVEL, 1))
        document[const.DATA_MISSIONS_TOTAL_EARNED] = (
            int(document.get(const.DATA_MISSIONS_TOTAL_EARNED, 0)) + fragments
        )
        document[const.DATA_MISSIONS_EXPERIENCE] = (
            int(document.get(const.DATA_MISSIONS_EXPERIENCE, 0)) + experience
        )
        new_level = MissionEngine.calculate_level(
            document[const.DATA_MISSIONS_EXPERIENCE]
        )
        document[const.DATA_MISSIONS_LEVEL] = new_level
        document[const.DATA_MISSIONS_COMPLETED_KEYS].append(
            MissionEngine.get_completion_key(
                template[const.DATA_MISSION_ID], template[const.DATA_MISSION_SCOPE], now
            )
        )

        return {
            "star_fragments": fragments,
            "experience": experience,
            "old_level": old_level,
            "new_level": new_level,
        }
