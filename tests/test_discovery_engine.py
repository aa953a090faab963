"""Tests for DiscoveryEngine - gate, rolls and history.

These tests verify:
- The gate (enabled, cooldown, daily cap) and the daily counter reset
- A discovery chance of 0 never yields, whatever the random source
- Seeded random sources replay identical discoveries
- Applying results, history retention and recent notifications
- Settings validation
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import random
from typing import Any

import pytest

from custom_components.petcare import const, data_builders as db
from custom_components.petcare.engines.discovery_engine import DiscoveryEngine
from custom_components.petcare.utils import dt_utils

NOW = datetime(2025, 4, 7, 12, 0, tzinfo=UTC)

FULL_POOLS: dict[str, list[dict[str, str]]] = {
    rarity: [{"id": f"{rarity}-gem", "name": f"{rarity.title()} Gem"}]
    for rarity in const.RARITIES
}


def make_settings(**overrides: Any) -> dict[str, Any]:
    """Settings whose last discovery was 5 hours ago (gate open)."""
    settings = dict(db.build_discovery_settings(NOW - timedelta(hours=5)))
    settings[const.DATA_DISCOVERY_LAST_RESET] = dt_utils.local_date_iso(NOW)
    settings.update(overrides)
    return settings


class TestGate:
    """Tests for should_discover and the daily reset."""

    def test_open_after_cooldown(self) -> None:
        """Enabled, cooldown elapsed and below the cap."""
        assert DiscoveryEngine.should_discover(make_settings(), NOW)

    def test_closed_when_disabled(self) -> None:
        """Disabled discovery never opens."""
        settings = make_settings(**{const.DATA_DISCOVERY_ENABLED: False})
        assert not DiscoveryEngine.should_discover(settings, NOW)

    def test_closed_during_cooldown(self) -> None:
        """Less than interval_hours since the last discovery."""
        settings = make_settings(
            **{const.DATA_DISCOVERY_LAST_TIME: dt_utils.dt_to_iso(NOW)}
        )
        assert not DiscoveryEngine.should_discover(settings, NOW)
        assert DiscoveryEngine.get_time_until_next(settings, NOW) == timedelta(
            hours=const.DEFAULT_DISCOVERY_INTERVAL_HOURS
        )

    def test_closed_at_daily_cap(self) -> None:
        """Reaching max_per_day closes the gate."""
        settings = make_settings(
            **{const.DATA_DISCOVERY_DAILY_COUNT: const.DEFAULT_DISCOVERY_MAX_PER_DAY}
        )
        assert not DiscoveryEngine.should_discover(settings, NOW)

    def test_zero_interval_is_always_ready(self) -> None:
        """An interval of 0 hours has no cooldown."""
        settings = make_settings(
            **{
                const.DATA_DISCOVERY_INTERVAL_HOURS: 0,
                const.DATA_DISCOVERY_LAST_TIME: dt_utils.dt_to_iso(NOW),
            }
        )
        assert DiscoveryEngine.should_discover(settings, NOW)

    def test_daily_reset(self) -> None:
        """A stale reset date zeroes the counter once."""
        settings = make_settings(
            **{
                const.DATA_DISCOVERY_DAILY_COUNT: 4,
                const.DATA_DISCOVERY_LAST_RESET: "2025-04-06",
            }
        )
        assert DiscoveryEngine.reset_daily_if_needed(settings, "2025-04-07")
        assert settings[const.DATA_DISCOVERY_DAILY_COUNT] == 0
        assert not DiscoveryEngine.reset_daily_if_needed(settings, "2025-04-07")

    def test_daily_progress(self) -> None:
        """Progress reports count, cap and percentage."""
        settings = make_settings(**{const.DATA_DISCOVERY_DAILY_COUNT: 3})
        assert DiscoveryEngine.get_daily_progress(settings) == {
            "current": 3,
            "max": 6,
            "percentage": 50.0,
        }


class TestRolls:
    """Tests for the probability rolls."""

    @pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
    def test_zero_chance_never_yields(self, seed: int) -> None:
        """discovery_chance = 0 yields nothing for any seed."""
        rng = random.Random(seed)
        for _ in range(50):
            assert DiscoveryEngine.roll_discoveries(0.0, FULL_POOLS, NOW, rng) == []

    def test_seeded_rolls_are_replayable(self) -> None:
        """The same seed produces the same records."""
        first = DiscoveryEngine.roll_discoveries(
            1.0, FULL_POOLS, NOW, random.Random(42)
        )
        second = DiscoveryEngine.roll_discoveries(
            1.0, FULL_POOLS, NOW, random.Random(42)
        )
        assert first == second
        assert 1 <= len(first) <= const.DISCOVERY_COUNT_MAX

    def test_full_chance_with_full_pools_always_yields(self) -> None:
        """With every pool stocked and chance 1, each draw succeeds."""
        rng = random.Random(3)
        for _ in range(20):
            records = DiscoveryEngine.roll_discoveries(1.0, FULL_POOLS, NOW, rng)
            assert records
            for record in records:
                low, high = const.RARITY_QUANTITY_RANGES[
                    record[const.DATA_RECORD_RARITY]
                ]
                assert low <= record[const.DATA_RECORD_QUANTITY] <= high
                assert record[const.DATA_RECORD_RESOURCE_ID] == (
                    f"{record[const.DATA_RECORD_RARITY]}-gem"
                )

    def test_empty_pools_are_skipped(self) -> None:
        """Draws landing on an empty pool produce no record."""
        rng = random.Random(5)
        assert DiscoveryEngine.roll_discoveries(1.0, {}, NOW, rng) == []

    def test_rarity_distribution_bounds(self) -> None:
        """Roll outcomes are always known rarities and counts."""
        rng = random.Random(99)
        for _ in range(200):
            assert DiscoveryEngine.roll_rarity(rng) in const.RARITIES
            assert 1 <= DiscoveryEngine.roll_item_count(rng) <= 3

    def test_message_names_the_resource(self) -> None:
        """Flavor messages include the resource name."""
        message = DiscoveryEngine.pick_message(
            const.RARITY_EPIC, "Star Dust", random.Random(1)
        )
        assert "Star Dust" in message


class TestDocument:
    """Tests for applying results and history maintenance."""

    def test_apply_discoveries_updates_gate_and_history(self) -> None:
        """A non-empty result consumes the gate and extends history."""
        document = db.hydrate_discovery_document(None, NOW - timedelta(hours=5))
        records = DiscoveryEngine.roll_discoveries(
            1.0, FULL_POOLS, NOW, random.Random(42)
        )
        DiscoveryEngine.apply_discoveries(document, records, NOW)

        settings = document[const.DATA_DISCOVERY_SETTINGS]
        assert settings[const.DATA_DISCOVERY_LAST_TIME] == dt_utils.dt_to_iso(NOW)
        assert settings[const.DATA_DISCOVERY_DAILY_COUNT] == len(records)
        assert document[const.DATA_DISCOVERY_TOTAL] == len(records)
        assert document[const.DATA_DISCOVERY_HISTORY] == records

    def test_apply_empty_result_is_noop(self) -> None:
        """A miss leaves the gate untouched."""
        document = db.hydrate_discovery_document(None, NOW - timedelta(hours=5))
        before = dict(document[const.DATA_DISCOVERY_SETTINGS])
        DiscoveryEngine.apply_discoveries(document, [], NOW)
        assert document[const.DATA_DISCOVERY_SETTINGS] == before

    def _record(self, age: timedelta) -> dict[str, Any]:
        return dict(
            DiscoveryEngine.build_record(
                FULL_POOLS[const.RARITY_COMMON][0],
                const.RARITY_COMMON,
                NOW - age,
                random.Random(0),
            )
        )

    def test_prune_history(self) -> None:
        """Records older than the retention period are removed."""
        history = [self._record(timedelta(days=8)), self._record(timedelta(days=2))]
        assert DiscoveryEngine.prune_history(history, NOW) == 1
        assert len(history) == 1

    def test_recent_window(self) -> None:
        """Only records within the last 24 hours are recent."""
        history = [self._record(timedelta(hours=30)), self._record(timedelta(hours=2))]
        recent = DiscoveryEngine.get_recent(history, NOW)
        assert recent == [history[1]]


class TestSettingsValidation:
    """Tests for validate_settings."""

    def test_normalizes_values(self) -> None:
        """Values are coerced to their stored types."""
        assert DiscoveryEngine.validate_settings(
            {
                const.DATA_DISCOVERY_CHANCE: "0.5",
                const.DATA_DISCOVERY_INTERVAL_HOURS: 2,
                const.DATA_DISCOVERY_MAX_PER_DAY: "3",
                const.DATA_DISCOVERY_ENABLED: 0,
            }
        ) == {
            const.DATA_DISCOVERY_CHANCE: 0.5,
            const.DATA_DISCOVERY_INTERVAL_HOURS: 2.0,
            const.DATA_DISCOVERY_MAX_PER_DAY: 3,
            const.DATA_DISCOVERY_ENABLED: False,
        }

    @pytest.mark.parametrize(
        "updates",
        [
            {const.DATA_DISCOVERY_CHANCE: 1.5},
            {const.DATA_DISCOVERY_CHANCE: -0.1},
            {const.DATA_DISCOVERY_INTERVAL_HOURS: -1},
            {const.DATA_DISCOVERY_MAX_PER_DAY: -2},
            {const.DATA_DISCOVERY_DAILY_COUNT: 0},
        ],
    )
    def test_rejects_invalid(self, updates: dict[str, Any]) -> None:
        """Out-of-range values and non-editable keys raise ValueError."""
        with pytest.raises(ValueError):
            DiscoveryEngine.validate_settings(updates)
