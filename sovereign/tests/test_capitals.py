"""
Tests for capitals and the capital registry.

Tests:
- Health is clamped to [0, 100]
- Production scales with health and never mutates it
- The default registry holds the three presets
"""

import math

import pytest

from ..engine_core.capitals import (
    CAPITAL_PRESETS,
    Capital,
    CapitalRegistry,
    GOVERNMENT,
    MILITARY,
    POPULATION,
)
from ..engine_core.resources import ResourceKind


class TestCapitalHealth:
    """Tests for health clamping."""

    def test_large_damage_clamps_to_zero(self):
        """Health 100, rate 10: modify_health(-150) gives 0 and production 0."""
        capital = Capital("Government", ResourceKind.MONEY, 10)
        capital.modify_health(-150)
        assert capital.health == 0
        assert capital.produce() == 0

    @pytest.mark.parametrize("delta,expected", [
        (-1000, 0.0),
        (1000, 100.0),
        (-30, 70.0),
        (math.inf, 100.0),
        (-math.inf, 0.0),
    ])
    def test_clamping(self, delta, expected):
        capital = Capital("Population", ResourceKind.FOOD, 8)
        capital.modify_health(delta)
        assert capital.health == expected

    def test_nan_is_ignored(self):
        capital = Capital("Military", ResourceKind.POWER, 6, health=40)
        capital.modify_health(float("nan"))
        assert capital.health == 40

    def test_initial_health_clamped(self):
        assert Capital("X", ResourceKind.MONEY, 1, health=250).health == 100

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            Capital("X", ResourceKind.MONEY, -1)


class TestProduction:
    """Tests for production output."""

    def test_full_health_produces_full_rate(self):
        assert Capital.from_preset(GOVERNMENT).produce() == 10

    def test_production_floors(self):
        """Rate 6 at 50% health gives 3; at 25% gives floor(1.5) = 1."""
        capital = Capital.from_preset(MILITARY, health=50)
        assert capital.produce() == 3
        capital.modify_health(-25)
        assert capital.produce() == 1

    def test_produce_does_not_mutate(self):
        capital = Capital.from_preset(POPULATION, health=80)
        capital.produce()
        capital.produce()
        assert capital.health == 80

    def test_production_monotonic_in_health(self):
        """Higher health never produces less."""
        outputs = [
            Capital("Population", ResourceKind.FOOD, 8, health=h).produce()
            for h in range(0, 101, 5)
        ]
        assert outputs == sorted(outputs)


class TestCapitalRegistry:
    """Tests for the registry."""

    def test_default_presets(self, registry):
        assert registry.names() == ["Government", "Population", "Military"]
        kinds = {c.name: c.resource_kind for c in registry.get_all()}
        assert kinds == {
            "Government": ResourceKind.MONEY,
            "Population": ResourceKind.FOOD,
            "Military": ResourceKind.POWER,
        }

    def test_presets_are_distinct_records(self):
        assert len({p.name for p in CAPITAL_PRESETS}) == 3

    def test_get_by_name(self, registry):
        assert registry.get_by_name("Military").production_rate == 6
        assert registry.get_by_name("Clergy") is None

    def test_add_ignores_duplicate_name(self, registry):
        assert registry.add(Capital("Government", ResourceKind.POWER, 99)) is False
        assert registry.get_by_name("Government").resource_kind is ResourceKind.MONEY

    def test_add_new_capital(self, registry):
        assert registry.add(Capital("Clergy", ResourceKind.FOOD, 2)) is True
        assert "Clergy" in registry.names()

    def test_default_initial_health(self):
        registry = CapitalRegistry.create_default(initial_health=60)
        assert all(c.health == 60 for c in registry.get_all())

    def test_snapshot(self, registry):
        snapshot = registry.snapshot()
        assert snapshot["Government"] == {
            "health": 100.0,
            "production_rate": 10.0,
            "resource": "Money",
        }
