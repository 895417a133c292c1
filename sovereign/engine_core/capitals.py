"""
Capital Registry - The three producing entities of a game.

Capitals are one entity type parameterized by a preset record
(name, resource kind, base rate) rather than one class per capital.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import math

from .resources import ResourceKind

logger = logging.getLogger(__name__)

MIN_HEALTH = 0.0
MAX_HEALTH = 100.0


@dataclass(frozen=True)
class CapitalPreset:
    """Fixed configuration for one capital."""
    name: str
    resource_kind: ResourceKind
    base_rate: float


GOVERNMENT = CapitalPreset("Government", ResourceKind.MONEY, 10.0)
POPULATION = CapitalPreset("Population", ResourceKind.FOOD, 8.0)
MILITARY = CapitalPreset("Military", ResourceKind.POWER, 6.0)

CAPITAL_PRESETS: tuple[CapitalPreset, ...] = (GOVERNMENT, POPULATION, MILITARY)


class Capital:
    """
    A named entity with health in [0, 100] that produces one resource.

    Production scales linearly with health: 100% health yields the
    full production rate.
    """

    def __init__(
        self,
        name: str,
        resource_kind: ResourceKind,
        production_rate: float,
        health: float = MAX_HEALTH,
    ):
        if production_rate < 0:
            raise ValueError("production_rate must be >= 0")
        self._name = name
        self._resource_kind = resource_kind
        self._production_rate = float(production_rate)
        self._health = _clamp(float(health))

    @classmethod
    def from_preset(cls, preset: CapitalPreset, health: float = MAX_HEALTH) -> Capital:
        return cls(preset.name, preset.resource_kind, preset.base_rate, health)

    @property
    def name(self) -> str:
        return self._name

    @property
    def resource_kind(self) -> ResourceKind:
        return self._resource_kind

    @property
    def production_rate(self) -> float:
        return self._production_rate

    @property
    def health(self) -> float:
        return self._health

    def produce(self) -> int:
        """Output for one turn: floor(rate * health / 100). Does not mutate."""
        return int(math.floor(self._production_rate * (self._health / MAX_HEALTH)))

    def modify_health(self, delta: float) -> None:
        """Shift health by delta, clamped into [0, 100]."""
        if math.isnan(delta):
            return
        self._health = _clamp(self._health + delta)

    def __repr__(self) -> str:
        return f"Capital({self._name}, health={self._health:g}, rate={self._production_rate:g})"


def _clamp(value: float) -> float:
    return max(MIN_HEALTH, min(MAX_HEALTH, value))


class CapitalRegistry:
    """
    Capitals keyed by unique name.

    A default registry holds exactly the three presets.
    """

    def __init__(self, capitals: list[Capital] | None = None):
        self._capitals: dict[str, Capital] = {}
        for capital in capitals or []:
            self.add(capital)

    @classmethod
    def create_default(cls, initial_health: float = MAX_HEALTH) -> CapitalRegistry:
        return cls([Capital.from_preset(p, initial_health) for p in CAPITAL_PRESETS])

    def add(self, capital: Capital) -> bool:
        """Add a capital unless its name is already taken."""
        if capital.name in self._capitals:
            logger.debug("Capital %s already registered, ignoring", capital.name)
            return False
        self._capitals[capital.name] = capital
        return True

    def get_all(self) -> list[Capital]:
        return list(self._capitals.values())

    def get_by_name(self, name: str) -> Capital | None:
        return self._capitals.get(name)

    def names(self) -> list[str]:
        return list(self._capitals.keys())

    def snapshot(self) -> dict[str, dict]:
        """Health, rate and resource per capital name."""
        return {
            c.name: {
                "health": c.health,
                "production_rate": c.production_rate,
                "resource": c.resource_kind.value,
            }
            for c in self._capitals.values()
        }
