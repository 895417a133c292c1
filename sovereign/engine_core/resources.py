"""
Resource Ledger - Counters for the three fungible resources.

Design principles:
- One Resource per kind, created once per game
- Amounts never go negative
- add() only accepts non-negative values; spend() reports failure instead of raising
"""

from __future__ import annotations
from enum import Enum
from typing import Mapping


class ResourceKind(Enum):
    """Kinds of resource a capital can produce."""
    MONEY = "Money"
    FOOD = "Food"
    POWER = "Power"

    @classmethod
    def parse(cls, value: str) -> ResourceKind:
        """Look up a kind by value or member name, case-insensitive."""
        for kind in cls:
            if value.lower() in (kind.value.lower(), kind.name.lower()):
                return kind
        raise ValueError(f"Unknown resource kind: {value}")


def _whole(value) -> int:
    if value != int(value):
        raise ValueError(f"Resource amounts are whole numbers, got {value!r}")
    return int(value)


class Resource:
    """
    A counted quantity of one resource kind.

    The kind is fixed at creation. The amount changes only through
    add(), spend() and set_amount().
    """

    def __init__(self, kind: ResourceKind, amount: int = 0):
        self._kind = kind
        self._amount = max(0, int(amount))

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    @property
    def amount(self) -> int:
        return self._amount

    def add(self, value: int) -> None:
        """Add a non-negative whole amount."""
        value = _whole(value)
        if value < 0:
            raise ValueError("Use spend() for negative values")
        self._amount += value

    def spend(self, value: int) -> bool:
        """
        Remove value from the counter.

        Returns False and leaves the amount unchanged if value is not
        positive or exceeds the current amount. Raises ValueError for a
        fractional value.
        """
        value = _whole(value)
        if value <= 0:
            return False
        if self._amount < value:
            return False
        self._amount -= value
        return True

    def set_amount(self, value: int) -> None:
        """Overwrite the amount, clamped at zero."""
        self._amount = max(0, int(value))

    def __repr__(self) -> str:
        return f"Resource({self._kind.value}={self._amount})"


class ResourceLedger:
    """
    Holds exactly one Resource per kind, in declaration order.

    Usage:
        ledger = ResourceLedger.create({"Food": 5})
        ledger.get_by_type(ResourceKind.FOOD).spend(10)  # False
    """

    def __init__(self, resources: list[Resource] | None = None):
        if resources is None:
            resources = [Resource(kind) for kind in ResourceKind]
        self._resources: dict[ResourceKind, Resource] = {}
        for resource in resources:
            if resource.kind in self._resources:
                raise ValueError(f"Duplicate resource kind: {resource.kind.value}")
            self._resources[resource.kind] = resource

    @classmethod
    def create(cls, initial: Mapping[str, int] | None = None) -> ResourceLedger:
        """Create a ledger with every kind, using initial amounts keyed by kind name."""
        amounts: dict[ResourceKind, int] = {}
        for name, amount in (initial or {}).items():
            amounts[ResourceKind.parse(name)] = amount
        return cls([Resource(kind, amounts.get(kind, 0)) for kind in ResourceKind])

    def get_all(self) -> list[Resource]:
        """All resources, one per kind, in stable order."""
        return list(self._resources.values())

    def get_by_type(self, kind: ResourceKind) -> Resource | None:
        """Get the resource of the given kind, if present."""
        return self._resources.get(kind)

    def amount_of(self, kind: ResourceKind) -> int:
        resource = self._resources.get(kind)
        return resource.amount if resource else 0

    def add(self, kind: ResourceKind, value: int) -> bool:
        """Add to a kind. Returns False if the kind is absent."""
        resource = self._resources.get(kind)
        if resource is None:
            return False
        resource.add(value)
        return True

    def spend(self, kind: ResourceKind, value: int) -> bool:
        """Spend from a kind. Returns False if absent or insufficient."""
        resource = self._resources.get(kind)
        if resource is None:
            return False
        return resource.spend(value)

    def snapshot(self) -> dict[str, int]:
        """Amounts keyed by kind name."""
        return {kind.value: r.amount for kind, r in self._resources.items()}
