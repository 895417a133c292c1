"""
Effect DSL - Conditions and effects attached to card choices.

Both are tagged variants over {resource, capital}:
- ResourceEffect / CapitalEffect mutate the ledger or a capital's health
- ResourceCondition / CapitalCondition guard whether a choice is available

They are plain frozen records. Evaluation lives in engine_core.evaluator,
which matches on the variant type.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..engine_core.resources import ResourceKind


@dataclass(frozen=True)
class ResourceEffect:
    """
    Change a resource by amount.

    Non-negative amounts are added. Negative amounts are spent, and a
    spend larger than the current amount does nothing.
    """
    kind: ResourceKind
    amount: int


@dataclass(frozen=True)
class CapitalEffect:
    """Shift a capital's health by amount (clamped)."""
    capital_name: str
    amount: float


Effect = Union[ResourceEffect, CapitalEffect]


@dataclass(frozen=True)
class ResourceCondition:
    """Met when the resource amount is at least min_amount."""
    kind: ResourceKind
    min_amount: int


@dataclass(frozen=True)
class CapitalCondition:
    """Met when the capital's health is at least min_health."""
    capital_name: str
    min_health: float


Condition = Union[ResourceCondition, CapitalCondition]


def describe_effect(effect: Effect) -> str:
    """Human-readable one-liner, e.g. 'Money +5' or 'Military health -10'."""
    if isinstance(effect, ResourceEffect):
        return f"{effect.kind.value} {effect.amount:+d}"
    return f"{effect.capital_name} health {effect.amount:+g}"


def describe_condition(condition: Condition) -> str:
    if isinstance(condition, ResourceCondition):
        return f"{condition.kind.value} >= {condition.min_amount}"
    return f"{condition.capital_name} health >= {condition.min_health:g}"


# ============================================================================
# Factory functions for common effect patterns
# ============================================================================

def gain(kind: ResourceKind, amount: int) -> ResourceEffect:
    """Add amount of a resource."""
    return ResourceEffect(kind=kind, amount=abs(amount))


def cost(kind: ResourceKind, amount: int) -> ResourceEffect:
    """Spend amount of a resource."""
    return ResourceEffect(kind=kind, amount=-abs(amount))


def heal(capital_name: str, amount: float) -> CapitalEffect:
    return CapitalEffect(capital_name=capital_name, amount=abs(amount))


def harm(capital_name: str, amount: float) -> CapitalEffect:
    return CapitalEffect(capital_name=capital_name, amount=-abs(amount))


def requires(kind: ResourceKind, min_amount: int) -> ResourceCondition:
    """Require at least min_amount of a resource."""
    return ResourceCondition(kind=kind, min_amount=min_amount)


def requires_health(capital_name: str, min_health: float) -> CapitalCondition:
    """Require a capital to have at least min_health."""
    return CapitalCondition(capital_name=capital_name, min_health=min_health)
