"""
Evaluator - Condition checks and effect application.

This module handles:
- Whether a condition holds against the current ledger and registry
- Whether a choice is available (all conditions hold)
- Applying effects, and applying a whole choice after re-validation

Missing references (a capital or resource that is not registered) never raise:
conditions evaluate to False and effects are skipped, with one warning per
distinct reference for each ledger or registry. Warnings are forgotten when
the ledger or registry is garbage collected.
"""

from __future__ import annotations
import logging
import weakref
from typing import Iterable, TYPE_CHECKING

from ..card_schema.effect_dsl import (
    CapitalCondition,
    CapitalEffect,
    ResourceCondition,
    ResourceEffect,
)
from ..errors import ChoiceLockedError

if TYPE_CHECKING:
    from ..card_schema.card import CardChoice, CardData
    from ..card_schema.effect_dsl import Condition, Effect
    from .capitals import CapitalRegistry
    from .resources import ResourceLedger

logger = logging.getLogger(__name__)


class _Unscoped:
    """Warning scope for evaluations with no ledger or registry."""


_UNSCOPED = _Unscoped()
_warned_references: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


def _warn_missing(scope: object | None, reference: str) -> None:
    warned = _warned_references.setdefault(scope if scope is not None else _UNSCOPED, set())
    if reference in warned:
        return
    warned.add(reference)
    logger.warning("Missing reference: %s", reference)


def is_met(
    condition: Condition,
    ledger: ResourceLedger | None,
    registry: CapitalRegistry | None,
) -> bool:
    """Evaluate one condition against current state."""
    if isinstance(condition, ResourceCondition):
        if ledger is None:
            _warn_missing(ledger, "resource ledger")
            return False
        resource = ledger.get_by_type(condition.kind)
        if resource is None:
            _warn_missing(ledger, f"resource {condition.kind.value}")
            return False
        return resource.amount >= condition.min_amount

    if isinstance(condition, CapitalCondition):
        if registry is None:
            _warn_missing(registry, "capital registry")
            return False
        capital = registry.get_by_name(condition.capital_name)
        if capital is None:
            _warn_missing(registry, f"capital {condition.capital_name}")
            return False
        return capital.health >= condition.min_health

    raise TypeError(f"Unknown condition type: {type(condition).__name__}")


def is_available(
    choice: CardChoice,
    ledger: ResourceLedger | None,
    registry: CapitalRegistry | None,
) -> bool:
    """True if every condition of the choice holds. Stops at the first failure."""
    return all(is_met(c, ledger, registry) for c in choice.conditions)


def available_choices(
    choices: Iterable[CardChoice],
    ledger: ResourceLedger | None,
    registry: CapitalRegistry | None,
) -> list[CardChoice]:
    """The subset of choices currently available, in declared order."""
    return [c for c in choices if is_available(c, ledger, registry)]


def apply_effect(
    effect: Effect,
    ledger: ResourceLedger | None,
    registry: CapitalRegistry | None,
) -> bool:
    """
    Apply one effect.

    Returns True if state changed. Absent targets and spends that exceed
    the current amount are skipped.
    """
    if isinstance(effect, ResourceEffect):
        resource = ledger.get_by_type(effect.kind) if ledger is not None else None
        if resource is None:
            _warn_missing(ledger, f"resource {effect.kind.value}")
            return False
        if effect.amount >= 0:
            resource.add(effect.amount)
            return True
        spent = resource.spend(-effect.amount)
        if not spent:
            logger.debug(
                "Insufficient %s for %d (have %d), effect skipped",
                effect.kind.value, -effect.amount, resource.amount,
            )
        return spent

    if isinstance(effect, CapitalEffect):
        capital = registry.get_by_name(effect.capital_name) if registry is not None else None
        if capital is None:
            _warn_missing(registry, f"capital {effect.capital_name}")
            return False
        capital.modify_health(effect.amount)
        return True

    raise TypeError(f"Unknown effect type: {type(effect).__name__}")


def apply_choice(
    card: CardData,
    choice: CardChoice,
    ledger: ResourceLedger | None,
    registry: CapitalRegistry | None,
) -> None:
    """
    Re-validate a choice and apply its effects in order.

    Raises ChoiceLockedError without mutating anything if a condition no
    longer holds, and ValueError if the choice is not on the card.
    """
    if choice not in card.choices:
        raise ValueError(f"Choice '{choice.label}' does not belong to card '{card.id}'")

    if not is_available(choice, ledger, registry):
        raise ChoiceLockedError(card.id, choice.label)

    for effect in choice.effects:
        apply_effect(effect, ledger, registry)
