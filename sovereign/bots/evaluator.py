"""
Choice Evaluator - Scores card choices for bot decision-making.

A choice is scored from the deltas it would cause:
- Resource deltas, weighted per kind and boosted when the resource is scarce
- Capital health deltas, boosted when the capital is weak
- Costs that cannot be paid score nothing (the spend would not happen)

Weights can be adjusted to create different play styles.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..card_schema.effect_dsl import CapitalEffect, ResourceEffect
from ..engine_core.capitals import MAX_HEALTH

if TYPE_CHECKING:
    from ..card_schema.card import CardChoice
    from ..card_schema.effect_dsl import Effect
    from ..engine_core.capitals import CapitalRegistry
    from ..engine_core.resources import ResourceLedger


def _default_resource_weights() -> dict[str, float]:
    return {"Money": 1.0, "Food": 1.0, "Power": 1.0}


@dataclass
class EvaluationWeights:
    """
    Weights for the choice evaluator.

    Higher values = more importance.
    """
    # Per unit of resource, keyed by resource name
    resource_weights: dict[str, float] = field(default_factory=_default_resource_weights)
    scarcity_threshold: int = 20  # Below this amount gains count extra
    scarcity_bonus: float = 0.5

    # Per point of capital health
    health_weight: float = 2.0
    weak_capital_threshold: float = 50.0  # Below this health changes count extra
    weak_capital_bonus: float = 1.0


@dataclass
class ChoiceEvaluation:
    """Result of scoring one choice."""
    total_score: float
    effect_scores: list[float] = field(default_factory=list)


class ChoiceEvaluator:
    """
    Evaluates choices against the current ledger and registry.

    Used by GreedyPolicy for 1-ply lookahead: score each available
    choice and pick the best.
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(
        self,
        choice: CardChoice,
        ledger: ResourceLedger,
        registry: CapitalRegistry,
    ) -> ChoiceEvaluation:
        scores = [self._score_effect(e, ledger, registry) for e in choice.effects]
        return ChoiceEvaluation(total_score=sum(scores), effect_scores=scores)

    def score_choice(
        self,
        choice: CardChoice,
        ledger: ResourceLedger,
        registry: CapitalRegistry,
    ) -> float:
        return self.evaluate(choice, ledger, registry).total_score

    def _score_effect(
        self,
        effect: Effect,
        ledger: ResourceLedger,
        registry: CapitalRegistry,
    ) -> float:
        w = self.weights

        if isinstance(effect, ResourceEffect):
            resource = ledger.get_by_type(effect.kind)
            if resource is None:
                return 0.0
            if effect.amount < 0 and resource.amount < -effect.amount:
                return 0.0
            weight = w.resource_weights.get(effect.kind.value, 1.0)
            if resource.amount < w.scarcity_threshold:
                weight *= 1.0 + w.scarcity_bonus
            return effect.amount * weight

        if isinstance(effect, CapitalEffect):
            capital = registry.get_by_name(effect.capital_name)
            if capital is None:
                return 0.0
            # Only the part of the delta that survives clamping counts
            target = max(0.0, min(MAX_HEALTH, capital.health + effect.amount))
            delta = target - capital.health
            weight = w.health_weight
            if capital.health < w.weak_capital_threshold:
                weight *= 1.0 + w.weak_capital_bonus
            return delta * weight

        raise TypeError(f"Unknown effect type: {type(effect).__name__}")
