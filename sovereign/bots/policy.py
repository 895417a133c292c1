"""
Choice Policy - Interface for automatic decision makers.

A ChoicePolicy receives a drawn card with its available choices and picks
one. Any policy can be plugged into the GameOrchestrator in place of a
human player.
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .evaluator import ChoiceEvaluator, EvaluationWeights

if TYPE_CHECKING:
    from ..card_schema.card import CardChoice
    from ..engine_core.capitals import CapitalRegistry
    from ..engine_core.resources import ResourceLedger
    from ..session.card_manager import DrawResult


@dataclass
class ChoiceDecision:
    """
    A decision made by a policy.

    Contains:
    - The choice to submit
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    choice: CardChoice
    explanation: str = ""
    confidence: float = 1.0

    # Evaluation details (for debugging)
    evaluated_choices: int = 0
    scores: dict[str, float] = field(default_factory=dict)
    details: dict[str, Any] = field(default_factory=dict)


class ChoicePolicy(ABC):
    """
    Abstract base class for decision makers.

    Implementations only pick among result.available_choices.
    """

    @abstractmethod
    def select_choice(
        self,
        result: DrawResult,
        ledger: ResourceLedger,
        registry: CapitalRegistry,
    ) -> ChoiceDecision:
        """
        Pick one of the available choices of a drawn card.

        Args:
            result: The draw, with the choices available at draw time
            ledger: Current resources (read only)
            registry: Current capitals (read only)

        Returns:
            ChoiceDecision with the selected choice

        Raises:
            ValueError if no choice is available
        """
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


def _require_choices(result: DrawResult) -> list[CardChoice]:
    if not result.available_choices:
        raise ValueError(f"No available choices on card {result.card.id}")
    return result.available_choices


class RandomPolicy(ChoicePolicy):
    """
    Random policy - selects choices uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    - Unattended autoplay
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_choice(self, result, ledger, registry) -> ChoiceDecision:
        choices = _require_choices(result)
        choice = self.rng.choice(choices)
        return ChoiceDecision(
            choice=choice,
            explanation="Selected randomly",
            confidence=1.0 / len(choices),
            evaluated_choices=len(choices),
        )


class FirstAvailablePolicy(ChoicePolicy):
    """
    First-available policy - always selects the first available choice.

    Used for deterministic testing.
    """

    def select_choice(self, result, ledger, registry) -> ChoiceDecision:
        choices = _require_choices(result)
        return ChoiceDecision(
            choice=choices[0],
            explanation="Selected first available choice",
            evaluated_choices=1,
        )


class GreedyPolicy(ChoicePolicy):
    """
    Greedy policy - scores every available choice and takes the best.

    Ties go to the choice listed first on the card.
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.evaluator = ChoiceEvaluator(weights)

    def select_choice(self, result, ledger, registry) -> ChoiceDecision:
        choices = _require_choices(result)
        scores: dict[str, float] = {}
        best = choices[0]
        best_score = float("-inf")

        for choice in choices:
            score = self.evaluator.score_choice(choice, ledger, registry)
            scores[choice.label] = score
            if score > best_score:
                best, best_score = choice, score

        return ChoiceDecision(
            choice=best,
            explanation=f"Best score {best_score:.1f}",
            evaluated_choices=len(choices),
            scores=scores,
        )


POLICY_NAMES = ("random", "first", "greedy")


def create_policy(name: str, seed: int | None = None) -> ChoicePolicy:
    """Build a policy by name ("random", "first" or "greedy")."""
    if name == "random":
        return RandomPolicy(seed)
    if name == "first":
        return FirstAvailablePolicy()
    if name == "greedy":
        return GreedyPolicy()
    raise ValueError(f"Unknown policy {name!r}, expected one of {', '.join(POLICY_NAMES)}")
