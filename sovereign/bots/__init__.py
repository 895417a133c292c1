"""
Bots module - Automatic decision makers.

Provides:
- ChoicePolicy: Interface for picking a card choice
- RandomPolicy, FirstAvailablePolicy, GreedyPolicy
- ChoiceEvaluator: Scores choices for GreedyPolicy
"""

from .policy import (
    ChoicePolicy,
    ChoiceDecision,
    RandomPolicy,
    FirstAvailablePolicy,
    GreedyPolicy,
    POLICY_NAMES,
    create_policy,
)
from .evaluator import ChoiceEvaluator, ChoiceEvaluation, EvaluationWeights

__all__ = [
    "ChoicePolicy",
    "ChoiceDecision",
    "RandomPolicy",
    "FirstAvailablePolicy",
    "GreedyPolicy",
    "ChoiceEvaluator",
    "ChoiceEvaluation",
    "EvaluationWeights",
    "POLICY_NAMES",
    "create_policy",
]
