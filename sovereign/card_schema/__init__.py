"""Card schema - immutable card, choice, condition and effect definitions."""

from .effect_dsl import (
    Effect,
    ResourceEffect,
    CapitalEffect,
    Condition,
    ResourceCondition,
    CapitalCondition,
)
from .card import CardData, CardChoice, Deck, DEFAULT_DECK_ORDER
from .catalog import CardCatalog
from .validation import validate_catalog, ValidationResult

__all__ = [
    "Effect",
    "ResourceEffect",
    "CapitalEffect",
    "Condition",
    "ResourceCondition",
    "CapitalCondition",
    "CardData",
    "CardChoice",
    "Deck",
    "DEFAULT_DECK_ORDER",
    "CardCatalog",
    "validate_catalog",
    "ValidationResult",
]
