"""
Catalog Validation - Sanity checks for loaded card definitions.

Validates that:
1. Every card has an id and a title
2. Condition thresholds are not negative
3. Capital references point at known capitals (warning only, decks may
   reference capitals that are added later)
4. Decks, cards and choices are not empty (warnings)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .card import CardData, CardChoice
from .catalog import CardCatalog
from .effect_dsl import (
    CapitalCondition,
    CapitalEffect,
    ResourceCondition,
)
from ..errors import CatalogValidationError


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(
    catalog: CardCatalog,
    capital_names: Iterable[str] | None = None,
    raise_on_error: bool = False,
) -> ValidationResult:
    """
    Validate a complete catalog.

    Args:
        catalog: Catalog to check
        capital_names: Known capital names; None skips reference checks
        raise_on_error: Raise CatalogValidationError when errors exist

    Returns:
        ValidationResult with errors and warnings
    """
    errors: list[str] = []
    warnings: list[str] = []
    known = set(capital_names) if capital_names is not None else None

    if not catalog.deck_names:
        warnings.append("Catalog has no decks")

    for deck, cards in catalog.get_all_decks().items():
        if not cards:
            warnings.append(f"Deck '{deck}' is empty")
        for card in cards:
            card_errors, card_warnings = _validate_card(deck, card, known)
            errors.extend(card_errors)
            warnings.extend(card_warnings)

    if raise_on_error and errors:
        raise CatalogValidationError(errors)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_card(
    deck: str,
    card: CardData,
    known_capitals: set[str] | None,
) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    where = f"{deck}/{card.id or '<no id>'}"

    if not card.id:
        errors.append(f"{where}: card id is required")
    if not card.title:
        warnings.append(f"{where}: card has no title")
    if not card.choices:
        warnings.append(f"{where}: card has no choices and will always be skipped")

    for choice in card.choices:
        choice_errors, choice_warnings = _validate_choice(where, choice, known_capitals)
        errors.extend(choice_errors)
        warnings.extend(choice_warnings)

    return errors, warnings


def _validate_choice(
    where: str,
    choice: CardChoice,
    known_capitals: set[str] | None,
) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    where = f"{where}/'{choice.label}'"

    if not choice.effects:
        warnings.append(f"{where}: choice has no effects")

    for condition in choice.conditions:
        if isinstance(condition, ResourceCondition):
            if condition.min_amount < 0:
                errors.append(f"{where}: negative min_amount {condition.min_amount}")
        elif isinstance(condition, CapitalCondition):
            if condition.min_health < 0:
                errors.append(f"{where}: negative min_health {condition.min_health:g}")
            if known_capitals is not None and condition.capital_name not in known_capitals:
                warnings.append(
                    f"{where}: condition references unknown capital '{condition.capital_name}'"
                )

    for effect in choice.effects:
        if isinstance(effect, CapitalEffect):
            if known_capitals is not None and effect.capital_name not in known_capitals:
                warnings.append(
                    f"{where}: effect references unknown capital '{effect.capital_name}'"
                )

    return errors, warnings
