"""
Errors - Exception hierarchy for the engine.

Caller bugs (negative amounts, foreign choices, bad configuration) raise the
built-in ValueError. Everything below is specific to game rules.
"""

from __future__ import annotations


class SovereignError(Exception):
    """Base exception for all engine errors."""
    pass


class ChoiceLockedError(SovereignError):
    """Raised when a choice is applied while one of its conditions fails."""

    def __init__(self, card_id: str, choice_label: str):
        self.card_id = card_id
        self.choice_label = choice_label
        super().__init__(
            f"Choice '{choice_label}' on card '{card_id}' is locked and cannot be applied"
        )


class SchedulerStateError(SovereignError):
    """Raised when the turn scheduler is started from the wrong state."""
    pass


class CatalogError(SovereignError):
    """Base class for card catalog problems."""
    pass


class DuplicateCardError(CatalogError):
    """Raised when two cards in the same deck share an id."""

    def __init__(self, deck: str, card_id: str):
        self.deck = deck
        self.card_id = card_id
        super().__init__(f"Duplicate card id '{card_id}' in deck '{deck}'")


class CatalogValidationError(CatalogError):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")
