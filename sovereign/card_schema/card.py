"""
Card definitions - Cards, their choices, and the decks they belong to.

Definitions are immutable once built. Lists passed in are stored as tuples.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .effect_dsl import Effect, Condition


class Deck(str, Enum):
    """Built-in deck categories, in rotation order."""
    PROGRESSION = "Progression"
    RESOURCE_SUPPORT = "ResourceSupport"
    HARM = "Harm"
    BIG_EVENT = "BigEvent"


DEFAULT_DECK_ORDER: tuple[str, ...] = tuple(deck.value for deck in Deck)


@dataclass(frozen=True)
class CardChoice:
    """
    A labeled option on a card.

    Available only when every condition holds; an empty condition
    list means always available. Effects apply in declared order.
    """
    label: str
    effects: tuple[Effect, ...] = field(default_factory=tuple)
    conditions: tuple[Condition, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "effects", tuple(self.effects or ()))
        object.__setattr__(self, "conditions", tuple(self.conditions or ()))

    @property
    def is_unconditional(self) -> bool:
        return not self.conditions


@dataclass(frozen=True)
class CardData:
    """A titled event card offering one or more choices."""
    id: str
    title: str
    description: str = ""
    choices: tuple[CardChoice, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "choices", tuple(self.choices or ()))

    def get_choice(self, label: str) -> CardChoice | None:
        """Look up a choice by label."""
        for choice in self.choices:
            if choice.label == label:
                return choice
        return None
