"""
Card Manager - Deck rotation, draws and choice application.

Draw policy:
- draw_next() moves a rotation pointer to the next deck (wrapping around)
  and draws uniformly at random from it
- draw_from(deck) draws from a named deck without moving the pointer
- An empty or unknown deck yields None

After a draw the available choices are computed and on_card_drawn fires.
Filtering is read-only and may run in a worker thread; it is always joined
before the draw result is published.
"""

from __future__ import annotations
import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Sequence, TYPE_CHECKING

from ..engine_core.evaluator import apply_choice, available_choices, is_available
from ..engine_core.events import EventHook

if TYPE_CHECKING:
    from ..card_schema.card import CardChoice, CardData
    from ..card_schema.catalog import CardCatalog
    from ..engine_core.capitals import CapitalRegistry
    from ..engine_core.resources import ResourceLedger

logger = logging.getLogger(__name__)


@dataclass
class DrawResult:
    """A drawn card with the choices available at draw time."""
    deck: str
    card: CardData
    available_choices: list[CardChoice] = field(default_factory=list)

    @property
    def has_choices(self) -> bool:
        return len(self.available_choices) > 0

    def locked_choices(self) -> list[CardChoice]:
        """Choices on the card that were not available at draw time."""
        return [c for c in self.card.choices if c not in self.available_choices]


class CardManager:
    """
    Draws cards and applies choices against the ledger and registry.

    Usage:
        manager = CardManager(catalog, ledger, registry, rng=random.Random(7))
        result = await manager.draw_next()
        if result and result.has_choices:
            manager.apply_choice(result.card, result.available_choices[0])
    """

    def __init__(
        self,
        catalog: CardCatalog,
        ledger: ResourceLedger,
        registry: CapitalRegistry,
        rng: random.Random | None = None,
        deck_order: Sequence[str] | None = None,
        offload_filtering: bool = False,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.registry = registry
        self.rng = rng or random.Random()
        self.offload_filtering = offload_filtering
        self.deck_order: tuple[str, ...] = (
            tuple(deck_order) if deck_order is not None else catalog.deck_names
        )
        self._rotation_index = -1

        self.on_card_drawn = EventHook("card_drawn")
        self.on_choice_applied = EventHook("choice_applied")

    @property
    def current_deck(self) -> str | None:
        """Deck the pointer is on, None before the first draw."""
        if self._rotation_index < 0 or not self.deck_order:
            return None
        return self.deck_order[self._rotation_index]

    def peek_next_deck(self) -> str | None:
        if not self.deck_order:
            return None
        return self.deck_order[(self._rotation_index + 1) % len(self.deck_order)]

    def advance_rotation(self) -> str | None:
        """Move the pointer to the next deck and return it."""
        if not self.deck_order:
            return None
        self._rotation_index = (self._rotation_index + 1) % len(self.deck_order)
        return self.deck_order[self._rotation_index]

    async def draw_next(self) -> DrawResult | None:
        """Advance the rotation, then draw from that deck."""
        deck = self.advance_rotation()
        if deck is None:
            logger.info("No decks to draw from")
            return None
        return await self.draw_from(deck)

    async def draw_from(self, deck: str) -> DrawResult | None:
        """Draw uniformly at random from deck. None if the deck is empty."""
        cards = self.catalog.get_all(deck)
        if not cards:
            logger.info("Deck %s is empty, no card drawn", deck)
            return None

        card = self.rng.choice(cards)
        if self.offload_filtering:
            choices = await asyncio.to_thread(
                available_choices, card.choices, self.ledger, self.registry
            )
        else:
            choices = available_choices(card.choices, self.ledger, self.registry)

        logger.info(
            "Drew %s from %s (%d/%d choices available)",
            card.id, deck, len(choices), len(card.choices),
        )
        self.on_card_drawn.emit(card, choices)
        return DrawResult(deck=deck, card=card, available_choices=choices)

    def is_available(self, choice: CardChoice) -> bool:
        return is_available(choice, self.ledger, self.registry)

    def apply_choice(self, card: CardData, choice: CardChoice, notify: bool = True) -> None:
        """
        Re-validate and apply a choice.

        Raises ChoiceLockedError (no mutation) if the choice is no longer
        available. With notify=False the caller emits on_choice_applied
        itself, once it has recorded the choice.
        """
        apply_choice(card, choice, self.ledger, self.registry)
        logger.info("Applied '%s' on %s", choice.label, card.id)
        if notify:
            self.on_choice_applied.emit(card, choice)
