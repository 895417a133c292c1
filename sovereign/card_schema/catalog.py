"""
Card Catalog - Read-only card lookup grouped by deck.

Built once from the loader's output (deck name -> list of CardData) and never
mutated afterwards. Deck order is the order of the mapping passed in, which
is also the rotation order used by the card manager.

Card ids must be unique within a deck. A collision raises DuplicateCardError
instead of letting the later card replace the earlier one.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Iterable, Mapping

from .card import CardData
from ..errors import DuplicateCardError


class CardCatalog:
    """
    Immutable catalog of decks.

    Usage:
        catalog = CardCatalog({"Harm": [plague, raid], "BigEvent": [comet]})
        catalog.get_all("Harm")            # (plague, raid)
        catalog.get_by_id("Harm", "raid")  # raid
        catalog.get_by_id("Harm", "nope")  # None
    """

    def __init__(self, decks: Mapping[str, Iterable[CardData]] | None = None):
        built: dict[str, Mapping[str, CardData]] = {}
        for deck, cards in (decks or {}).items():
            deck_name = _deck_key(deck)
            by_id: dict[str, CardData] = dict(built.get(deck_name, {}))
            for card in cards:
                if card.id in by_id:
                    raise DuplicateCardError(deck_name, card.id)
                by_id[card.id] = card
            built[deck_name] = MappingProxyType(by_id)
        self._decks: Mapping[str, Mapping[str, CardData]] = MappingProxyType(built)

    @classmethod
    def empty(cls) -> CardCatalog:
        return cls({})

    @property
    def deck_names(self) -> tuple[str, ...]:
        """Deck names in declared order."""
        return tuple(self._decks.keys())

    @property
    def card_count(self) -> int:
        return sum(len(cards) for cards in self._decks.values())

    @property
    def is_empty(self) -> bool:
        return self.card_count == 0

    def get_all(self, deck: str) -> tuple[CardData, ...]:
        """Cards of a deck in declared order; empty for unknown decks."""
        cards = self._decks.get(_deck_key(deck))
        return tuple(cards.values()) if cards else ()

    def get_by_id(self, deck: str, card_id: str) -> CardData | None:
        cards = self._decks.get(_deck_key(deck))
        if cards is None:
            return None
        return cards.get(card_id)

    def get_all_decks(self) -> dict[str, tuple[CardData, ...]]:
        """Every deck mapped to its cards."""
        return {deck: tuple(cards.values()) for deck, cards in self._decks.items()}

    def __contains__(self, deck: object) -> bool:
        return isinstance(deck, str) and _deck_key(deck) in self._decks

    def __repr__(self) -> str:
        sizes = ", ".join(f"{d}={len(c)}" for d, c in self._decks.items())
        return f"CardCatalog({sizes})"


def _deck_key(deck: str) -> str:
    # Deck members are str enums; key by their plain value
    return getattr(deck, "value", deck)
