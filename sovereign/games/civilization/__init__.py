"""
Civilization - The built-in game

Three capitals keep a small realm running:
- Government produces Money
- Population produces Food
- Military produces Power

Every few turns an event card is drawn from the next deck in rotation
(Progression, ResourceSupport, Harm, BigEvent) and the player picks one
of its available choices.

This module contains:
- Card definitions for the four decks
- Setup helpers for a fresh game
"""

from .cards import CIVILIZATION_DECKS, get_all_cards, get_card_by_id
from .setup import create_ledger, create_registry, create_catalog, GameWorld, setup_civilization_game

__all__ = [
    "CIVILIZATION_DECKS",
    "get_all_cards",
    "get_card_by_id",
    "create_ledger",
    "create_registry",
    "create_catalog",
    "GameWorld",
    "setup_civilization_game",
]
