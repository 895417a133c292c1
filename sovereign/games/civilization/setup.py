"""
Civilization Game Setup - Creates the starting state.

This module handles:
- The resource ledger with configured starting amounts
- The registry with the three preset capitals
- The card catalog (built-in decks unless a loader supplies one)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...card_schema.catalog import CardCatalog
from ...engine_core.capitals import CapitalRegistry
from ...engine_core.resources import ResourceLedger
from .cards import CIVILIZATION_DECKS

if TYPE_CHECKING:
    from ...config import GameConfig


@dataclass
class GameWorld:
    """The mutable state and the catalog for one game."""
    ledger: ResourceLedger
    registry: CapitalRegistry
    catalog: CardCatalog


def create_ledger(config: GameConfig | None = None) -> ResourceLedger:
    return ResourceLedger.create(config.initial_resources if config else None)


def create_registry(config: GameConfig | None = None) -> CapitalRegistry:
    if config is None:
        return CapitalRegistry.create_default()
    return CapitalRegistry.create_default(initial_health=config.initial_health)


def create_catalog() -> CardCatalog:
    """Catalog of the built-in decks."""
    return CardCatalog(CIVILIZATION_DECKS)


def setup_civilization_game(
    config: GameConfig | None = None,
    catalog: CardCatalog | None = None,
) -> GameWorld:
    """
    Set up a new game.

    Args:
        config: Game configuration (defaults apply when omitted)
        catalog: Prebuilt catalog (built-in decks when omitted)

    Returns:
        GameWorld ready to hand to a session
    """
    if config is not None:
        config.validate()

    return GameWorld(
        ledger=create_ledger(config),
        registry=create_registry(config),
        catalog=catalog if catalog is not None else create_catalog(),
    )
