"""
Sovereign - Turn-based civilization management engine

Three capitals (Government, Population, Military) each produce one resource
(Money, Food, Power) every turn. Every few turns an event card interrupts the
loop and offers the player a choice gated by conditions. The engine provides:
- Resource ledger and capital registry
- Card catalog with decks, conditions and effects
- A pausable turn scheduler
- Deck-cycling card draws and choice application
- Decision-maker policies for autoplay
"""

__version__ = "0.1.0"
