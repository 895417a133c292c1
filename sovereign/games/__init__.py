"""
Games module - Built-in game content.

Each game has its own subpackage with:
- Card definitions grouped into decks
- Setup helpers for the starting ledger, registry and catalog
"""
