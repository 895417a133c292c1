"""
Game Configuration - Tunables for a session.

Values come from code, from the CLI, or from SOVEREIGN_* environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os

DEFAULT_TICK_INTERVAL_MS = 1000
DEFAULT_TURNS_PER_CARD = 3
DEFAULT_INITIAL_HEALTH = 100.0


def _default_resources() -> dict[str, int]:
    return {"Money": 0, "Food": 0, "Power": 0}


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class GameConfig:
    """
    Configuration for one game session.

    tick_interval_ms is the wall-clock wait between turns. A card is drawn
    after every turns_per_card completed turns.
    """
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    turns_per_card: int = DEFAULT_TURNS_PER_CARD

    # Starting state
    initial_resources: dict[str, int] = field(default_factory=_default_resources)
    initial_health: float = DEFAULT_INITIAL_HEALTH

    # Card draws
    random_seed: int | None = None
    offload_filtering: bool = True
    cards_path: str | None = None  # None = built-in decks

    # Autoplay limit (CLI)
    max_turns: int | None = None

    def validate(self) -> None:
        """Raise ValueError if any value is out of range."""
        if self.tick_interval_ms < 0:
            raise ValueError("tick_interval_ms must be >= 0")
        if self.turns_per_card < 1:
            raise ValueError("turns_per_card must be >= 1")
        if not 0.0 <= self.initial_health <= 100.0:
            raise ValueError("initial_health must be within [0, 100]")
        for kind, amount in self.initial_resources.items():
            if amount < 0:
                raise ValueError(f"initial amount for {kind} must be >= 0")
        if self.max_turns is not None and self.max_turns < 1:
            raise ValueError("max_turns must be >= 1")

    @classmethod
    def from_env(cls) -> GameConfig:
        """Build a config from SOVEREIGN_* environment variables."""
        config = cls(
            tick_interval_ms=_int_env("SOVEREIGN_TICK_MS", DEFAULT_TICK_INTERVAL_MS),
            turns_per_card=_int_env("SOVEREIGN_TURNS_PER_CARD", DEFAULT_TURNS_PER_CARD),
            random_seed=_int_env("SOVEREIGN_SEED", None),
            cards_path=os.getenv("SOVEREIGN_CARDS_PATH") or None,
            max_turns=_int_env("SOVEREIGN_MAX_TURNS", None),
        )
        config.validate()
        return config
