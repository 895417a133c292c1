"""
Session Module - Runs games.

A session represents one play-through:
- Created from a GameConfig
- Ticks turns through the TurnScheduler
- Draws cards every few turns and waits for a choice
- Destroyed when the game ends

Sessions are EPHEMERAL: nothing is persisted.
"""

from .scheduler import TurnScheduler, SchedulerState
from .card_manager import CardManager, DrawResult
from .game_loop import GameOrchestrator, LoopState, CardResolution
from .manager import SessionManager, Session, SessionStatus, SessionEvent

__all__ = [
    "TurnScheduler",
    "SchedulerState",
    "CardManager",
    "DrawResult",
    "GameOrchestrator",
    "LoopState",
    "CardResolution",
    "SessionManager",
    "Session",
    "SessionStatus",
    "SessionEvent",
]
