"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. create_session() builds ledger, registry, catalog, scheduler,
   card manager and orchestrator from a GameConfig
2. start() launches the turn loop on the running event loop
3. During the game:
   - Turns tick and capitals produce
   - Every turns_per_card turns a card is drawn and the scheduler pauses
   - A policy or an external caller submits a choice
4. stop() or end_session() ends the game; the session is forgotten

PERSISTENCE RULES:
- Sessions live in memory only
- Nothing survives end_session()
"""

from __future__ import annotations
import asyncio
import logging
import random
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

from ..card_schema.effect_dsl import describe_effect
from ..config import GameConfig
from ..games.civilization import GameWorld, setup_civilization_game
from ..loader import build_catalog
from .card_manager import CardManager
from .game_loop import GameOrchestrator
from .scheduler import TurnScheduler

if TYPE_CHECKING:
    from ..bots.policy import ChoicePolicy
    from ..card_schema.card import CardChoice, CardData
    from ..card_schema.catalog import CardCatalog

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 500


class SessionStatus(Enum):
    """State of a game session."""
    CREATED = "created"  # Built, turn loop not started
    RUNNING = "running"  # Turn loop active (possibly paused)
    STOPPED = "stopped"  # Ended normally
    FAILED = "failed"  # Turn loop raised


@dataclass
class SessionEvent:
    """One entry of the session's event history."""
    sequence: int
    kind: str  # turn_started, turn_ended, card_drawn, choice_applied
    turn: int
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "kind": self.kind,
            "turn": self.turn,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }


class Session:
    """
    One play-through of the game.

    Contains:
    - The configuration and the game world (ledger, registry, catalog)
    - The scheduler, card manager and orchestrator wired together
    - A bounded history of events and a list of listeners

    Listeners are called synchronously with each SessionEvent; an exception
    in a listener is logged and does not affect the game.
    """

    def __init__(
        self,
        session_id: str,
        config: GameConfig,
        world: GameWorld,
        policy: ChoicePolicy | None = None,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ):
        self.session_id = session_id
        self.config = config
        self.world = world
        self.policy = policy
        self.created_at = time.time()
        self.status = SessionStatus.CREATED
        self.error: str | None = None

        self.scheduler = TurnScheduler(world.ledger, world.registry)
        self.card_manager = CardManager(
            world.catalog,
            world.ledger,
            world.registry,
            rng=random.Random(config.random_seed),
            offload_filtering=config.offload_filtering,
        )
        self.orchestrator = GameOrchestrator(
            self.scheduler,
            self.card_manager,
            turns_per_card=config.turns_per_card,
            decision_maker=policy,
        )

        self.events: deque[SessionEvent] = deque(maxlen=history_size)
        self._sequence = 0
        self._listeners: list[Callable[[SessionEvent], None]] = []

        self.scheduler.on_turn_started.subscribe(self._on_turn_started)
        self.scheduler.on_turn_ended.subscribe(self._on_turn_ended)
        self.card_manager.on_card_drawn.subscribe(self._on_card_drawn)
        self.card_manager.on_choice_applied.subscribe(self._on_choice_applied)

    @property
    def current_turn(self) -> int:
        """Last turn played. The turn cut off by max_turns is not counted."""
        turn = self.scheduler.current_turn
        if self.config.max_turns is not None:
            return min(turn, self.config.max_turns)
        return turn

    def is_active(self) -> bool:
        return self.status in {SessionStatus.CREATED, SessionStatus.RUNNING}

    def add_listener(self, listener: Callable[[SessionEvent], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def start(self) -> asyncio.Task:
        """Start the turn loop. Must be called with a running event loop."""
        task = self.scheduler.start(self.config.tick_interval_ms)
        task.add_done_callback(self._on_loop_done)
        self.status = SessionStatus.RUNNING
        logger.info("Session %s started", self.session_id)
        return task

    async def wait(self) -> None:
        """Wait until the turn loop exits, then release the session."""
        task = self.scheduler.task
        if task is not None:
            await asyncio.wait([task])
        await self.stop()

    async def stop(self) -> None:
        """Stop the turn loop and cancel any unresolved card."""
        self.scheduler.stop()
        self.orchestrator.stop()

        pending = [
            t for t in (self.scheduler.task, self.orchestrator.card_task)
            if t is not None and not t.done()
        ]
        if pending:
            await asyncio.wait(pending)

        if self.status in {SessionStatus.CREATED, SessionStatus.RUNNING}:
            self.status = SessionStatus.STOPPED
            logger.info(
                "Session %s stopped at turn %d", self.session_id, self.current_turn
            )

    def pause(self) -> None:
        self.scheduler.pause()

    def resume(self) -> None:
        self.scheduler.resume()

    def submit_choice(self, choice: CardChoice) -> bool:
        return self.orchestrator.submit_choice(choice)

    def submit_choice_index(self, index: int) -> bool:
        return self.orchestrator.submit_choice_index(index)

    def submit_choice_label(self, label: str) -> bool:
        return self.orchestrator.submit_choice_label(label)

    def snapshot(self) -> dict[str, Any]:
        """Live state for display."""
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "scheduler_state": self.scheduler.state.value,
            "turn": self.current_turn,
            "resources": self.world.ledger.snapshot(),
            "capitals": self.world.registry.snapshot(),
            "has_pending_card": self.orchestrator.has_pending_choice(),
        }

    def _on_loop_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            if self.status == SessionStatus.RUNNING:
                self.status = SessionStatus.STOPPED
            return
        logger.error(
            "Session %s turn loop failed at turn %d",
            self.session_id, self.current_turn, exc_info=exc,
        )
        self.status = SessionStatus.FAILED
        self.error = str(exc)
        self.orchestrator.stop()

    def _on_turn_started(self, turn: int) -> None:
        max_turns = self.config.max_turns
        if max_turns is not None and turn > max_turns:
            logger.info("Session %s reached %d turns", self.session_id, max_turns)
            self.scheduler.stop()
            return
        self._record("turn_started", {})

    def _on_turn_ended(self, turn: int) -> None:
        self._record("turn_ended", {"resources": self.world.ledger.snapshot()})

    def _on_card_drawn(self, card: CardData, choices: list[CardChoice]) -> None:
        self._record("card_drawn", {
            "card_id": card.id,
            "title": card.title,
            "available": [c.label for c in choices],
        })

    def _on_choice_applied(self, card: CardData, choice: CardChoice) -> None:
        self._record("choice_applied", {
            "card_id": card.id,
            "label": choice.label,
            "effects": [describe_effect(e) for e in choice.effects],
        })

    def _record(self, kind: str, payload: dict[str, Any]) -> None:
        self._sequence += 1
        event = SessionEvent(self._sequence, kind, self.current_turn, payload)
        self.events.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session %s listener failed on %s", self.session_id, kind)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from a config
    - Track active sessions
    - Stop and forget ended sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        config: GameConfig | None = None,
        catalog: CardCatalog | None = None,
        policy: ChoicePolicy | None = None,
    ) -> Session:
        """
        Create a new game session (not started).

        Args:
            config: Session configuration (defaults when omitted)
            catalog: Prebuilt catalog; otherwise config.cards_path is loaded,
                or the built-in decks are used
            policy: Decision maker; None means choices come from submit_choice

        Returns:
            New Session ready to start
        """
        config = config or GameConfig()
        config.validate()

        if catalog is None and config.cards_path:
            result = build_catalog(config.cards_path)
            for error in result.errors:
                logger.error("Card loading: %s", error)
            catalog = result.catalog

        world = setup_civilization_game(config, catalog=catalog)
        session = Session(str(uuid.uuid4()), config, world, policy=policy)
        self._sessions[session.session_id] = session
        logger.info(
            "Created session %s (%d cards, policy=%s)",
            session.session_id,
            world.catalog.card_count,
            policy.get_name() if policy else "external",
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    async def end_session(self, session_id: str) -> bool:
        """
        Stop a session and remove it from memory.

        Returns:
            False if the session does not exist
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        await session.stop()
        return True

    async def end_all(self) -> None:
        for session_id in list(self._sessions):
            await self.end_session(session_id)

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]
