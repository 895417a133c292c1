"""
Game Loop - Couples the turn scheduler to card draws.

The cadence:
1. The scheduler ends turn N
2. If N is a multiple of turns_per_card, the orchestrator pauses the
   scheduler (inside the turn_ended handler, before anything can await)
3. A card is drawn from the next deck in rotation
4. If at least one choice is available, the orchestrator waits for
   submit_choice() (from a human, an API call or a bot policy)
5. The choice is applied and the scheduler resumes

Cards with no available choices, and empty decks, are skipped. The resume in
step 5 happens exactly once per card, whatever the outcome, including a
failing decision maker or cancellation.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..bots.policy import ChoicePolicy
    from ..card_schema.card import CardChoice
    from .card_manager import CardManager, DrawResult
    from .scheduler import TurnScheduler

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the card cadence."""
    RUNNING = "running"  # Turns are ticking
    DRAWING = "drawing"  # Scheduler paused, card being drawn
    WAITING_CHOICE = "waiting_choice"  # Scheduler paused, card pending
    STOPPED = "stopped"


@dataclass
class CardResolution:
    """How one card draw ended."""
    turn: int
    deck: str | None
    card_id: str | None = None
    choice_label: str | None = None
    skipped: bool = False
    reason: str = ""


class GameOrchestrator:
    """
    Pauses the scheduler every turns_per_card turns and resolves a card.

    Usage:
        orchestrator = GameOrchestrator(scheduler, card_manager, turns_per_card=3)
        scheduler.start(tick_interval_ms=1000)
        ...
        # From the UI, once orchestrator.pending is set:
        orchestrator.submit_choice(orchestrator.pending.available_choices[0])

    With a decision_maker every card is resolved automatically.
    """

    def __init__(
        self,
        scheduler: TurnScheduler,
        card_manager: CardManager,
        turns_per_card: int = 3,
        decision_maker: ChoicePolicy | None = None,
    ):
        if turns_per_card < 1:
            raise ValueError("turns_per_card must be >= 1")

        self.scheduler = scheduler
        self.card_manager = card_manager
        self.turns_per_card = turns_per_card
        self.decision_maker = decision_maker
        self.history: list[CardResolution] = []

        self._state = LoopState.RUNNING
        self._pending: DrawResult | None = None
        self._choice_future: asyncio.Future | None = None
        self._card_task: asyncio.Task | None = None
        self._unsubscribe = scheduler.on_turn_ended.subscribe(self._on_turn_ended)

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def pending(self) -> DrawResult | None:
        """The card waiting for a choice, if any."""
        return self._pending

    @property
    def card_task(self) -> asyncio.Task | None:
        return self._card_task

    def has_pending_choice(self) -> bool:
        return self._choice_future is not None and not self._choice_future.done()

    def submit_choice(self, choice: CardChoice) -> bool:
        """
        Resolve the pending card with a choice.

        Returns:
            False if no card is pending (nothing happens)

        Raises:
            ValueError if the choice is not on the pending card
            ChoiceLockedError if its conditions no longer hold; the card
            stays pending and nothing is mutated

        The card is resolved as soon as the effects are applied. An error
        raised by an on_choice_applied subscriber still propagates, but the
        card is no longer pending and cannot be applied again.
        """
        if not self.has_pending_choice() or self._pending is None:
            logger.debug("submit_choice ignored, no card pending")
            return False

        card = self._pending.card
        if choice not in card.choices:
            raise ValueError(f"'{choice.label}' is not a choice of card {card.id}")

        self.card_manager.apply_choice(card, choice, notify=False)
        self._choice_future.set_result(choice)
        self.card_manager.on_choice_applied.emit(card, choice)
        return True

    def submit_choice_index(self, index: int) -> bool:
        """Submit by position among all of the pending card's choices."""
        if self._pending is None:
            return False
        choices = self._pending.card.choices
        if not 0 <= index < len(choices):
            raise ValueError(f"Choice index {index} out of range (0..{len(choices) - 1})")
        return self.submit_choice(choices[index])

    def submit_choice_label(self, label: str) -> bool:
        if self._pending is None:
            return False
        choice = self._pending.card.get_choice(label)
        if choice is None:
            raise ValueError(f"Card {self._pending.card.id} has no choice '{label}'")
        return self.submit_choice(choice)

    def stop(self) -> None:
        """Detach from the scheduler and cancel any card in flight."""
        if self._state == LoopState.STOPPED:
            return
        self._state = LoopState.STOPPED
        self._unsubscribe()
        if self._card_task is not None and not self._card_task.done():
            self._card_task.cancel()

    def _on_turn_ended(self, turn: int) -> None:
        if turn % self.turns_per_card != 0 or self._state == LoopState.STOPPED:
            return
        if self._card_task is not None and not self._card_task.done():
            logger.warning("Turn %d ended while a card is still unresolved", turn)
            return

        # Paused before the draw task exists, so no turn can slip past it
        self.scheduler.pause()
        self._state = LoopState.DRAWING
        self._card_task = asyncio.get_running_loop().create_task(
            self._resolve_card(turn), name=f"card-turn-{turn}"
        )

    async def _resolve_card(self, turn: int) -> None:
        resolution = CardResolution(turn=turn, deck=None)
        try:
            result = await self.card_manager.draw_next()
            if result is None:
                resolution.deck = self.card_manager.current_deck
                resolution.skipped = True
                resolution.reason = "empty deck"
                logger.info("Turn %d: no card drawn from %s", turn, resolution.deck)
                return

            resolution.deck = result.deck
            resolution.card_id = result.card.id
            if not result.has_choices:
                resolution.skipped = True
                resolution.reason = "no available choices"
                logger.info("Turn %d: %s has no available choices, skipped", turn, result.card.id)
                return

            choice = await self._await_choice(result)
            if choice is None:
                resolution.skipped = True
                resolution.reason = "decision maker failed"
                return
            resolution.choice_label = choice.label
        finally:
            self._pending = None
            self._choice_future = None
            self.history.append(resolution)
            if self._state != LoopState.STOPPED:
                self._state = LoopState.RUNNING
            self.scheduler.resume()

    async def _await_choice(self, result: DrawResult) -> CardChoice | None:
        self._pending = result
        self._choice_future = asyncio.get_running_loop().create_future()
        self._state = LoopState.WAITING_CHOICE

        if self.decision_maker is not None:
            try:
                decision = self.decision_maker.select_choice(
                    result, self.card_manager.ledger, self.card_manager.registry
                )
                self.submit_choice(decision.choice)
            except Exception:
                if self._choice_future.done():
                    logger.exception("Choice applied on %s, but a subscriber failed", result.card.id)
                    return self._choice_future.result()
                logger.exception(
                    "Decision maker %s failed on %s, card skipped",
                    self.decision_maker.get_name(), result.card.id,
                )
                return None

        return await self._choice_future
