"""
Turn Scheduler - The ticking loop that advances the game.

States:
    IDLE -> RUNNING <-> PAUSED
    any  -> STOPPED (terminal)

Each turn:
1. Increment the turn counter
2. Notify on_turn_started(turn)
3. Every capital produces into its resource
4. Notify on_turn_ended(turn)
5. Wait tick_interval_ms

The loop runs as a single asyncio task and only suspends at two points:
the inter-turn wait and the pause wait. While paused nothing happens,
no counter increment and no notifications. stop() wakes either wait.

pause(), resume() and stop() are plain methods and must be called from
the event loop that runs the scheduler.
"""

from __future__ import annotations
import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..engine_core.events import EventHook
from ..errors import SchedulerStateError

if TYPE_CHECKING:
    from ..engine_core.capitals import CapitalRegistry
    from ..engine_core.resources import ResourceLedger

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """State of the turn scheduler."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TurnScheduler:
    """
    Drives turns for one game.

    Usage:
        scheduler = TurnScheduler(ledger, registry)
        scheduler.on_turn_ended.subscribe(lambda turn: print(turn))
        task = scheduler.start(tick_interval_ms=1000)
        ...
        scheduler.stop()
        await task
    """

    def __init__(self, ledger: ResourceLedger, registry: CapitalRegistry):
        self.ledger = ledger
        self.registry = registry
        self.on_turn_started = EventHook("turn_started")
        self.on_turn_ended = EventHook("turn_ended")

        self._current_turn = 0
        self._started = False
        self._stopped = False
        self._paused = False
        self._task: asyncio.Task | None = None

        # Set while not paused; stop() sets it too so a paused loop can exit
        self._resume_signal = asyncio.Event()
        self._resume_signal.set()
        self._stop_signal = asyncio.Event()

    @property
    def current_turn(self) -> int:
        return self._current_turn

    @property
    def state(self) -> SchedulerState:
        if self._stopped:
            return SchedulerState.STOPPED
        if not self._started:
            return SchedulerState.IDLE
        if self._paused:
            return SchedulerState.PAUSED
        return SchedulerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self, tick_interval_ms: int = 1000) -> asyncio.Task:
        """
        Start the turn loop on the running event loop.

        Raises SchedulerStateError if already started or stopped. A stopped
        scheduler cannot be restarted; create a new one.
        """
        self._mark_started(tick_interval_ms)
        self._task = asyncio.get_running_loop().create_task(
            self._loop(tick_interval_ms), name="turn-scheduler"
        )
        return self._task

    async def run(self, tick_interval_ms: int = 1000) -> None:
        """Run the turn loop in the current task until stopped."""
        self._mark_started(tick_interval_ms)
        await self._loop(tick_interval_ms)

    def pause(self) -> None:
        if self._paused or self._stopped:
            return
        self._paused = True
        self._resume_signal.clear()
        logger.debug("Scheduler paused at turn %d", self._current_turn)

    def resume(self) -> None:
        if not self._paused or self._stopped:
            return
        self._paused = False
        self._resume_signal.set()
        logger.debug("Scheduler resumed at turn %d", self._current_turn)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._stop_signal.set()
        self._resume_signal.set()
        logger.debug("Scheduler stopped at turn %d", self._current_turn)

    def _mark_started(self, tick_interval_ms: int) -> None:
        if self._stopped:
            raise SchedulerStateError("Scheduler is stopped; create a new one")
        if self._started:
            raise SchedulerStateError("Scheduler is already running")
        if tick_interval_ms < 0:
            raise ValueError("tick_interval_ms must be >= 0")
        self._started = True

    async def _loop(self, tick_interval_ms: int) -> None:
        logger.info("Turn loop started (tick %d ms)", tick_interval_ms)
        try:
            while not self._stopped:
                if self._paused:
                    await self._resume_signal.wait()
                    continue

                self._advance()
                await self._wait_tick(tick_interval_ms / 1000.0)
        finally:
            self._stopped = True
            logger.info("Turn loop exited after turn %d", self._current_turn)

    def _advance(self) -> None:
        """Run one turn: notify start, produce, notify end."""
        self._current_turn += 1
        turn = self._current_turn
        self.on_turn_started.emit(turn)
        if self._stopped:
            return

        for capital in self.registry.get_all():
            produced = capital.produce()
            resource = self.ledger.get_by_type(capital.resource_kind)
            if resource is not None:
                resource.add(produced)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Turn %d resources=%s capitals=%s",
                turn,
                self.ledger.snapshot(),
                {c.name: c.health for c in self.registry.get_all()},
            )

        self.on_turn_ended.emit(turn)

    async def _wait_tick(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._stop_signal.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
