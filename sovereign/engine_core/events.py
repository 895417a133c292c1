"""
Event hooks - Explicit subscriber lists for engine notifications.
"""

from __future__ import annotations
from typing import Any, Callable


class EventHook:
    """
    An ordered list of handlers notified synchronously on emit().

    Handlers run in subscription order. An exception raised by a handler
    propagates to the emitter.

    Usage:
        on_turn_ended = EventHook("turn_ended")
        unsubscribe = on_turn_ended.subscribe(lambda turn: print(turn))
        on_turn_ended.emit(3)
        unsubscribe()
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: list[Callable[..., Any]] = []

    def subscribe(self, handler: Callable[..., Any]) -> Callable[[], None]:
        """Register a handler. Returns a function that removes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(handler)

        return unsubscribe

    def unsubscribe(self, handler: Callable[..., Any]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, *args: Any) -> None:
        for handler in list(self._handlers):
            handler(*args)

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)
