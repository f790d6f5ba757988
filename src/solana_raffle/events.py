"""
Raffle events for indexers and automation.

Each event is emitted exactly once per state transition that produced it.
Listeners are plain callables; a listener that raises is logged and
skipped so that observers can never alter raffle state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryRecorded:
    participant: str


@dataclass(frozen=True)
class RoundClosing:
    request_id: int


@dataclass(frozen=True)
class WinnerSelected:
    winner: str


RaffleEvent = Union[EntryRecorded, RoundClosing, WinnerSelected]
Listener = Callable[[RaffleEvent], None]


class EventBus:
    def __init__(self, history_limit: Optional[int] = 1000) -> None:
        self._listeners: List[Listener] = []
        self._history_limit = history_limit
        # newest `history_limit` events, all of them if None
        self.history: List[RaffleEvent] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: RaffleEvent) -> None:
        self.history.append(event)
        if self._history_limit is not None and len(self.history) > self._history_limit:
            del self.history[: -self._history_limit]
        log.debug("event %s", event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Listener %r failed on %s", listener, event)
