"""
Automation keeper.

Polls the raffle, closes the round when upkeep is due and, for coordinators
that are polled rather than pushing callbacks, relays fulfilled words back
into the raffle. The keeper is untrusted: calling early or twice only earns
an UpkeepNotNeeded, which is logged and ignored.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .errors import RaffleError, UpkeepNotNeeded
from .raffle import Raffle, RaffleState
from .randomness import RandomnessCoordinator

log = logging.getLogger(__name__)


class Keeper:
    def __init__(
        self,
        raffle: Raffle,
        coordinator: Optional[RandomnessCoordinator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.raffle = raffle
        self.coordinator = coordinator
        self._sleep = sleep

    def run_once(self) -> Optional[int]:
        """One tick. Returns the request id if this tick closed the round."""
        if self.raffle.state is RaffleState.CALCULATING:
            self._relay()
            return None

        if not self.raffle.check_upkeep():
            return None
        try:
            return self.raffle.perform_upkeep()
        except UpkeepNotNeeded as e:
            # Another caller closed the round between check and perform.
            log.warning("Upkeep rejected: %s", e)
            return None

    def _relay(self) -> None:
        poll = getattr(self.coordinator, "poll", None)
        request_id = self.raffle.pending_request_id
        if poll is None or request_id is None:
            return
        words = poll(request_id)
        if words is None:
            log.debug("Request %s not fulfilled yet", request_id)
            return
        try:
            self.raffle.fulfill_random_words(request_id, words)
        except RaffleError as e:
            log.warning("Relaying words for request %s failed: %s", request_id, e)

    def run(self, poll_s: float = 5.0, max_ticks: Optional[int] = None) -> int:
        """Ticks until `max_ticks` is reached (forever if None). Returns rounds closed."""
        closed = 0
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if self.run_once() is not None:
                closed += 1
            ticks += 1
            if max_ticks is None or ticks < max_ticks:
                self._sleep(poll_s)
        return closed
