"""
Recurring raffle: round manager and fulfillment handler.

Lifecycle:
    OPEN --perform_upkeep--> CALCULATING --fulfill_random_words--> OPEN

perform_upkeep() only registers a randomness request; the words arrive
later through fulfill_random_words(), which must name the pending request.
Every public method runs under one re-entrant lock, so calls against a
Raffle are totally ordered. Calls made from inside the payout (the
transfer collaborator calling back in) see the round already reset and
cannot enter or close until the payout has returned.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from .addresses import is_valid_address
from .custody import CustodyLedger, ValueTransfer
from .draw import select_winner
from .errors import (
    InsufficientFee,
    InvalidParticipant,
    PayoutFailed,
    RandomnessRequestFailed,
    RoundNotOpen,
    UnknownOrStaleRequest,
    UpkeepNotNeeded,
)
from .events import EntryRecorded, EventBus, RoundClosing, WinnerSelected
from .randomness import RandomnessCoordinator, RandomnessRequest

if TYPE_CHECKING:
    from .config import Settings

log = logging.getLogger(__name__)


class RaffleState(str, Enum):
    OPEN = "OPEN"
    CALCULATING = "CALCULATING"


@dataclass(frozen=True)
class UpkeepStatus:
    ready: bool
    pot: int
    num_entrants: int
    state: RaffleState
    elapsed: float


@dataclass(frozen=True)
class RoundResult:
    """One paid-out round, kept for audits."""
    round_number: int
    request_id: int
    random_word: int
    winner_index: int
    winner: str
    prize: int
    entrants: Tuple[str, ...]
    settled_at: float


class Raffle:
    def __init__(
        self,
        entrance_fee: int,
        interval: float,
        coordinator: RandomnessCoordinator,
        custody: CustodyLedger,
        payout: Optional[ValueTransfer] = None,
        request: Optional[RandomnessRequest] = None,
        events: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
        history_limit: Optional[int] = 1000,
    ) -> None:
        if entrance_fee <= 0:
            raise ValueError("Entrance fee must be positive")
        if interval < 0:
            raise ValueError("Interval must be non-negative")

        self._entrance_fee = int(entrance_fee)
        self._interval = float(interval)
        self._coordinator = coordinator
        self._custody = custody
        self._payout: ValueTransfer = payout if payout is not None else custody
        self._request = request or RandomnessRequest()
        self.events = events or EventBus()
        self._clock = clock
        self._lock = threading.RLock()

        self._state = RaffleState.OPEN
        self._entrants: List[str] = []
        self._pending_request_id: Optional[int] = None
        self._recent_winner: Optional[str] = None
        self._last_timestamp = clock()
        self._paying_out = False
        self._rounds_settled = 0
        self._history_limit = history_limit
        # newest `history_limit` rounds, all of them if None
        self.results: List[RoundResult] = []

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        coordinator: RandomnessCoordinator,
        custody: CustodyLedger,
        **kwargs,
    ) -> "Raffle":
        return cls(
            entrance_fee=settings.entrance_fee,
            interval=settings.interval_s,
            coordinator=coordinator,
            custody=custody,
            request=settings.randomness_request(),
            **kwargs,
        )

    # ---- read side -------------------------------------------------------

    @property
    def entrance_fee(self) -> int:
        return self._entrance_fee

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> RaffleState:
        return self._state

    @property
    def entrants(self) -> Tuple[str, ...]:
        return tuple(self._entrants)

    @property
    def num_entrants(self) -> int:
        return len(self._entrants)

    @property
    def pot(self) -> int:
        return self._custody.balance_of(self._custody.account)

    @property
    def pending_request_id(self) -> Optional[int]:
        return self._pending_request_id

    @property
    def recent_winner(self) -> Optional[str]:
        return self._recent_winner

    @property
    def last_timestamp(self) -> float:
        return self._last_timestamp

    def upkeep_status(self) -> UpkeepStatus:
        with self._lock:
            elapsed = self._clock() - self._last_timestamp
            pot = self.pot
            ready = (
                elapsed >= self._interval
                and self._state is RaffleState.OPEN
                and pot > 0
                and len(self._entrants) > 0
            )
            return UpkeepStatus(ready, pot, len(self._entrants), self._state, elapsed)

    def check_upkeep(self) -> bool:
        return self.upkeep_status().ready

    # ---- round manager ---------------------------------------------------

    def enter(self, participant: str, amount: int) -> None:
        """Buy one slot in the current round for `amount` lamports."""
        with self._lock:
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise TypeError(f"Amount must be whole lamports, got {amount!r}")
            if amount < self._entrance_fee:
                raise InsufficientFee(amount, self._entrance_fee)
            if self._state is not RaffleState.OPEN:
                raise RoundNotOpen(self._state.value)
            if self._paying_out:
                raise RoundNotOpen("PAYING_OUT")
            if not is_valid_address(participant):
                raise InvalidParticipant(participant)

            self._custody.fund(amount)
            self._entrants.append(participant)
            log.info("Entry #%d from %s (%d lamports)", len(self._entrants), participant, amount)
            self.events.emit(EntryRecorded(participant))

    def perform_upkeep(self) -> int:
        """Close the round and request randomness. Returns the request id."""
        with self._lock:
            status = self.upkeep_status()
            if not status.ready:
                raise UpkeepNotNeeded(status.pot, status.num_entrants, status.state.value)

            self._state = RaffleState.CALCULATING
            try:
                request_id = self._coordinator.request_random_words(self._request)
            except Exception as e:
                self._state = RaffleState.OPEN
                log.error("Randomness request failed, round stays open: %s", e)
                raise RandomnessRequestFailed(str(e)) from e

            self._pending_request_id = request_id
            log.info(
                "Round closed with %d entrants, pot %d; waiting on request %s",
                status.num_entrants, status.pot, request_id,
            )
            self.events.emit(RoundClosing(request_id))
            return request_id

    # ---- fulfillment handler ---------------------------------------------

    def fulfill_random_words(self, request_id: int, random_words: Sequence[int]) -> str:
        """
        Coordinator callback. Picks the winner, resets the round and pays out.

        State is reset before the transfer. WinnerSelected is built at that
        point but delivered only after the transfer succeeds, so a transfer
        collaborator calling back in sees the round already reset while no
        WinnerSelected has been delivered yet.

        If the transfer reports failure, or reports success without the pot
        leaving custody, every change is undone, WinnerSelected is never
        delivered, and the same request can be fulfilled again.
        """
        with self._lock:
            if self._state is not RaffleState.CALCULATING or request_id != self._pending_request_id:
                log.warning(
                    "Rejected callback for request %s (pending: %s, state: %s)",
                    request_id, self._pending_request_id, self._state.value,
                )
                raise UnknownOrStaleRequest(request_id, self._pending_request_id)
            if not random_words:
                raise ValueError(f"Request {request_id}: callback carried no random words")

            word = int(random_words[0])
            index, winner = select_winner(self._entrants, word)
            prize = self.pot
            saved = (
                self._recent_winner,
                self._state,
                self._entrants,
                self._pending_request_id,
                self._last_timestamp,
            )

            self._recent_winner = winner
            self._state = RaffleState.OPEN
            self._entrants = []
            self._pending_request_id = None
            self._last_timestamp = self._clock()
            selected = WinnerSelected(winner)

            self._paying_out = True
            try:
                paid = self._payout.transfer(winner, prize)
            except Exception:
                self._restore(saved)
                raise
            finally:
                self._paying_out = False

            # custody must have released exactly the whole pot
            if paid and self.pot != 0:
                log.error(
                    "Payout rail reported success but custody still holds %d of %d",
                    self.pot, prize,
                )
                paid = False
            if not paid:
                self._restore(saved)
                log.error("Payout of %d to %s failed; round rolled back", prize, winner)
                raise PayoutFailed(winner, prize)

            self.results.append(
                RoundResult(
                    round_number=self._rounds_settled + 1,
                    request_id=request_id,
                    random_word=word,
                    winner_index=index,
                    winner=winner,
                    prize=prize,
                    entrants=tuple(saved[2]),
                    settled_at=self._last_timestamp,
                )
            )
            self._rounds_settled += 1
            if self._history_limit is not None and len(self.results) > self._history_limit:
                del self.results[: -self._history_limit]
            log.info("Winner of request %s: %s (slot %d), paid %d", request_id, winner, index, prize)
            self.events.emit(selected)
            return winner

    def _restore(self, saved: tuple) -> None:
        (
            self._recent_winner,
            self._state,
            self._entrants,
            self._pending_request_id,
            self._last_timestamp,
        ) = saved
