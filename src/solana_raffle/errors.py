"""
Raffle errors.

Every rejected call raises one of these and leaves the raffle untouched.
Callers can catch `RaffleError` for everything, or the concrete classes:

- admission: InsufficientFee, RoundNotOpen, InvalidParticipant
- automation: UpkeepNotNeeded (carries pot / entrants / state)
- protocol: UnknownOrStaleRequest (forged, replayed or late callback)
- fatal to the operation: PayoutFailed, RandomnessRequestFailed
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class RaffleError(Exception):
    """Base class for all raffle errors."""


class ConfigError(RaffleError):
    """Invalid or missing configuration value."""


class RpcError(RaffleError):
    """The coordinator answered with a JSON-RPC error object."""

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(f"RPC error: {error}")


@dataclass(frozen=True)
class InsufficientFee(RaffleError):
    amount: int
    entrance_fee: int

    def __str__(self) -> str:
        return f"InsufficientFee: sent {self.amount}, entrance fee is {self.entrance_fee}"


@dataclass(frozen=True)
class RoundNotOpen(RaffleError):
    state: str

    def __str__(self) -> str:
        return f"RoundNotOpen: raffle is {self.state}"


@dataclass(frozen=True)
class InvalidParticipant(RaffleError):
    address: str

    def __str__(self) -> str:
        return f"InvalidParticipant: {self.address!r} is not a base58 public key"


@dataclass(frozen=True)
class UpkeepNotNeeded(RaffleError):
    """
    Raised by perform_upkeep when the round cannot close yet.

    Attributes:
        pot: Lamports currently held by the raffle account.
        num_entrants: Entries recorded in the current round.
        state: Raffle state name at the time of the call.
    """
    pot: int
    num_entrants: int
    state: str

    def __str__(self) -> str:
        return (
            f"UpkeepNotNeeded: pot={self.pot} entrants={self.num_entrants} "
            f"state={self.state}"
        )


@dataclass(frozen=True)
class UnknownOrStaleRequest(RaffleError):
    request_id: int
    pending_request_id: Optional[int]

    def __str__(self) -> str:
        return (
            f"UnknownOrStaleRequest: got request {self.request_id}, "
            f"pending is {self.pending_request_id}"
        )


@dataclass(frozen=True)
class PayoutFailed(RaffleError):
    winner: str
    amount: int

    def __str__(self) -> str:
        return f"PayoutFailed: could not send {self.amount} to {self.winner}"


class RandomnessRequestFailed(RaffleError):
    """The coordinator refused or failed to register a request."""
