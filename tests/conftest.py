from __future__ import annotations

import pytest

from solana_raffle.addresses import address_from_bytes
from solana_raffle.custody import CustodyLedger
from solana_raffle.raffle import Raffle
from solana_raffle.randomness import LocalCoordinator

ENTRANCE_FEE = 1
INTERVAL = 10.0


def addr(tag: int) -> str:
    """Deterministic valid participant address."""
    return address_from_bytes(bytes([tag]) * 32)


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingTransfer:
    def __init__(self) -> None:
        self.calls = []

    def transfer(self, to: str, amount: int) -> bool:
        self.calls.append((to, amount))
        return False


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def ledger() -> CustodyLedger:
    return CustodyLedger()


@pytest.fixture
def coordinator() -> LocalCoordinator:
    return LocalCoordinator()


@pytest.fixture
def raffle(clock, ledger, coordinator) -> Raffle:
    r = Raffle(
        entrance_fee=ENTRANCE_FEE,
        interval=INTERVAL,
        coordinator=coordinator,
        custody=ledger,
        clock=clock,
    )
    coordinator.bind(r.fulfill_random_words)
    return r
