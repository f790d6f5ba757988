"""Tests for the automation keeper."""

from conftest import INTERVAL, addr
from solana_raffle.keeper import Keeper
from solana_raffle.raffle import RaffleState


class PolledCoordinator:
    """Coordinator that only exposes results through poll()."""

    def __init__(self) -> None:
        self.words = {}
        self.polled = []

    def request_random_words(self, request) -> int:
        return 11

    def poll(self, request_id):
        self.polled.append(request_id)
        return self.words.get(request_id)


class TestRunOnce:
    def test_noop_when_not_ready(self, raffle) -> None:
        raffle.enter(addr(1), 1)
        assert Keeper(raffle).run_once() is None
        assert raffle.state is RaffleState.OPEN

    def test_closes_when_ready(self, raffle, clock) -> None:
        raffle.enter(addr(1), 1)
        clock.advance(INTERVAL)
        request_id = Keeper(raffle).run_once()
        assert request_id == raffle.pending_request_id
        assert raffle.state is RaffleState.CALCULATING

    def test_second_tick_does_not_close_again(self, raffle, clock, coordinator) -> None:
        raffle.enter(addr(1), 1)
        clock.advance(INTERVAL)
        keeper = Keeper(raffle, coordinator)
        keeper.run_once()
        assert keeper.run_once() is None
        assert len(coordinator.requests) == 1

    def test_relays_polled_words(self, ledger, clock) -> None:
        from solana_raffle.raffle import Raffle

        coordinator = PolledCoordinator()
        raffle = Raffle(1, INTERVAL, coordinator, ledger, clock=clock)
        keeper = Keeper(raffle, coordinator)
        raffle.enter(addr(1), 1)
        raffle.enter(addr(2), 1)
        clock.advance(INTERVAL)
        assert keeper.run_once() == 11

        assert keeper.run_once() is None
        assert raffle.state is RaffleState.CALCULATING

        coordinator.words[11] = [3]
        keeper.run_once()
        assert raffle.state is RaffleState.OPEN
        assert raffle.recent_winner == addr(2)
        assert coordinator.polled == [11, 11]


class TestRun:
    def test_run_counts_closed_rounds(self, raffle, clock) -> None:
        sleeps = []
        raffle.enter(addr(1), 1)
        clock.advance(INTERVAL)
        keeper = Keeper(raffle, sleep=sleeps.append)
        assert keeper.run(poll_s=2.0, max_ticks=3) == 1
        assert sleeps == [2.0, 2.0]
