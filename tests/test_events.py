"""Tests for the raffle event bus."""

from solana_raffle.events import EntryRecorded, EventBus, RoundClosing, WinnerSelected


class TestEventBus:
    def test_listeners_receive_events_in_order(self) -> None:
        bus = EventBus()
        got = []
        bus.subscribe(got.append)
        bus.emit(EntryRecorded("a"))
        bus.emit(RoundClosing(1))
        bus.emit(WinnerSelected("a"))
        assert got == [EntryRecorded("a"), RoundClosing(1), WinnerSelected("a")]
        assert bus.history == got

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        got = []
        unsubscribe = bus.subscribe(got.append)
        unsubscribe()
        unsubscribe()
        bus.emit(RoundClosing(2))
        assert got == []

    def test_failing_listener_does_not_block_others(self, caplog) -> None:
        bus = EventBus()
        got = []

        def broken(event):
            raise RuntimeError("indexer down")

        bus.subscribe(broken)
        bus.subscribe(got.append)
        bus.emit(WinnerSelected("b"))
        assert got == [WinnerSelected("b")]
        assert "indexer down" in caplog.text

    def test_raffle_listener_sees_lifecycle(self, raffle, clock) -> None:
        from conftest import addr

        got = []
        raffle.events.subscribe(got.append)
        raffle.enter(addr(9), 1)
        clock.advance(11)
        request_id = raffle.perform_upkeep()
        raffle.fulfill_random_words(request_id, [3])
        assert [type(e).__name__ for e in got] == ["EntryRecorded", "RoundClosing", "WinnerSelected"]


class TestHistoryLimit:
    def test_history_keeps_newest(self) -> None:
        bus = EventBus(history_limit=2)
        got = []
        bus.subscribe(got.append)
        for n in range(1, 4):
            bus.emit(RoundClosing(n))
        assert bus.history == [RoundClosing(2), RoundClosing(3)]
        assert len(got) == 3
