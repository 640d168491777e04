from __future__ import annotations

from typing import List

import pytest

from marky.runtime import Debouncer


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


def make_debouncer() -> tuple[Debouncer, FakeClock]:
    clock = FakeClock()
    return Debouncer(name="test", clock=clock), clock


def test_callback_runs_after_quiet_period() -> None:
    debouncer, clock = make_debouncer()
    calls: List[str] = []
    debouncer.schedule(lambda: calls.append("x"), 1000)

    clock.advance(999)
    assert not debouncer.process_timeouts()
    clock.advance(1)
    assert debouncer.process_timeouts()

    assert calls == ["x"]
    assert not debouncer.pending


def test_rescheduling_discards_pending_call() -> None:
    debouncer, clock = make_debouncer()
    calls: List[int] = []
    for index in range(10):
        debouncer.schedule(lambda index=index: calls.append(index), 1000)
        clock.advance(100)

    clock.advance(1000)
    debouncer.process_timeouts()
    debouncer.process_timeouts()

    assert calls == [9]


def test_shorter_delay_replaces_longer_one() -> None:
    debouncer, clock = make_debouncer()
    calls: List[str] = []
    debouncer.schedule(lambda: calls.append("content"), 1000)
    debouncer.schedule(lambda: calls.append("format"), 100)

    clock.advance(100)
    debouncer.process_timeouts()

    assert calls == ["format"]


def test_cancel_and_flush() -> None:
    debouncer, _ = make_debouncer()
    calls: List[str] = []

    debouncer.schedule(lambda: calls.append("a"), 500)
    assert debouncer.cancel()
    assert not debouncer.flush()

    debouncer.schedule(lambda: calls.append("b"), 500)
    assert debouncer.flush()
    assert calls == ["b"]


def test_generations_increase() -> None:
    debouncer, _ = make_debouncer()

    first = debouncer.schedule(lambda: None, 10)
    second = debouncer.schedule(lambda: None, 10)

    assert second == first + 1


def test_negative_delay_rejected() -> None:
    debouncer, _ = make_debouncer()

    with pytest.raises(ValueError):
        debouncer.schedule(lambda: None, -1)
