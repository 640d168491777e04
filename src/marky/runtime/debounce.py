"""Trailing-edge debounce timer driven by the host event loop."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from . import telemetry


@dataclass
class PendingCall:
    deadline: float
    delay_ms: int
    generation: int
    callback: Callable[[], None]


class Debouncer:
    """Single-slot, cancel-and-reschedule timer.

    Hosts poll :meth:`process_timeouts` from their event loop (the Textual
    adapter uses ``set_interval``). Scheduling while a call is pending discards
    the pending call; only the newest callback ever runs.
    """

    def __init__(
        self, *, name: str = "debounce", clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.name = name
        self._clock = clock
        self._pending: Optional[PendingCall] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, callback: Callable[[], None], delay_ms: int) -> int:
        if delay_ms < 0:
            raise ValueError("delay_ms must not be negative")
        self._generation += 1
        self._pending = PendingCall(
            deadline=self._clock() + delay_ms / 1000.0,
            delay_ms=delay_ms,
            generation=self._generation,
            callback=callback,
        )
        return self._generation

    def cancel(self) -> bool:
        cancelled = self._pending is not None
        self._pending = None
        return cancelled

    def process_timeouts(self) -> bool:
        """Run the pending callback if its deadline passed. Returns ``True`` if it ran."""

        pending = self._pending
        if pending is None or pending.deadline > self._clock():
            return False
        return self._fire(pending.generation)

    def flush(self) -> bool:
        """Run the pending callback now, regardless of its deadline."""

        if self._pending is None:
            return False
        return self._fire(self._pending.generation)

    def _fire(self, generation: int) -> bool:
        pending = self._pending
        if pending is None or pending.generation != generation:
            return False
        self._pending = None
        with telemetry.span(
            name=f"{self.name}::fire",
            component="runtime",
            metadata={"delay_ms": pending.delay_ms, "generation": generation},
        ):
            pending.callback()
        return True


__all__ = ["Debouncer", "PendingCall"]
