"""Runtime services: telemetry and timers."""

from .debounce import Debouncer, PendingCall

__all__ = ["Debouncer", "PendingCall"]
