"""Round timers.

Scheduled work runs as Socket.IO background tasks, so the same code works
under eventlet green threads and plain OS threads. A handle is only a
cancellation flag: callbacks must still re-check room state when they fire.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self, label: str = "") -> None:
        self.label = label
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any], label: str = "") -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], Any], label: str = "") -> TimerHandle: ...


def _run_callback(handle: TimerHandle, callback: Callable[[], Any]) -> None:
    try:
        callback()
    except Exception:
        logger.exception("[timer-error] label=%s", handle.label)


class SocketIOScheduler:
    """Scheduler backed by ``socketio.start_background_task``/``socketio.sleep``."""

    def __init__(self, socketio, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._socketio = socketio
        self._monotonic = monotonic

    def call_later(self, delay: float, callback: Callable[[], Any], label: str = "") -> TimerHandle:
        handle = TimerHandle(label)

        def _runner() -> None:
            self._socketio.sleep(delay)
            if handle.cancelled:
                return
            _run_callback(handle, callback)

        self._socketio.start_background_task(_runner)
        return handle

    def call_every(self, interval: float, callback: Callable[[], Any], label: str = "") -> TimerHandle:
        handle = TimerHandle(label)

        def _runner() -> None:
            # Ticks stay on a fixed grid from the start, however long callbacks take.
            start = self._monotonic()
            ticks = 0
            while True:
                ticks += 1
                self._socketio.sleep(max(0.0, start + ticks * interval - self._monotonic()))
                if handle.cancelled:
                    return
                _run_callback(handle, callback)

        self._socketio.start_background_task(_runner)
        return handle


class RoundTimers:
    """The timer handles owned by one room for its current round."""

    def __init__(self) -> None:
        self.reveal: TimerHandle | None = None
        self.countdown: TimerHandle | None = None
        self.timeout: TimerHandle | None = None
        self.advance: TimerHandle | None = None

    def handles(self) -> list[TimerHandle]:
        return [h for h in (self.reveal, self.countdown, self.timeout, self.advance) if h is not None]

    def cancel_all(self) -> None:
        for h in self.handles():
            h.cancel()
        self.reveal = None
        self.countdown = None
        self.timeout = None
        self.advance = None

    def __repr__(self) -> str:
        return f"RoundTimers(active={len(self.handles())})"
