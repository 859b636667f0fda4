"""Thread-based tick source for quiz runs hosted by the API server."""

from __future__ import annotations

from threading import Lock, Timer
from typing import Callable

from quiz_night.constants.quiz_constants import TIMER_TICK_INTERVAL_SECONDS


class ThreadingTicker:
    """Calls ``on_tick`` every interval on a daemon timer thread until stopped.

    Each ``start`` bumps a generation counter; a timer that fires for an older
    generation does nothing, so a stop racing an in-flight tick cannot revive
    the countdown.
    """

    def __init__(self, interval_seconds: float = TIMER_TICK_INTERVAL_SECONDS) -> None:
        if interval_seconds <= 0:
            raise ValueError("Tick interval must be positive.")
        self._interval = interval_seconds
        self._lock = Lock()
        self._generation = 0
        self._timer: Timer | None = None
        self._callback: Callable[[], None] | None = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._callback is not None

    def start(self, on_tick: Callable[[], None]) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            self._callback = on_tick
            self._schedule_locked(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            self._callback = None

    def _schedule_locked(self, generation: int) -> None:
        timer = Timer(self._interval, self._fire, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._callback is None:
                return
            callback = self._callback
        callback()
        with self._lock:
            if generation == self._generation and self._callback is not None:
                self._schedule_locked(generation)
