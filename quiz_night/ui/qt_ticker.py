"""QTimer-backed tick source so quiz countdowns run on the GUI thread."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer

from quiz_night.constants.quiz_constants import TIMER_TICK_INTERVAL_SECONDS


class QtTicker(QObject):
    """Calls ``on_tick`` from the Qt event loop until stopped."""

    def __init__(
        self,
        parent: QObject | None = None,
        interval_seconds: float = TIMER_TICK_INTERVAL_SECONDS,
    ) -> None:
        super().__init__(parent)
        self._callback: Callable[[], None] | None = None
        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_seconds * 1000))
        self._timer.timeout.connect(self._handle_timeout)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self, on_tick: Callable[[], None]) -> None:
        self._callback = on_tick
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _handle_timeout(self) -> None:
        if self._callback is not None:
            self._callback()
