from __future__ import annotations

import time

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")
pytest.importorskip("PySide6.QtWidgets")

from quiz_night.ui.qt_ticker import QtTicker  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])


def _pump(until, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not until() and time.monotonic() < deadline:
        QtCore.QCoreApplication.processEvents()
        time.sleep(0.005)


def test_qt_ticker_ticks_until_stopped(qt_app) -> None:
    ticks: list[int] = []
    ticker = QtTicker(interval_seconds=0.01)

    ticker.start(lambda: ticks.append(1))
    assert ticker.is_running
    _pump(lambda: len(ticks) >= 2)
    ticker.stop()
    seen = len(ticks)
    _pump(lambda: False, timeout=0.05)

    assert seen >= 2
    assert len(ticks) == seen
    assert not ticker.is_running
