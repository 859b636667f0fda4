"""Qt UI components for the quiz host console."""

from .dialog_helpers import (
    confirm_end_game,
    confirm_mark_wrong,
    show_error,
    show_info,
    show_warning,
)
from .host_main_window import HostMainWindow
from .qt_ticker import QtTicker

__all__ = [
    "HostMainWindow",
    "QtTicker",
    "confirm_end_game",
    "confirm_mark_wrong",
    "show_error",
    "show_info",
    "show_warning",
]
