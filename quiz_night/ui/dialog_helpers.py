"""Helper functions for common dialog patterns in the host console."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def confirm_end_game(parent: QWidget, game_name: str) -> bool:
    """Ask before ending a running game for every player.

    Args:
        parent: Parent widget for the dialog
        game_name: Name of the game shown in the prompt

    Returns:
        True if the host confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "End Game",
        f"End '{game_name}' for all players?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def confirm_mark_wrong(parent: QWidget, player_name: str) -> bool:
    reply = QMessageBox.question(
        parent,
        "Buzzer",
        f"Mark {player_name}'s answer as wrong?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
