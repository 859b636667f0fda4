"""Qt main window with the host and practice tabs."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QMainWindow,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_night.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from quiz_night.constants.ui_constants import (
    PLAYER_URL_PLACEHOLDER,
    TAB_HOST,
    TAB_PRACTICE,
    WINDOW_TITLE,
)
from quiz_night.core.quiz_importer import QuizImportError
from quiz_night.core.quiz_manager import QuizManager
from quiz_night.ui.components.host_panel import HostPanel
from quiz_night.ui.components.practice_panel import PracticePanel
from quiz_night.ui.dialog_helpers import show_error, show_info

_TEXT_FILE_FILTER = "Quiz text files (*.txt);;All files (*)"


class HostMainWindow(QMainWindow):
    """Main Qt window for the quiz host."""

    def __init__(self, quiz_manager: QuizManager, host_id: str, player_url: str | None = None) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.quiz_manager = quiz_manager
        self.player_url = player_url or PLAYER_URL_PLACEHOLDER
        self._last_export_path: Path | None = None

        self._build_ui(host_id)

    def _build_ui(self, host_id: str) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_toolbar_buttons(root_layout)

        self.tabs = QTabWidget(self)
        self.host_panel = HostPanel(self.quiz_manager, host_id, self.player_url, self)
        self.practice_panel = PracticePanel(self.quiz_manager, self)
        self.tabs.addTab(self.host_panel, TAB_HOST)
        self.tabs.addTab(self.practice_panel, TAB_PRACTICE)
        root_layout.addWidget(self.tabs)

    def _build_toolbar_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.import_button = QPushButton("Import Questions", self)
        self.import_button.clicked.connect(self._handle_import)
        button_row.addWidget(self.import_button)

        self.export_button = QPushButton("Export Questions", self)
        self.export_button.clicked.connect(self._handle_export)
        button_row.addWidget(self.export_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _handle_import(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Import questions", str(Path.home()), _TEXT_FILE_FILTER)
        if not file_path:
            return
        try:
            created = self.quiz_manager.import_questions_from_file(Path(file_path))
        except (OSError, QuizImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return
        show_info(self, "Questions imported", f"Added {len(created)} questions to the bank.")

    def _handle_export(self) -> None:
        default_path = self._last_export_path or (Path.cwd() / "quiz_questions.txt")
        file_path, _ = QFileDialog.getSaveFileName(self, "Export questions", str(default_path), _TEXT_FILE_FILTER)
        if not file_path:
            return
        try:
            count = self.quiz_manager.export_questions_to_file(Path(file_path))
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return
        self._last_export_path = Path(file_path)
        show_info(self, "Questions exported", f"Exported {count} questions to {file_path}.")

    def _handle_about(self) -> None:
        details = f"{APP_NAME} v{APP_VERSION}\nLicense: {APP_LICENSE}\n\n{APP_ABOUT_TEXT}"
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.host_panel.release()
        self.practice_panel.release()
        super().closeEvent(event)
