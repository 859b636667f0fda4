"""Component for hosting a live game from the console."""

from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from quiz_night.constants.ui_constants import (
    DEFAULT_GAME_NAME,
    GAME_NAME_PLACEHOLDER,
    HOST_CREATE_BUTTON,
    HOST_END_BUTTON,
    HOST_NEXT_BUTTON,
    HOST_NO_SESSION,
    HOST_PLAYERS_TEMPLATE,
    HOST_RESULTS_BUTTON,
    HOST_START_BUTTON,
    HOST_WRONG_BUTTON,
    NO_QUESTIONS_MESSAGE,
    SESSION_REFRESH_INTERVAL_MS,
)
from quiz_night.core.markdown_renderer import renderer
from quiz_night.core.models import SessionState
from quiz_night.core.quiz_manager import QuizManager
from quiz_night.core.services.game_state import GameStateSnapshot, GameStateSync
from quiz_night.ui.dialog_helpers import confirm_end_game, confirm_mark_wrong, show_error, show_warning


class HostPanel(QWidget):
    """Creates a game, shows its mirrored state and issues host commands."""

    def __init__(
        self,
        quiz_manager: QuizManager,
        host_id: str,
        player_url: str,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.host_id = host_id
        self.player_url = player_url
        self._sync: GameStateSync | None = None

        self._build_ui()
        self._configure_refresh_timer()
        self._render(None)

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        create_row = QHBoxLayout()
        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText(GAME_NAME_PLACEHOLDER)
        self.name_input.setText(DEFAULT_GAME_NAME)
        create_row.addWidget(self.name_input, stretch=1)
        self.create_button = QPushButton(HOST_CREATE_BUTTON, self)
        self.create_button.clicked.connect(self._handle_create)
        create_row.addWidget(self.create_button)
        layout.addLayout(create_row)

        self.network_label = QLabel(f"Players connect to: {self.player_url}", self)
        self.network_label.setWordWrap(True)
        self.network_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(self.network_label)

        self.status_label = QLabel(HOST_NO_SESSION, self)
        self.status_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(self.status_label)

        self.question_view = QTextBrowser(self)
        layout.addWidget(self.question_view, stretch=2)

        self.answer_label = QLabel("", self)
        layout.addWidget(self.answer_label)

        lists_row = QHBoxLayout()
        players_group = QGroupBox(HOST_PLAYERS_TEMPLATE.format(count=0), self)
        self.players_group = players_group
        players_layout = QVBoxLayout()
        players_group.setLayout(players_layout)
        self.player_list = QListWidget(self)
        self.player_list.setAlternatingRowColors(True)
        players_layout.addWidget(self.player_list)
        lists_row.addWidget(players_group, stretch=1)

        answers_group = QGroupBox("Answers", self)
        answers_layout = QVBoxLayout()
        answers_group.setLayout(answers_layout)
        self.answer_list = QListWidget(self)
        answers_layout.addWidget(self.answer_list)
        lists_row.addWidget(answers_group, stretch=1)
        layout.addLayout(lists_row, stretch=2)

        command_row = QHBoxLayout()
        self.start_button = QPushButton(HOST_START_BUTTON, self)
        self.start_button.clicked.connect(lambda: self._run_command(GameStateSync.start_game))
        self.next_button = QPushButton(HOST_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._run_command(GameStateSync.next_question))
        self.results_button = QPushButton(HOST_RESULTS_BUTTON, self)
        self.results_button.clicked.connect(lambda: self._run_command(GameStateSync.show_results))
        self.wrong_button = QPushButton(HOST_WRONG_BUTTON, self)
        self.wrong_button.clicked.connect(self._handle_mark_wrong)
        self.end_button = QPushButton(HOST_END_BUTTON, self)
        self.end_button.clicked.connect(self._handle_end)
        for button in (
            self.start_button,
            self.next_button,
            self.results_button,
            self.wrong_button,
            self.end_button,
        ):
            command_row.addWidget(button)
        layout.addLayout(command_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(SESSION_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self.refresh)
        self.refresh_timer.start()

    def refresh(self) -> None:
        self._render(self._sync.snapshot() if self._sync is not None else None)

    def release(self) -> None:
        self.refresh_timer.stop()
        if self._sync is not None:
            self.quiz_manager.release_game_state(self._sync.game_id)
            self._sync = None

    def _handle_create(self) -> None:
        if self._sync is not None:
            snapshot = self._sync.snapshot()
            if snapshot.session is not None and snapshot.session.state is not SessionState.ENDED:
                show_warning(self, "Game running", "End the current game before creating a new one.")
                return
            self.quiz_manager.release_game_state(self._sync.game_id)
            self._sync = None

        try:
            session = self.quiz_manager.create_game(self.name_input.text() or DEFAULT_GAME_NAME, self.host_id)
        except ValueError:
            show_warning(self, "No questions", NO_QUESTIONS_MESSAGE)
            return
        self._sync = self.quiz_manager.game_state(session.id)
        self.refresh()

    def _run_command(self, command) -> None:
        if self._sync is None:
            return
        previous_error = self._sync.error
        if not command(self._sync) and self._sync.error is not previous_error:
            show_error(self, "Host command failed", str(self._sync.error))
        self.refresh()

    def _handle_mark_wrong(self) -> None:
        item = self.player_list.currentItem()
        if self._sync is None or item is None:
            return
        player_id = item.data(Qt.UserRole)
        if confirm_mark_wrong(self, item.data(Qt.UserRole + 1)):
            self._run_command(lambda sync: sync.mark_player_wrong(player_id))

    def _handle_end(self) -> None:
        if self._sync is None or self._sync.session is None:
            return
        if confirm_end_game(self, self._sync.session.name):
            self._run_command(GameStateSync.end_game)

    def _render(self, snapshot: GameStateSnapshot | None) -> None:
        session = snapshot.session if snapshot is not None else None
        state = session.state if session is not None else None
        self.start_button.setEnabled(state is SessionState.WAITING)
        self.next_button.setEnabled(state in (SessionState.QUESTION, SessionState.RESULT))
        self.results_button.setEnabled(state is SessionState.QUESTION)
        self.wrong_button.setEnabled(state in (SessionState.QUESTION, SessionState.RESULT))
        self.end_button.setEnabled(state is not None and state is not SessionState.ENDED)

        if snapshot is None or session is None:
            self.status_label.setText(HOST_NO_SESSION if snapshot is None else "Loading game…")
            self.question_view.clear()
            self.answer_label.clear()
            self.player_list.clear()
            self.answer_list.clear()
            self.players_group.setTitle(HOST_PLAYERS_TEMPLATE.format(count=0))
            return

        position = ""
        if session.current_question_index is not None:
            position = f" | question {session.current_question_index + 1} of {len(session.questions)}"
        self.status_label.setText(f"{session.name} ({session.id}) | {session.state.value}{position}")

        question = snapshot.current_question
        if question is None:
            self.question_view.clear()
            self.answer_label.clear()
        else:
            self.question_view.setHtml(renderer.render_fragment(question.prompt))
            self.answer_label.setText(f"Answer: {question.correct_answer}")

        self._render_players(snapshot)
        names = {player.id: player.name for player in snapshot.players}
        self.answer_list.clear()
        for answer in snapshot.answers:
            mark = "✓" if answer.is_correct else "✗"
            self.answer_list.addItem(f"{mark} {names.get(answer.player_id, '?')}: {answer.answer}")

    def _render_players(self, snapshot: GameStateSnapshot) -> None:
        selected = self.player_list.currentItem()
        selected_id = selected.data(Qt.UserRole) if selected is not None else None
        self.player_list.clear()
        ranked = sorted(snapshot.players, key=lambda p: (-p.score, p.name.casefold()))
        for player in ranked:
            item = QListWidgetItem(f"{player.name} | {player.score}")
            item.setData(Qt.UserRole, player.id)
            item.setData(Qt.UserRole + 1, player.name)
            self.player_list.addItem(item)
            if player.id == selected_id:
                self.player_list.setCurrentItem(item)
        self.players_group.setTitle(HOST_PLAYERS_TEMPLATE.format(count=len(ranked)))
