"""Component for playing the question bank locally against the clock."""

from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QProgressBar,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from quiz_night.constants.ui_constants import (
    NO_QUESTIONS_MESSAGE,
    PRACTICE_ANSWER_PLACEHOLDER,
    PRACTICE_KIND_ALL,
    PRACTICE_NEW_BUTTON,
    PRACTICE_NEXT_BUTTON,
    PRACTICE_REFRESH_INTERVAL_MS,
    PRACTICE_RESET_BUTTON,
    PRACTICE_REVEAL_BUTTON,
    PRACTICE_SCORING_CHECKBOX,
    PRACTICE_START_BUTTON,
    PRACTICE_SUBMIT_BUTTON,
    PRACTICE_TIMED_CHECKBOX,
    QUIZ_COMPLETE_TEMPLATE,
)
from quiz_night.constants.quiz_constants import DEFAULT_TIME_LIMIT_SECONDS, KIND_TIME_LIMIT_SECONDS
from quiz_night.core.markdown_renderer import renderer
from quiz_night.core.models import QuestionKind
from quiz_night.core.quiz_engine import QuizEngine, QuizState
from quiz_night.core.quiz_manager import QuizManager
from quiz_night.ui.dialog_helpers import show_info, show_warning
from quiz_night.ui.qt_ticker import QtTicker

_WARNING_STYLE = "padding: 2px 6px; border-radius: 4px; background-color: #fee2e2; color: #b91c1c;"
_NORMAL_STYLE = "padding: 2px 6px; border-radius: 4px;"


class PracticePanel(QWidget):
    """UI component for a single-player run of the question bank."""

    def __init__(self, quiz_manager: QuizManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.quiz_manager = quiz_manager
        self.engine: QuizEngine | None = None
        self._ticker = QtTicker(self)
        self._finished_result: tuple[int, int] | None = None
        self._shown_question_id: str | None = None

        self._build_ui()
        self._configure_refresh_timer()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        options_row = QHBoxLayout()
        self.kind_combo = QComboBox(self)
        self.kind_combo.addItem(PRACTICE_KIND_ALL, None)
        for kind in QuestionKind:
            self.kind_combo.addItem(kind.value, kind)
        options_row.addWidget(self.kind_combo)
        self.timed_checkbox = QCheckBox(PRACTICE_TIMED_CHECKBOX, self)
        self.timed_checkbox.setChecked(True)
        options_row.addWidget(self.timed_checkbox)
        self.scoring_checkbox = QCheckBox(PRACTICE_SCORING_CHECKBOX, self)
        self.scoring_checkbox.setChecked(True)
        options_row.addWidget(self.scoring_checkbox)
        options_row.addStretch()
        self.new_button = QPushButton(PRACTICE_NEW_BUTTON, self)
        self.new_button.clicked.connect(self._handle_new_game)
        options_row.addWidget(self.new_button)
        layout.addLayout(options_row)

        timer_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        timer_row.addWidget(self.progress_label)
        self.time_label = QLabel("", self)
        self.time_label.setStyleSheet(_NORMAL_STYLE)
        timer_row.addWidget(self.time_label)
        self.time_progress = QProgressBar(self)
        self.time_progress.setRange(0, 100)
        self.time_progress.setTextVisible(False)
        timer_row.addWidget(self.time_progress, stretch=1)
        self.score_label = QLabel("", self)
        timer_row.addWidget(self.score_label)
        layout.addLayout(timer_row)

        self.question_view = QTextBrowser(self)
        layout.addWidget(self.question_view, stretch=1)

        answer_row = QHBoxLayout()
        self.answer_input = QLineEdit(self)
        self.answer_input.setPlaceholderText(PRACTICE_ANSWER_PLACEHOLDER)
        self.answer_input.returnPressed.connect(self._handle_submit)
        answer_row.addWidget(self.answer_input, stretch=1)
        self.submit_button = QPushButton(PRACTICE_SUBMIT_BUTTON, self)
        self.submit_button.clicked.connect(self._handle_submit)
        answer_row.addWidget(self.submit_button)
        layout.addLayout(answer_row)

        self.feedback_label = QLabel("", self)
        self.feedback_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.feedback_label)

        button_row = QHBoxLayout()
        self.start_button = QPushButton(PRACTICE_START_BUTTON, self)
        self.start_button.clicked.connect(lambda: self._transition(QuizEngine.start))
        self.reveal_button = QPushButton(PRACTICE_REVEAL_BUTTON, self)
        self.reveal_button.clicked.connect(lambda: self._transition(QuizEngine.show_answer))
        self.next_button = QPushButton(PRACTICE_NEXT_BUTTON, self)
        self.next_button.clicked.connect(self._handle_next)
        self.reset_button = QPushButton(PRACTICE_RESET_BUTTON, self)
        self.reset_button.clicked.connect(lambda: self._transition(QuizEngine.reset))
        for button in (self.start_button, self.reveal_button, self.next_button, self.reset_button):
            button_row.addWidget(button)
        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(PRACTICE_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self.refresh)
        self.refresh_timer.start()

    def release(self) -> None:
        self.refresh_timer.stop()
        if self.engine is not None:
            self.engine.close()

    def _handle_new_game(self) -> None:
        kind: QuestionKind | None = self.kind_combo.currentData()
        questions = self.quiz_manager.questions.questions_for_play(kind)
        if not questions:
            show_warning(self, "No questions", NO_QUESTIONS_MESSAGE)
            return
        time_limit = None
        if self.timed_checkbox.isChecked():
            time_limit = KIND_TIME_LIMIT_SECONDS[kind.value] if kind is not None else DEFAULT_TIME_LIMIT_SECONDS

        if self.engine is not None:
            self.engine.close()
        self._finished_result = None
        self.engine = QuizEngine(
            questions,
            time_limit_seconds=time_limit,
            on_finish=self._handle_finished,
            scoring=self.scoring_checkbox.isChecked(),
            ticker=self._ticker,
        )
        self.answer_input.clear()
        self.refresh()

    def _handle_finished(self, score: int, total: int) -> None:
        self._finished_result = (score, total)

    def _handle_submit(self) -> None:
        if self.engine is None:
            return
        if self.engine.submit(self.answer_input.text()):
            self.answer_input.clear()
        self.refresh()

    def _handle_next(self) -> None:
        if self.engine is None:
            return
        self.engine.next()
        self.refresh()
        if self._finished_result is not None:
            score, total = self._finished_result
            self._finished_result = None
            show_info(self, "Quiz complete", QUIZ_COMPLETE_TEMPLATE.format(score=score, total=total))

    def _transition(self, action) -> None:
        if self.engine is None:
            return
        action(self.engine)
        self.refresh()

    def refresh(self) -> None:
        engine = self.engine
        state = engine.state if engine is not None else None
        self.start_button.setEnabled(state is QuizState.READY)
        self.submit_button.setEnabled(state is QuizState.QUESTION)
        self.answer_input.setEnabled(state is QuizState.QUESTION)
        self.reveal_button.setEnabled(state is QuizState.QUESTION)
        self.next_button.setEnabled(state is QuizState.ANSWERED)
        self.reset_button.setEnabled(engine is not None)

        if engine is None:
            self.progress_label.clear()
            self.time_label.clear()
            self.score_label.clear()
            self.time_progress.setVisible(False)
            self.question_view.clear()
            self.feedback_label.clear()
            return

        snapshot = engine.snapshot()
        self.progress_label.setText(f"Question {snapshot.current_index + 1} of {snapshot.total_questions}")
        self.score_label.setText(f"Score: {snapshot.score}" if snapshot.scoring else "")
        self.time_progress.setVisible(engine.is_timed)
        self.time_label.setVisible(engine.is_timed)
        if engine.is_timed:
            self.time_label.setText(engine.formatted_time)
            self.time_label.setStyleSheet(_WARNING_STYLE if engine.is_time_warning else _NORMAL_STYLE)
            self.time_progress.setValue(int(engine.progress_percent))

        if snapshot.state in (QuizState.READY, QuizState.FINISHED):
            self._shown_question_id = None
        if snapshot.state is QuizState.FINISHED:
            self.question_view.setHtml(
                f"<p>{QUIZ_COMPLETE_TEMPLATE.format(score=snapshot.score, total=snapshot.total_questions)}</p>"
            )
            self.feedback_label.clear()
            return
        if snapshot.state is QuizState.READY:
            self.question_view.setHtml("<p>Press Start when you are ready.</p>")
            self.feedback_label.clear()
            return

        question = snapshot.question
        if question is not None:
            html = renderer.render_fragment(question.prompt)
            for url in question.image_urls:
                html += f'<p><img src="{url}" width="320" /></p>'
            # Render once per question so the view keeps its scroll position.
            if self._shown_question_id != question.id:
                self.question_view.setHtml(html)
                self._shown_question_id = question.id

        if snapshot.state is QuizState.ANSWERED and question is not None:
            if snapshot.timed_out:
                self.feedback_label.setText(f"Time is up! The answer was {question.correct_answer}.")
            elif snapshot.is_correct is True:
                self.feedback_label.setText("Correct!")
            elif snapshot.is_correct is False:
                self.feedback_label.setText(f"Not quite. The answer was {question.correct_answer}.")
            else:
                self.feedback_label.setText(f"The answer is {question.correct_answer}.")
        else:
            self.feedback_label.clear()
