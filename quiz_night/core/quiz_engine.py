"""Single-player quiz state machine shared by all four game kinds.

The engine sequences through a fixed list of questions. Timing and scoring are
optional capabilities chosen at construction time:

* ``time_limit_seconds=None`` gives an untimed quiz that only moves on manual
  calls; otherwise a one-second countdown runs while a question is open and a
  timeout closes it as incorrect.
* ``scoring=False`` gives the reveal-only mode where :meth:`show_answer` (or
  :meth:`submit`) closes a question without judging it.

Every public method takes the engine lock, so a timer tick racing a submit is
resolved by whichever call gets the lock first; the other becomes a no-op
because the state has already left ``QUESTION``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from threading import RLock
from typing import Callable, Protocol, Sequence

from quiz_night.constants.quiz_constants import TIMER_WARNING_THRESHOLD_SECONDS
from quiz_night.core.answer_checker import answers_match
from quiz_night.core.models import Question

logger = logging.getLogger(__name__)


class QuizState(str, Enum):
    READY = "ready"
    QUESTION = "question"
    ANSWERED = "answered"
    FINISHED = "finished"


class Ticker(Protocol):
    """One-second tick source driving the countdown."""

    def start(self, on_tick: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


@dataclass(slots=True, frozen=True)
class QuizSnapshot:
    """Read-only view of a run, safe to hand to another thread."""

    state: QuizState
    current_index: int
    total_questions: int
    question: Question | None
    score: int
    time_remaining: int | None
    answer: str | None
    is_correct: bool | None
    timed_out: bool
    scoring: bool


def format_time(seconds: int) -> str:
    """Format a second count as ``MM:SS``."""
    minutes, remainder = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{remainder:02d}"


class QuizEngine:
    """Drives one player through a question sequence."""

    def __init__(
        self,
        questions: Sequence[Question],
        time_limit_seconds: int | None = None,
        on_finish: Callable[[int, int], None] | None = None,
        *,
        scoring: bool = True,
        ticker: Ticker | None = None,
        warning_threshold_seconds: int = TIMER_WARNING_THRESHOLD_SECONDS,
    ) -> None:
        if not questions:
            raise ValueError("A quiz needs at least one question.")
        if time_limit_seconds is not None and time_limit_seconds <= 0:
            raise ValueError("Time limit must be a positive number of seconds.")
        self._lock = RLock()
        self._questions: tuple[Question, ...] = tuple(questions)
        self._time_limit = time_limit_seconds
        self._on_finish = on_finish
        self._scoring = scoring
        self._ticker = ticker
        self._warning_threshold = warning_threshold_seconds

        self._state = QuizState.READY
        self._current_index = 0
        self._score = 0
        self._time_remaining: int | None = time_limit_seconds
        self._answer: str | None = None
        self._is_correct: bool | None = None
        self._timed_out = False
        self._finish_notified = False

    # --- read-outs ---

    @property
    def state(self) -> QuizState:
        with self._lock:
            return self._state

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._current_index

    @property
    def current_question(self) -> Question | None:
        with self._lock:
            if self._state is QuizState.FINISHED:
                return None
            return self._questions[self._current_index]

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def score(self) -> int:
        with self._lock:
            return self._score

    @property
    def time_remaining(self) -> int | None:
        with self._lock:
            return self._time_remaining

    @property
    def is_timed(self) -> bool:
        return self._time_limit is not None

    @property
    def scoring(self) -> bool:
        return self._scoring

    @property
    def last_answer(self) -> str | None:
        with self._lock:
            return self._answer

    @property
    def is_correct(self) -> bool | None:
        with self._lock:
            return self._is_correct

    @property
    def timed_out(self) -> bool:
        with self._lock:
            return self._timed_out

    @property
    def formatted_time(self) -> str:
        with self._lock:
            return format_time(self._time_remaining or 0)

    @property
    def progress_percent(self) -> float:
        """Share of the countdown still left, 100 when untimed."""
        with self._lock:
            if self._time_limit is None or self._time_remaining is None:
                return 100.0
            return max(0.0, self._time_remaining / self._time_limit * 100)

    @property
    def is_time_warning(self) -> bool:
        with self._lock:
            if self._state is not QuizState.QUESTION or self._time_remaining is None:
                return False
            return 0 < self._time_remaining <= self._warning_threshold

    def snapshot(self) -> QuizSnapshot:
        with self._lock:
            question = None if self._state is QuizState.FINISHED else self._questions[self._current_index]
            return QuizSnapshot(
                state=self._state,
                current_index=self._current_index,
                total_questions=len(self._questions),
                question=question,
                score=self._score,
                time_remaining=self._time_remaining,
                answer=self._answer,
                is_correct=self._is_correct,
                timed_out=self._timed_out,
                scoring=self._scoring,
            )

    # --- transitions ---

    def start(self) -> bool:
        with self._lock:
            if self._state is not QuizState.READY:
                return False
            self._current_index = 0
            self._score = 0
            self._finish_notified = False
            self._open_question()
            return True

    def submit(self, answer: object) -> bool:
        """Close the open question with ``answer``; judged only when scoring is on."""
        with self._lock:
            if self._state is not QuizState.QUESTION:
                return False
            self._stop_timer()
            self._answer = "" if answer is None else str(answer)
            if self._scoring:
                question = self._questions[self._current_index]
                self._is_correct = answers_match(answer, question.correct_answer)
                if self._is_correct:
                    self._score += 1
            self._state = QuizState.ANSWERED
            return True

    def show_answer(self) -> bool:
        """Reveal the answer without judging or scoring."""
        with self._lock:
            if self._state is not QuizState.QUESTION:
                return False
            self._stop_timer()
            self._state = QuizState.ANSWERED
            return True

    def tick(self) -> bool:
        """Advance the countdown by one second; returns True when it timed out."""
        with self._lock:
            if self._state is not QuizState.QUESTION or self._time_remaining is None:
                return False
            self._time_remaining = max(0, self._time_remaining - 1)
            if self._time_remaining > 0:
                return False
            self._stop_timer()
            self._answer = None
            self._is_correct = False
            self._timed_out = True
            self._state = QuizState.ANSWERED
            logger.debug("Question %d timed out", self._current_index)
            return True

    def next(self) -> bool:
        with self._lock:
            if self._state is not QuizState.ANSWERED:
                return False
            if self._current_index < len(self._questions) - 1:
                self._current_index += 1
                self._open_question()
                return True
            self._state = QuizState.FINISHED
            self._time_remaining = None if self._time_limit is None else 0
            if not self._finish_notified:
                self._finish_notified = True
                if self._on_finish is not None:
                    self._on_finish(self._score, len(self._questions))
            return True

    def reset(self) -> bool:
        """Return to ``READY`` with every field at its initial value."""
        with self._lock:
            self._stop_timer()
            self._state = QuizState.READY
            self._current_index = 0
            self._score = 0
            self._time_remaining = self._time_limit
            self._clear_answer()
            return True

    def close(self) -> None:
        """Stop any running countdown; used when the run is discarded."""
        with self._lock:
            self._stop_timer()

    # --- internals ---

    def _open_question(self) -> None:
        self._clear_answer()
        self._time_remaining = self._time_limit
        self._state = QuizState.QUESTION
        if self._time_limit is not None and self._ticker is not None:
            self._ticker.start(self.tick)

    def _clear_answer(self) -> None:
        self._answer = None
        self._is_correct = None
        self._timed_out = False

    def _stop_timer(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
