from __future__ import annotations

from typing import Callable, Iterator

import pytest

from quiz_night.backend.base import Backend
from quiz_night.backend.memory import create_memory_backend
from quiz_night.core.models import Question, QuestionKind
from quiz_night.core.question_form import QuestionForm
from quiz_night.core.quiz_manager import QuizManager
from quiz_night.core.services.image_store import ImageStore
from quiz_night.core.services.question_repository import QuestionRepository

ADMIN_EMAIL = "host@example.org"
ADMIN_PASSWORD = "secret-pass"


class ManualTicker:
    """Ticker whose ticks are fired by the test."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.starts = 0
        self.stops = 0

    @property
    def running(self) -> bool:
        return self.callback is not None

    def start(self, on_tick: Callable[[], None]) -> None:
        self.starts += 1
        self.callback = on_tick

    def stop(self) -> None:
        self.stops += 1
        self.callback = None

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


def make_question(index: int, answer: str = "Paris", kind: QuestionKind = QuestionKind.TRIVIA) -> Question:
    return Question(id=f"q{index}", kind=kind, prompt=f"Question {index}?", correct_answer=answer)


@pytest.fixture
def backend() -> Backend:
    backend = create_memory_backend("http://quiz.test")
    backend.auth.register_user(ADMIN_EMAIL, ADMIN_PASSWORD)
    return backend


@pytest.fixture
def repository(backend: Backend) -> QuestionRepository:
    return QuestionRepository(backend.data, ImageStore(backend.storage))


@pytest.fixture
def trivia_ids(repository: QuestionRepository) -> list[str]:
    forms = [
        QuestionForm(kind=QuestionKind.TRIVIA, prompt="Capital of France?", answer="Paris"),
        QuestionForm(kind=QuestionKind.TRIVIA, prompt="Legs on a spider?", answer="8"),
        QuestionForm(kind=QuestionKind.TRIVIA, prompt="Red planet?", answer="Mars"),
    ]
    return [repository.create_question(form).id for form in forms]


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def manager(backend: Backend) -> Iterator[QuizManager]:
    manager = QuizManager(backend, public_base_url="http://quiz.test", ticker_factory=ManualTicker)
    yield manager
    manager.close()
