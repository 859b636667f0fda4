"""Service for managing the question bank stored on the backend."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from quiz_night.backend.base import DataStore, RowNotFoundError
from quiz_night.constants.backend_constants import TABLE_GAME_SESSIONS, TABLE_QUESTIONS
from quiz_night.constants.quiz_constants import DEFAULT_PLAY_QUESTION_LIMIT
from quiz_night.core.errors import QuestionInUseError, QuestionNotFoundError
from quiz_night.core.models import Question, QuestionKind
from quiz_night.core.question_form import QuestionForm, form_to_row
from quiz_night.core.services.image_store import ImageStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QuestionPage:
    """One page of the admin question list."""

    questions: list[Question]
    total: int
    page: int
    limit: int


class QuestionRepository:
    """CRUD over ``game_questions`` plus image cleanup on delete."""

    def __init__(self, data: DataStore, images: ImageStore) -> None:
        self._data = data
        self._images = images

    def list_questions(
        self,
        kind: QuestionKind | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> QuestionPage:
        """Return questions newest first, optionally filtered by kind."""
        if page < 1:
            raise ValueError("Page numbers start at 1.")
        if limit < 1:
            raise ValueError("Limit must be positive.")
        filters = {"question_type": kind.value} if kind is not None else None
        rows = self._data.select(
            TABLE_QUESTIONS,
            filters=filters,
            order_by="created_at",
            descending=True,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self._data.count(TABLE_QUESTIONS, filters=filters)
        return QuestionPage(
            questions=[Question.from_row(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    def get_question(self, question_id: str) -> Question:
        try:
            row = self._data.get(TABLE_QUESTIONS, question_id)
        except RowNotFoundError as exc:
            raise QuestionNotFoundError(f"Question {question_id} not found.") from exc
        return Question.from_row(row)

    def create_question(self, form: QuestionForm) -> Question:
        row = self._data.insert(TABLE_QUESTIONS, form_to_row(form))
        logger.info("Created %s question %s", row["question_type"], row["id"])
        return Question.from_row(row)

    def update_question(self, question_id: str, form: QuestionForm) -> Question:
        changes = form_to_row(form)
        try:
            row = self._data.update(TABLE_QUESTIONS, question_id, changes)
        except RowNotFoundError as exc:
            raise QuestionNotFoundError(f"Question {question_id} not found.") from exc
        return Question.from_row(row)

    def delete_question(self, question_id: str, image_urls: list[str] | None = None) -> None:
        """Delete a question and its images.

        Image cleanup failures are logged and do not stop the record deletion.
        Questions still referenced by a game session are refused.
        """
        question = self.get_question(question_id)
        sessions = self._data.select(TABLE_GAME_SESSIONS, contains={"questions": [question_id]})
        if sessions:
            raise QuestionInUseError(
                f"Question {question_id} is used by {len(sessions)} game session(s) and cannot be deleted."
            )

        urls = question.image_urls if image_urls is None else image_urls
        if urls and not self._images.delete_images(urls):
            logger.warning("Some images of question %s could not be deleted", question_id)

        try:
            self._data.delete(TABLE_QUESTIONS, question_id)
        except RowNotFoundError as exc:
            raise QuestionNotFoundError(f"Question {question_id} not found.") from exc
        logger.info("Deleted question %s", question_id)

    def questions_for_play(
        self,
        kind: QuestionKind | None = None,
        limit: int = DEFAULT_PLAY_QUESTION_LIMIT,
    ) -> list[Question]:
        """Playable questions in authoring order, as served to the solo games."""
        filters = {"question_type": kind.value} if kind is not None else None
        rows = self._data.select(TABLE_QUESTIONS, filters=filters, order_by="created_at")
        playable = [q for q in (Question.from_row(row) for row in rows) if q.is_playable]
        return playable[:limit]

    def all_questions(self) -> list[Question]:
        rows = self._data.select(TABLE_QUESTIONS, order_by="created_at")
        return [Question.from_row(row) for row in rows]

    def import_forms(self, forms: list[QuestionForm]) -> list[Question]:
        return [self.create_question(form) for form in forms]
