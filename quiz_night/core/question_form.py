"""Editable question drafts used by the admin surfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from quiz_night.core.errors import QuestionValidationError
from quiz_night.core.models import Question, QuestionKind


@dataclass(slots=True)
class QuestionForm:
    """Draft of a question as entered by an admin."""

    kind: QuestionKind | None
    prompt: str
    answer: str
    image_urls: list[str] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)


def validate_question_form(form: QuestionForm) -> str | None:
    """Return the first problem with ``form``, or None when it can be saved."""
    if form.kind is None:
        return "Please choose a question kind."
    if not form.prompt.strip():
        return "Please enter the question."
    if not str(form.answer).strip():
        return "Please enter the answer."
    if form.kind.requires_images and not [url for url in form.image_urls if url.strip()]:
        return "Please upload at least one image."
    return None


def ensure_valid(form: QuestionForm) -> None:
    problem = validate_question_form(form)
    if problem is not None:
        raise QuestionValidationError(problem)


def form_to_row(form: QuestionForm) -> dict[str, Any]:
    """Convert a validated draft into a ``game_questions`` row."""
    ensure_valid(form)
    return {
        "question_type": form.kind.value,
        "question": form.prompt.strip(),
        "answer": str(form.answer).strip(),
        "image_urls": [url.strip() for url in form.image_urls if url.strip()],
        "hints": [hint.strip() for hint in form.hints if hint.strip()],
    }


def form_from_question(question: Question) -> QuestionForm:
    return QuestionForm(
        kind=question.kind,
        prompt=question.prompt,
        answer=str(question.correct_answer),
        image_urls=list(question.image_urls),
        hints=list(question.hints),
    )
