"""Utilities for importing question banks from a human-friendly text file.

File format (repeat blocks separated by blank lines or '---'):

    KIND: trivia | movie | photo-year | guess-who   (optional, default trivia)
    Q: Question text. Additional lines until the next marker are treated as
       part of the question.
    ANSWER: The correct answer
    HINT: A hint (repeatable)
    IMAGE: https://... (repeatable, shown in order)

Example:

    KIND: photo-year
    Q: In which year was this photo taken?
    ANSWER: 1969
    IMAGE: https://assets.example.org/moon-landing.jpg
    HINT: One small step
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from quiz_night.core.models import QuestionKind
from quiz_night.core.question_form import QuestionForm, validate_question_form


class QuizImportError(Exception):
    """Raised when a question bank cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported question drafts."""

    source_path: Path | None
    questions: list[QuestionForm]


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    questions = parse_quiz_text(text)
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return ImportedQuiz(source_path=file_path, questions=questions)


def parse_quiz_text(text: str) -> list[QuestionForm]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped.startswith("#"):
            continue
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    return [_parse_block(block) for block in blocks if block]


def _parse_block(block: str) -> QuestionForm:
    kind = QuestionKind.TRIVIA
    question_lines: list[str] = []
    answer: str | None = None
    hints: list[str] = []
    images: list[str] = []
    in_question = False

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        marker, _, value = line.partition(":")
        marker = marker.strip().upper()
        value = value.strip()

        if marker == "KIND":
            try:
                kind = QuestionKind.parse(value)
            except ValueError as exc:
                raise QuizImportError(str(exc)) from exc
            in_question = False
        elif marker == "Q":
            question_lines = [value]
            in_question = True
        elif marker == "ANSWER":
            answer = value
            in_question = False
        elif marker == "HINT":
            hints.append(value)
            in_question = False
        elif marker == "IMAGE":
            # URLs contain ':' themselves, so keep everything after the marker.
            images.append(line.split(":", 1)[1].strip())
            in_question = False
        elif in_question:
            question_lines.append(line)
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")

    if not question_lines:
        raise QuizImportError("Question text missing (Q: ...)")
    if answer is None:
        raise QuizImportError("Answer missing (ANSWER: ...)")

    form = QuestionForm(
        kind=kind,
        prompt="\n".join(question_lines).strip(),
        answer=answer,
        image_urls=images,
        hints=hints,
    )
    problem = validate_question_form(form)
    if problem is not None:
        raise QuizImportError(problem)
    return form
