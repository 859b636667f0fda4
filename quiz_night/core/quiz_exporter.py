"""Utilities for exporting questions to the plain-text format used for imports."""

from __future__ import annotations

from pathlib import Path

from quiz_night.core.models import Question


def save_quiz_to_file(file_path: Path, questions: list[Question]) -> None:
    """Persist the provided questions to disk in the text import format."""

    if not questions:
        raise ValueError("Cannot export an empty question bank.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_questions(questions), encoding="utf-8")


def serialize_questions(questions: list[Question]) -> str:
    blocks = [_serialize_question(question) for question in questions]
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: Question) -> str:
    lines = [f"KIND: {question.kind.value}"]

    prompt_lines = question.prompt.splitlines() or [""]
    lines.append(f"Q: {prompt_lines[0]}")
    lines.extend(prompt_lines[1:])

    lines.append(f"ANSWER: {question.correct_answer}")
    lines.extend(f"HINT: {hint}" for hint in question.hints)
    lines.extend(f"IMAGE: {url}" for url in question.image_urls)
    return "\n".join(lines)
