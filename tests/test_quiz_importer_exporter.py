from __future__ import annotations

from pathlib import Path

import pytest

from quiz_night.constants.quiz_constants import SAMPLE_QUESTIONS_PATH
from quiz_night.core.models import Question, QuestionKind
from quiz_night.core.quiz_exporter import save_quiz_to_file, serialize_questions
from quiz_night.core.quiz_importer import QuizImportError, load_quiz_from_file, parse_quiz_text


SAMPLE = """
# Comment lines are skipped.
Q: What is the capital
of France?
ANSWER: Paris
HINT: Eiffel

---
KIND: photo-year
Q: When was this taken?
ANSWER: 1969
IMAGE: https://assets.example.org/moon.jpg
IMAGE: https://assets.example.org/moon-2.jpg
"""


def test_parse_blocks_with_defaults_and_multiline_prompt() -> None:
    trivia, photo = parse_quiz_text(SAMPLE)

    assert trivia.kind is QuestionKind.TRIVIA
    assert trivia.prompt == "What is the capital\nof France?"
    assert trivia.hints == ["Eiffel"]
    assert photo.kind is QuestionKind.PHOTO_YEAR
    assert photo.image_urls == ["https://assets.example.org/moon.jpg", "https://assets.example.org/moon-2.jpg"]


@pytest.mark.parametrize(
    "text",
    [
        "ANSWER: Paris",
        "Q: Where?",
        "KIND: cartoon\nQ: Who?\nANSWER: Bugs",
        "KIND: movie\nQ: Which film?\nANSWER: Up",
        "stray text\nQ: Where?\nANSWER: Here",
    ],
)
def test_parse_rejects_broken_blocks(text: str) -> None:
    with pytest.raises(QuizImportError):
        parse_quiz_text(text)


def test_empty_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "empty.txt"
    path.write_text("# nothing here\n", encoding="utf-8")

    with pytest.raises(QuizImportError):
        load_quiz_from_file(path)


def test_bundled_sample_bank_parses() -> None:
    imported = load_quiz_from_file(SAMPLE_QUESTIONS_PATH)

    assert imported.questions
    assert all(form.kind is QuestionKind.TRIVIA for form in imported.questions)


def test_exported_text_imports_back(tmp_path: Path) -> None:
    questions = [
        Question(id="a", kind=QuestionKind.TRIVIA, prompt="Line one\nLine two", correct_answer="X", hints=["h"]),
        Question(
            id="b",
            kind=QuestionKind.GUESS_WHO,
            prompt="Who?",
            correct_answer="Ada",
            image_urls=["https://assets.example.org/ada.jpg"],
        ),
    ]
    path = tmp_path / "nested" / "bank.txt"

    save_quiz_to_file(path, questions)
    forms = load_quiz_from_file(path).questions

    assert [(f.kind, f.prompt, f.answer) for f in forms] == [
        (QuestionKind.TRIVIA, "Line one\nLine two", "X"),
        (QuestionKind.GUESS_WHO, "Who?", "Ada"),
    ]
    assert forms[1].image_urls == ["https://assets.example.org/ada.jpg"]


def test_serialize_separates_blocks() -> None:
    text = serialize_questions(
        [Question(id="a", kind=QuestionKind.TRIVIA, prompt="Q1", correct_answer=5)]
    )

    assert text == "KIND: trivia\nQ: Q1\nANSWER: 5\n"


def test_export_of_empty_bank_is_refused(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        save_quiz_to_file(tmp_path / "bank.txt", [])
