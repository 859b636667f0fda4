from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quiz_night.backend.base import Backend
from quiz_night.constants.backend_constants import TABLE_GAME_SESSIONS, TABLE_QUESTIONS
from quiz_night.core.errors import QuestionInUseError, QuestionNotFoundError, QuestionValidationError
from quiz_night.core.models import QuestionKind
from quiz_night.core.question_form import QuestionForm, form_from_question, validate_question_form
from quiz_night.core.services.image_store import ImageStore
from quiz_night.core.services.question_repository import QuestionRepository


@pytest.mark.parametrize(
    ("form", "message"),
    [
        (QuestionForm(kind=None, prompt="Q", answer="A"), "Please choose a question kind."),
        (QuestionForm(kind=QuestionKind.TRIVIA, prompt=" ", answer="A"), "Please enter the question."),
        (QuestionForm(kind=QuestionKind.TRIVIA, prompt="Q", answer=""), "Please enter the answer."),
        (QuestionForm(kind=QuestionKind.MOVIE, prompt="Q", answer="A"), "Please upload at least one image."),
    ],
)
def test_validation_messages(form: QuestionForm, message: str) -> None:
    assert validate_question_form(form) == message


def test_trivia_needs_no_images() -> None:
    assert validate_question_form(QuestionForm(kind=QuestionKind.TRIVIA, prompt="Q", answer="A")) is None


def test_create_rejects_invalid_form(repository: QuestionRepository) -> None:
    with pytest.raises(QuestionValidationError):
        repository.create_question(QuestionForm(kind=QuestionKind.GUESS_WHO, prompt="Who?", answer="Ada"))


def test_create_and_get_round_trip(repository: QuestionRepository) -> None:
    created = repository.create_question(
        QuestionForm(
            kind=QuestionKind.PHOTO_YEAR,
            prompt=" In which year? ",
            answer="1969",
            image_urls=["http://img/1.png", " "],
            hints=["Moon"],
        )
    )

    fetched = repository.get_question(created.id)

    assert fetched.kind is QuestionKind.PHOTO_YEAR
    assert fetched.prompt == "In which year?"
    assert fetched.image_urls == ["http://img/1.png"]
    assert fetched.hints == ["Moon"]
    assert form_from_question(fetched).answer == "1969"


def test_list_is_newest_first_and_filtered(repository: QuestionRepository, trivia_ids: list[str]) -> None:
    movie = repository.create_question(
        QuestionForm(kind=QuestionKind.MOVIE, prompt="Which film?", answer="Up", image_urls=["http://img/up.png"])
    )

    everything = repository.list_questions()
    trivia = repository.list_questions(QuestionKind.TRIVIA, page=1, limit=2)

    assert everything.total == 4
    assert everything.questions[0].id == movie.id
    assert trivia.total == 3
    assert [q.id for q in trivia.questions] == [trivia_ids[2], trivia_ids[1]]


def test_update_missing_question_raises(repository: QuestionRepository) -> None:
    with pytest.raises(QuestionNotFoundError):
        repository.update_question("missing", QuestionForm(kind=QuestionKind.TRIVIA, prompt="Q", answer="A"))


def test_delete_removes_question_and_images(backend: Backend, repository: QuestionRepository) -> None:
    images = ImageStore(backend.storage)
    url = images.upload_image(QuestionKind.MOVIE, "poster.png", b"png-bytes", "image/png")
    question = repository.create_question(
        QuestionForm(kind=QuestionKind.MOVIE, prompt="Which film?", answer="Up", image_urls=[url])
    )

    repository.delete_question(question.id)

    with pytest.raises(QuestionNotFoundError):
        repository.get_question(question.id)
    assert not backend.storage.exists(images.bucket, images.extract_file_path(url))


def test_delete_survives_image_cleanup_failure(repository: QuestionRepository) -> None:
    question = repository.create_question(
        QuestionForm(
            kind=QuestionKind.MOVIE,
            prompt="Which film?",
            answer="Up",
            image_urls=["http://elsewhere.example/poster.png"],
        )
    )

    repository.delete_question(question.id)

    with pytest.raises(QuestionNotFoundError):
        repository.get_question(question.id)


def test_delete_refuses_question_used_by_a_session(
    backend: Backend, repository: QuestionRepository, trivia_ids: list[str]
) -> None:
    backend.data.insert(TABLE_GAME_SESSIONS, {"name": "g", "questions": [trivia_ids[0]]})

    with pytest.raises(QuestionInUseError):
        repository.delete_question(trivia_ids[0])
    assert repository.get_question(trivia_ids[0]).id == trivia_ids[0]


def test_questions_for_play_keeps_authoring_order(repository: QuestionRepository, trivia_ids: list[str]) -> None:
    played = repository.questions_for_play(QuestionKind.TRIVIA, limit=2)

    assert [q.id for q in played] == trivia_ids[:2]


def test_image_store_paths_and_url_parsing(backend: Backend) -> None:
    images = ImageStore(backend.storage)
    moment = datetime(2024, 1, 2, tzinfo=timezone.utc)

    path = images.build_object_path(QuestionKind.GUESS_WHO, "../My Photo!.jpg", now=moment)

    assert path == f"guess-who/{int(moment.timestamp() * 1000)}_My_Photo_.jpg"
    assert images.extract_file_path(
        "http://quiz.test/storage/v1/object/public/game_assets/guess-who/1_a%20b.jpg"
    ) == "guess-who/1_a b.jpg"
    assert images.extract_file_path("http://quiz.test/other/path.jpg") is None


def test_image_store_rejects_empty_upload(backend: Backend) -> None:
    with pytest.raises(ValueError):
        ImageStore(backend.storage).upload_image(QuestionKind.MOVIE, "a.png", b"")


def test_numeric_zero_answer_is_kept(backend: Backend, repository: QuestionRepository) -> None:
    row = backend.data.insert(
        TABLE_QUESTIONS, {"question_type": "trivia", "question": "How many moons has Venus?", "answer": 0}
    )

    question = repository.get_question(row["id"])

    assert question.correct_answer == 0
    assert question.is_playable
    assert [q.id for q in repository.questions_for_play(QuestionKind.TRIVIA, 5)] == [row["id"]]
