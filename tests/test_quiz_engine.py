from __future__ import annotations

import pytest

from conftest import ManualTicker, make_question
from quiz_night.core.quiz_engine import QuizEngine, QuizState, format_time


def _questions(*answers: str):
    return [make_question(index, answer) for index, answer in enumerate(answers)]


class FinishRecorder:
    def __init__(self) -> None:
        self.calls: list[tuple[int, int]] = []

    def __call__(self, score: int, total: int) -> None:
        self.calls.append((score, total))


def test_empty_question_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        QuizEngine([])


def test_non_positive_time_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        QuizEngine(_questions("A"), time_limit_seconds=0)


def test_initial_state_is_ready() -> None:
    engine = QuizEngine(_questions("A", "B"))

    assert engine.state is QuizState.READY
    assert engine.current_index == 0
    assert engine.score == 0
    assert engine.current_question.id == "q0"


def test_untimed_scenario_scores_two_of_three_and_finishes_once() -> None:
    on_finish = FinishRecorder()
    engine = QuizEngine(_questions("A", "B", "C"), on_finish=on_finish)

    assert engine.start()
    for answer in ("A", "wrong", "C"):
        assert engine.submit(answer)
        assert engine.next()

    assert engine.state is QuizState.FINISHED
    assert engine.score == 2
    assert on_finish.calls == [(2, 3)]
    assert engine.current_question is None

    assert engine.next() is False
    assert on_finish.calls == [(2, 3)]


def test_answers_are_compared_case_insensitively() -> None:
    engine = QuizEngine(_questions("Paris", "5"))
    engine.start()

    engine.submit("paris")
    assert engine.is_correct is True
    engine.next()
    engine.submit("4")
    assert engine.is_correct is False
    engine.next()

    assert engine.score == 1


def test_surrounding_whitespace_is_ignored() -> None:
    engine = QuizEngine(_questions("Mars"))
    engine.start()
    engine.submit("  MARS ")

    assert engine.is_correct is True
    assert engine.score == 1


def test_second_submit_in_same_question_has_no_effect() -> None:
    engine = QuizEngine(_questions("A", "B"))
    engine.start()

    assert engine.submit("A")
    assert engine.submit("A") is False
    assert engine.score == 1
    assert engine.state is QuizState.ANSWERED


def test_start_is_a_noop_outside_ready() -> None:
    engine = QuizEngine(_questions("A", "B"))
    engine.start()
    engine.submit("A")

    assert engine.start() is False
    assert engine.state is QuizState.ANSWERED
    assert engine.score == 1


def test_next_is_a_noop_while_question_is_open() -> None:
    engine = QuizEngine(_questions("A", "B"))
    engine.start()

    assert engine.next() is False
    assert engine.current_index == 0


def test_show_answer_closes_question_without_verdict() -> None:
    engine = QuizEngine(_questions("A"))
    engine.start()

    assert engine.show_answer()
    assert engine.state is QuizState.ANSWERED
    assert engine.is_correct is None
    assert engine.score == 0


def test_unscored_mode_records_answer_without_judging() -> None:
    on_finish = FinishRecorder()
    engine = QuizEngine(_questions("A", "B"), on_finish=on_finish, scoring=False)
    engine.start()

    engine.submit("A")
    assert engine.last_answer == "A"
    assert engine.is_correct is None
    engine.next()
    engine.show_answer()
    engine.next()

    assert engine.score == 0
    assert on_finish.calls == [(0, 2)]


def test_timeout_counts_as_incorrect(ticker: ManualTicker) -> None:
    engine = QuizEngine(_questions("A", "B"), time_limit_seconds=3, ticker=ticker)
    engine.start()
    assert ticker.running

    ticker.fire(3)

    assert engine.state is QuizState.ANSWERED
    assert engine.timed_out is True
    assert engine.is_correct is False
    assert engine.last_answer is None
    assert engine.score == 0
    assert not ticker.running


def test_timer_restarts_from_full_limit_on_next_question(ticker: ManualTicker) -> None:
    engine = QuizEngine(_questions("A", "B"), time_limit_seconds=5, ticker=ticker)
    engine.start()
    ticker.fire(2)
    assert engine.time_remaining == 3

    engine.submit("A")
    assert not ticker.running
    engine.next()

    assert engine.time_remaining == 5
    assert ticker.running
    assert engine.timed_out is False


def test_tick_after_submit_is_ignored() -> None:
    engine = QuizEngine(_questions("A"), time_limit_seconds=2)
    engine.start()
    engine.submit("A")

    assert engine.tick() is False
    assert engine.time_remaining == 2
    assert engine.is_correct is True


def test_submit_after_timeout_is_ignored() -> None:
    engine = QuizEngine(_questions("A"), time_limit_seconds=1)
    engine.start()
    assert engine.tick() is True

    assert engine.submit("A") is False
    assert engine.score == 0


def test_full_timed_run_reaches_finished_once(ticker: ManualTicker) -> None:
    on_finish = FinishRecorder()
    engine = QuizEngine(_questions("A", "B", "C"), time_limit_seconds=2, on_finish=on_finish, ticker=ticker)
    engine.start()

    engine.submit("A")
    engine.next()
    ticker.fire(2)
    engine.next()
    engine.submit("C")
    engine.next()

    assert engine.state is QuizState.FINISHED
    assert engine.score == 2
    assert on_finish.calls == [(2, 3)]


def test_reset_from_finished_behaves_like_fresh_run() -> None:
    on_finish = FinishRecorder()
    engine = QuizEngine(_questions("A", "B"), on_finish=on_finish)
    engine.start()
    engine.submit("A")
    engine.next()
    engine.submit("B")
    engine.next()
    assert engine.state is QuizState.FINISHED

    assert engine.reset()
    assert engine.state is QuizState.READY
    assert engine.current_index == 0
    assert engine.score == 0
    assert engine.last_answer is None
    assert on_finish.calls == [(2, 2)]

    engine.start()
    engine.submit("A")
    engine.next()
    engine.submit("x")
    engine.next()
    assert engine.score == 1
    assert on_finish.calls == [(2, 2), (1, 2)]


def test_reset_stops_running_timer(ticker: ManualTicker) -> None:
    engine = QuizEngine(_questions("A"), time_limit_seconds=10, ticker=ticker)
    engine.start()
    ticker.fire(4)

    engine.reset()

    assert not ticker.running
    assert engine.time_remaining == 10


def test_single_question_run_finishes_after_one_next() -> None:
    on_finish = FinishRecorder()
    engine = QuizEngine(_questions("A"), on_finish=on_finish)
    engine.start()
    engine.submit("A")
    engine.next()

    assert engine.state is QuizState.FINISHED
    assert on_finish.calls == [(1, 1)]


def test_time_warning_and_progress_readouts() -> None:
    engine = QuizEngine(_questions("A"), time_limit_seconds=20, warning_threshold_seconds=10)
    engine.start()
    assert engine.progress_percent == 100.0
    assert engine.is_time_warning is False

    for _ in range(10):
        engine.tick()

    assert engine.time_remaining == 10
    assert engine.is_time_warning is True
    assert engine.progress_percent == 50.0
    assert engine.formatted_time == "00:10"


def test_untimed_engine_has_no_countdown() -> None:
    engine = QuizEngine(_questions("A"))
    engine.start()

    assert engine.is_timed is False
    assert engine.tick() is False
    assert engine.time_remaining is None
    assert engine.progress_percent == 100.0


def test_snapshot_reflects_current_state() -> None:
    engine = QuizEngine(_questions("A", "B"), time_limit_seconds=15)
    engine.start()
    engine.submit("a")

    snapshot = engine.snapshot()

    assert snapshot.state is QuizState.ANSWERED
    assert snapshot.question.id == "q0"
    assert snapshot.score == 1
    assert snapshot.answer == "a"
    assert snapshot.is_correct is True
    assert snapshot.total_questions == 2


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00"), (9, "00:09"), (75, "01:15"), (-3, "00:00")],
)
def test_format_time(seconds: int, expected: str) -> None:
    assert format_time(seconds) == expected
