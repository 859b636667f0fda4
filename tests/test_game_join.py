from __future__ import annotations

from datetime import datetime, timedelta, timezone
import random
import threading
import time
from typing import Callable

import pytest

from quiz_night.backend.base import Backend
from quiz_night.constants.backend_constants import TABLE_GAME_SESSIONS, TABLE_PLAYER_ANSWERS, TABLE_PLAYERS
from quiz_night.constants.quiz_constants import MAX_PLAYERS_PER_GAME
from quiz_night.core.errors import JoinRejectedError, PlayerNotFoundError, SessionNotFoundError
from quiz_night.core.models import GameSession, SessionState
from quiz_night.core.nickname_generator import NicknameGenerator
from quiz_night.core.services.game_join import PlayerService
from quiz_night.core.services.game_sessions import GameSessionService


@pytest.fixture
def players(backend: Backend) -> PlayerService:
    return PlayerService(backend.data, NicknameGenerator(rng=random.Random(3)))


@pytest.fixture
def game(backend: Backend, trivia_ids: list[str]) -> GameSession:
    return GameSessionService(backend.data).create_session("Game", trivia_ids, "host")


def _set_state(backend: Backend, game_id: str, state: SessionState, **changes: object) -> None:
    backend.data.update(TABLE_GAME_SESSIONS, game_id, {"state": state.value, **changes})


def test_join_creates_active_player_with_zero_score(players: PlayerService, game: GameSession) -> None:
    player = players.join_game(game.id, "  Ann ")

    assert player.name == "Ann"
    assert player.score == 0
    assert player.is_active is True
    assert [p.id for p in players.list_players(game.id)] == [player.id]


@pytest.mark.parametrize("name", ["", "   ", "x" * 13])
def test_join_rejects_bad_names(players: PlayerService, game: GameSession, name: str) -> None:
    with pytest.raises(ValueError):
        players.join_game(game.id, name)


def test_join_unknown_game_raises(players: PlayerService) -> None:
    with pytest.raises(SessionNotFoundError):
        players.join_game("missing", "Ann")


def test_duplicate_name_is_rejected_case_insensitively(players: PlayerService, game: GameSession) -> None:
    players.join_game(game.id, "Ann")

    with pytest.raises(JoinRejectedError):
        players.join_game(game.id, "ANN")


def test_full_game_rejects_new_players(backend: Backend, players: PlayerService, game: GameSession) -> None:
    for index in range(MAX_PLAYERS_PER_GAME):
        backend.data.insert(TABLE_PLAYERS, {"game_id": game.id, "name": f"p{index}", "score": 0})

    with pytest.raises(JoinRejectedError, match="full"):
        players.join_game(game.id, "Late")


def test_ended_game_rejects_joins(backend: Backend, players: PlayerService, game: GameSession) -> None:
    _set_state(backend, game.id, SessionState.ENDED)

    with pytest.raises(JoinRejectedError):
        players.join_game(game.id, "Ann")


def test_late_join_follows_session_setting(backend: Backend, players: PlayerService, game: GameSession) -> None:
    _set_state(backend, game.id, SessionState.QUESTION)
    assert players.join_game(game.id, "Early").name == "Early"

    backend.data.update(TABLE_GAME_SESSIONS, game.id, {"settings": {"allow_late_join": False}})
    with pytest.raises(JoinRejectedError):
        players.join_game(game.id, "Late")


def test_random_name_join_picks_a_free_nickname(players: PlayerService, game: GameSession) -> None:
    player = players.join_with_random_name(game.id)

    adjective, noun = player.name.split(" ")
    assert adjective and noun
    assert len(player.name) <= 12


def test_recover_reactivates_player_of_same_game(backend: Backend, players: PlayerService, game: GameSession) -> None:
    player = players.join_game(game.id, "Ann")
    backend.data.update(TABLE_PLAYERS, player.id, {"is_active": False})

    recovered = players.recover_player(game.id, player.id)

    assert recovered is not None and recovered.is_active is True
    assert players.recover_player("other-game", player.id) is None
    assert players.recover_player(game.id, "missing") is None


def test_correct_answer_scores_once(players: PlayerService, game: GameSession, trivia_ids: list[str]) -> None:
    player = players.join_game(game.id, "Ann")
    started = datetime.now(timezone.utc) - timedelta(seconds=2)

    first = players.submit_answer(game.id, player.id, trivia_ids[0], " paris ", started)
    again = players.submit_answer(game.id, player.id, trivia_ids[0], "Paris", started)

    assert first.is_correct is True
    assert first.response_time_ms >= 2000
    assert again.id == first.id
    assert players.list_players(game.id)[0].score == 1


def test_wrong_answer_does_not_score(players: PlayerService, game: GameSession, trivia_ids: list[str]) -> None:
    player = players.join_game(game.id, "Ann")

    answer = players.submit_answer(game.id, player.id, trivia_ids[1], "7", datetime.now(timezone.utc))

    assert answer.is_correct is False
    assert players.list_players(game.id)[0].score == 0


def test_answer_from_foreign_player_is_rejected(
    backend: Backend, players: PlayerService, game: GameSession, trivia_ids: list[str]
) -> None:
    other = GameSessionService(backend.data).create_session("Other", trivia_ids, "host")
    stranger = players.join_game(other.id, "Bob")

    with pytest.raises(PlayerNotFoundError):
        players.submit_answer(game.id, stranger.id, trivia_ids[0], "Paris", datetime.now(timezone.utc))


def test_empty_answer_is_rejected(players: PlayerService, game: GameSession, trivia_ids: list[str]) -> None:
    player = players.join_game(game.id, "Ann")

    with pytest.raises(ValueError):
        players.submit_answer(game.id, player.id, trivia_ids[0], "  ", datetime.now(timezone.utc))


def _slow_selects(monkeypatch: pytest.MonkeyPatch, backend: Backend, *tables: str) -> None:
    real_select = backend.data.select

    def select(table: str, **kwargs: object) -> list[dict]:
        rows = real_select(table, **kwargs)
        if table in tables:
            time.sleep(0.05)
        return rows

    monkeypatch.setattr(backend.data, "select", select)


def _run_together(*calls: Callable[[], object]) -> list[object]:
    outcomes: list[object] = []

    def run(call: Callable[[], object]) -> None:
        try:
            outcomes.append(call())
        except Exception as exc:  # collected for the assertions below
            outcomes.append(exc)

    threads = [threading.Thread(target=run, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)
    return outcomes


def test_concurrent_submissions_store_one_answer(
    monkeypatch: pytest.MonkeyPatch, backend: Backend, players: PlayerService, game: GameSession, trivia_ids: list[str]
) -> None:
    player = players.join_game(game.id, "Ann")
    started = datetime.now(timezone.utc)
    _slow_selects(monkeypatch, backend, TABLE_PLAYER_ANSWERS)

    outcomes = _run_together(
        lambda: players.submit_answer(game.id, player.id, trivia_ids[0], "Paris", started),
        lambda: players.submit_answer(game.id, player.id, trivia_ids[0], "paris", started),
    )

    assert not [o for o in outcomes if isinstance(o, Exception)]
    rows = backend.data.select(
        TABLE_PLAYER_ANSWERS, filters={"game_id": game.id, "player_id": player.id, "question_id": trivia_ids[0]}
    )
    assert len(rows) == 1
    assert players.list_players(game.id)[0].score == 1


def test_concurrent_correct_answers_add_up(
    monkeypatch: pytest.MonkeyPatch, backend: Backend, players: PlayerService, game: GameSession, trivia_ids: list[str]
) -> None:
    player = players.join_game(game.id, "Ann")
    started = datetime.now(timezone.utc)
    _slow_selects(monkeypatch, backend, TABLE_PLAYER_ANSWERS)

    _run_together(
        lambda: players.submit_answer(game.id, player.id, trivia_ids[0], "Paris", started),
        lambda: players.submit_answer(game.id, player.id, trivia_ids[2], "Mars", started),
    )

    assert players.list_players(game.id)[0].score == 2


def test_concurrent_joins_with_same_name_admit_one(
    monkeypatch: pytest.MonkeyPatch, backend: Backend, players: PlayerService, game: GameSession
) -> None:
    _slow_selects(monkeypatch, backend, TABLE_PLAYERS)

    outcomes = _run_together(
        lambda: players.join_game(game.id, "Ann"),
        lambda: players.join_game(game.id, "ann"),
    )

    assert len([o for o in outcomes if isinstance(o, JoinRejectedError)]) == 1
    assert [p.name.casefold() for p in players.list_players(game.id)] == ["ann"]
