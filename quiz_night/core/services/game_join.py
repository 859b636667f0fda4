"""Service for players joining a hosted game and submitting answers."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from threading import Lock

from quiz_night.backend.base import DataStore, RowNotFoundError
from quiz_night.constants.backend_constants import (
    TABLE_GAME_SESSIONS,
    TABLE_PLAYER_ANSWERS,
    TABLE_PLAYERS,
    TABLE_QUESTIONS,
)
from quiz_night.constants.quiz_constants import (
    MAX_NICKNAME_LENGTH,
    MAX_PLAYERS_PER_GAME,
    POINTS_PER_CORRECT_ANSWER,
    RANDOM_NAME_MAX_ATTEMPTS,
)
from quiz_night.core.answer_checker import answers_match
from quiz_night.core.errors import (
    JoinRejectedError,
    PlayerNotFoundError,
    QuestionNotFoundError,
    SessionNotFoundError,
)
from quiz_night.core.models import GameSession, Player, PlayerAnswer, Question, SessionState
from quiz_night.core.nickname_generator import NicknameGenerator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlayerService:
    """Join, reconnect and answer on behalf of players."""

    def __init__(self, data: DataStore, nicknames: NicknameGenerator | None = None) -> None:
        self._data = data
        self._nicknames = nicknames or NicknameGenerator()
        self._lock = Lock()
        self._game_locks: dict[str, Lock] = {}

    def join_game(self, game_id: str, name: str) -> Player:
        cleaned = name.strip()
        if not game_id or not cleaned:
            raise ValueError("A game id and a name are required to join.")
        if len(cleaned) > MAX_NICKNAME_LENGTH:
            raise ValueError(f"Names can be at most {MAX_NICKNAME_LENGTH} characters long.")

        session = self._load_session(game_id)
        if session.state is SessionState.ENDED:
            raise JoinRejectedError("This game has already ended.")
        if session.state is not SessionState.WAITING and not session.settings.allow_late_join:
            raise JoinRejectedError("This game has already started and does not allow late joining.")

        with self._game_lock(game_id):
            existing = self._data.select(TABLE_PLAYERS, filters={"game_id": game_id})
            if any(row["name"].casefold() == cleaned.casefold() for row in existing):
                raise JoinRejectedError("That name is already taken. Please choose another one.")
            if len(existing) >= MAX_PLAYERS_PER_GAME:
                raise JoinRejectedError("This game is full.")

            now = _utcnow()
            row = self._data.insert(
                TABLE_PLAYERS,
                {
                    "game_id": game_id,
                    "name": cleaned,
                    "score": 0,
                    "is_active": True,
                    "last_active": now,
                    "joined_at": now,
                },
            )
        logger.info("Player %s joined game %s", cleaned, game_id)
        return Player.from_row(row)

    def join_with_random_name(self, game_id: str) -> Player:
        taken = [row["name"] for row in self._data.select(TABLE_PLAYERS, filters={"game_id": game_id})]
        name = self._nicknames.unique_name(taken, RANDOM_NAME_MAX_ATTEMPTS)
        if name is None:
            raise JoinRejectedError("Could not find a free nickname. Please try again.")
        return self.join_game(game_id, name)

    def recover_player(self, game_id: str, player_id: str) -> Player | None:
        """Mark a returning player active again; None when the player is gone."""
        try:
            row = self._data.get(TABLE_PLAYERS, player_id)
        except RowNotFoundError:
            return None
        if row["game_id"] != game_id:
            return None
        updated = self._data.update(
            TABLE_PLAYERS,
            player_id,
            {"is_active": True, "last_active": _utcnow()},
        )
        return Player.from_row(updated)

    def list_players(self, game_id: str) -> list[Player]:
        rows = self._data.select(TABLE_PLAYERS, filters={"game_id": game_id}, order_by="joined_at")
        return [Player.from_row(row) for row in rows]

    def submit_answer(
        self,
        game_id: str,
        player_id: str,
        question_id: str,
        answer: str,
        started_at: datetime,
    ) -> PlayerAnswer:
        """Record a player's answer; resubmitting for the same question updates it."""
        if not game_id or not player_id or not question_id or not str(answer).strip():
            raise ValueError("Game, player, question and answer are required.")

        self._load_player(game_id, player_id)
        question = self._load_question(question_id)
        is_correct = answers_match(answer, question.correct_answer)

        # The lookup and the write must not interleave with another submission for the game.
        with self._game_lock(game_id):
            now = _utcnow()
            response_time_ms = max(0, int((now - started_at).total_seconds() * 1000))
            existing = self._data.select(
                TABLE_PLAYER_ANSWERS,
                filters={"game_id": game_id, "player_id": player_id, "question_id": question_id},
                limit=1,
            )
            values = {
                "answer": str(answer),
                "is_correct": is_correct,
                "response_time": response_time_ms,
                "submitted_at": now,
            }
            if existing:
                row = self._data.update(TABLE_PLAYER_ANSWERS, existing[0]["id"], values)
                return PlayerAnswer.from_row(row)

            row = self._data.insert(
                TABLE_PLAYER_ANSWERS,
                {"game_id": game_id, "player_id": player_id, "question_id": question_id, **values},
            )
            changes: dict[str, object] = {"last_active": now}
            if is_correct:
                current = self._load_player(game_id, player_id)
                changes["score"] = current.score + POINTS_PER_CORRECT_ANSWER
            self._data.update(TABLE_PLAYERS, player_id, changes)
            return PlayerAnswer.from_row(row)

    def _game_lock(self, game_id: str) -> Lock:
        with self._lock:
            lock = self._game_locks.get(game_id)
            if lock is None:
                lock = self._game_locks[game_id] = Lock()
            return lock

    def _load_session(self, game_id: str) -> GameSession:
        try:
            return GameSession.from_row(self._data.get(TABLE_GAME_SESSIONS, game_id))
        except RowNotFoundError as exc:
            raise SessionNotFoundError(f"Game session {game_id} not found.") from exc

    def _load_player(self, game_id: str, player_id: str) -> Player:
        try:
            row = self._data.get(TABLE_PLAYERS, player_id)
        except RowNotFoundError as exc:
            raise PlayerNotFoundError(f"Player {player_id} not found.") from exc
        if row["game_id"] != game_id:
            raise PlayerNotFoundError(f"Player {player_id} is not part of game {game_id}.")
        return Player.from_row(row)

    def _load_question(self, question_id: str) -> Question:
        try:
            return Question.from_row(self._data.get(TABLE_QUESTIONS, question_id))
        except RowNotFoundError as exc:
            raise QuestionNotFoundError(f"Question {question_id} not found.") from exc
