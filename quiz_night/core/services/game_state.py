"""Local mirror of a hosted game session kept current by the change feed.

The mirror is read-only from the caller's point of view. Host commands write
straight to the backend and the mirror only changes when the resulting change
event arrives, so the view can briefly lag behind a command but never diverges
from the server. Events are applied as upserts keyed by id, which makes
redelivery harmless.

Commands and loads never raise backend errors: they store the error in
:attr:`GameStateSync.error`, log it and return False.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from threading import RLock
from typing import Callable, TypeVar

from quiz_night.backend.base import (
    BackendError,
    ChangeEvent,
    ChangeFeed,
    DataStore,
    RowNotFoundError,
    Subscription,
)
from quiz_night.constants.backend_constants import (
    TABLE_GAME_SESSIONS,
    TABLE_PLAYER_ANSWERS,
    TABLE_PLAYERS,
    TABLE_QUESTIONS,
)
from quiz_night.constants.quiz_constants import BUZZER_WRONG_ANSWER
from quiz_night.core.errors import SessionNotFoundError
from quiz_night.core.models import GameSession, Player, PlayerAnswer, Question, SessionState

logger = logging.getLogger(__name__)

_Entity = TypeVar("_Entity", Player, PlayerAnswer)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _upsert(items: list[_Entity], item: _Entity) -> None:
    for index, existing in enumerate(items):
        if existing.id == item.id:
            items[index] = item
            return
    items.append(item)


@dataclass(slots=True, frozen=True)
class GameStateSnapshot:
    """Immutable copy of the mirror for UI and API consumers."""

    session: GameSession | None
    current_question: Question | None
    players: tuple[Player, ...]
    answers: tuple[PlayerAnswer, ...]
    loading: bool
    error: Exception | None


class GameStateSync:
    """Mirrors one game session, its players and the current question's answers."""

    def __init__(self, data: DataStore, feed: ChangeFeed, game_id: str) -> None:
        self._data = data
        self._feed = feed
        self.game_id = game_id
        self._lock = RLock()
        self._subscriptions: list[Subscription] = []
        self._listeners: list[Callable[[], None]] = []

        self.session: GameSession | None = None
        self.current_question: Question | None = None
        self.players: list[Player] = []
        self.answers: list[PlayerAnswer] = []
        self.loading = False
        self.error: Exception | None = None

    # --- lifecycle ---

    def open(self) -> bool:
        """Load the initial state and subscribe; subscription happens even if loading fails."""
        loaded = self.load()
        self.subscribe()
        return loaded

    def close(self) -> None:
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            self._feed.unsubscribe(subscription)

    def __enter__(self) -> GameStateSync:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_subscribed(self) -> bool:
        with self._lock:
            return bool(self._subscriptions)

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` after every applied change event."""
        with self._lock:
            self._listeners.append(callback)

    def load(self) -> bool:
        with self._lock:
            self.loading = True
            try:
                try:
                    session_row = self._data.get(TABLE_GAME_SESSIONS, self.game_id)
                except RowNotFoundError as exc:
                    raise SessionNotFoundError(f"Game session {self.game_id} not found.") from exc
                session = GameSession.from_row(session_row)
                self.session = session

                question = None
                if session.current_question_id:
                    question = Question.from_row(self._data.get(TABLE_QUESTIONS, session.current_question_id))
                self.current_question = question

                player_rows = self._data.select(TABLE_PLAYERS, filters={"game_id": self.game_id})
                self.players = [Player.from_row(row) for row in player_rows]

                answers: list[PlayerAnswer] = []
                if session.current_question_id:
                    answer_rows = self._data.select(
                        TABLE_PLAYER_ANSWERS,
                        filters={"game_id": self.game_id, "question_id": session.current_question_id},
                    )
                    answers = [PlayerAnswer.from_row(row) for row in answer_rows]
                self.answers = answers
                self.error = None
                return True
            except (BackendError, SessionNotFoundError) as exc:
                self.error = exc
                logger.error("Error loading game session %s: %s", self.game_id, exc)
                return False
            finally:
                self.loading = False

    def subscribe(self) -> None:
        with self._lock:
            if self._subscriptions:
                return
            self._subscriptions = [
                self._feed.subscribe(TABLE_PLAYERS, {"game_id": self.game_id}, self._on_player_event),
                self._feed.subscribe(TABLE_PLAYER_ANSWERS, {"game_id": self.game_id}, self._on_answer_event),
                self._feed.subscribe(TABLE_GAME_SESSIONS, {"id": self.game_id}, self._on_session_event),
            ]

    def snapshot(self) -> GameStateSnapshot:
        with self._lock:
            return GameStateSnapshot(
                session=self.session,
                current_question=self.current_question,
                players=tuple(self.players),
                answers=tuple(self.answers),
                loading=self.loading,
                error=self.error,
            )

    # --- change events ---

    def _on_player_event(self, event: ChangeEvent) -> None:
        if event.event_type == "DELETE":
            return
        with self._lock:
            _upsert(self.players, Player.from_row(event.row))
        self._notify()

    def _on_answer_event(self, event: ChangeEvent) -> None:
        if event.event_type == "DELETE":
            return
        answer = PlayerAnswer.from_row(event.row)
        with self._lock:
            # Answers are scoped to the current question in the local view.
            if self.session is not None and answer.question_id != self.session.current_question_id:
                return
            _upsert(self.answers, answer)
        self._notify()

    def _on_session_event(self, event: ChangeEvent) -> None:
        if event.event_type == "DELETE":
            return
        session = GameSession.from_row(event.row)
        with self._lock:
            previous_pointer = self.session.current_question_id if self.session is not None else None
            self.session = session
            if session.current_question_id != previous_pointer:
                self.answers = []
                if session.current_question_id is None:
                    self.current_question = None
                else:
                    try:
                        row = self._data.get(TABLE_QUESTIONS, session.current_question_id)
                    except BackendError as exc:
                        self.error = exc
                        logger.error("Error loading question %s: %s", session.current_question_id, exc)
                    else:
                        self.current_question = Question.from_row(row)
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()

    # --- host commands ---

    def start_game(self) -> bool:
        session = self._session_or_none()
        if session is None or session.state is not SessionState.WAITING or not session.questions:
            return False
        now = _utcnow()
        return self._write(
            "starting game",
            {
                "state": SessionState.QUESTION.value,
                "current_question_index": 0,
                "current_question_id": session.questions[0],
                "started_at": now,
                "updated_at": now,
            },
        )

    def next_question(self) -> bool:
        session = self._session_or_none()
        if session is None or session.current_question_index is None:
            return False
        next_index = session.current_question_index + 1
        now = _utcnow()
        if next_index >= len(session.questions):
            return self._write(
                "ending game after last question",
                {
                    "state": SessionState.ENDED.value,
                    "current_question_index": None,
                    "current_question_id": None,
                    "ended_at": now,
                    "updated_at": now,
                },
            )
        return self._write(
            "moving to next question",
            {
                "state": SessionState.QUESTION.value,
                "current_question_index": next_index,
                "current_question_id": session.questions[next_index],
                "updated_at": now,
            },
        )

    def show_results(self) -> bool:
        return self._write("showing results", {"state": SessionState.RESULT.value, "updated_at": _utcnow()})

    def end_game(self) -> bool:
        now = _utcnow()
        return self._write(
            "ending game",
            {"state": SessionState.ENDED.value, "ended_at": now, "updated_at": now},
        )

    def mark_player_wrong(self, player_id: str) -> bool:
        """Force the player's answer to the current question to count as wrong."""
        session = self._session_or_none()
        if session is None or not session.current_question_id:
            return False
        try:
            existing = self._data.select(
                TABLE_PLAYER_ANSWERS,
                filters={
                    "game_id": self.game_id,
                    "player_id": player_id,
                    "question_id": session.current_question_id,
                },
                limit=1,
            )
            now = _utcnow()
            if existing:
                self._data.update(
                    TABLE_PLAYER_ANSWERS,
                    existing[0]["id"],
                    {"is_correct": False, "updated_at": now},
                )
            else:
                self._data.insert(
                    TABLE_PLAYER_ANSWERS,
                    {
                        "game_id": self.game_id,
                        "player_id": player_id,
                        "question_id": session.current_question_id,
                        "answer": BUZZER_WRONG_ANSWER,
                        "is_correct": False,
                        "response_time": 0,
                        "submitted_at": now,
                    },
                )
            return True
        except BackendError as exc:
            self._record_error("marking player wrong", exc)
            return False

    def _session_or_none(self) -> GameSession | None:
        with self._lock:
            return self.session

    def _write(self, action: str, changes: dict[str, object]) -> bool:
        try:
            self._data.update(TABLE_GAME_SESSIONS, self.game_id, changes)
            return True
        except BackendError as exc:
            self._record_error(action, exc)
            return False

    def _record_error(self, action: str, exc: Exception) -> None:
        with self._lock:
            self.error = exc
        logger.error("Error %s for game %s: %s", action, self.game_id, exc)
