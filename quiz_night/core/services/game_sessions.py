"""Service for creating and configuring hosted game sessions."""

from __future__ import annotations

import logging
import random
from typing import Any

from quiz_night.backend.base import DataStore, RowNotFoundError
from quiz_night.constants.backend_constants import TABLE_GAME_SESSIONS
from quiz_night.core.errors import SessionNotFoundError
from quiz_night.core.models import GameSession, GameSettings, SessionState

logger = logging.getLogger(__name__)


class GameSessionService:
    """Creates sessions in the waiting state and manages their settings."""

    def __init__(self, data: DataStore, rng: random.Random | None = None) -> None:
        self._data = data
        self._rng = rng or random.Random()

    def create_session(
        self,
        name: str,
        question_ids: list[str],
        host_id: str,
        settings: dict[str, Any] | None = None,
    ) -> GameSession:
        cleaned_name = name.strip()
        if not cleaned_name or not question_ids or not host_id:
            raise ValueError("A game needs a name, a host and at least one question.")

        merged = GameSettings().merged(settings)
        ordered = list(question_ids)
        if merged.randomize_questions:
            self._rng.shuffle(ordered)

        row = self._data.insert(
            TABLE_GAME_SESSIONS,
            {
                "name": cleaned_name,
                "host_id": host_id,
                "state": SessionState.WAITING.value,
                "questions": ordered,
                "settings": merged.to_dict(),
                "current_question_index": None,
                "current_question_id": None,
                "started_at": None,
                "ended_at": None,
            },
        )
        logger.info("Created game session %s with %d questions", row["id"], len(ordered))
        return GameSession.from_row(row)

    def get_session(self, game_id: str) -> GameSession:
        try:
            return GameSession.from_row(self._data.get(TABLE_GAME_SESSIONS, game_id))
        except RowNotFoundError as exc:
            raise SessionNotFoundError(f"Game session {game_id} not found.") from exc

    def list_sessions_by_host(self, host_id: str) -> list[GameSession]:
        rows = self._data.select(
            TABLE_GAME_SESSIONS,
            filters={"host_id": host_id},
            order_by="created_at",
            descending=True,
        )
        return [GameSession.from_row(row) for row in rows]

    def update_settings(self, game_id: str, overrides: dict[str, Any]) -> GameSession:
        current = self.get_session(game_id)
        merged = current.settings.merged(overrides)
        row = self._data.update(TABLE_GAME_SESSIONS, game_id, {"settings": merged.to_dict()})
        return GameSession.from_row(row)
