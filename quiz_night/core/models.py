"""Domain models for the quiz application."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any

from quiz_night.constants.quiz_constants import DEFAULT_SESSION_SETTINGS


class QuestionKind(str, Enum):
    """The four question kinds; the tag decides which fields are required."""

    TRIVIA = "trivia"
    MOVIE = "movie"
    PHOTO_YEAR = "photo-year"
    GUESS_WHO = "guess-who"

    @property
    def requires_images(self) -> bool:
        return self is not QuestionKind.TRIVIA

    @classmethod
    def parse(cls, value: str | QuestionKind) -> QuestionKind:
        if isinstance(value, QuestionKind):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown question kind '{value}'. Expected one of: {allowed}.") from exc


class SessionState(str, Enum):
    """Lifecycle of a hosted game session."""

    WAITING = "waiting"
    QUESTION = "question"
    RESULT = "result"
    ENDED = "ended"


@dataclass(slots=True)
class Question:
    """A quiz question of any kind."""

    id: str
    kind: QuestionKind
    prompt: str
    correct_answer: str | int | float
    hints: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_playable(self) -> bool:
        if not str(self.correct_answer).strip():
            return False
        return bool(self.image_urls) or not self.kind.requires_images

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Question:
        return cls(
            id=row["id"],
            kind=QuestionKind.parse(row["question_type"]),
            prompt=row.get("question") or "",
            correct_answer="" if row.get("answer") is None else row["answer"],
            hints=list(row.get("hints") or []),
            image_urls=list(row.get("image_urls") or []),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(slots=True)
class GameSettings:
    """Per-session options chosen by the host."""

    allow_late_join: bool = bool(DEFAULT_SESSION_SETTINGS["allow_late_join"])
    question_timer: int = int(DEFAULT_SESSION_SETTINGS["question_timer"])
    randomize_questions: bool = bool(DEFAULT_SESSION_SETTINGS["randomize_questions"])
    show_results_after_each: bool = bool(DEFAULT_SESSION_SETTINGS["show_results_after_each"])
    countdown_before_question: int = int(DEFAULT_SESSION_SETTINGS["countdown_before_question"])

    def merged(self, overrides: dict[str, Any] | None) -> GameSettings:
        """Return a copy with ``overrides`` applied; unknown keys are rejected."""
        values = self.to_dict()
        for key, value in (overrides or {}).items():
            if key not in values:
                raise ValueError(f"Unknown session setting '{key}'.")
            values[key] = value
        settings = GameSettings(**values)
        if settings.question_timer <= 0:
            raise ValueError("Question timer must be a positive number of seconds.")
        if settings.countdown_before_question < 0:
            raise ValueError("Countdown must not be negative.")
        return settings

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, values: dict[str, Any] | None) -> GameSettings:
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in (values or {}).items() if key in known})


@dataclass(slots=True)
class GameSession:
    """Server-owned record of a hosted multiplayer game."""

    id: str
    name: str
    host_id: str
    state: SessionState
    questions: list[str]
    settings: GameSettings
    current_question_index: int | None = None
    current_question_id: str | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> GameSession:
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            host_id=row.get("host_id") or "",
            state=SessionState(row.get("state") or SessionState.WAITING.value),
            questions=list(row.get("questions") or []),
            settings=GameSettings.from_dict(row.get("settings")),
            current_question_index=row.get("current_question_index"),
            current_question_id=row.get("current_question_id"),
            started_at=row.get("started_at"),
            ended_at=row.get("ended_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(slots=True)
class Player:
    """A participant of one game session."""

    id: str
    game_id: str
    name: str
    score: int = 0
    is_active: bool = True
    last_active: datetime | None = None
    joined_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Player:
        return cls(
            id=row["id"],
            game_id=row["game_id"],
            name=row.get("name") or "",
            score=int(row.get("score") or 0),
            is_active=bool(row.get("is_active", True)),
            last_active=row.get("last_active"),
            joined_at=row.get("joined_at"),
        )


@dataclass(slots=True)
class PlayerAnswer:
    """A player's answer to one question of one session."""

    id: str
    game_id: str
    player_id: str
    question_id: str
    answer: str
    is_correct: bool
    response_time_ms: int
    submitted_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PlayerAnswer:
        return cls(
            id=row["id"],
            game_id=row["game_id"],
            player_id=row["player_id"],
            question_id=row["question_id"],
            answer=row.get("answer") or "",
            is_correct=bool(row.get("is_correct")),
            response_time_ms=int(row.get("response_time") or 0),
            submitted_at=row.get("submitted_at"),
        )
