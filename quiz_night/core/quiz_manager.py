"""Business logic shared between the Qt host console and the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import random
from threading import Lock
import time
from typing import Any, Callable
from uuid import uuid4

from quiz_night.backend.base import Backend
from quiz_night.constants.backend_constants import DEFAULT_PUBLIC_BASE_URL
from quiz_night.constants.quiz_constants import (
    DEFAULT_PLAY_QUESTION_LIMIT,
    DEFAULT_TIME_LIMIT_SECONDS,
    FINISHED_SOLO_RUN_TTL_SECONDS,
    KIND_TIME_LIMIT_SECONDS,
    MAX_SOLO_RUNS,
    SOLO_RUN_IDLE_SECONDS,
)
from quiz_night.core.errors import RunNotFoundError
from quiz_night.core.models import GameSession, Question, QuestionKind, SessionState
from quiz_night.core.quiz_engine import QuizEngine, Ticker
from quiz_night.core.quiz_exporter import save_quiz_to_file
from quiz_night.core.quiz_importer import load_quiz_from_file
from quiz_night.core.services.auth import AuthService
from quiz_night.core.services.game_join import PlayerService
from quiz_night.core.services.game_sessions import GameSessionService
from quiz_night.core.services.game_state import GameStateSync
from quiz_night.core.services.image_store import ImageStore
from quiz_night.core.services.question_repository import QuestionRepository
from quiz_night.core.tickers import ThreadingTicker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SoloRun:
    """A single-player quiz run hosted for an API client."""

    run_id: str
    kind: QuestionKind | None
    engine: QuizEngine
    result: tuple[int, int] | None = None
    last_used: float = 0.0
    finished_at: float | None = None


class QuizManager:
    """Facade over the question bank, hosted games and solo runs."""

    def __init__(
        self,
        backend: Backend,
        public_base_url: str = DEFAULT_PUBLIC_BASE_URL,
        ticker_factory: Callable[[], Ticker] = ThreadingTicker,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = Lock()
        self._clock = clock
        self.backend = backend
        self._ticker_factory = ticker_factory

        # Services
        self.images = ImageStore(backend.storage)
        self.questions = QuestionRepository(backend.data, self.images)
        self.sessions = GameSessionService(backend.data, rng)
        self.players = PlayerService(backend.data)
        self.auth = AuthService(backend.auth, public_base_url)

        self._runs: dict[str, SoloRun] = {}
        self._game_states: dict[str, GameStateSync] = {}

    # --- Question bank ---

    def import_questions_from_file(self, path: Path) -> list[Question]:
        imported = load_quiz_from_file(path)
        created = self.questions.import_forms(imported.questions)
        logger.info("Imported %d questions from %s", len(created), imported.source_path)
        return created

    def export_questions_to_file(self, path: Path) -> int:
        questions = self.questions.all_questions()
        save_quiz_to_file(path, questions)
        return len(questions)

    # --- Hosted games ---

    def create_game(
        self,
        name: str,
        host_id: str,
        question_ids: list[str] | None = None,
        settings: dict[str, Any] | None = None,
    ) -> GameSession:
        """Create a session; without explicit ids every playable question is used."""
        if question_ids is None:
            question_ids = [q.id for q in self.questions.all_questions() if q.is_playable]
        return self.sessions.create_session(name, question_ids, host_id, settings)

    def game_state(self, game_id: str) -> GameStateSync:
        """Return the shared synchronizer for a session, opening it on first use.

        Once the session has ended the synchronizer is released again; the
        returned object keeps its last state for reading.
        """
        with self._lock:
            sync = self._game_states.get(game_id)
            if sync is None:
                sync = GameStateSync(self.backend.data, self.backend.feed, game_id)
                self._game_states[game_id] = sync
                created = True
            else:
                created = False
        if created:
            sync.add_listener(lambda: self._release_if_ended(sync))
            sync.open()
            self._release_if_ended(sync)
        return sync

    def release_game_state(self, game_id: str) -> None:
        with self._lock:
            sync = self._game_states.pop(game_id, None)
        if sync is not None:
            sync.close()

    def open_game_state_count(self) -> int:
        with self._lock:
            return len(self._game_states)

    def _release_if_ended(self, sync: GameStateSync) -> None:
        session = sync.snapshot().session
        if session is None or session.state is not SessionState.ENDED:
            return
        with self._lock:
            if self._game_states.get(sync.game_id) is sync:
                del self._game_states[sync.game_id]
        sync.close()
        logger.debug("Released game state for ended session %s", sync.game_id)

    # --- Solo runs ---

    def create_solo_run(
        self,
        kind: QuestionKind | None = None,
        *,
        timed: bool = True,
        scoring: bool = True,
        limit: int = DEFAULT_PLAY_QUESTION_LIMIT,
    ) -> SoloRun:
        questions = self.questions.questions_for_play(kind, limit)
        if not questions:
            raise ValueError("No playable questions are available for this game.")
        time_limit = None
        if timed:
            time_limit = KIND_TIME_LIMIT_SECONDS[kind.value] if kind is not None else DEFAULT_TIME_LIMIT_SECONDS

        run_id = uuid4().hex

        def record_result(score: int, total: int) -> None:
            with self._lock:
                finished = self._runs.get(run_id)
                if finished is not None:
                    finished.result = (score, total)
                    finished.finished_at = self._clock()
            logger.info("Solo run %s finished with %d / %d", run_id, score, total)

        engine = QuizEngine(
            questions,
            time_limit_seconds=time_limit,
            on_finish=record_result,
            scoring=scoring,
            ticker=self._ticker_factory() if timed else None,
        )
        run = SoloRun(run_id=run_id, kind=kind, engine=engine, last_used=self._clock())
        with self._lock:
            expired = self._expired_runs(room=1)
            self._runs[run_id] = run
        self._close_runs(expired)
        return run

    def get_solo_run(self, run_id: str) -> SoloRun:
        with self._lock:
            expired = self._expired_runs()
            run = self._runs.get(run_id)
            if run is not None:
                run.last_used = self._clock()
        self._close_runs(expired)
        if run is None:
            raise RunNotFoundError(f"Quiz run {run_id} not found.")
        return run

    def delete_solo_run(self, run_id: str) -> None:
        with self._lock:
            run = self._runs.pop(run_id, None)
        if run is None:
            raise RunNotFoundError(f"Quiz run {run_id} not found.")
        run.engine.close()

    def solo_run_count(self) -> int:
        with self._lock:
            return len(self._runs)

    def _expired_runs(self, room: int = 0) -> list[SoloRun]:
        """Pop runs that finished or went idle too long ago; call with the lock held."""
        now = self._clock()
        expired = [
            run
            for run in self._runs.values()
            if now - run.last_used > SOLO_RUN_IDLE_SECONDS
            or (run.finished_at is not None and now - run.finished_at > FINISHED_SOLO_RUN_TTL_SECONDS)
        ]
        for run in expired:
            del self._runs[run.run_id]
        # Over the cap, finished runs go first, then the least recently used.
        overflow = len(self._runs) - (MAX_SOLO_RUNS - room)
        if overflow > 0:
            oldest = sorted(self._runs.values(), key=lambda r: (r.finished_at is None, r.last_used))
            for run in oldest[:overflow]:
                del self._runs[run.run_id]
                expired.append(run)
        return expired

    @staticmethod
    def _close_runs(runs: list[SoloRun]) -> None:
        for run in runs:
            run.engine.close()
            logger.debug("Dropped solo run %s", run.run_id)

    # --- Shutdown ---

    def close(self) -> None:
        with self._lock:
            runs = list(self._runs.values())
            states = list(self._game_states.values())
            self._runs.clear()
            self._game_states.clear()
        for run in runs:
            run.engine.close()
        for sync in states:
            sync.close()
        self.auth.close()
