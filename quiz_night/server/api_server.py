"""FastAPI server exposing the admin, host, player and solo-play endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Response, UploadFile
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel, Field
import uvicorn

from quiz_night.backend.base import AuthError, AuthSession, BackendError, StorageError
from quiz_night.constants.about import APP_NAME, APP_VERSION
from quiz_night.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_night.constants.quiz_constants import DEFAULT_PLAY_QUESTION_LIMIT
from quiz_night.core.errors import (
    JoinRejectedError,
    PlayerNotFoundError,
    QuestionInUseError,
    QuestionNotFoundError,
    QuestionValidationError,
    RunNotFoundError,
    SessionNotFoundError,
)
from quiz_night.core.markdown_renderer import renderer
from quiz_night.core.models import GameSession, Player, PlayerAnswer, Question, QuestionKind, SessionState
from quiz_night.core.question_form import QuestionForm
from quiz_night.core.quiz_engine import QuizSnapshot, QuizState, format_time
from quiz_night.core.quiz_exporter import serialize_questions
from quiz_night.core.quiz_importer import QuizImportError, parse_quiz_text
from quiz_night.core.quiz_manager import QuizManager, SoloRun
from quiz_night.core.services.game_state import GameStateSnapshot, GameStateSync

logger = logging.getLogger(__name__)

_PLAYER_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>QuizNight</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; }
      .hidden { display: none; }
      input, button { font-size: 1rem; padding: 0.75rem; border-radius: 0.5rem; border: none; }
      button { background: #1f9aa5; color: #fff; cursor: pointer; }
      button:disabled { opacity: 0.5; }
      #status { min-height: 1.25rem; color: #94a3b8; }
    </style>
  </head>
  <body>
    <section class="card" id="join-card">
      <h1>QuizNight</h1>
      <input id="game-id" placeholder="Game code" />
      <input id="player-name" placeholder="Your name (optional)" maxlength="12" />
      <button id="join-button">Join</button>
    </section>
    <section class="card hidden" id="game-card">
      <p id="player-label"></p>
      <div id="question"></div>
      <input id="answer" placeholder="Your answer" />
      <button id="answer-button">Send</button>
      <p id="status"></p>
    </section>
    <script>
      let gameId = null, player = null, questionId = null, shownAt = null;
      const byId = (id) => document.getElementById(id);

      byId('join-button').addEventListener('click', async () => {
        gameId = byId('game-id').value.trim();
        const name = byId('player-name').value.trim();
        const response = await fetch(`/games/${gameId}/players`, {
          method: 'POST', headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ name: name || null })
        });
        const body = await response.json();
        if (!response.ok) { alert(body.detail || 'Unable to join.'); return; }
        player = body;
        byId('player-label').textContent = `You are ${player.name}`;
        byId('join-card').classList.add('hidden');
        byId('game-card').classList.remove('hidden');
        setInterval(refresh, 1500);
        refresh();
      });

      async function refresh() {
        const response = await fetch(`/games/${gameId}`);
        if (!response.ok) { return; }
        const state = await response.json();
        const question = state.current_question;
        if (state.state === 'ended') {
          byId('question').innerHTML = '<p>The game has ended. Thanks for playing!</p>';
          byId('answer-button').disabled = true;
          return;
        }
        if (!question) {
          byId('question').innerHTML = '<p>Waiting for the host…</p>';
          byId('answer-button').disabled = true;
          return;
        }
        if (question.id !== questionId) {
          questionId = question.id;
          shownAt = new Date().toISOString();
          byId('question').innerHTML = question.prompt_html;
          for (const url of question.image_urls) {
            const image = document.createElement('img');
            image.src = url;
            image.style.maxWidth = '100%';
            byId('question').appendChild(image);
          }
          byId('answer').value = '';
          byId('status').textContent = '';
        }
        byId('answer-button').disabled = state.state !== 'question';
      }

      byId('answer-button').addEventListener('click', async () => {
        const response = await fetch(`/games/${gameId}/answers`, {
          method: 'POST', headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({
            player_id: player.id, question_id: questionId,
            answer: byId('answer').value, started_at: shownAt
          })
        });
        const body = await response.json();
        byId('status').textContent = response.ok ? 'Answer sent!' : (body.detail || 'Unable to send answer.');
      });
    </script>
  </body>
</html>
"""


class SignInPayload(BaseModel):
    """Payload schema for admin sign-in."""

    email: str
    password: str


class PasswordResetPayload(BaseModel):
    email: str


class QuestionPayload(BaseModel):
    """Payload schema for creating or updating a question."""

    kind: QuestionKind | None = None
    prompt: str = ""
    answer: str = ""
    image_urls: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)

    def to_form(self) -> QuestionForm:
        return QuestionForm(
            kind=self.kind,
            prompt=self.prompt,
            answer=self.answer,
            image_urls=list(self.image_urls),
            hints=list(self.hints),
        )


class ImportPayload(BaseModel):
    text: str


class SessionPayload(BaseModel):
    """Payload schema for creating a hosted game."""

    name: str
    question_ids: list[str] | None = None
    settings: dict[str, Any] | None = None


class JoinPayload(BaseModel):
    """Payload schema for joining a game; no name picks a random one."""

    name: str | None = None


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    player_id: str
    question_id: str
    answer: str
    started_at: datetime | None = None


class SoloRunPayload(BaseModel):
    kind: QuestionKind | None = None
    timed: bool = True
    scoring: bool = True
    limit: int = Field(default=DEFAULT_PLAY_QUESTION_LIMIT, ge=1)


class SoloAnswerPayload(BaseModel):
    answer: str


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _question_to_dict(question: Question, include_answer: bool = True) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": question.id,
        "kind": question.kind.value,
        "prompt": question.prompt,
        "prompt_html": renderer.render_fragment(question.prompt),
        "hints": renderer.render_hints(question.hints),
        "image_urls": list(question.image_urls),
    }
    if include_answer:
        payload["answer"] = str(question.correct_answer)
        payload["created_at"] = _iso(question.created_at)
        payload["updated_at"] = _iso(question.updated_at)
    return payload


def _session_to_dict(session: GameSession) -> dict[str, object]:
    return {
        "id": session.id,
        "name": session.name,
        "host_id": session.host_id,
        "state": session.state.value,
        "questions": list(session.questions),
        "settings": session.settings.to_dict(),
        "current_question_index": session.current_question_index,
        "current_question_id": session.current_question_id,
        "started_at": _iso(session.started_at),
        "ended_at": _iso(session.ended_at),
    }


def _player_to_dict(player: Player) -> dict[str, object]:
    return {
        "id": player.id,
        "game_id": player.game_id,
        "name": player.name,
        "score": player.score,
        "is_active": player.is_active,
        "joined_at": _iso(player.joined_at),
    }


def _answer_to_dict(answer: PlayerAnswer) -> dict[str, object]:
    return {
        "id": answer.id,
        "player_id": answer.player_id,
        "question_id": answer.question_id,
        "answer": answer.answer,
        "is_correct": answer.is_correct,
        "response_time_ms": answer.response_time_ms,
        "submitted_at": _iso(answer.submitted_at),
    }


def _game_state_to_dict(snapshot: GameStateSnapshot, *, for_host: bool) -> dict[str, object]:
    session = snapshot.session
    state = session.state if session is not None else None
    question = snapshot.current_question
    # Players only see the answer once the host reveals results.
    reveal = for_host or state in (SessionState.RESULT, SessionState.ENDED)
    payload: dict[str, object] = {
        "session": _session_to_dict(session) if session is not None else None,
        "state": state.value if state is not None else None,
        "current_question": _question_to_dict(question, include_answer=reveal) if question else None,
        "players": [
            _player_to_dict(p) for p in sorted(snapshot.players, key=lambda p: (-p.score, p.name.casefold()))
        ],
        "error": str(snapshot.error) if snapshot.error is not None else None,
    }
    if for_host or state is SessionState.RESULT:
        payload["answers"] = [_answer_to_dict(a) for a in snapshot.answers]
    return payload


def _solo_snapshot_to_dict(run: SoloRun) -> dict[str, object]:
    snapshot: QuizSnapshot = run.engine.snapshot()
    question = snapshot.question
    revealed = snapshot.state is QuizState.ANSWERED
    return {
        "run_id": run.run_id,
        "kind": run.kind.value if run.kind is not None else None,
        "state": snapshot.state.value,
        "current_index": snapshot.current_index,
        "total_questions": snapshot.total_questions,
        "question": _question_to_dict(question, include_answer=revealed) if question else None,
        "score": snapshot.score,
        "scoring": snapshot.scoring,
        "time_remaining": snapshot.time_remaining,
        "formatted_time": format_time(snapshot.time_remaining or 0),
        "answer": snapshot.answer,
        "is_correct": snapshot.is_correct,
        "timed_out": snapshot.timed_out,
        "result": list(run.result) if run.result is not None else None,
    }


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    def require_admin(
        authorization: str | None = Header(default=None),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> AuthSession:
        try:
            return manager.auth.require_admin(_bearer_token(authorization))
        except AuthError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc

    def load_game_state(game_id: str, manager: QuizManager) -> GameStateSync:
        try:
            manager.sessions.get_session(game_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return manager.game_state(game_id)

    def load_run(run_id: str, manager: QuizManager) -> SoloRun:
        try:
            return manager.get_solo_run(run_id)
        except RunNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/", response_class=HTMLResponse)
    def serve_player_page() -> str:
        return _PLAYER_PAGE_HTML

    # --- Auth ---

    @app.post("/auth/sign-in")
    def sign_in(payload: SignInPayload, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        try:
            session = manager.auth.sign_in(payload.email, payload.password)
        except AuthError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return {
            "access_token": session.access_token,
            "token_type": "bearer",
            "user_id": session.user_id,
            "email": session.email,
        }

    @app.post("/auth/sign-out", status_code=204)
    def sign_out(
        authorization: str | None = Header(default=None),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        token = _bearer_token(authorization)
        if token is None:
            raise HTTPException(status_code=401, detail="Not signed in.")
        try:
            manager.auth.sign_out(token)
        except AuthError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc
        return Response(status_code=204)

    @app.post("/auth/password-reset", status_code=202)
    def request_password_reset(
        payload: PasswordResetPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            manager.auth.request_password_reset(payload.email)
        except AuthError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"detail": "If the address is registered, a reset link has been sent."}

    @app.get("/auth/session")
    def get_auth_session(admin: AuthSession = Depends(require_admin)) -> dict[str, object]:
        return {"user_id": admin.user_id, "email": admin.email, "created_at": _iso(admin.created_at)}

    # --- Admin: question bank ---

    @app.get("/admin/questions")
    def list_questions(
        kind: QuestionKind | None = None,
        page: int = 1,
        limit: int = 50,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            result = manager.questions.list_questions(kind, page, limit)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {
            "questions": [_question_to_dict(q) for q in result.questions],
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
        }

    @app.get("/admin/questions/export", response_class=PlainTextResponse)
    def export_questions(
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> str:
        questions = manager.questions.all_questions()
        if not questions:
            raise HTTPException(status_code=404, detail="The question bank is empty.")
        return serialize_questions(questions)

    @app.post("/admin/questions/import", status_code=201)
    def import_questions(
        payload: ImportPayload,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            forms = parse_quiz_text(payload.text)
        except QuizImportError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        created = manager.questions.import_forms(forms)
        return {"imported": len(created), "question_ids": [q.id for q in created]}

    @app.post("/admin/questions", status_code=201)
    def create_question(
        payload: QuestionPayload,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            question = manager.questions.create_question(payload.to_form())
        except QuestionValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _question_to_dict(question)

    @app.get("/admin/questions/{question_id}")
    def get_question(
        question_id: str,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            return _question_to_dict(manager.questions.get_question(question_id))
        except QuestionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.put("/admin/questions/{question_id}")
    def update_question(
        question_id: str,
        payload: QuestionPayload,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            question = manager.questions.update_question(question_id, payload.to_form())
        except QuestionValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except QuestionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _question_to_dict(question)

    @app.delete("/admin/questions/{question_id}", status_code=204)
    def delete_question(
        question_id: str,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        try:
            manager.questions.delete_question(question_id)
        except QuestionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except QuestionInUseError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return Response(status_code=204)

    @app.post("/admin/images", status_code=201)
    async def upload_image(
        kind: QuestionKind = Form(...),
        file: UploadFile = File(...),
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        data = await file.read()
        try:
            url = manager.images.upload_image(kind, file.filename or "image", data, file.content_type)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except StorageError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"url": url}

    # --- Admin: hosted games ---

    @app.post("/admin/sessions", status_code=201)
    def create_session(
        payload: SessionPayload,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            session = manager.create_game(payload.name, admin.user_id, payload.question_ids, payload.settings)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _session_to_dict(session)

    @app.get("/admin/sessions")
    def list_sessions(
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_session_to_dict(s) for s in manager.sessions.list_sessions_by_host(admin.user_id)]

    @app.patch("/admin/sessions/{game_id}/settings")
    def update_session_settings(
        game_id: str,
        overrides: dict[str, Any],
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            session = manager.sessions.update_settings(game_id, overrides)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _session_to_dict(session)

    @app.get("/admin/sessions/{game_id}/state")
    def get_host_state(
        game_id: str,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        sync = load_game_state(game_id, manager)
        return _game_state_to_dict(sync.snapshot(), for_host=True)

    @app.post("/admin/sessions/{game_id}/{command}")
    def run_host_command(
        game_id: str,
        command: str,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        sync = load_game_state(game_id, manager)
        commands = {
            "start": sync.start_game,
            "next": sync.next_question,
            "results": sync.show_results,
            "end": sync.end_game,
        }
        action = commands.get(command)
        if action is None:
            raise HTTPException(status_code=404, detail=f"Unknown host command '{command}'.")
        previous_error = sync.error
        if not action():
            raise HTTPException(status_code=409, detail=_command_failure(sync, command, previous_error))
        return _game_state_to_dict(sync.snapshot(), for_host=True)

    @app.post("/admin/sessions/{game_id}/players/{player_id}/wrong")
    def mark_player_wrong(
        game_id: str,
        player_id: str,
        admin: AuthSession = Depends(require_admin),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        sync = load_game_state(game_id, manager)
        previous_error = sync.error
        if not sync.mark_player_wrong(player_id):
            raise HTTPException(status_code=409, detail=_command_failure(sync, "wrong", previous_error))
        return _game_state_to_dict(sync.snapshot(), for_host=True)

    # --- Players ---

    @app.get("/games/{game_id}")
    def get_player_state(game_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        sync = load_game_state(game_id, manager)
        return _game_state_to_dict(sync.snapshot(), for_host=False)

    @app.post("/games/{game_id}/players", status_code=201)
    def join_game(
        game_id: str,
        payload: JoinPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            if payload.name and payload.name.strip():
                player = manager.players.join_game(game_id, payload.name)
            else:
                player = manager.players.join_with_random_name(game_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except JoinRejectedError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _player_to_dict(player)

    @app.post("/games/{game_id}/players/{player_id}/recover")
    def recover_player(
        game_id: str,
        player_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        player = manager.players.recover_player(game_id, player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player is no longer part of this game.")
        return _player_to_dict(player)

    @app.post("/games/{game_id}/answers", status_code=201)
    def submit_answer(
        game_id: str,
        payload: AnswerPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            session = manager.sessions.get_session(game_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if session.state is not SessionState.QUESTION or session.current_question_id != payload.question_id:
            raise HTTPException(status_code=409, detail="This question is not open for answers.")

        started_at = payload.started_at or datetime.now(timezone.utc)
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)
        try:
            answer = manager.players.submit_answer(
                game_id, payload.player_id, payload.question_id, payload.answer, started_at
            )
        except (PlayerNotFoundError, QuestionNotFoundError) as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _answer_to_dict(answer)

    # --- Solo runs ---

    @app.post("/play/runs", status_code=201)
    def create_solo_run(
        payload: SoloRunPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            run = manager.create_solo_run(
                payload.kind, timed=payload.timed, scoring=payload.scoring, limit=payload.limit
            )
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _solo_snapshot_to_dict(run)

    @app.get("/play/runs/{run_id}")
    def get_solo_run(run_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _solo_snapshot_to_dict(load_run(run_id, manager))

    @app.post("/play/runs/{run_id}/submit")
    def submit_solo_answer(
        run_id: str,
        payload: SoloAnswerPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        run = load_run(run_id, manager)
        if not run.engine.submit(payload.answer):
            raise HTTPException(status_code=409, detail="No question is open for answers.")
        return _solo_snapshot_to_dict(run)

    @app.post("/play/runs/{run_id}/{action}")
    def advance_solo_run(
        run_id: str,
        action: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        run = load_run(run_id, manager)
        transitions = {
            "start": run.engine.start,
            "reveal": run.engine.show_answer,
            "next": run.engine.next,
            "reset": run.engine.reset,
        }
        transition = transitions.get(action)
        if transition is None:
            raise HTTPException(status_code=404, detail=f"Unknown action '{action}'.")
        if not transition():
            raise HTTPException(
                status_code=409,
                detail=f"Cannot {action} while the quiz is {run.engine.state.value}.",
            )
        return _solo_snapshot_to_dict(run)

    @app.delete("/play/runs/{run_id}", status_code=204)
    def delete_solo_run(run_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        try:
            manager.delete_solo_run(run_id)
        except RunNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return Response(status_code=204)

    # --- Public objects ---

    @app.get("/storage/v1/object/public/{bucket}/{path:path}")
    def download_object(bucket: str, path: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        try:
            data, content_type = manager.backend.storage.download(bucket, path)
        except StorageError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return Response(content=data, media_type=content_type or "application/octet-stream")

    return app


def _command_failure(sync: GameStateSync, command: str, previous_error: Exception | None) -> str:
    error = sync.snapshot().error
    if isinstance(error, BackendError) and error is not previous_error:
        return f"Host command '{command}' failed: {error}"
    return f"Host command '{command}' is not allowed in the current game state."


def start_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizApiServer", daemon=True)
    thread.start()
    logger.info("API server listening on %s:%d", host, port)
    return thread
