"""Admin authentication on top of the backend auth provider."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable

from quiz_night.backend.base import AuthError, AuthProvider, AuthSession
from quiz_night.constants.backend_constants import PASSWORD_RESET_REDIRECT_PATH

logger = logging.getLogger(__name__)


class AuthService:
    """Signs admins in and out and answers "is this token an admin?".

    Every signed-in user is treated as an admin.
    """

    def __init__(self, auth: AuthProvider, public_base_url: str) -> None:
        self._auth = auth
        self._public_base_url = public_base_url.rstrip("/")
        self._lock = Lock()
        self._current: AuthSession | None = None
        self._unregister = auth.on_session_change(self._handle_session_change)

    def sign_in(self, email: str, password: str) -> AuthSession:
        if not email.strip() or not password:
            raise AuthError("Email and password are required.")
        session = self._auth.sign_in_with_password(email.strip(), password)
        logger.info("Admin %s signed in", session.email)
        return session

    def sign_out(self, access_token: str) -> None:
        self._auth.sign_out(access_token)

    def request_password_reset(self, email: str) -> None:
        if not email.strip():
            raise AuthError("Email is required.")
        redirect_to = f"{self._public_base_url}{PASSWORD_RESET_REDIRECT_PATH}"
        self._auth.request_password_reset(email.strip(), redirect_to)

    def current_session(self) -> AuthSession | None:
        """The most recent session seen through the session-change callback."""
        with self._lock:
            return self._current

    def require_admin(self, access_token: str | None) -> AuthSession:
        if not access_token:
            raise AuthError("Not signed in.")
        session = self._auth.get_session(access_token)
        if session is None:
            raise AuthError("Session expired. Please sign in again.")
        return session

    def on_session_change(
        self, callback: Callable[[str, AuthSession | None], None]
    ) -> Callable[[], None]:
        return self._auth.on_session_change(callback)

    def close(self) -> None:
        self._unregister()

    def _handle_session_change(self, event: str, session: AuthSession | None) -> None:
        with self._lock:
            if event == "SIGNED_IN":
                self._current = session
            elif event == "SIGNED_OUT":
                if session is None or (self._current and self._current.access_token == session.access_token):
                    self._current = None
