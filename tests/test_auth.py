from __future__ import annotations

import pytest

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD
from quiz_night.backend.base import AuthError, Backend
from quiz_night.core.services.auth import AuthService


@pytest.fixture
def auth(backend: Backend):
    service = AuthService(backend.auth, "http://quiz.test/")
    yield service
    service.close()


def test_sign_in_tracks_current_session(auth: AuthService) -> None:
    session = auth.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert auth.current_session() == session
    assert auth.require_admin(session.access_token) == session

    auth.sign_out(session.access_token)

    assert auth.current_session() is None
    with pytest.raises(AuthError):
        auth.require_admin(session.access_token)


@pytest.mark.parametrize(("email", "password"), [("", "pw"), ("  ", "pw"), (ADMIN_EMAIL, "")])
def test_sign_in_requires_both_fields(auth: AuthService, email: str, password: str) -> None:
    with pytest.raises(AuthError):
        auth.sign_in(email, password)


def test_wrong_password_is_rejected(auth: AuthService) -> None:
    with pytest.raises(AuthError):
        auth.sign_in(ADMIN_EMAIL, "nope")
    assert auth.current_session() is None


def test_require_admin_without_token(auth: AuthService) -> None:
    with pytest.raises(AuthError):
        auth.require_admin(None)


def test_password_reset_redirects_to_public_url(backend: Backend, auth: AuthService) -> None:
    auth.request_password_reset(" host@example.org ")

    assert backend.auth.reset_requests == [("host@example.org", "http://quiz.test/reset-password")]


def test_password_reset_requires_email(auth: AuthService) -> None:
    with pytest.raises(AuthError):
        auth.request_password_reset(" ")


def test_session_change_listeners_can_unregister(auth: AuthService) -> None:
    events: list[str] = []
    unregister = auth.on_session_change(lambda event, session: events.append(event))

    session = auth.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD)
    unregister()
    auth.sign_out(session.access_token)

    assert events == ["SIGNED_IN"]
