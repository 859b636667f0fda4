"""Exceptions raised by the quiz services."""

from __future__ import annotations


class QuestionValidationError(ValueError):
    """Raised when a question draft is missing a required field."""


class QuestionNotFoundError(LookupError):
    """Raised when a question id does not resolve."""


class SessionNotFoundError(LookupError):
    """Raised when a game session id does not resolve."""


class PlayerNotFoundError(LookupError):
    """Raised when a player id does not resolve within a session."""


class QuestionInUseError(RuntimeError):
    """Raised when deleting a question that a game session still references."""


class JoinRejectedError(RuntimeError):
    """Raised when a player cannot join a game session."""


class RunNotFoundError(LookupError):
    """Raised when a solo quiz run id does not resolve."""
