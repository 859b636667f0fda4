"""Contracts for the backend platform the quiz application is built on.

The application never talks to a concrete database, bucket or auth server
directly. Services receive a :class:`Backend` bundle and only use the four
ports defined here, so the hosted platform and the in-memory implementation
are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

Row = dict[str, Any]


class BackendError(Exception):
    """Raised when a backend call fails (network, auth, constraint violation)."""


class RowNotFoundError(BackendError):
    """Raised when a single-row lookup does not resolve."""


class StorageError(BackendError):
    """Raised when an object storage operation fails."""


class AuthError(BackendError):
    """Raised when authentication is rejected."""


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """Row-level notification delivered by the change feed."""

    table: str
    event_type: str  # INSERT, UPDATE or DELETE
    row: Row


@dataclass(slots=True)
class Subscription:
    """Handle returned by :meth:`ChangeFeed.subscribe`."""

    subscription_id: str
    table: str
    filters: dict[str, Any]
    on_change: Callable[[ChangeEvent], None] = field(repr=False)
    active: bool = True


@dataclass(slots=True, frozen=True)
class AuthSession:
    """Signed-in user session."""

    access_token: str
    user_id: str
    email: str
    created_at: datetime


class DataStore(ABC):
    """Table-oriented data store with equality and containment filters."""

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        contains: dict[str, list[Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Row]:
        """Return copies of the rows matching every filter."""

    @abstractmethod
    def count(self, table: str, *, filters: dict[str, Any] | None = None) -> int:
        """Return the number of rows matching ``filters``."""

    @abstractmethod
    def get(self, table: str, row_id: str) -> Row:
        """Return one row by id or raise :class:`RowNotFoundError`."""

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """Insert a row, assigning ``id`` and timestamps when absent."""

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Row) -> Row:
        """Apply ``changes`` to one row and return the stored result."""

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete one row by id."""


class ObjectStorage(ABC):
    """Bucketed blob storage with public URLs."""

    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store ``data`` and return the object path."""

    @abstractmethod
    def download(self, bucket: str, path: str) -> tuple[bytes, str | None]:
        """Return the object bytes and content type."""

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Return the public URL for an object path."""

    @abstractmethod
    def delete(self, bucket: str, path: str) -> None:
        """Remove an object."""


class ChangeFeed(ABC):
    """Push feed of row-level changes."""

    @abstractmethod
    def subscribe(
        self,
        table: str,
        filters: dict[str, Any],
        on_change: Callable[[ChangeEvent], None],
    ) -> Subscription:
        """Deliver changes of ``table`` rows matching ``filters`` to ``on_change``."""

    @abstractmethod
    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivering events to a subscription."""


class AuthProvider(ABC):
    """Password-based authentication."""

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Return a new session or raise :class:`AuthError`."""

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        """Invalidate a session."""

    @abstractmethod
    def request_password_reset(self, email: str, redirect_to: str) -> None:
        """Send a password reset link."""

    @abstractmethod
    def get_session(self, access_token: str) -> AuthSession | None:
        """Return the session for a token, if it is still valid."""

    @abstractmethod
    def on_session_change(
        self, callback: Callable[[str, AuthSession | None], None]
    ) -> Callable[[], None]:
        """Register ``callback(event, session)``; returns an unregister function."""


@dataclass(slots=True)
class Backend:
    """Bundle of the platform ports handed to services."""

    data: DataStore
    storage: ObjectStorage
    feed: ChangeFeed
    auth: AuthProvider
