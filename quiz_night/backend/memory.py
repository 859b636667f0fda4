"""In-process implementation of the backend ports.

Used for local runs of the host console and API and for the test suite. Every
port guards its state with a lock so the API worker threads and the Qt thread
can share one instance. Change events are dispatched after the write has been
committed and the lock released, so subscribers may call back into the store.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
import hashlib
from itertools import count
import logging
import secrets
from threading import Lock
from typing import Any, Callable
from uuid import uuid4

from quiz_night.backend.base import (
    AuthError,
    AuthProvider,
    AuthSession,
    Backend,
    ChangeEvent,
    ChangeFeed,
    DataStore,
    ObjectStorage,
    Row,
    RowNotFoundError,
    StorageError,
    Subscription,
)
from quiz_night.constants.backend_constants import DEFAULT_PUBLIC_BASE_URL, PUBLIC_OBJECT_PREFIX

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _matches(row: Row, filters: dict[str, Any] | None, contains: dict[str, list[Any]] | None = None) -> bool:
    if filters:
        for key, expected in filters.items():
            if row.get(key) != expected:
                return False
    if contains:
        for key, required in contains.items():
            values = row.get(key) or []
            if not all(item in values for item in required):
                return False
    return True


class InMemoryDataStore(DataStore, ChangeFeed):
    """Dictionary-backed tables plus the change feed fed by their writes."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tables: dict[str, dict[str, Row]] = {}
        self._sequence: dict[str, int] = {}
        self._counter = count(1)
        self._subscriptions: dict[str, Subscription] = {}

    # --- DataStore ---

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
        with self._lock:
            rows = [row for row in self._tables.get(table, {}).values() if _matches(row, filters, contains)]
            if order_by is not None:
                rows.sort(
                    key=lambda r: (r.get(order_by) is not None, r.get(order_by), self._sequence[r["id"]]),
                    reverse=descending,
                )
            else:
                rows.sort(key=lambda r: self._sequence[r["id"]])
            end = None if limit is None else offset + limit
            return copy.deepcopy(rows[offset:end])

    def count(self, table: str, *, filters: dict[str, Any] | None = None) -> int:
        with self._lock:
            return sum(1 for row in self._tables.get(table, {}).values() if _matches(row, filters))

    def get(self, table: str, row_id: str) -> Row:
        with self._lock:
            row = self._tables.get(table, {}).get(row_id)
            if row is None:
                raise RowNotFoundError(f"No row with id {row_id!r} in {table}.")
            return copy.deepcopy(row)

    def insert(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        now = _utcnow()
        stored.setdefault("id", uuid4().hex)
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        with self._lock:
            rows = self._tables.setdefault(table, {})
            if stored["id"] in rows:
                raise StorageError(f"Duplicate id {stored['id']!r} in {table}.")
            rows[stored["id"]] = stored
            self._sequence[stored["id"]] = next(self._counter)
            result = copy.deepcopy(stored)
        self._dispatch(ChangeEvent(table=table, event_type="INSERT", row=result))
        return copy.deepcopy(result)

    def update(self, table: str, row_id: str, changes: Row) -> Row:
        with self._lock:
            row = self._tables.get(table, {}).get(row_id)
            if row is None:
                raise RowNotFoundError(f"No row with id {row_id!r} in {table}.")
            row.update(copy.deepcopy(changes))
            row["id"] = row_id
            if "updated_at" not in changes:
                row["updated_at"] = _utcnow()
            result = copy.deepcopy(row)
        self._dispatch(ChangeEvent(table=table, event_type="UPDATE", row=result))
        return copy.deepcopy(result)

    def delete(self, table: str, row_id: str) -> None:
        with self._lock:
            row = self._tables.get(table, {}).pop(row_id, None)
            if row is None:
                raise RowNotFoundError(f"No row with id {row_id!r} in {table}.")
            self._sequence.pop(row_id, None)
        self._dispatch(ChangeEvent(table=table, event_type="DELETE", row=row))

    # --- ChangeFeed ---

    def subscribe(
        self,
        table: str,
        filters: dict[str, Any],
        on_change: Callable[[ChangeEvent], None],
    ) -> Subscription:
        subscription = Subscription(
            subscription_id=uuid4().hex,
            table=table,
            filters=dict(filters),
            on_change=on_change,
        )
        with self._lock:
            self._subscriptions[subscription.subscription_id] = subscription
        logger.debug("Subscribed to %s with %s", table, filters)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.pop(subscription.subscription_id, None)
            subscription.active = False

    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _dispatch(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [
                sub
                for sub in self._subscriptions.values()
                if sub.table == event.table and _matches(event.row, sub.filters)
            ]
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.on_change(copy.deepcopy(event))
            except Exception:
                logger.exception("Change subscriber for %s failed", event.table)


class InMemoryObjectStorage(ObjectStorage):
    """Keeps uploaded objects in memory, keyed by bucket and path."""

    def __init__(self, public_base_url: str = DEFAULT_PUBLIC_BASE_URL) -> None:
        self._lock = Lock()
        self._objects: dict[tuple[str, str], tuple[bytes, str | None]] = {}
        self._public_base_url = public_base_url.rstrip("/")

    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        cleaned = path.strip("/")
        if not cleaned:
            raise StorageError("Object path must not be empty.")
        with self._lock:
            if (bucket, cleaned) in self._objects:
                raise StorageError(f"Object {cleaned!r} already exists in {bucket}.")
            self._objects[(bucket, cleaned)] = (bytes(data), content_type)
        return cleaned

    def download(self, bucket: str, path: str) -> tuple[bytes, str | None]:
        with self._lock:
            stored = self._objects.get((bucket, path.strip("/")))
        if stored is None:
            raise StorageError(f"Object {path!r} not found in {bucket}.")
        return stored

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}{PUBLIC_OBJECT_PREFIX}{bucket}/{path.strip('/')}"

    def delete(self, bucket: str, path: str) -> None:
        with self._lock:
            removed = self._objects.pop((bucket, path.strip("/")), None)
        if removed is None:
            raise StorageError(f"Object {path!r} not found in {bucket}.")

    def exists(self, bucket: str, path: str) -> bool:
        with self._lock:
            return (bucket, path.strip("/")) in self._objects


class InMemoryAuth(AuthProvider):
    """Email/password accounts with opaque bearer tokens."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: dict[str, tuple[str, str, str]] = {}  # email -> (user_id, salt, hash)
        self._sessions: dict[str, AuthSession] = {}
        self._listeners: list[Callable[[str, AuthSession | None], None]] = []
        self.reset_requests: list[tuple[str, str]] = []

    @staticmethod
    def _hash_password(password: str, salt: str) -> str:
        return hashlib.sha256(f"{salt}{password}".encode("utf-8")).hexdigest()

    def register_user(self, email: str, password: str) -> str:
        normalized = email.strip().lower()
        if not normalized or not password:
            raise AuthError("Email and password are required.")
        salt = secrets.token_hex(8)
        with self._lock:
            existing = self._users.get(normalized)
            user_id = existing[0] if existing else uuid4().hex
            self._users[normalized] = (user_id, salt, self._hash_password(password, salt))
        return user_id

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        normalized = email.strip().lower()
        with self._lock:
            account = self._users.get(normalized)
            if account is None or self._hash_password(password, account[1]) != account[2]:
                raise AuthError("Invalid login credentials.")
            session = AuthSession(
                access_token=secrets.token_urlsafe(24),
                user_id=account[0],
                email=normalized,
                created_at=_utcnow(),
            )
            self._sessions[session.access_token] = session
            listeners = list(self._listeners)
        for listener in listeners:
            listener("SIGNED_IN", session)
        return session

    def sign_out(self, access_token: str) -> None:
        with self._lock:
            session = self._sessions.pop(access_token, None)
            listeners = list(self._listeners)
        if session is None:
            raise AuthError("Session not found.")
        for listener in listeners:
            listener("SIGNED_OUT", None)

    def request_password_reset(self, email: str, redirect_to: str) -> None:
        normalized = email.strip().lower()
        if not normalized:
            raise AuthError("Email is required.")
        with self._lock:
            # Unknown addresses are accepted silently to avoid account probing.
            self.reset_requests.append((normalized, redirect_to))
        logger.info("Password reset requested for %s", normalized)

    def get_session(self, access_token: str) -> AuthSession | None:
        with self._lock:
            return self._sessions.get(access_token)

    def on_session_change(
        self, callback: Callable[[str, AuthSession | None], None]
    ) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unregister() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unregister


def create_memory_backend(public_base_url: str = DEFAULT_PUBLIC_BASE_URL) -> Backend:
    """Build a :class:`Backend` whose ports all live in this process."""
    store = InMemoryDataStore()
    return Backend(
        data=store,
        storage=InMemoryObjectStorage(public_base_url),
        feed=store,
        auth=InMemoryAuth(),
    )
