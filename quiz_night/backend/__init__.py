"""Backend platform ports and the in-memory implementation."""

from .base import (
    AuthError,
    AuthProvider,
    AuthSession,
    Backend,
    BackendError,
    ChangeEvent,
    ChangeFeed,
    DataStore,
    ObjectStorage,
    RowNotFoundError,
    StorageError,
    Subscription,
)
from .memory import create_memory_backend

__all__ = [
    "AuthError",
    "AuthProvider",
    "AuthSession",
    "Backend",
    "BackendError",
    "ChangeEvent",
    "ChangeFeed",
    "DataStore",
    "ObjectStorage",
    "RowNotFoundError",
    "StorageError",
    "Subscription",
    "create_memory_backend",
]
