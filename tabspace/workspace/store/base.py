"""Durable key-value store interface for workspace persistence.

The workspace writes one serialized snapshot under a single key on every
mutation and reads it once at startup.  The interface is deliberately tiny so
that any durable string store (a JSON file, Redis, an in-memory dict in tests)
can back it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class StoreError(RuntimeError):
    """Raised by a store backend when a read or write cannot be completed."""


class StoreQuotaError(StoreError):
    """Raised when a write would exceed the backend's capacity."""


class StoreDecodeError(StoreError):
    """Raised when a stored value exists but is not valid UTF-8 text."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous protocol for reading and writing string values by key."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Delete the key.  No-op if not found."""
        ...
