"""Workspace persistence adapter.

Writes the whole workspace (every tab plus the active id and a write
timestamp) under a single key after each mutation, and reads it back once at
startup.  Persistence is best-effort: a failed write is logged and forgotten,
and an unreadable, corrupt or stale snapshot is deleted and treated as if
nothing had been saved.  Nothing here ever raises into the tab store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from loguru import logger
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from tabspace.workspace.models.tab import TabRecord, WorkspaceSnapshot, utcnow
from tabspace.workspace.store.base import KeyValueStore, StoreDecodeError, StoreError

DEFAULT_STORAGE_KEY = "tabspace:workspace"
DEFAULT_STALE_AFTER = timedelta(hours=24)


class PersistenceAdapter:
    """Serializes workspace snapshots into a ``KeyValueStore``."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        stale_after: timedelta = DEFAULT_STALE_AFTER,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._key = key
        self._stale_after = stale_after
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    @property
    def stale_after(self) -> timedelta:
        return self._stale_after

    # -- Write -----------------------------------------------------------------

    def save(self, tabs: Iterable[TabRecord], active_tab_id: str | None) -> bool:
        """Write a snapshot.  Returns ``False`` (after logging) if the write failed."""
        try:
            snapshot = WorkspaceSnapshot(tabs=list(tabs), active_tab_id=active_tab_id, timestamp=self._clock())
            raw = snapshot.to_json()
        except (PydanticSerializationError, ValueError, TypeError) as exc:
            # Page state that JSON cannot carry.
            logger.warning("Failed to serialize workspace for '{}': {}", self._key, exc)
            return False

        try:
            self._store.set(self._key, raw)
        except StoreError as exc:
            logger.warning("Failed to persist workspace under '{}': {}", self._key, exc)
            return False
        return True

    # -- Read ------------------------------------------------------------------

    def load(self, *, purge_invalid: bool = True) -> WorkspaceSnapshot | None:
        """Read the persisted snapshot.

        Returns ``None`` when nothing usable is stored.  Stale and corrupt
        snapshots are deleted unless ``purge_invalid`` is false.
        """
        try:
            raw = self._store.get(self._key)
        except StoreDecodeError as exc:
            logger.warning("Discarding undecodable workspace snapshot '{}': {}", self._key, exc)
            if purge_invalid:
                self.clear_stored_state()
            return None
        except StoreError as exc:
            logger.warning("Failed to read persisted workspace '{}': {}", self._key, exc)
            return None

        if raw is None:
            return None

        try:
            snapshot = WorkspaceSnapshot.from_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding corrupt workspace snapshot '{}': {}", self._key, exc)
            if purge_invalid:
                self.clear_stored_state()
            return None

        if self.is_stale(snapshot):
            logger.info(
                "Discarding stale workspace snapshot '{}' (written {})",
                self._key,
                snapshot.timestamp.isoformat(),
            )
            if purge_invalid:
                self.clear_stored_state()
            return None

        return snapshot

    def is_stale(self, snapshot: WorkspaceSnapshot) -> bool:
        return self._clock() - snapshot.timestamp > self._stale_after

    def age(self, snapshot: WorkspaceSnapshot) -> timedelta:
        return self._clock() - snapshot.timestamp

    # -- Delete ----------------------------------------------------------------

    def clear_stored_state(self) -> None:
        try:
            self._store.delete(self._key)
        except StoreError as exc:
            logger.warning("Failed to clear persisted workspace '{}': {}", self._key, exc)
