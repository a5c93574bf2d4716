"""In-process registry of live UI instances bound to tabs.

Each tab id owns at most one disposable handle.  Registering a new handle
disposes the one it replaces; removing a tab disposes its handle.  Every
handle that leaves the registry is disposed exactly once.  Ephemeral -- empty
on process restart.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from loguru import logger


@runtime_checkable
class Disposable(Protocol):
    """A live UI instance that must be released when its tab goes away."""

    def dispose(self) -> None: ...


class ResourceRegistry:
    """Maps tab id -> the live handle rendered for that tab."""

    def __init__(self) -> None:
        self._handles: dict[str, Disposable] = {}

    # -- Mutation --------------------------------------------------------------

    def register(self, tab_id: str, handle: Disposable) -> None:
        """Store ``handle`` for ``tab_id``, disposing any previous handle first.

        Re-registering the handle that is already stored is a no-op.
        """
        current = self._handles.get(tab_id)
        if current is handle:
            return
        if current is not None:
            self.dispose(tab_id)
        logger.debug("Registry: register handle for tab {}", tab_id)
        self._handles[tab_id] = handle

    def dispose(self, tab_id: str) -> bool:
        """Dispose and forget the handle for ``tab_id``.

        Returns ``True`` if there was a handle.  The mapping is removed before
        ``dispose()`` runs, so a failing handle is never disposed twice.
        """
        handle = self._handles.pop(tab_id, None)
        if handle is None:
            return False
        logger.debug("Registry: dispose handle for tab {}", tab_id)
        try:
            handle.dispose()
        except Exception:
            logger.exception("Registry: handle for tab {} failed to dispose", tab_id)
        return True

    def dispose_all(self) -> int:
        """Dispose every handle.  Returns how many were released."""
        tab_ids = list(self._handles)
        for tab_id in tab_ids:
            self.dispose(tab_id)
        return len(tab_ids)

    # -- Query -----------------------------------------------------------------

    def get(self, tab_id: str) -> Disposable | None:
        return self._handles.get(tab_id)

    def tab_ids(self) -> list[str]:
        return list(self._handles)

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)
