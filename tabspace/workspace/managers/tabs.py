"""Tab store -- the single owner of the open tabs and the active tab.

Every change to the workspace goes through a ``TabStore`` method.  A public
method applies its whole change first, then, once per outermost call:

1. persists the new workspace through the ``PersistenceAdapter``;
2. publishes ``tabs_changed`` / ``active_tab_changed``;
3. issues at most one navigation through the ``NavigationCoordinator``.

Operations on unknown tab ids are silent no-ops: they come from harmless races
such as a close button clicked twice.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Any

from loguru import logger

from tabspace.workspace.events import StateChannel
from tabspace.workspace.models.tab import TabConfig, TabRecord, new_tab_id, utcnow
from tabspace.workspace.registry import Disposable, ResourceRegistry

if TYPE_CHECKING:
    from tabspace.workspace.navigation import NavigationCoordinator
    from tabspace.workspace.persistence import PersistenceAdapter

DEFAULT_MAX_TABS = 10

Scheduler = Callable[[Callable[[], None]], Any]


def call_now(callback: Callable[[], None]) -> None:
    callback()


class TabStore:
    """Ordered collection of tab records plus the active-tab pointer.

    Constructed once per session and handed to whoever needs it; there is no
    module-level instance.
    """

    def __init__(
        self,
        *,
        persistence: PersistenceAdapter | None = None,
        registry: ResourceRegistry | None = None,
        navigation: NavigationCoordinator | None = None,
        max_tabs: int = DEFAULT_MAX_TABS,
        clock: Callable[[], datetime] = utcnow,
        scheduler: Scheduler = call_now,
    ) -> None:
        if max_tabs < 1:
            msg = f"max_tabs must be at least 1, got {max_tabs}"
            raise ValueError(msg)

        self._persistence = persistence
        self._registry = registry if registry is not None else ResourceRegistry()
        self._navigation = navigation
        self._max_tabs = max_tabs
        self._clock = clock
        self._scheduler = scheduler

        self._tabs: list[TabRecord] = []
        self._active_tab_id: str | None = None
        self._restored = False

        # Pending side effects of the mutation in progress.
        self._depth = 0
        self._dirty = False
        self._purge_storage = False
        self._navigate_to: str | None = None
        self._navigate_home = False

        self.tabs_changed: StateChannel[list[TabRecord]] = StateChannel("tabs", [])
        self.active_tab_changed: StateChannel[str | None] = StateChannel("active_tab", None)

        if navigation is not None:
            navigation.bind(self)

    # -- Properties ------------------------------------------------------------

    @property
    def max_tabs(self) -> int:
        return self._max_tabs

    @property
    def active_tab_id(self) -> str | None:
        return self._active_tab_id

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    def __len__(self) -> int:
        return len(self._tabs)

    # -- Open / activate -------------------------------------------------------

    def open_tab(self, title: str, location: str, reuse_if_exists: bool = True) -> str:
        """Open a tab for ``location`` and make it active.  Returns its id.

        With ``reuse_if_exists`` a tab already showing ``location`` is activated
        instead, keeping its saved state.  At capacity the least recently
        activated inactive tab is closed first.
        """
        with self._mutation():
            if reuse_if_exists:
                index = self._index_by_location(location)
                if index != -1:
                    self._activate(index)
                    return self._tabs[index].id

            if len(self._tabs) >= self._max_tabs:
                self._evict()

            now = self._clock()
            tab_id = new_tab_id()
            while self._index_of(tab_id) != -1:
                tab_id = new_tab_id()
            record = TabRecord(id=tab_id, title=title, location=location, created_at=now, last_accessed_at=now)
            self._tabs.append(record)
            self._dirty = True
            logger.debug("Tabs: opened {} ({})", record.id, location)
            self._activate(len(self._tabs) - 1)
            return record.id

    def open_tab_from_config(self, config: TabConfig) -> str:
        return self.open_tab(config.title, config.location, reuse_if_exists=config.reuse_if_exists)

    def activate_tab(self, tab_id: str) -> None:
        with self._mutation():
            index = self._index_of(tab_id)
            if index == -1:
                logger.debug("Tabs: activate ignored, unknown tab {}", tab_id)
                return
            self._activate(index)

    # -- Close -----------------------------------------------------------------

    def close_tab(self, tab_id: str) -> None:
        """Close a tab and release its UI instance.

        Closing the active tab activates the tab that slides into its slot, or
        the new last tab when the closed one was last.
        """
        with self._mutation():
            index = self._index_of(tab_id)
            if index == -1:
                logger.debug("Tabs: close ignored, unknown tab {}", tab_id)
                return
            self._remove(index)

    def close_all_tabs(self) -> None:
        """Close every tab, go home and purge the persisted workspace."""
        with self._mutation():
            released = self._registry.dispose_all()
            count = len(self._tabs)
            self._tabs.clear()
            self._set_active_id(None)
            self._request_home()
            self._purge_storage = True
            self._dirty = True
            logger.info("Tabs: closed all {} tabs ({} handles released)", count, released)

    def close_other_tabs(self, tab_id: str) -> None:
        with self._mutation():
            index = self._index_of(tab_id)
            if index == -1:
                logger.debug("Tabs: close-others ignored, unknown tab {}", tab_id)
                return
            keep = self._tabs[index]
            for tab in self._tabs:
                if tab.id != tab_id:
                    self._registry.dispose(tab.id)
            self._tabs = [keep]
            self._dirty = True
            self._activate(0)

    # -- Per-tab fields --------------------------------------------------------

    def update_tab_title(self, tab_id: str, title: str) -> None:
        with self._mutation():
            tab = self._get(tab_id)
            if tab is not None:
                tab.title = title
                self._dirty = True

    def save_tab_state(self, tab_id: str, state: Any) -> None:
        """Store the page's opaque state blob for ``tab_id``.  ``None`` clears it."""
        with self._mutation():
            tab = self._get(tab_id)
            if tab is not None:
                tab.page_state = state
                self._dirty = True

    def get_tab_state(self, tab_id: str) -> Any | None:
        tab = self._get(tab_id)
        return tab.page_state if tab is not None else None

    def save_scroll_position(self, tab_id: str, position: float) -> None:
        with self._mutation():
            tab = self._get(tab_id)
            if tab is not None:
                tab.scroll_position = position
                self._dirty = True

    def get_scroll_position(self, tab_id: str) -> float:
        tab = self._get(tab_id)
        if tab is None or tab.scroll_position is None:
            return 0.0
        return tab.scroll_position

    # -- Queries ---------------------------------------------------------------

    def get_active_tab(self) -> TabRecord | None:
        tab = self._get(self._active_tab_id) if self._active_tab_id is not None else None
        return tab.model_copy() if tab is not None else None

    def get_all_tabs(self) -> list[TabRecord]:
        """Return a snapshot; mutating it does not affect the store."""
        return [tab.model_copy() for tab in self._tabs]

    def get_tab(self, tab_id: str) -> TabRecord | None:
        tab = self._get(tab_id)
        return tab.model_copy() if tab is not None else None

    def find_tab_by_location(self, location: str) -> TabRecord | None:
        index = self._index_by_location(location)
        return self._tabs[index].model_copy() if index != -1 else None

    def is_active_tab(self, tab_id: str) -> bool:
        return tab_id == self._active_tab_id

    # -- UI instances ----------------------------------------------------------

    def register_component_ref(self, tab_id: str, handle: Disposable) -> None:
        """Bind a live UI instance to a tab; the store disposes it with the tab.

        A handle offered for an unknown tab is disposed at once so it cannot
        leak.
        """
        if self._index_of(tab_id) == -1:
            logger.debug("Tabs: disposing handle offered for unknown tab {}", tab_id)
            handle.dispose()
            return
        self._registry.register(tab_id, handle)

    def dispose_component_ref(self, tab_id: str) -> bool:
        return self._registry.dispose(tab_id)

    # -- Persistence -----------------------------------------------------------

    def clear_stored_state(self) -> None:
        if self._persistence is not None:
            self._persistence.clear_stored_state()

    def restore(self) -> bool:
        """Hydrate from the persisted snapshot.  Runs at most once.

        Returns ``True`` if tabs were restored.  Navigation to the restored
        active tab is handed to the scheduler so the navigator can finish its
        own start-up first.
        """
        if self._restored:
            logger.warning("Tabs: restore already ran, ignoring")
            return False
        self._restored = True

        if self._persistence is None:
            return False
        if self._tabs:
            logger.warning("Tabs: restore skipped, {} tabs already open", len(self._tabs))
            return False

        snapshot = self._persistence.load()
        if snapshot is None or not snapshot.tabs:
            return False

        tabs = snapshot.tabs
        active_id = snapshot.active_tab_id
        if active_id is not None and not any(tab.id == active_id for tab in tabs):
            logger.warning("Tabs: persisted active tab {} not found, restoring without one", active_id)
            active_id = None
        for tab in tabs:
            tab.active = tab.id == active_id
        self._tabs = list(tabs)
        self._active_tab_id = active_id
        while len(self._tabs) > self._max_tabs:
            index = self._evict_candidate()
            if index == -1:
                break
            dropped = self._tabs.pop(index)
            logger.debug("Tabs: dropped restored tab {} over capacity", dropped.id)

        self._publish()
        logger.info("Tabs: restored {} tabs (active={})", len(self._tabs), active_id)

        if active_id is not None:
            self._scheduler(partial(self._navigate_to_restored, active_id))
        return True

    def _navigate_to_restored(self, tab_id: str) -> None:
        tab = self._get(tab_id)
        if self._navigation is None or tab is None or not tab.active:
            return
        self._navigation.navigate_to_tab(tab.location)

    # -- Internals -------------------------------------------------------------

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._flush()

    def _flush(self) -> None:
        if not self._dirty:
            return
        self._dirty = False

        if self._persistence is not None:
            if self._purge_storage:
                self._persistence.clear_stored_state()
            else:
                self._persistence.save(self._tabs, self._active_tab_id)
        self._purge_storage = False

        self._publish()

        location, home = self._navigate_to, self._navigate_home
        self._navigate_to, self._navigate_home = None, False
        if self._navigation is None:
            return
        if home:
            self._navigation.navigate_home()
        elif location is not None:
            self._navigation.navigate_to_tab(location)

    def _publish(self) -> None:
        self.tabs_changed.publish(self.get_all_tabs())
        if self.active_tab_changed.value != self._active_tab_id:
            self.active_tab_changed.publish(self._active_tab_id)

    def _activate(self, index: int) -> None:
        target = self._tabs[index]
        # Never move last_accessed_at backwards, even if the clock does.
        now = max(self._clock(), target.last_accessed_at)
        for tab in self._tabs:
            tab.active = tab is target
        target.last_accessed_at = now
        self._set_active_id(target.id)
        self._navigate_to, self._navigate_home = target.location, False
        target.loaded = True
        self._dirty = True

    def _remove(self, index: int) -> None:
        removed = self._tabs[index]
        self._registry.dispose(removed.id)
        del self._tabs[index]
        self._dirty = True
        logger.debug("Tabs: closed {} ({})", removed.id, removed.location)

        if removed.active and self._tabs:
            self._activate(min(index, len(self._tabs) - 1))
        elif not self._tabs:
            self._set_active_id(None)
            self._request_home()

    def _evict(self) -> None:
        index = self._evict_candidate()
        if index == -1 and self._max_tabs == 1 and self._tabs:
            # With room for a single tab the only record is the active one.
            index = 0
        if index == -1:
            return
        logger.debug("Tabs: evicting {} to stay within {} tabs", self._tabs[index].id, self._max_tabs)
        self._remove(index)

    def _evict_candidate(self) -> int:
        """Index of the least recently activated inactive tab, or -1."""
        best = -1
        for index, tab in enumerate(self._tabs):
            if tab.active:
                continue
            if best == -1 or tab.last_accessed_at < self._tabs[best].last_accessed_at:
                best = index
        return best

    def _set_active_id(self, tab_id: str | None) -> None:
        self._active_tab_id = tab_id
        if tab_id is None:
            for tab in self._tabs:
                tab.active = False

    def _request_home(self) -> None:
        self._navigate_to, self._navigate_home = None, True

    def _get(self, tab_id: str) -> TabRecord | None:
        index = self._index_of(tab_id)
        return self._tabs[index] if index != -1 else None

    def _index_of(self, tab_id: str) -> int:
        for index, tab in enumerate(self._tabs):
            if tab.id == tab_id:
                return index
        return -1

    def _index_by_location(self, location: str) -> int:
        for index, tab in enumerate(self._tabs):
            if tab.location == location:
                return index
        return -1
