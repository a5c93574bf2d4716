"""Workspace assembly.

``build_workspace`` is the start-up sequence: pick the durable store from
settings, wire the persistence adapter, resource registry and navigation
coordinator into a ``TabStore``, and hydrate it once from the saved snapshot.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from loguru import logger

from tabspace.workspace.managers.tabs import Scheduler, TabStore
from tabspace.workspace.navigation import MemoryRouter, NavigationCoordinator, Navigator
from tabspace.workspace.persistence import PersistenceAdapter
from tabspace.workspace.registry import ResourceRegistry
from tabspace.workspace.settings import TabspaceSettings, get_settings
from tabspace.workspace.store.base import KeyValueStore
from tabspace.workspace.store.local import LocalKeyValueStore
from tabspace.workspace.store.memory import MemoryKeyValueStore


def create_state_store(settings: TabspaceSettings) -> KeyValueStore:
    """Instantiate the key-value backend selected by ``settings.state_store``."""
    if settings.state_store == "memory":
        return MemoryKeyValueStore()
    if settings.state_store == "redis":
        if not settings.redis_url:
            msg = "TABSPACE_REDIS_URL is required when TABSPACE_STATE_STORE=redis"
            raise ValueError(msg)
        from tabspace.workspace.store.redis import RedisKeyValueStore

        logger.info("Workspace state store: redis")
        return RedisKeyValueStore.from_url(settings.redis_url)
    logger.info("Workspace state store: local ({})", settings.data_root)
    return LocalKeyValueStore(settings.data_root, prefix=settings.data_prefix)


def create_persistence(settings: TabspaceSettings, store: KeyValueStore | None = None) -> PersistenceAdapter:
    return PersistenceAdapter(
        store if store is not None else create_state_store(settings),
        key=settings.storage_key,
        stale_after=settings.stale_after,
    )


def next_tick(callback: Callable[[], None]) -> None:
    """Run ``callback`` on the next loop iteration, or now if no loop is running."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
    else:
        loop.call_soon(callback)


def build_workspace(
    settings: TabspaceSettings | None = None,
    *,
    navigator: Navigator | None = None,
    store: KeyValueStore | None = None,
    scheduler: Scheduler = next_tick,
    restore: bool = True,
) -> TabStore:
    """Create a ready-to-use ``TabStore``, hydrated from the saved workspace."""
    settings = settings or get_settings()
    navigator = navigator if navigator is not None else MemoryRouter(settings.home_location)

    tabs = TabStore(
        persistence=create_persistence(settings, store),
        registry=ResourceRegistry(),
        navigation=NavigationCoordinator(navigator, home_location=settings.home_location),
        max_tabs=settings.max_tabs,
        scheduler=scheduler,
    )
    if restore:
        tabs.restore()
    return tabs
