"""Shared test fixtures.

Everything here is in-process: a manual clock, an in-memory router and an
in-memory key-value store.  Tests needing Docker (the Redis backend) live in
their own module and are marked with ``@pytest.mark.integration``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from tabspace.workspace.managers.tabs import TabStore
from tabspace.workspace.navigation import MemoryRouter, NavigationCoordinator
from tabspace.workspace.persistence import PersistenceAdapter
from tabspace.workspace.registry import ResourceRegistry
from tabspace.workspace.settings import get_settings
from tabspace.workspace.store.memory import MemoryKeyValueStore

START = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)


class ManualClock:
    """Clock that moves forward by ``step`` on every read."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class DeferredScheduler:
    """Collects scheduled callbacks until ``run_all`` is called."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], None]] = []

    def __call__(self, callback: Callable[[], None]) -> None:
        self.pending.append(callback)

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for callback in pending:
            callback()


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Keep TABSPACE_* env overrides from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler() -> DeferredScheduler:
    return DeferredScheduler()


@pytest.fixture
def router() -> MemoryRouter:
    return MemoryRouter("/")


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(kv_store: MemoryKeyValueStore, clock: ManualClock) -> PersistenceAdapter:
    return PersistenceAdapter(kv_store, key="test:workspace", clock=clock)


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def tabs(
    persistence: PersistenceAdapter,
    registry: ResourceRegistry,
    router: MemoryRouter,
    clock: ManualClock,
    scheduler: DeferredScheduler,
) -> TabStore:
    return TabStore(
        persistence=persistence,
        registry=registry,
        navigation=NavigationCoordinator(router, home_location="/"),
        clock=clock,
        scheduler=scheduler,
    )
