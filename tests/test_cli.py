"""Tests for the maintenance CLI."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from datetime import timedelta

import pytest
from click.testing import CliRunner
from loguru import logger

from tabspace.cli import main
from tabspace.workspace.models.tab import TabRecord, WorkspaceSnapshot, utcnow
from tabspace.workspace.store.local import LocalKeyValueStore

KEY = "tabspace:workspace"


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def data_root(monkeypatch: pytest.MonkeyPatch, tmp_path) -> LocalKeyValueStore:
    monkeypatch.setenv("TABSPACE_STATE_STORE", "local")
    monkeypatch.setenv("TABSPACE_DATA_ROOT", str(tmp_path))
    monkeypatch.setenv("TABSPACE_STORAGE_KEY", KEY)
    monkeypatch.setenv("TABSPACE_LOG_LEVEL", "WARNING")
    return LocalKeyValueStore(tmp_path)


def _save(store: LocalKeyValueStore, *, age: timedelta = timedelta(hours=1)) -> None:
    snapshot = WorkspaceSnapshot(
        tabs=[
            TabRecord(id="tab-a", title="Customers", location="/customers"),
            TabRecord(id="tab-b", title="Order #7", location="/orders/7", active=True),
        ],
        active_tab_id="tab-b",
        timestamp=utcnow() - age,
    )
    store.set(KEY, snapshot.to_json())


def test_show_lists_tabs(data_root: LocalKeyValueStore) -> None:
    _save(data_root)

    result = CliRunner().invoke(main, ["snapshot", "show"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith(f"Snapshot '{KEY}' written")
    assert lines[1] == "  tab-a  Customers  /customers"
    assert lines[2] == "* tab-b  Order #7  /orders/7"


def test_show_does_not_delete_stale_snapshot(data_root: LocalKeyValueStore) -> None:
    _save(data_root, age=timedelta(hours=30))

    result = CliRunner().invoke(main, ["snapshot", "show"])

    assert result.exit_code == 0, result.output
    assert "No usable snapshot" in result.output
    assert data_root.get(KEY) is not None


def test_show_empty(data_root: LocalKeyValueStore) -> None:
    result = CliRunner().invoke(main, ["snapshot", "show"])
    assert result.exit_code == 0
    assert "No usable snapshot" in result.output


def test_clear(data_root: LocalKeyValueStore) -> None:
    _save(data_root)

    result = CliRunner().invoke(main, ["snapshot", "clear", "--yes"])

    assert result.exit_code == 0, result.output
    assert data_root.get(KEY) is None


def test_clear_aborts_without_confirmation(data_root: LocalKeyValueStore) -> None:
    _save(data_root)

    result = CliRunner().invoke(main, ["snapshot", "clear"], input="n\n")

    assert result.exit_code != 0
    assert data_root.get(KEY) is not None
