"""Unit tests for the memory and local filesystem key-value stores.

No database or Docker required -- uses a temporary directory.
"""

from __future__ import annotations

import pytest

from tabspace.workspace.store import (
    KeyValueStore,
    LocalKeyValueStore,
    MemoryKeyValueStore,
    StoreDecodeError,
    StoreError,
    StoreQuotaError,
)


@pytest.fixture(params=["memory", "local"])
def store(request: pytest.FixtureRequest, tmp_path) -> KeyValueStore:
    if request.param == "memory":
        return MemoryKeyValueStore()
    return LocalKeyValueStore(tmp_path)


def test_backends_satisfy_protocol(store: KeyValueStore) -> None:
    assert isinstance(store, KeyValueStore)


def test_set_and_get(store: KeyValueStore) -> None:
    store.set("workspace", '{"tabs": []}')
    assert store.get("workspace") == '{"tabs": []}'


def test_get_missing(store: KeyValueStore) -> None:
    assert store.get("nonexistent") is None


def test_overwrite(store: KeyValueStore) -> None:
    store.set("workspace", "one")
    store.set("workspace", "two")
    assert store.get("workspace") == "two"


def test_delete(store: KeyValueStore) -> None:
    store.set("workspace", "value")
    store.delete("workspace")
    assert store.get("workspace") is None

    # Delete non-existent is a no-op.
    store.delete("nonexistent")


def test_keys_isolated(store: KeyValueStore) -> None:
    store.set("a", "1")
    store.set("b", "2")
    store.delete("a")
    assert store.get("a") is None
    assert store.get("b") == "2"


# ---------------------------------------------------------------------------
# Memory quota
# ---------------------------------------------------------------------------


def test_memory_quota_rejects_oversized_write() -> None:
    store = MemoryKeyValueStore(max_bytes=8)
    store.set("k", "1234")

    with pytest.raises(StoreQuotaError):
        store.set("k", "123456789")

    assert store.get("k") == "1234"


def test_memory_quota_counts_other_keys() -> None:
    store = MemoryKeyValueStore(max_bytes=8)
    store.set("a", "12345")
    with pytest.raises(StoreQuotaError):
        store.set("b", "12345")
    # Replacing a key only counts its new size.
    store.set("a", "12345678")


def test_quota_error_is_store_error() -> None:
    assert issubclass(StoreQuotaError, StoreError)


# ---------------------------------------------------------------------------
# Local layout
# ---------------------------------------------------------------------------


def test_local_layout(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path)
    store.set("workspace", "{}")
    assert (tmp_path / "state" / "workspace.json").read_text(encoding="utf-8") == "{}"


def test_local_prefix_creates_namespaced_path(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path, prefix="alice")
    store.set("workspace", "{}")
    assert (tmp_path / "alice" / "state" / "workspace.json").exists()


def test_local_unsafe_key_characters(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path)
    store.set("tabspace:workspace/../x", "v")

    assert store.path_for("tabspace:workspace/../x").parent == tmp_path / "state"
    assert store.get("tabspace:workspace/../x") == "v"


def test_local_leaves_no_temp_files(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path)
    store.set("workspace", "one")
    store.set("workspace", "two")
    assert sorted(p.name for p in (tmp_path / "state").iterdir()) == ["workspace.json"]


def test_local_write_failure_raises_store_error(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = LocalKeyValueStore(blocker)

    with pytest.raises(StoreError):
        store.set("workspace", "{}")


def test_local_undecodable_value_raises_decode_error(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path)
    path = store.path_for("workspace")
    path.parent.mkdir(parents=True)
    path.write_bytes(b'{"tabs": [], "x": "\xff\xfe"}')

    with pytest.raises(StoreDecodeError):
        store.get("workspace")


def test_local_delete_failure_raises_store_error(tmp_path) -> None:
    store = LocalKeyValueStore(tmp_path)
    # A directory where the value file should be cannot be unlinked.
    store.path_for("workspace").mkdir(parents=True)

    with pytest.raises(StoreError):
        store.delete("workspace")
