"""Durable key-value stores for workspace persistence."""

from tabspace.workspace.store.base import KeyValueStore, StoreDecodeError, StoreError, StoreQuotaError
from tabspace.workspace.store.local import LocalKeyValueStore
from tabspace.workspace.store.memory import MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "LocalKeyValueStore",
    "MemoryKeyValueStore",
    "StoreDecodeError",
    "StoreError",
    "StoreQuotaError",
]
