"""In-memory key-value store.

Lives for the lifetime of the process only.  ``max_bytes`` models a storage
quota: a write whose encoded size would push the total past it is rejected with
``StoreQuotaError`` and leaves the previous value in place.
"""

from __future__ import annotations

from tabspace.workspace.store.base import StoreQuotaError


class MemoryKeyValueStore:
    """Dict-backed implementation of the KeyValueStore protocol."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            needed = others + len(value.encode("utf-8"))
            if needed > self._max_bytes:
                msg = f"Quota exceeded writing '{key}': {needed} > {self._max_bytes} bytes"
                raise StoreQuotaError(msg)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data
