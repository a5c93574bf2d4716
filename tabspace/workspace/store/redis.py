"""Redis key-value store.

Keeps the workspace snapshot as a plain string value, so several processes
(or a restarted one on another host) can share the same saved workspace.
Errors raised by redis-py are wrapped in ``StoreError``, and a value that is
not UTF-8 text raises ``StoreDecodeError``.
"""

from __future__ import annotations

import redis

from tabspace.workspace.store.base import StoreDecodeError, StoreError


class RedisKeyValueStore:
    """Redis implementation of the KeyValueStore protocol."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisKeyValueStore:
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except UnicodeDecodeError as exc:
            # Raised by the client itself when decode_responses is on.
            msg = f"Value of '{key}' in redis is not valid UTF-8: {exc}"
            raise StoreDecodeError(msg) from exc
        except redis.RedisError as exc:
            msg = f"Failed to read '{key}' from redis: {exc}"
            raise StoreError(msg) from exc
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = f"Value of '{key}' in redis is not valid UTF-8: {exc}"
                raise StoreDecodeError(msg) from exc
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except redis.RedisError as exc:
            msg = f"Failed to write '{key}' to redis: {exc}"
            raise StoreError(msg) from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            msg = f"Failed to delete '{key}' from redis: {exc}"
            raise StoreError(msg) from exc

    def close(self) -> None:
        self._client.close()
