"""Local filesystem key-value store.

Stores each key as a file under a data root with optional namespace prefix::

    {data_root}/{prefix}/state/{key}.json

When prefix is None, the path collapses to::

    {data_root}/state/{key}.json

Writes are atomic: data is written to a temporary file in the same directory,
then renamed to the target path.  This prevents corrupt reads if the process
crashes mid-write.
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from pathlib import Path

from tabspace.workspace.store.base import StoreDecodeError, StoreError

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class LocalKeyValueStore:
    """Local filesystem implementation of the KeyValueStore protocol."""

    def __init__(self, data_root: str | Path, prefix: str | None = None) -> None:
        base = Path(data_root)
        if prefix:
            base = base / prefix
        self._base = base / "state"

    def path_for(self, key: str) -> Path:
        """Map a key to its file; characters unsafe in file names become ``_``."""
        return self._base / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            msg = f"{path} is not valid UTF-8: {exc}"
            raise StoreDecodeError(msg) from exc
        except OSError as exc:
            msg = f"Failed to read {path}: {exc}"
            raise StoreError(msg) from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            _atomic_write(path, value)
        except OSError as exc:
            msg = f"Failed to write {path}: {exc}"
            raise StoreError(msg) from exc

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            msg = f"Failed to delete {path}: {exc}"
            raise StoreError(msg) from exc


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is atomic
    on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
