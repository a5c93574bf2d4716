"""Workspace configuration loaded from TABSPACE_* environment variables."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TabspaceSettings(BaseSettings):
    """Tab workspace settings.

    All fields are read from environment variables with the ``TABSPACE_``
    prefix.  For example, ``TABSPACE_MAX_TABS=5`` maps to ``max_tabs``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Workspace -------------------------------------------------------------
    max_tabs: int = Field(default=10, ge=1)
    """Capacity bound.  Opening a tab beyond it evicts the oldest inactive tab."""

    home_location: str = "/"
    """Where the navigator is sent once the last tab is closed."""

    # -- Persistence -----------------------------------------------------------
    storage_key: str = "tabspace:workspace"
    stale_after_hours: float = Field(default=24.0, gt=0)
    """Persisted snapshots older than this are discarded instead of restored."""

    state_store: Literal["memory", "local", "redis"] = "local"

    # Local (only when state_store = "local")
    data_root: str = "./data"
    data_prefix: str | None = None
    """Optional namespace directory: ``{data_root}/{data_prefix}/state/...``."""

    # Redis (only when state_store = "redis")
    redis_url: str | None = None

    # -- Helpers ---------------------------------------------------------------

    @property
    def stale_after(self) -> timedelta:
        return timedelta(hours=self.stale_after_hours)


@lru_cache(maxsize=1)
def get_settings() -> TabspaceSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return TabspaceSettings()
