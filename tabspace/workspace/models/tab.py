"""Tab and workspace snapshot models.

A tab is one open logical page: its own location, title and scratch state.
The snapshot is the wire format written to the durable key-value store; field
names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator
from pydantic.alias_generators import to_camel

# Fields that are omitted from the serialized form when unset.
_OPTIONAL_FIELDS = ("scroll_position", "page_state", "scrollPosition", "pageState")


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_tab_id() -> str:
    return f"tab-{uuid.uuid4().hex[:12]}"


def _ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so comparisons never mix naive and aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TabConfig(BaseModel):
    """Arguments for opening a tab, as passed by a shell menu entry."""

    title: str
    location: str
    reuse_if_exists: bool = True


class TabRecord(BaseModel):
    """One open workspace entry.

    ``page_state`` belongs to the page that owns the tab.  The store hands it
    back unchanged and never looks inside.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_tab_id)
    title: str
    location: str
    active: bool = False
    loaded: bool = False
    scroll_position: float | None = None
    page_state: Any | None = None
    created_at: datetime = Field(default_factory=utcnow)
    last_accessed_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "last_accessed_at")
    @classmethod
    def _aware_timestamps(cls, value: datetime) -> datetime:
        return _ensure_aware(value)

    @model_serializer(mode="wrap")
    def _drop_absent(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        for key in _OPTIONAL_FIELDS:
            if key in data and data[key] is None:
                del data[key]
        return data


class WorkspaceSnapshot(BaseModel):
    """Everything needed to rebuild the workspace after a reload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tabs: list[TabRecord] = Field(default_factory=list)
    active_tab_id: str | None = None
    timestamp: datetime = Field(default_factory=utcnow, description="Write time, used for the staleness check")

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime) -> datetime:
        return _ensure_aware(value)

    @model_validator(mode="after")
    def _unique_ids(self) -> WorkspaceSnapshot:
        seen: set[str] = set()
        for tab in self.tabs:
            if tab.id in seen:
                msg = f"Duplicate tab id in snapshot: {tab.id}"
                raise ValueError(msg)
            seen.add(tab.id)
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> WorkspaceSnapshot:
        return cls.model_validate_json(raw)
