"""Data models for the tab workspace."""

from tabspace.workspace.models.tab import TabConfig, TabRecord, WorkspaceSnapshot

__all__ = [
    "TabConfig",
    "TabRecord",
    "WorkspaceSnapshot",
]
