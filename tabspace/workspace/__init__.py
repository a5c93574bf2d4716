"""Multi-tab workspace: open tabs, the active tab, and their saved scratch state."""

from tabspace.workspace.app import build_workspace
from tabspace.workspace.managers.tabs import TabStore
from tabspace.workspace.models import TabConfig, TabRecord, WorkspaceSnapshot
from tabspace.workspace.navigation import MemoryRouter, NavigationCoordinator, Navigator
from tabspace.workspace.pages import PageStateBinding
from tabspace.workspace.persistence import PersistenceAdapter
from tabspace.workspace.registry import Disposable, ResourceRegistry

__all__ = [
    "Disposable",
    "MemoryRouter",
    "NavigationCoordinator",
    "Navigator",
    "PageStateBinding",
    "PersistenceAdapter",
    "ResourceRegistry",
    "TabConfig",
    "TabRecord",
    "TabStore",
    "WorkspaceSnapshot",
    "build_workspace",
]
