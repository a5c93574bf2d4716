"""Navigation coordination between the active tab and the current location.

Two rules are kept in step:

- activating a tab moves the navigator to the tab's location;
- the navigator moving (by any means) activates the tab at that location.

The loop between them is broken by one check: the navigator is only commanded
when the target differs from its current location, so a navigation caused by
an activation reports a location whose tab is already active.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from loguru import logger

from tabspace.workspace.events import StateChannel

if TYPE_CHECKING:
    from tabspace.workspace.managers.tabs import TabStore

LocationListener = Callable[[str], None]


@runtime_checkable
class Navigator(Protocol):
    """The routing collaborator the workspace drives and listens to."""

    @property
    def current_location(self) -> str: ...

    def navigate_to(self, location: str) -> None: ...

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        """Call ``listener(location)`` after every location change."""
        ...


class MemoryRouter:
    """In-process navigator with a history stack.

    Used when the workspace runs headless (CLI, tests) or when the host shell
    has no router of its own.
    """

    def __init__(self, initial_location: str = "/") -> None:
        self._history: list[str] = [initial_location]
        self._changes: StateChannel[str] = StateChannel("location", initial_location)

    @property
    def current_location(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def navigate_to(self, location: str) -> None:
        self._history.append(location)
        self._changes.publish(location)

    def back(self) -> bool:
        """Return to the previous location.  ``False`` if there is none."""
        if len(self._history) < 2:
            return False
        self._history.pop()
        self._changes.publish(self._history[-1])
        return True

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        return self._changes.subscribe(listener, replay=False)


class NavigationCoordinator:
    """Bidirectional glue between the tab store and a ``Navigator``."""

    def __init__(self, navigator: Navigator, *, home_location: str = "/") -> None:
        self._navigator = navigator
        self._home_location = home_location
        self._tabs: TabStore | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def navigator(self) -> Navigator:
        return self._navigator

    @property
    def home_location(self) -> str:
        return self._home_location

    # -- Lifecycle -------------------------------------------------------------

    def bind(self, tabs: TabStore) -> None:
        """Start following navigator changes on behalf of ``tabs``."""
        self.unbind()
        self._tabs = tabs
        self._unsubscribe = self._navigator.subscribe(self.on_location_changed)

    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._tabs = None

    # -- Tab -> location -------------------------------------------------------

    def navigate_to_tab(self, location: str) -> bool:
        """Move the navigator to ``location`` unless it is already there.

        This guard is what keeps activation and navigation from re-triggering
        each other; callers must not bypass it.
        """
        if location == self._navigator.current_location:
            return False
        logger.debug("Navigation: {} -> {}", self._navigator.current_location, location)
        self._navigator.navigate_to(location)
        return True

    def navigate_home(self) -> None:
        logger.debug("Navigation: home ({})", self._home_location)
        self._navigator.navigate_to(self._home_location)

    # -- Location -> tab -------------------------------------------------------

    def on_location_changed(self, location: str) -> None:
        """Activate the tab shown at ``location``, if there is one.

        A location with no tab leaves the active tab untouched.
        """
        if self._tabs is None:
            return
        active = self._tabs.get_active_tab()
        if active is not None and active.location == location:
            return
        match = self._tabs.find_tab_by_location(location)
        if match is None:
            logger.debug("Navigation: no tab open for {}", location)
            return
        self._tabs.activate_tab(match.id)
