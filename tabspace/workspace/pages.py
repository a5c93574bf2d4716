"""Page-side helper for keeping scratch state in the tab a page lives in.

A page captures its tab id once, when it is created (the tab being shown is
the active one), and from then on saves and restores through that id even if
the user switches to another tab in between::

    binding = PageStateBinding(tabs)
    form = binding.restore(CustomerForm) or CustomerForm()
    ...
    binding.save(form)          # on every change
    binding.clear()             # after a successful submit
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from tabspace.workspace.managers.tabs import TabStore
    from tabspace.workspace.registry import Disposable

M = TypeVar("M", bound=BaseModel)


class PageStateBinding:
    """Binds one page instance to the tab it was opened in."""

    def __init__(self, tabs: TabStore, tab_id: str | None = None) -> None:
        self._tabs = tabs
        if tab_id is None:
            active = tabs.get_active_tab()
            tab_id = active.id if active is not None else None
        self._tab_id = tab_id

    @property
    def tab_id(self) -> str | None:
        return self._tab_id

    @property
    def bound(self) -> bool:
        return self._tab_id is not None

    # -- Page state ------------------------------------------------------------

    def save(self, state: BaseModel | Any) -> None:
        """Save ``state``; pydantic models are stored as plain JSON data."""
        if self._tab_id is None:
            return
        if isinstance(state, BaseModel):
            state = state.model_dump(mode="json")
        self._tabs.save_tab_state(self._tab_id, state)

    def restore(self, model: type[M] | None = None) -> M | Any | None:
        """Return the saved state, validated into ``model`` when given.

        State that no longer fits ``model`` is logged and treated as absent.
        """
        if self._tab_id is None:
            return None
        state = self._tabs.get_tab_state(self._tab_id)
        if state is None or model is None:
            return state
        try:
            return model.model_validate(state)
        except ValidationError as exc:
            logger.warning("Ignoring saved state for tab {} ({}): {}", self._tab_id, model.__name__, exc)
            return None

    def clear(self) -> None:
        if self._tab_id is not None:
            self._tabs.save_tab_state(self._tab_id, None)

    # -- Scroll / title --------------------------------------------------------

    def save_scroll_position(self, position: float) -> None:
        if self._tab_id is not None:
            self._tabs.save_scroll_position(self._tab_id, position)

    def scroll_position(self) -> float:
        if self._tab_id is None:
            return 0.0
        return self._tabs.get_scroll_position(self._tab_id)

    def set_title(self, title: str) -> None:
        if self._tab_id is not None:
            self._tabs.update_tab_title(self._tab_id, title)

    # -- UI instance -----------------------------------------------------------

    def attach(self, handle: Disposable) -> None:
        """Hand the page's live UI instance to the store for disposal with the tab."""
        if self._tab_id is None:
            handle.dispose()
            return
        self._tabs.register_component_ref(self._tab_id, handle)
