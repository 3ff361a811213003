"""Header panel state: the mobile menu and the search bar never open together."""

from enum import Enum


class HeaderPanel(str, Enum):
    IDLE = "idle"
    MENU_OPEN = "menu_open"
    SEARCH_OPEN = "search_open"


class HeaderEvent(str, Enum):
    TOGGLE_MENU = "toggle_menu"
    TOGGLE_SEARCH = "toggle_search"
    CLOSE = "close"  # navigation closes everything


def transition(state: HeaderPanel, event: HeaderEvent) -> HeaderPanel:
    """Next header state. Opening one panel closes the other."""
    if event is HeaderEvent.CLOSE:
        return HeaderPanel.IDLE
    if event is HeaderEvent.TOGGLE_MENU:
        if state is HeaderPanel.MENU_OPEN:
            return HeaderPanel.IDLE
        return HeaderPanel.MENU_OPEN
    if event is HeaderEvent.TOGGLE_SEARCH:
        if state is HeaderPanel.SEARCH_OPEN:
            return HeaderPanel.IDLE
        return HeaderPanel.SEARCH_OPEN
    raise ValueError(f"Unknown header event: {event!r}")
