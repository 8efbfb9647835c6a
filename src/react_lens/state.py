"""State management for the browser service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page

    from react_lens.browser.driver import PageDriver
    from react_lens.inspect.session import InspectionSession


class ConnectionState(Enum):
    """Browser connection state."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class PageEntry:
    """A tracked page with its driver and inspection session."""

    page: Page
    driver: PageDriver
    session: InspectionSession


@dataclass
class BrowserState:
    """Current browser state."""

    connection: ConnectionState = ConnectionState.DISCONNECTED
    error: str | None = None

    # Playwright objects (None when disconnected)
    browser: Browser | None = None
    context: BrowserContext | None = None

    pages: list[PageEntry] = field(default_factory=list)
    selected: int = 0

    @property
    def current(self) -> PageEntry | None:
        """The selected page, if any page is open."""
        if not self.pages:
            return None
        if self.selected >= len(self.pages):
            self.selected = len(self.pages) - 1
        return self.pages[self.selected]

    def find(self, page: Page) -> PageEntry | None:
        return next((entry for entry in self.pages if entry.page is page), None)

    def remove(self, page: Page) -> bool:
        """Forget a closed page, keeping the selection on the same page when possible."""
        for i, entry in enumerate(self.pages):
            if entry.page is page:
                self.pages.pop(i)
                if i < self.selected or self.selected >= len(self.pages):
                    self.selected = max(self.selected - 1, 0)
                return True
        return False
