"""Page selection and navigation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Protocol

from react_lens.errors import LensError
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.config import LensConfig
    from react_lens.inspect.session import InspectionSession
    from react_lens.state import BrowserState, PageEntry

NavigationKind = Literal["url", "back", "forward", "reload"]

CLOSE_LAST_PAGE_ERROR = "The last open page can not be closed"


class _BrowserCoreProtocol(Protocol):
    """Protocol defining members expected from BrowserServiceCore."""

    config: LensConfig
    state: BrowserState

    async def ensure_connected(self) -> None: ...

    async def _track(self, page: Any) -> PageEntry: ...


class BrowserPagesMixin(_BrowserCoreProtocol):
    """List, select, open and navigate pages."""

    async def current_entry(self) -> PageEntry:
        await self.ensure_connected()
        entry = self.state.current
        if entry is None:
            raise LensError("No page is open")
        return entry

    async def current_session(self) -> InspectionSession:
        """Inspection session of the selected page."""
        entry = await self.current_entry()
        return entry.session

    async def list_pages(self) -> list[dict[str, Any]]:
        await self.ensure_connected()
        pages = []
        for index, entry in enumerate(self.state.pages):
            try:
                title = await entry.page.title()
            except Exception:
                title = ""
            pages.append(
                {
                    "index": index,
                    "url": entry.page.url,
                    "title": title,
                    "selected": index == self.state.selected,
                }
            )
        return pages

    async def select_page(self, index: int) -> PageEntry:
        await self.ensure_connected()
        if not 0 <= index < len(self.state.pages):
            raise LensError(
                f"Page index {index} out of range (0-{len(self.state.pages) - 1})"
            )
        self.state.selected = index
        entry = self.state.pages[index]
        await entry.page.bring_to_front()
        return entry

    async def new_page(self, url: str | None = None) -> PageEntry:
        """Open a page, register the hook, then navigate to ``url``."""
        await self.ensure_connected()
        context = self.state.context
        if context is None:
            raise LensError("Browser has no context")
        with LogSpan(span="browser.newPage", url=url):
            entry = await self._track(await context.new_page())
            self.state.selected = self.state.pages.index(entry)
            if url:
                await entry.page.goto(
                    url, wait_until="load", timeout=self.config.navigation_timeout_ms
                )
            return entry

    async def close_page(self, index: int) -> None:
        """Close a page by index. The last open page cannot be closed."""
        await self.ensure_connected()
        if len(self.state.pages) <= 1:
            raise LensError(CLOSE_LAST_PAGE_ERROR)
        if not 0 <= index < len(self.state.pages):
            raise LensError(
                f"Page index {index} out of range (0-{len(self.state.pages) - 1})"
            )
        page = self.state.pages[index].page
        await page.close()
        # The close event may arrive later; drop the entry now.
        self.state.remove(page)

    async def navigate_page(
        self, url: str | None = None, kind: NavigationKind = "url"
    ) -> PageEntry:
        """Navigate the selected page by URL, through history, or reload it.

        Snapshot references taken before navigating become stale.
        """
        entry = await self.current_entry()
        page = entry.page
        timeout = self.config.navigation_timeout_ms
        with LogSpan(span="browser.navigate", kind=kind, url=url):
            if kind == "url":
                if not url:
                    raise LensError("A URL is required for navigation of type=url")
                await page.goto(url, wait_until="load", timeout=timeout)
            elif kind == "back":
                await page.go_back(wait_until="load", timeout=timeout)
            elif kind == "forward":
                await page.go_forward(wait_until="load", timeout=timeout)
            elif kind == "reload":
                await page.reload(wait_until="load", timeout=timeout)
            else:
                raise LensError(f"Unknown navigation type: {kind}")
        return entry
