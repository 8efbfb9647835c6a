"""Core browser service - connection, page tracking and shutdown.

Provides the browser connection via Playwright, either attaching to a
running Chrome over CDP or launching Chromium.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from playwright.async_api import Page, async_playwright

from react_lens.browser.driver import PageDriver
from react_lens.config import LensConfig, get_config
from react_lens.errors import LensError
from react_lens.inspect.session import InspectionSession
from react_lens.logging import LogSpan
from react_lens.state import BrowserState, ConnectionState, PageEntry


class BrowserServiceCore:
    """Core browser service - connection, page tracking and shutdown."""

    def __init__(self, config: LensConfig | None = None, state: BrowserState | None = None) -> None:
        self.config = config or get_config()
        self.state = state or BrowserState()
        self._playwright: Any = None

    def _set_error(self, context: str, error: Exception) -> None:
        """Set error state and log it."""
        msg = f"{context}: {error}"
        self.state.error = msg
        logger.error(msg)

    @property
    def connected(self) -> bool:
        return self.state.connection is ConnectionState.CONNECTED

    async def connect(self) -> bool:
        """Connect to or launch the browser according to config.

        Every page already open is tracked, and the hook is registered on it
        before ``target_url`` (if any) is opened.

        Returns:
            True if connection successful, False otherwise.
        """
        state = self.state
        state.connection = ConnectionState.CONNECTING
        state.error = None
        config = self.config

        with LogSpan(span="browser.connect", existing=config.connect_existing) as span:
            try:
                self._playwright = await async_playwright().start()

                if config.connect_existing:
                    state.browser = await self._playwright.chromium.connect_over_cdp(
                        f"http://localhost:{config.cdp_port}"
                    )
                    contexts = state.browser.contexts
                    state.context = (
                        contexts[0] if contexts else await state.browser.new_context()
                    )
                else:
                    state.browser = await self._playwright.chromium.launch(
                        headless=config.headless,
                        args=list(config.browser_args),
                    )
                    # no_viewport=True allows browser window to resize normally
                    state.context = await state.browser.new_context(
                        no_viewport=config.no_viewport
                    )

                state.context.on("page", self._on_new_page)
                for page in state.context.pages:
                    await self._track(page)
                if not state.pages:
                    await self._track(await state.context.new_page())

                current = state.current
                if config.target_url and current is not None:
                    await current.page.goto(
                        config.target_url,
                        wait_until="load",
                        timeout=config.navigation_timeout_ms,
                    )

                state.browser.on("disconnected", self._on_browser_disconnected)
                state.connection = ConnectionState.CONNECTED
                span.add(pages=len(state.pages))
                return True

            except Exception as e:
                state.connection = ConnectionState.ERROR
                self._set_error("Browser connection failed", e)
                span.add(error=str(e))
                return False

    async def ensure_connected(self) -> None:
        """Connect on first use.

        Raises:
            LensError: If the browser cannot be reached or launched
        """
        if self.connected:
            return
        if not await self.connect():
            raise LensError(self.state.error or "Browser connection failed")

    async def _track(self, page: Page) -> PageEntry:
        existing = self.state.find(page)
        if existing is not None:
            return existing
        driver = PageDriver(page)
        entry = PageEntry(page=page, driver=driver, session=InspectionSession(driver, self.config))
        self.state.pages.append(entry)
        page.on("close", self._on_page_close)
        try:
            await entry.session.hook.prepare()
        except Exception as e:
            # Attach retries later; this page still gets tracked.
            logger.warning(f"Could not pre-register hook on {page.url}: {e}")
        return entry

    async def _on_new_page(self, page: Page) -> None:
        await self._track(page)

    def _on_page_close(self, page: Page) -> None:
        self.state.remove(page)

    def _on_browser_disconnected(self, _browser: Any) -> None:
        self.state.connection = ConnectionState.DISCONNECTED
        self.state.pages.clear()

    async def disconnect(self) -> None:
        """Disconnect from (or close) the browser and stop Playwright."""
        state = self.state
        with LogSpan(span="browser.disconnect", existing=self.config.connect_existing):
            try:
                # An attached browser belongs to the user; only drop the connection.
                if state.browser and not self.config.connect_existing:
                    await state.browser.close()
            except Exception as e:
                logger.debug(f"Browser close failed: {e}")

            if self._playwright:
                await self._playwright.stop()
                self._playwright = None

        self.state = BrowserState()
