"""React DevTools hook bootstrap.

React registers its renderers with ``window.__REACT_DEVTOOLS_GLOBAL_HOOK__``
only if the hook exists before React loads. The bootstrap therefore
registers the hook as an init script, then falls back to installing it in
the live page, and as a last resort reloads the page once so the init
script runs ahead of React.

State machine (per page):

    NOT_INSTALLED -> INSTALLED_NO_RENDERERS -> INSTALLED_WITH_RENDERERS

There is no transition back; at most one reload is ever triggered.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from react_lens.inspect.models import AttachResult, RendererInfo
from react_lens.inspect.scripts import load_script
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver

NO_RENDERERS_MESSAGE = (
    "React DevTools hook installed but no renderers registered. "
    "The page may not use React, or React loaded before the hook."
)


class HookState(Enum):
    NOT_INSTALLED = "not-installed"
    INSTALLED_NO_RENDERERS = "installed-no-renderers"
    INSTALLED_WITH_RENDERERS = "installed-with-renderers"


class HookBootstrap:
    """Installs the DevTools hook on one page and reports registered renderers."""

    def __init__(self, driver: PageDriver, reload_timeout_ms: float = 30000) -> None:
        self.driver = driver
        self.reload_timeout_ms = reload_timeout_ms
        self.state = HookState.NOT_INSTALLED
        self._init_script_registered = False
        self._reloaded = False

    async def read_renderers(self) -> list[RendererInfo]:
        result = await self.driver.evaluate(load_script("renderers.js")) or {}
        return [RendererInfo.model_validate(item) for item in result.get("renderers") or []]

    def _attached(self, renderers: list[RendererInfo]) -> AttachResult:
        self.state = HookState.INSTALLED_WITH_RENDERERS
        return AttachResult(attached=True, renderers=renderers)

    async def prepare(self) -> None:
        """Register the hook as an init script so it runs before page scripts.

        Safe to call repeatedly; only the first call does anything.
        """
        if self._init_script_registered:
            return
        try:
            await self.driver.set_bypass_csp(True)
        except Exception as e:
            logger.debug(f"CSP bypass unavailable: {e}")
        await self.driver.add_init_script(load_script("hook.js"))
        self._init_script_registered = True

    async def ensure_attached(self) -> AttachResult:
        """Make sure the hook is installed and at least one renderer registered.

        Never raises: failures come back as ``attached=False`` with a message.
        """
        async with LogSpan(span="inspect.hook.attach", state=self.state.value) as span:
            try:
                result = await self._attach()
            except Exception as e:
                logger.warning(f"Hook attach failed: {e}")
                result = AttachResult(
                    attached=False, message=f"Failed to attach React DevTools hook: {e}"
                )
            span.add(
                attached=result.attached,
                renderers=len(result.renderers),
                state=self.state.value,
                reloaded=self._reloaded,
            )
            return result

    async def _attach(self) -> AttachResult:
        await self.prepare()

        renderers = await self.read_renderers()
        if renderers:
            return self._attached(renderers)

        await self.driver.evaluate(load_script("hook.js"))
        self.state = HookState.INSTALLED_NO_RENDERERS
        renderers = await self.read_renderers()
        if renderers:
            return self._attached(renderers)

        if not self._reloaded:
            self._reloaded = True
            logger.info(f"No React renderers on {self.driver.url}, reloading once")
            await self.driver.reload(self.reload_timeout_ms)
            renderers = await self.read_renderers()
            if renderers:
                return self._attached(renderers)

        return AttachResult(attached=False, message=NO_RENDERERS_MESSAGE)
