"""Page driver - the thin seam between inspection code and Playwright.

Everything the inspection layer needs from a page goes through
``PageDriver``: script evaluation, init scripts, reloads and the handful of
raw CDP calls (accessibility tree, node resolution, remote calls).
Playwright errors are converted to react-lens errors here.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from playwright.async_api import CDPSession, ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from react_lens.errors import LensError, ResolutionError


class PageDriver:
    """Async facade over one Playwright page and its CDP session."""

    def __init__(self, page: Page, cdp: CDPSession | None = None) -> None:
        self.page = page
        self._cdp = cdp
        self._dom_enabled = False

    async def cdp(self) -> CDPSession:
        """CDP session for the page, created on first use."""
        if self._cdp is None:
            self._cdp = await self.page.context.new_cdp_session(self.page)
        return self._cdp

    async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        session = await self.cdp()
        return await session.send(method, params or {})

    @property
    def url(self) -> str:
        return self.page.url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def add_init_script(self, script: str) -> None:
        await self.page.add_init_script(script)

    async def set_bypass_csp(self, enabled: bool = True) -> None:
        await self.send("Page.setBypassCSP", {"enabled": enabled})

    async def reload(self, timeout_ms: float = 30000) -> None:
        await self.page.reload(wait_until="load", timeout=timeout_ms)
        # Node ids from the previous document are gone.
        self._dom_enabled = False

    async def get_full_ax_tree(self) -> list[dict[str, Any]]:
        result = await self.send("Accessibility.getFullAXTree")
        return result.get("nodes") or []

    async def ensure_document(self) -> None:
        """Enable the DOM domain so backend node ids can be resolved."""
        if self._dom_enabled:
            return
        await self.send("DOM.enable")
        await self.send("DOM.getDocument", {"depth": 0})
        self._dom_enabled = True

    async def resolve_node(self, backend_node_id: int) -> str:
        """Resolve a backend node id to a remote object id.

        Raises:
            ResolutionError: If the node is stale, detached or unknown
        """
        try:
            await self.ensure_document()
            result = await self.send("DOM.resolveNode", {"backendNodeId": backend_node_id})
        except PlaywrightError as e:
            raise ResolutionError(backend_node_id, e.message) from e
        object_id = (result.get("object") or {}).get("objectId")
        if not object_id:
            raise ResolutionError(backend_node_id, "node has no remote object")
        return object_id

    async def call_function_on(
        self,
        object_id: str,
        declaration: str,
        arguments: list[Any] | None = None,
    ) -> Any:
        """Call a function with ``this`` bound to a remote object.

        Arguments are passed by value; the return value comes back by value.

        Raises:
            LensError: If the call fails or the function throws
        """
        params = {
            "objectId": object_id,
            "functionDeclaration": declaration,
            "arguments": [{"value": value} for value in arguments or []],
            "returnByValue": True,
        }
        try:
            result = await self.send("Runtime.callFunctionOn", params)
        except PlaywrightError as e:
            raise LensError(f"Runtime.callFunctionOn failed: {e.message}") from e
        if result.get("exceptionDetails"):
            details = result["exceptionDetails"]
            text = (details.get("exception") or {}).get("description") or details.get("text")
            raise LensError(f"Page script threw: {text}")
        return (result.get("result") or {}).get("value")

    async def release_object(self, object_id: str) -> None:
        """Release a remote object. Failures only mean it is already gone."""
        try:
            await self.send("Runtime.releaseObject", {"objectId": object_id})
        except PlaywrightError as e:
            logger.debug(f"releaseObject {object_id} failed: {e.message}")

    async def locate_by_role(
        self, role: str, name: str | None = None, timeout_ms: float = 2000
    ) -> ElementHandle | None:
        """First element with the given ARIA role and accessible name."""
        locator = self.page.get_by_role(role, name=name, exact=True) if name else (
            self.page.get_by_role(role)
        )
        try:
            return await locator.first.element_handle(timeout=timeout_ms)
        except PlaywrightError as e:
            logger.debug(f"No element for role={role!r} name={name!r}: {e.message}")
            return None
