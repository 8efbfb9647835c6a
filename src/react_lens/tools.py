"""Tool handlers.

Each handler takes the browser service plus the tool's parameters and
returns the text sent back to the client. Handlers may raise; ``ToolGate``
serializes calls and turns exceptions into ``"Error: ..."`` text.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from loguru import logger

from react_lens.errors import LensError
from react_lens.logging import LogSpan
from react_lens.utils import serialize_result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from react_lens.browser import BrowserService
    from react_lens.browser.pages import NavigationKind


class ToolGate:
    """Runs tool handlers one at a time against a lazily created browser service.

    A single lock is held for the full duration of each call, so handlers
    never interleave. Exceptions become ``"Error: ..."`` text.
    """

    def __init__(self, service_factory: Callable[[], BrowserService]) -> None:
        self._service_factory = service_factory
        self._service: BrowserService | None = None
        self.lock = asyncio.Lock()

    @property
    def service(self) -> BrowserService:
        if self._service is None:
            self._service = self._service_factory()
        return self._service

    async def run(
        self,
        name: str,
        handler: Callable[..., Awaitable[str]],
        **params: Any,
    ) -> str:
        async with self.lock:
            with LogSpan(span=f"tool.{name}", **params) as span:
                try:
                    result = await handler(self.service, **params)
                except Exception as e:
                    logger.opt(exception=e).debug(f"{name} failed")
                    span.add(error=str(e))
                    return f"Error: {e}"
                span.add(chars=len(result))
                return result

    async def close(self) -> None:
        async with self.lock:
            if self._service is not None:
                await self._service.disconnect()
                self._service = None


async def ensure_react_attached(service: BrowserService) -> str:
    session = await service.current_session()
    result = await session.ensure_attached()
    lines = [
        "React DevTools backend is installed."
        if result.attached
        else "React DevTools backend is not installed."
    ]
    if result.message:
        lines.append(result.message)
    if not result.renderers:
        lines.append("No React renderers detected on this page.")
    else:
        lines.append("Renderers:")
        for renderer in result.renderers:
            bundle = "n/a" if renderer.bundle_type is None else renderer.bundle_type
            lines.append(
                f"- id={renderer.id} name={renderer.name or 'unknown'} "
                f"version={renderer.version or 'unknown'} bundleType={bundle}"
            )
    return "\n".join(lines)


async def list_react_roots(service: BrowserService, renderer_id: int | None = None) -> str:
    session = await service.current_session()
    roots = await session.list_roots()
    if renderer_id is not None:
        roots = [root for root in roots if root.renderer_id == renderer_id]
    if not roots:
        return "No React roots detected."
    return "\n".join(
        f"renderer={root.renderer_id}({root.renderer_name or 'unknown'}) "
        f"root={root.root_id} idx={root.root_index} name={root.display_name} "
        f"nodes={root.nodes}{'+' if root.capped else ''}"
        for root in roots
    )


async def take_snapshot(service: BrowserService, verbose: bool = False) -> str:
    session = await service.current_session()
    return serialize_result(await session.take_snapshot(verbose=verbose))


async def get_component_map(
    service: BrowserService, verbose: bool = False, include_state: bool = False
) -> str:
    session = await service.current_session()
    return await session.get_component_map(verbose=verbose, include_state=include_state)


def _lookup_failure(error: LensError, **context: Any) -> str:
    logger.debug(f"Component lookup failed: {error}")
    return serialize_result({"success": False, "error": str(error), **context})


async def get_react_component_from_backend_node_id(
    service: BrowserService, backend_dom_node_id: int
) -> str:
    session = await service.current_session()
    try:
        details = await session.get_component_from_backend_node_id(backend_dom_node_id)
    except LensError as e:
        return _lookup_failure(e, backendDOMNodeId=backend_dom_node_id)
    return serialize_result({"success": True, "component": details})


async def get_react_component_from_snapshot(
    service: BrowserService, role: str, name: str | None = None
) -> str:
    session = await service.current_session()
    try:
        details = await session.get_component_from_role(role, name)
    except LensError as e:
        return _lookup_failure(e, role=role, name=name)
    return serialize_result({"success": True, "component": details})


async def _pages_text(service: BrowserService) -> str:
    pages = await service.list_pages()
    lines = ["## Pages"]
    for page in pages:
        marker = " [selected]" if page["selected"] else ""
        lines.append(f"{page['index']}: {page['url']}{marker}")
    return "\n".join(lines)


async def list_pages(service: BrowserService) -> str:
    return await _pages_text(service)


async def select_page(service: BrowserService, page_idx: int) -> str:
    await service.select_page(page_idx)
    return await _pages_text(service)


async def close_page(service: BrowserService, page_idx: int) -> str:
    await service.close_page(page_idx)
    return await _pages_text(service)


async def new_page(service: BrowserService, url: str) -> str:
    await service.new_page(url)
    return await _pages_text(service)


async def navigate_page(
    service: BrowserService, url: str | None = None, kind: NavigationKind = "url"
) -> str:
    entry = await service.navigate_page(url=url, kind=kind)
    if kind == "reload":
        message = "Successfully reloaded the page."
    else:
        message = f"Successfully navigated to {entry.page.url}."
    return f"{message}\n{await _pages_text(service)}"
