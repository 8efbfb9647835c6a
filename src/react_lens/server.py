"""FastMCP server exposing the React inspection tools.

Typical agent flow:
  take_snapshot()                                   -> accessibility tree with backendDOMNodeId
  get_react_component_from_backend_node_id(id=42)   -> component, props, source, owners
  get_component_map()                               -> whole page as one annotated tree

All tools share one browser, created on the first call, and run strictly
one at a time.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

from fastmcp import FastMCP

from react_lens import tools
from react_lens.browser import BrowserService
from react_lens.config import get_config

# Import logging first to remove Loguru's default console handler
from react_lens.logging import LogSpan, configure_logging
from react_lens.tools import ToolGate

_config = get_config()

# Initialize logging to serve.log
configure_logging(log_name="serve")

INSTRUCTIONS = """react-lens inspects the React app in the selected browser page.

Call take_snapshot to see the accessibility tree; every node carries a
backendDOMNodeId that get_react_component_from_backend_node_id resolves to
the owning component. References are only valid until the page reloads or
navigates. get_component_map renders the whole page as one tree of
components annotated with role and accessible name."""

_gate = ToolGate(lambda: BrowserService(_config))

_READ_ONLY = {"readOnlyHint": True, "destructiveHint": False, "openWorldHint": False}


@asynccontextmanager
async def _lifespan(_server: FastMCP) -> AsyncIterator[None]:
    """Manage server lifecycle - close the browser on shutdown."""
    with LogSpan(span="mcp.server.start") as start_span:
        # The browser itself starts on the first tool call.
        start_span.add(
            connectExisting=_config.connect_existing,
            headless=_config.headless,
            targetUrl=_config.target_url,
        )

    yield

    with LogSpan(span="mcp.server.stop"):
        await _gate.close()


mcp = FastMCP(
    name="react-lens",
    instructions=INSTRUCTIONS,
    lifespan=_lifespan,
)


# =============================================================================
# React inspection
# =============================================================================


@mcp.tool(annotations={"title": "Ensure React Attached", "idempotentHint": True})
async def ensure_react_attached() -> str:
    """Ensure the React DevTools hook is present on the current page and list detected renderers.

    May reload the page once if React loaded before the hook.
    """
    return await _gate.run("ensure_react_attached", tools.ensure_react_attached)


@mcp.tool(annotations={"title": "List React Roots", **_READ_ONLY})
async def list_react_roots(renderer_id: int | None = None) -> str:
    """List React roots detected on the current page.

    Args:
        renderer_id: Only list roots of this renderer
    """
    return await _gate.run("list_react_roots", tools.list_react_roots, renderer_id=renderer_id)


@mcp.tool(annotations={"title": "Take Accessibility Snapshot", **_READ_ONLY})
async def take_snapshot(verbose: bool = False) -> str:
    """Take an accessibility tree snapshot of the current page.

    Returns a hierarchical tree with roles, accessible names and the
    backendDOMNodeId of each element, for use with
    get_react_component_from_backend_node_id, or null for an empty tree.

    Args:
        verbose: Include ignored nodes (default: only meaningful nodes)
    """
    return await _gate.run("take_snapshot", tools.take_snapshot, verbose=verbose)


@mcp.tool(annotations={"title": "Get Component Map"})
async def get_component_map(verbose: bool = False, include_state: bool = False) -> str:
    """Render the page's React component tree annotated with accessibility roles and names.

    Each line: ComponentName {props} [role="..." name="..."] (file:line:col).
    Elements with no component of their own are listed as bare [role name] lines.

    Args:
        verbose: Build the snapshot with ignored nodes included
        include_state: Append a short state summary to each component line
    """
    return await _gate.run(
        "get_component_map",
        tools.get_component_map,
        verbose=verbose,
        include_state=include_state,
    )


@mcp.tool(annotations={"title": "Get Component By Node Id", **_READ_ONLY})
async def get_react_component_from_backend_node_id(backend_dom_node_id: int) -> str:
    """Get the React component that owns an element from take_snapshot.

    Returns JSON {success, component?, error?}. The component carries name,
    type, props, state, source location and the chain of owner components.

    Args:
        backend_dom_node_id: backendDOMNodeId from the current page's snapshot
    """
    return await _gate.run(
        "get_react_component_from_backend_node_id",
        tools.get_react_component_from_backend_node_id,
        backend_dom_node_id=backend_dom_node_id,
    )


@mcp.tool(annotations={"title": "Get Component By Role", **_READ_ONLY})
async def get_react_component_from_snapshot(role: str, name: str | None = None) -> str:
    """Get the React component for an element found by accessible role and name.

    Returns JSON {success, component?, error?} like
    get_react_component_from_backend_node_id.

    Args:
        role: Accessible role from the snapshot (e.g. "button", "heading")
        name: Accessible name from the snapshot (e.g. "Submit")
    """
    return await _gate.run(
        "get_react_component_from_snapshot",
        tools.get_react_component_from_snapshot,
        role=role,
        name=name,
    )


# =============================================================================
# Pages
# =============================================================================


@mcp.tool(annotations={"title": "List Pages", **_READ_ONLY})
async def list_pages() -> str:
    """Get a list of pages open in the browser."""
    return await _gate.run("list_pages", tools.list_pages)


@mcp.tool(annotations={"title": "Select Page"})
async def select_page(page_idx: int) -> str:
    """Select a page as the context for future tool calls.

    Args:
        page_idx: Index of the page, from list_pages
    """
    return await _gate.run("select_page", tools.select_page, page_idx=page_idx)


@mcp.tool(annotations={"title": "Close Page", "destructiveHint": True})
async def close_page(page_idx: int) -> str:
    """Close a page by index. The last open page cannot be closed.

    Args:
        page_idx: Index of the page, from list_pages
    """
    return await _gate.run("close_page", tools.close_page, page_idx=page_idx)


@mcp.tool(annotations={"title": "New Page", "openWorldHint": True})
async def new_page(url: str) -> str:
    """Open a new page and load a URL in it.

    Args:
        url: URL to load
    """
    return await _gate.run("new_page", tools.new_page, url=url)


@mcp.tool(annotations={"title": "Navigate Page", "openWorldHint": True})
async def navigate_page(
    url: str | None = None,
    type: Literal["url", "back", "forward", "reload"] = "url",
) -> str:
    """Navigate the selected page by URL, back or forward in history, or reload it.

    Snapshot node ids taken before navigating stop resolving.

    Args:
        url: Target URL (only for type="url")
        type: Kind of navigation
    """
    return await _gate.run("navigate_page", tools.navigate_page, url=url, kind=type)


def main() -> None:
    """Run the MCP server over stdio transport."""
    mcp.run(show_banner=False)
