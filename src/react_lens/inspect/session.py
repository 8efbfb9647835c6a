"""Inspection session - every inspection operation for one page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from react_lens.config import LensConfig, get_config
from react_lens.errors import HookNotAttachedError, LensError, NoRootsError
from react_lens.inspect.fiber import extract_fiber_roots, resolve_display_name
from react_lens.inspect.hook import HookBootstrap
from react_lens.inspect.models import AttachResult, ComponentDetails, RootInfo
from react_lens.inspect.resolver import resolve_by_role, resolve_owner_chain
from react_lens.inspect.scripts import load_script
from react_lens.inspect.snapshot import build_correlation
from react_lens.inspect.snapshot import take_snapshot as snapshot_page
from react_lens.inspect.tagging import tag_elements
from react_lens.inspect.walker import ComponentTreeWalker
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver
    from react_lens.inspect.snapshot import Snapshot


class InspectionSession:
    """Hook bootstrap, snapshots, component maps and lookups for one page.

    Callers are expected to serialize calls; the session keeps per-page
    state (the hook state machine) and is not safe to use concurrently.
    """

    def __init__(self, driver: PageDriver, config: LensConfig | None = None) -> None:
        self.driver = driver
        self.config = config or get_config()
        self.hook = HookBootstrap(driver, reload_timeout_ms=self.config.navigation_timeout_ms)

    async def ensure_attached(self) -> AttachResult:
        return await self.hook.ensure_attached()

    async def list_roots(self) -> list[RootInfo]:
        """List committed roots with the display name of their first component.

        Raises:
            HookNotAttachedError: If no renderer is registered
        """
        attach = await self.ensure_attached()
        if not attach.attached:
            raise HookNotAttachedError(attach.message or "React DevTools hook not attached")
        result = await self.driver.evaluate(
            load_script("roots.js"), {"maxNodes": self.config.max_root_nodes}
        ) or {}
        by_id = {renderer.id: renderer for renderer in attach.renderers}
        roots = []
        for entry in result.get("roots") or []:
            renderer_id = int(entry.get("rendererId", 0))
            renderer = by_id.get(renderer_id)
            display_name = (
                resolve_display_name(entry.get("tag"), entry.get("type"))
                if entry.get("type")
                else "Unknown"
            )
            roots.append(
                RootInfo(
                    renderer_id=renderer_id,
                    renderer_name=entry.get("rendererName") or (renderer.name if renderer else None),
                    renderer_version=entry.get("rendererVersion")
                    or (renderer.version if renderer else None),
                    root_id=f"{renderer_id}:{entry.get('rootIndex', 0)}",
                    root_index=int(entry.get("rootIndex", 0)),
                    display_name=display_name,
                    nodes=int(entry.get("nodes", 0)),
                    capped=bool(entry.get("capped")),
                )
            )
        return roots

    async def take_snapshot(self, verbose: bool = False) -> Snapshot | None:
        return await snapshot_page(self.driver, verbose=verbose)

    async def get_component_map(self, verbose: bool = False, include_state: bool = False) -> str:
        """Render the annotated component tree of the page.

        Returns:
            The tree as text, or ``"Error: <reason>"``
        """
        async with LogSpan(
            span="inspect.componentMap", verbose=verbose, includeState=include_state
        ) as span:
            attach = await self.ensure_attached()
            if not attach.attached:
                span.add(attached=False)
                return f"Error: {attach.message or 'React DevTools hook not attached'}"

            snapshot = await self.take_snapshot(verbose=verbose)
            if snapshot is None:
                return "Error: Accessibility snapshot is empty"
            correlation = build_correlation(snapshot.root)
            tagging = await tag_elements(self.driver, correlation)

            try:
                forest = await extract_fiber_roots(
                    self.driver,
                    include_state=include_state,
                    max_nodes=self.config.max_fiber_nodes,
                )
            except (HookNotAttachedError, NoRootsError) as e:
                return f"Error: {e}"

            walker = ComponentTreeWalker(
                correlation=correlation,
                include_state=include_state,
                max_props=self.config.max_props,
                max_state_chars=self.config.max_state_chars,
                max_string_length=self.config.max_string_length,
                max_steps=self.config.max_walk_steps,
            )
            result = walker.walk(forest)
            span.add(
                tagged=tagging.tagged,
                components=result.components,
                leaves=result.leaves,
                truncated=result.truncated,
            )
            if result.truncated:
                logger.warning("Component map truncated at the node limit")
            return result.render()

    async def get_component_from_backend_node_id(self, backend_node_id: int) -> ComponentDetails:
        """Owner chain for an element from a snapshot of the current page load.

        Raises:
            ResolutionError: If the reference is stale or unknown
            ComponentNotFoundError: If no authored component owns the element
        """
        await self.ensure_attached()
        return await resolve_owner_chain(
            self.driver,
            backend_node_id,
            max_steps=self.config.max_owner_steps,
            max_owners=self.config.max_owners,
        )

    async def get_component_from_role(self, role: str, name: str | None = None) -> ComponentDetails:
        """Owner chain for the first element matching ``role`` and ``name``."""
        if not role:
            raise LensError("role is required")
        await self.ensure_attached()
        return await resolve_by_role(
            self.driver,
            role,
            name,
            max_steps=self.config.max_owner_steps,
            max_owners=self.config.max_owners,
        )
