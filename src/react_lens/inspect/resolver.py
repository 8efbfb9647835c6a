"""Single-node resolver.

Given one element (by backend node id, or by role and accessible name),
finds the authored component that owns it and the chain of authored
components above it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from react_lens.errors import ComponentNotFoundError, LensError
from react_lens.inspect.fiber import component_type_label, parse_source, resolve_display_name
from react_lens.inspect.models import ComponentDetails, OwnerInfo
from react_lens.inspect.scripts import load_script
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver

_FAILURE_MESSAGES = {
    "no-fiber": "Element has no React fiber attached",
    "limit": "No authored component within {limit} steps above the element",
    "no-component": "No authored component above the element",
}


def _options(max_steps: int, max_owners: int) -> dict[str, int]:
    return {"maxSteps": max_steps, "maxOwners": max_owners}


def parse_owner_chain(payload: Any, max_steps: int = 20) -> ComponentDetails:
    """Turn the owner-chain script's result into ``ComponentDetails``.

    Raises:
        ComponentNotFoundError: If the script found no owning component
    """
    if not isinstance(payload, dict):
        raise ComponentNotFoundError("Owner lookup returned no result")
    if not payload.get("success"):
        reason = payload.get("reason") or "no-component"
        template = _FAILURE_MESSAGES.get(reason, "Component lookup failed: {reason}")
        raise ComponentNotFoundError(template.format(limit=max_steps, reason=reason))

    component = payload.get("component") or {}
    tag = component.get("tag")
    return ComponentDetails(
        name=resolve_display_name(tag, component.get("type")),
        type=component_type_label(tag),
        props=component.get("props"),
        state=component.get("state"),
        source=parse_source(component.get("source")),
        owners=[
            OwnerInfo(
                name=resolve_display_name(owner.get("tag"), owner.get("type")),
                type=component_type_label(owner.get("tag")),
                source=parse_source(owner.get("source")),
            )
            for owner in payload.get("owners") or []
            if isinstance(owner, dict)
        ],
    )


async def resolve_owner_chain(
    driver: PageDriver,
    backend_node_id: int,
    max_steps: int = 20,
    max_owners: int = 10,
) -> ComponentDetails:
    """Describe the component that owns the element behind ``backend_node_id``.

    The reference must come from a snapshot of the current page load; after
    a reload or navigation it fails to resolve.

    Raises:
        ResolutionError: If the reference no longer points at a live element
        ComponentNotFoundError: If no authored component owns the element
    """
    with LogSpan(span="inspect.resolve", backendNodeId=backend_node_id) as span:
        object_id = await driver.resolve_node(backend_node_id)
        try:
            payload = await driver.call_function_on(
                object_id,
                load_script("owner_chain.js"),
                [_options(max_steps, max_owners)],
            )
        finally:
            await driver.release_object(object_id)
        details = parse_owner_chain(payload, max_steps)
        span.add(component=details.name, owners=len(details.owners))
        return details


async def resolve_by_role(
    driver: PageDriver,
    role: str,
    name: str | None = None,
    max_steps: int = 20,
    max_owners: int = 10,
) -> ComponentDetails:
    """Describe the component that owns the first element with ``role`` / ``name``.

    Raises:
        LensError: If no element matches
        ComponentNotFoundError: If no authored component owns the element
    """
    with LogSpan(span="inspect.resolveRole", role=role, name=name) as span:
        handle = await driver.locate_by_role(role, name)
        if handle is None:
            label = f'role="{role}"' + (f' name="{name}"' if name else "")
            raise LensError(f"No element found with {label}")
        script = f"(element, options) => ({load_script('owner_chain.js')}).call(element, options)"
        try:
            payload = await handle.evaluate(script, _options(max_steps, max_owners))
        finally:
            await handle.dispose()
        details = parse_owner_chain(payload, max_steps)
        span.add(component=details.name)
        return details
