"""Accessibility snapshot builder.

Rebuilds the hierarchy of the flat node list returned by CDP
``Accessibility.getFullAXTree`` and derives the two lookup tables the
correlator needs:

- CorrelationMap: backendDOMNodeId -> (role, name)
- AdjacencyMap: backendDOMNodeId -> [child backendDOMNodeId]

Both are rebuilt on every call. Backend ids are only valid for the current
page load, so nothing here is cached.
"""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from loguru import logger

from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver

# CDP AX properties copied onto snapshot nodes as state flags.
STATE_PROPERTIES = (
    "busy",
    "checked",
    "disabled",
    "editable",
    "expanded",
    "focusable",
    "focused",
    "invalid",
    "modal",
    "multiline",
    "multiselectable",
    "pressed",
    "readonly",
    "required",
    "selected",
)


@dataclass(frozen=True)
class AccessibilityNode:
    """One node of a snapshot. Immutable once built."""

    uid: str
    role: str | None
    name: str | None
    backend_dom_node_id: int | None = None
    value: str | float | None = None
    description: str | None = None
    level: int | None = None
    states: Mapping[str, bool | str] = field(default_factory=dict)
    children: tuple[AccessibilityNode, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, using the field names of the CDP node."""
        data: dict[str, Any] = {
            "role": self.role,
            "name": self.name,
            "uid": self.uid,
            "backendDOMNodeId": self.backend_dom_node_id,
        }
        if self.value is not None:
            data["value"] = self.value
        if self.description:
            data["description"] = self.description
        if self.level is not None:
            data["level"] = self.level
        data.update(self.states)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data

    def iter_nodes(self) -> Iterator[AccessibilityNode]:
        """Yield this node and every descendant in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class Snapshot:
    root: AccessibilityNode
    snapshot_id: str
    node_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"root": self.root.to_dict(), "snapshotId": self.snapshot_id}


@dataclass(frozen=True)
class AxFact:
    """What the accessibility tree says about one element."""

    role: str
    name: str


@dataclass
class Correlation:
    """Lookup tables derived from one snapshot."""

    facts: dict[int, AxFact] = field(default_factory=dict)
    adjacency: dict[int, list[int]] = field(default_factory=dict)


def _ax_value(prop: Any) -> Any:
    """Unwrap a CDP AXValue ``{"type": ..., "value": ...}``."""
    if isinstance(prop, dict):
        return prop.get("value")
    return None


def _read_states(raw: dict[str, Any]) -> tuple[dict[str, bool | str], int | None]:
    states: dict[str, bool | str] = {}
    level: int | None = None
    for prop in raw.get("properties") or []:
        if not isinstance(prop, dict):
            continue
        name = prop.get("name")
        value = _ax_value(prop.get("value"))
        if name == "level" and isinstance(value, (int, float)):
            level = int(value)
        elif name in STATE_PROPERTIES and value is not None:
            if value in ("true", "false"):
                value = value == "true"
            states[name] = value if isinstance(value, (bool, str)) else bool(value)
    return states, level


def build_snapshot(
    nodes: list[dict[str, Any]],
    verbose: bool = False,
    snapshot_id: str | None = None,
) -> Snapshot | None:
    """Build a hierarchical snapshot from a flat CDP AX node list.

    The first node is the document root. When ``verbose`` is False, nodes
    CDP marks as ignored are dropped and their kept descendants are
    promoted to the nearest kept ancestor. The root itself is always kept.
    Child ids that are missing from the list or malformed are skipped.

    Args:
        nodes: ``nodes`` array from ``Accessibility.getFullAXTree``
        verbose: Keep ignored nodes
        snapshot_id: Prefix for node uids (defaults to a millisecond timestamp)

    Returns:
        Snapshot, or None when the node list is empty.
    """
    if not nodes:
        return None

    snapshot_id = snapshot_id or str(int(time.time() * 1000))
    by_id: dict[str, dict[str, Any]] = {}
    for raw in nodes:
        if isinstance(raw, dict) and isinstance(raw.get("nodeId"), str):
            by_id.setdefault(raw["nodeId"], raw)

    root_raw = nodes[0]
    if not isinstance(root_raw, dict):
        return None

    # Pre-order pass: decide which nodes are kept and who their parent is.
    kept: list[dict[str, Any]] = []
    child_slots: list[list[int]] = []
    visited: set[str] = set()
    if isinstance(root_raw.get("nodeId"), str):
        visited.add(root_raw["nodeId"])
    stack: list[tuple[dict[str, Any] | str, int | None]] = [(root_raw, None)]
    while stack:
        item, parent = stack.pop()
        if isinstance(item, str):
            if item in visited:
                continue
            raw = by_id.get(item)
            if raw is None:
                logger.debug(f"Skipping unknown AX child id {item!r}")
                continue
            visited.add(item)
        else:
            raw = item

        # An ignored node is dropped but not its subtree: its children attach to
        # the nearest kept ancestor instead of being discarded along with it.
        owner = parent
        if verbose or parent is None or not raw.get("ignored"):
            owner = len(kept)
            kept.append(raw)
            child_slots.append([])
            if parent is not None:
                child_slots[parent].append(owner)

        child_ids = [cid for cid in raw.get("childIds") or [] if isinstance(cid, str)]
        stack.extend((cid, owner) for cid in reversed(child_ids))

    # Children always come after their parent, so build back to front.
    built: list[AccessibilityNode | None] = [None] * len(kept)
    for index in range(len(kept) - 1, -1, -1):
        raw = kept[index]
        states, level = _read_states(raw)
        backend = raw.get("backendDOMNodeId")
        built[index] = AccessibilityNode(
            uid=f"{snapshot_id}_{index}",
            role=_ax_value(raw.get("role")),
            name=_ax_value(raw.get("name")),
            backend_dom_node_id=backend if isinstance(backend, int) else None,
            value=_ax_value(raw.get("value")),
            description=_ax_value(raw.get("description")) or None,
            level=level,
            states=states,
            children=tuple(built[child] for child in child_slots[index]),
        )
    return Snapshot(root=built[0], snapshot_id=snapshot_id, node_count=len(kept))


def build_correlation(root: AccessibilityNode) -> Correlation:
    """Derive the CorrelationMap and AdjacencyMap from a snapshot tree.

    The first occurrence of a backend id wins; nodes without one are not
    correlatable and only contribute through their own children.
    """
    correlation = Correlation()
    for node in root.iter_nodes():
        ref = node.backend_dom_node_id
        if ref is None or ref in correlation.facts:
            continue
        correlation.facts[ref] = AxFact(role=node.role or "", name=node.name or "")
        correlation.adjacency[ref] = [
            child.backend_dom_node_id
            for child in node.children
            if child.backend_dom_node_id is not None
        ]
    return correlation


async def take_snapshot(driver: PageDriver, verbose: bool = False) -> Snapshot | None:
    """Fetch the full AX tree from the page and build a snapshot."""
    with LogSpan(span="inspect.snapshot", verbose=verbose) as span:
        nodes = await driver.get_full_ax_tree()
        span.add("rawNodes", len(nodes))
        snapshot = build_snapshot(nodes, verbose=verbose)
        span.add("nodes", snapshot.node_count if snapshot else 0)
        return snapshot
