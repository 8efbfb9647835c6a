"""Fiber tree extraction and classification.

The page-side script (``js/fiber_tree.js``) walks every committed root and
returns a bounded JSON copy of the fiber tree. This module turns that copy
into ``FiberNode`` objects and holds the rules for classifying fibers and
naming components, shared by the walker and the single-node resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from react_lens.errors import HookNotAttachedError, NoRootsError
from react_lens.inspect.models import SourceLocation
from react_lens.inspect.scripts import load_script
from react_lens.logging import LogSpan

if TYPE_CHECKING:
    from react_lens.browser.driver import PageDriver

# Attributes written by the tagging pass and read back during extraction.
MARKER_REF = "data-rl-ref"
MARKER_ROLE = "data-rl-role"
MARKER_NAME = "data-rl-name"

# React work tags (ReactWorkTags.js)
FUNCTION_COMPONENT = 0
CLASS_COMPONENT = 1
INDETERMINATE_COMPONENT = 2
HOST_ROOT = 3
HOST_COMPONENT = 5
FORWARD_REF = 11
MEMO_COMPONENT = 14
SIMPLE_MEMO_COMPONENT = 15
HOST_HOISTABLE = 26
HOST_SINGLETON = 27

AUTHORED_TAGS = frozenset(
    {
        FUNCTION_COMPONENT,
        CLASS_COMPONENT,
        INDETERMINATE_COMPONENT,
        FORWARD_REF,
        MEMO_COMPONENT,
        SIMPLE_MEMO_COMPONENT,
    }
)
HOST_TAGS = frozenset({HOST_COMPONENT, HOST_HOISTABLE, HOST_SINGLETON})

_TYPE_LABELS = {
    FUNCTION_COMPONENT: "FunctionComponent",
    CLASS_COMPONENT: "ClassComponent",
    INDETERMINATE_COMPONENT: "IndeterminateComponent",
    HOST_COMPONENT: "HostComponent",
    FORWARD_REF: "ForwardRef",
    MEMO_COMPONENT: "MemoComponent",
    SIMPLE_MEMO_COMPONENT: "MemoComponent",
}


class FiberKind(Enum):
    """How the walker treats a fiber."""

    COMPONENT = "authored-component"
    HOST = "host-element"
    OTHER = "other"


def classify(tag: int | None) -> FiberKind:
    if tag in AUTHORED_TAGS:
        return FiberKind.COMPONENT
    if tag in HOST_TAGS:
        return FiberKind.HOST
    return FiberKind.OTHER


def component_type_label(tag: int | None) -> str:
    """Human label for a work tag, e.g. ``FunctionComponent``."""
    return _TYPE_LABELS.get(tag, f"UnknownTag({tag})")


def resolve_display_name(tag: int | None, type_info: dict[str, Any] | None) -> str:
    """Name an authored component the way React DevTools does.

    Resolution order: developer-assigned ``displayName``, then the type's
    own name, then the name of the wrapped type for ``forwardRef`` and
    ``memo`` wrappers, then a generic label.
    """
    info = type_info or {}
    if info.get("displayName"):
        return info["displayName"]

    if tag == FORWARD_REF:
        return (
            info.get("renderDisplayName")
            or info.get("renderName")
            or info.get("elementName")
            or "ForwardRef"
        )
    if tag in (MEMO_COMPONENT, SIMPLE_MEMO_COMPONENT):
        return (
            info.get("innerDisplayName")
            or info.get("innerName")
            or info.get("name")
            or info.get("elementName")
            or "Memo"
        )
    return info.get("name") or info.get("elementName") or "Anonymous"


def parse_source(raw: Any) -> SourceLocation | None:
    if not isinstance(raw, dict) or not any(raw.values()):
        return None
    return SourceLocation.model_validate(raw)


@dataclass
class ElementMarkers:
    """Correlation markers read back from a tagged DOM element."""

    ref: int
    role: str
    name: str


@dataclass
class FiberNode:
    """Bounded copy of one fiber, as returned by the extraction script."""

    id: int
    tag: int | None
    kind: FiberKind
    name: str | None = None
    props: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    state: Any = None
    source: SourceLocation | None = None
    markers: ElementMarkers | None = None
    children: list[FiberNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FiberNode:
        """Build a node tree from the script's JSON without recursion."""
        root = cls._single(data)
        stack = [(root, data)]
        while stack:
            node, raw = stack.pop()
            for child_raw in raw.get("children") or []:
                if not isinstance(child_raw, dict):
                    continue
                child = cls._single(child_raw)
                node.children.append(child)
                stack.append((child, child_raw))
        return root

    @classmethod
    def _single(cls, raw: dict[str, Any]) -> FiberNode:
        tag = raw.get("tag")
        kind = classify(tag)
        node = cls(id=int(raw.get("id", -1)), tag=tag, kind=kind)
        if kind is FiberKind.COMPONENT:
            node.name = resolve_display_name(tag, raw.get("type"))
            node.props = [
                (str(entry[0]), entry[1])
                for entry in raw.get("props") or []
                if isinstance(entry, list) and len(entry) == 2 and isinstance(entry[1], dict)
            ]
            node.state = raw.get("state")
            node.source = parse_source(raw.get("source"))
        elif kind is FiberKind.HOST:
            node.name = raw.get("hostType")
            markers = raw.get("markers")
            if isinstance(markers, dict) and isinstance(markers.get("ref"), (int, float)):
                node.markers = ElementMarkers(
                    ref=int(markers["ref"]),
                    role=markers.get("role") or "",
                    name=markers.get("name") or "",
                )
        return node


@dataclass
class FiberRoot:
    renderer_id: int
    root_index: int
    tree: FiberNode


@dataclass
class FiberForest:
    """Every root extracted in one call."""

    roots: list[FiberRoot]
    truncated: bool = False


async def extract_fiber_roots(
    driver: PageDriver,
    include_state: bool = False,
    max_nodes: int = 20000,
) -> FiberForest:
    """Copy the live fiber tree of every committed root out of the page.

    Raises:
        HookNotAttachedError: If the hook is missing or has no renderers
        NoRootsError: If renderers registered but no root was found
    """
    options = {
        "includeState": include_state,
        "maxNodes": max_nodes,
        "markers": {"ref": MARKER_REF, "role": MARKER_ROLE, "name": MARKER_NAME},
    }
    with LogSpan(span="inspect.fiber.extract", includeState=include_state) as span:
        result = await driver.evaluate(load_script("fiber_tree.js"), options) or {}
        if not result.get("hook") or not result.get("renderers"):
            raise HookNotAttachedError(
                "React DevTools hook not found or no renderers registered on this page"
            )
        roots = [
            FiberRoot(
                renderer_id=int(entry.get("rendererId", 0)),
                root_index=int(entry.get("rootIndex", 0)),
                tree=FiberNode.from_dict(entry["tree"]),
            )
            for entry in result.get("roots") or []
            if isinstance(entry, dict) and isinstance(entry.get("tree"), dict)
        ]
        span.add(roots=len(roots), truncated=bool(result.get("truncated")))
        if not roots:
            raise NoRootsError(
                "No React roots found: renderers are registered but nothing has been committed yet"
            )
        return FiberForest(roots=roots, truncated=bool(result.get("truncated")))
