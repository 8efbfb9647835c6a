"""Text rendering for the component map.

Line format:

    ComponentName {prop="value", count={1}} [role="button" name="Sign up"] (src/Button.tsx:42:8)

Accessibility-only leaves render as ``[role="..." name="..."]`` one level
below the component that owns them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from react_lens.inspect.models import SourceLocation

BRANCH = "├─ "
LAST = "└─ "
PIPE = "│  "
SPACE = "   "

# Props that are plumbing rather than something the author passed.
_INTERNAL_PREFIXES = ("__", "data-inspector-")
_HIDDEN_KEYS = frozenset({"children"})


def _escape(text: str) -> str:
    return " ".join(text.split()).replace("\\", "\\\\").replace('"', '\\"')


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(limit - 1, 0)] + "…"


def format_prop_value(descriptor: dict[str, Any], max_string_length: int = 40) -> str:
    """Render one prop value on a single line.

    Primitives are shown inline; functions, arrays, objects and elements are
    collapsed to fixed placeholders so the output stays bounded.
    """
    kind = descriptor.get("t")
    value = descriptor.get("v")
    if kind == "string":
        return f'"{_escape(_truncate(str(value), max_string_length))}"'
    if kind == "number":
        return f"{{{value}}}"
    if kind == "boolean":
        return "{true}" if value else "{false}"
    if kind in ("null", "undefined"):
        return f"{{{kind}}}"
    if kind == "function":
        return "{fn}"
    if kind == "array":
        return "{[...]}"
    if kind == "element":
        return "{<Element>}"
    if kind == "dom":
        return "{<Node>}"
    if kind == "symbol":
        return f"{{{value}}}"
    return "{{...}}"


def is_internal_prop(key: str) -> bool:
    return key in _HIDDEN_KEYS or key.startswith(_INTERNAL_PREFIXES)


def format_props(
    props: list[tuple[str, dict[str, Any]]],
    max_props: int = 3,
    max_string_length: int = 40,
) -> str | None:
    """Summarize the first ``max_props`` author-supplied props.

    Returns:
        ``{a="x", b={1}}``, or None when nothing is left to show.
    """
    shown = [
        f"{key}={format_prop_value(desc, max_string_length)}"
        for key, desc in props
        if not is_internal_prop(key)
    ][:max_props]
    if not shown:
        return None
    return "{" + ", ".join(shown) + "}"


def format_state(state: Any, max_chars: int = 80) -> str | None:
    """Compact one-line JSON of a state snapshot, capped at ``max_chars``."""
    if state is None or state == []:
        return None
    text = json.dumps(state, ensure_ascii=False, separators=(",", ":"), default=str)
    return _truncate(text, max_chars)


def format_annotation(role: str, name: str) -> str:
    return f'[role="{_escape(role)}" name="{_escape(name)}"]'


@dataclass
class RenderedLine:
    """One row of the component map, plus the rows nested under it."""

    component_name: str | None = None
    props_summary: str | None = None
    state_summary: str | None = None
    annotation: str | None = None
    source: SourceLocation | None = None
    depth: int = 0
    connector_prefix: str = ""
    children: list[RenderedLine] = field(default_factory=list)

    @property
    def text(self) -> str:
        parts = []
        if self.component_name:
            parts.append(self.component_name)
        if self.props_summary:
            parts.append(self.props_summary)
        if self.annotation:
            parts.append(self.annotation)
        if self.source:
            parts.append(f"({self.source.format()})")
        if self.state_summary:
            parts.append(f"state={self.state_summary}")
        return " ".join(parts)


def child_prefix(parent_prefix: str, is_last: bool) -> str:
    """Derive a child's prefix from its parent's.

    The parent's own connector is swapped for its continuation glyph
    (``├─`` becomes ``│``, ``└─`` becomes blank), then the child's connector
    is appended.
    """
    if parent_prefix.endswith(BRANCH):
        base = parent_prefix[: -len(BRANCH)] + PIPE
    elif parent_prefix.endswith(LAST):
        base = parent_prefix[: -len(LAST)] + SPACE
    else:
        base = parent_prefix
    return base + (LAST if is_last else BRANCH)


def render_lines(top_level: list[RenderedLine]) -> list[str]:
    """Flatten a line tree into text rows, filling in prefix and depth."""
    rows: list[str] = []
    stack = [(line, "", 0) for line in reversed(top_level)]
    while stack:
        line, prefix, depth = stack.pop()
        line.connector_prefix = prefix
        line.depth = depth
        rows.append(prefix + line.text)
        count = len(line.children)
        for index in range(count - 1, -1, -1):
            stack.append(
                (
                    line.children[index],
                    child_prefix(prefix, index == count - 1),
                    depth + 1,
                )
            )
    return rows


def render_tree(lines: list[RenderedLine], header: str, truncated: bool = False) -> str:
    """Render a complete map: header row, then every line."""
    rows = [header, *render_lines(lines)]
    if truncated:
        rows.append("(tree truncated: node limit reached)")
    return "\n".join(rows)
