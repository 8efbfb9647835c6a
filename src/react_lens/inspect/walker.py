"""Component tree walker / correlator.

Merges the extracted fiber tree with the accessibility lookup tables into
one annotated tree of ``RenderedLine`` rows:

- every authored component gets one line, annotated with the role and name
  of its first host descendant when that element was tagged;
- accessibility children of that element that no component claims are
  listed directly beneath it as bare ``[role=... name=...]`` leaves;
- host elements that no component claims but that carry a semantic
  annotation get their own bare line;
- everything else is transparent.

Traversal uses an explicit stack, a visited set keyed by fiber id and a
hard step ceiling; the fiber graph is assumed acyclic but not trusted to be.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from react_lens.inspect.fiber import ElementMarkers, FiberForest, FiberKind, FiberNode
from react_lens.inspect.format import (
    RenderedLine,
    format_annotation,
    format_props,
    format_state,
    render_tree,
)
from react_lens.inspect.roles import is_semantic_role
from react_lens.inspect.snapshot import Correlation

HEADER = "React Component Tree:"


@dataclass
class WalkResult:
    lines: list[RenderedLine]
    components: int = 0
    leaves: int = 0
    truncated: bool = False

    def render(self) -> str:
        return render_tree(self.lines, HEADER, self.truncated)


@dataclass
class ComponentTreeWalker:
    """Walks a fiber forest and produces the annotated line tree."""

    correlation: Correlation
    include_state: bool = False
    max_props: int = 3
    max_state_chars: int = 80
    max_string_length: int = 40
    max_steps: int = 50000
    _host_cache: dict[int, FiberNode | None] = field(default_factory=dict, init=False)

    def first_host_descendant(self, node: FiberNode) -> FiberNode | None:
        """First host fiber below ``node`` in pre-order (first child, then siblings).

        Stops at the first host found, so each component is associated with
        at most one element.
        """
        if node.id in self._host_cache:
            return self._host_cache[node.id]
        found: FiberNode | None = None
        seen: set[int] = set()
        stack = list(reversed(node.children))
        while stack:
            current = stack.pop()
            if current.id in seen:
                continue
            seen.add(current.id)
            if current.kind is FiberKind.HOST:
                found = current
                break
            stack.extend(reversed(current.children))
        self._host_cache[node.id] = found
        return found

    def _collect_claims(self, forest: FiberForest) -> set[int]:
        """Backend ids of every element associated with some component."""
        claimed: set[int] = set()
        seen: set[int] = set()
        stack = [root.tree for root in reversed(forest.roots)]
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            if node.kind is FiberKind.COMPONENT:
                host = self.first_host_descendant(node)
                if host is not None and host.markers is not None:
                    claimed.add(host.markers.ref)
            stack.extend(reversed(node.children))
        return claimed

    def _annotation(self, markers: ElementMarkers | None) -> str | None:
        # Markers left over from an earlier pass may point at refs the current
        # snapshot does not know, or at elements whose role is no longer semantic.
        fact = self.correlation.facts.get(markers.ref) if markers else None
        if fact is None or not is_semantic_role(fact.role):
            return None
        return format_annotation(fact.role, fact.name)

    def _component_line(self, node: FiberNode, host: FiberNode | None) -> RenderedLine:
        return RenderedLine(
            component_name=node.name,
            props_summary=format_props(node.props, self.max_props, self.max_string_length),
            state_summary=(
                format_state(node.state, self.max_state_chars) if self.include_state else None
            ),
            annotation=self._annotation(host.markers if host else None),
            source=node.source,
        )

    def _leaves(self, ref: int, claimed: set[int], emitted: set[int]) -> list[RenderedLine]:
        leaves = []
        for child_ref in self.correlation.adjacency.get(ref, []):
            if child_ref in claimed or child_ref in emitted:
                continue
            fact = self.correlation.facts.get(child_ref)
            if fact is None or not is_semantic_role(fact.role):
                continue
            emitted.add(child_ref)
            leaves.append(RenderedLine(annotation=format_annotation(fact.role, fact.name)))
        return leaves

    def walk(self, forest: FiberForest) -> WalkResult:
        """Walk every root in order and build the line tree."""
        claimed = self._collect_claims(forest)
        emitted: set[int] = set()
        visited: set[int] = set()
        top = RenderedLine()
        result = WalkResult(lines=top.children, truncated=forest.truncated)
        steps = 0

        stack: list[tuple[FiberNode, RenderedLine]] = [
            (root.tree, top) for root in reversed(forest.roots)
        ]
        while stack:
            node, container = stack.pop()
            if node.id in visited:
                logger.debug(f"Fiber {node.id} reached twice, skipping")
                continue
            visited.add(node.id)
            steps += 1
            if steps > self.max_steps:
                result.truncated = True
                break

            parent = container
            if node.kind is FiberKind.COMPONENT:
                host = self.first_host_descendant(node)
                line = self._component_line(node, host)
                if host is not None and host.markers is not None:
                    emitted.add(host.markers.ref)
                    line.children.extend(self._leaves(host.markers.ref, claimed, emitted))
                    result.leaves += len(line.children)
                container.children.append(line)
                result.components += 1
                parent = line
            elif node.kind is FiberKind.HOST and node.markers is not None:
                ref = node.markers.ref
                fact = self.correlation.facts.get(ref)
                if (
                    fact is not None
                    and ref not in claimed
                    and ref not in emitted
                    and is_semantic_role(fact.role)
                ):
                    emitted.add(ref)
                    line = RenderedLine(annotation=self._annotation(node.markers))
                    container.children.append(line)
                    parent = line

            for child in reversed(node.children):
                stack.append((child, parent))

        return result
