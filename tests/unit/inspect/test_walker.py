"""Unit tests for the component tree walker."""

from __future__ import annotations

import pytest
from fakes import ax_node

from react_lens.inspect.fiber import FiberForest, FiberKind, FiberNode, FiberRoot
from react_lens.inspect.snapshot import build_correlation, build_snapshot
from react_lens.inspect.walker import ComponentTreeWalker


def _host(node_id: int, host_type: str, ref: int | None = None, role: str = "", name: str = "",
          children: list[dict] | None = None) -> dict:
    node = {"id": node_id, "tag": 5, "hostType": host_type, "children": children or []}
    if ref is not None:
        node["markers"] = {"ref": ref, "role": role, "name": name}
    return node


def _component(node_id: int, name: str, children: list[dict] | None = None,
               props: list | None = None, source: dict | None = None, state=None) -> dict:
    node = {
        "id": node_id,
        "tag": 0,
        "type": {"name": name},
        "props": props or [],
        "children": children or [],
    }
    if source:
        node["source"] = source
    if state is not None:
        node["state"] = state
    return node


def _forest(*trees: dict) -> FiberForest:
    return FiberForest(
        roots=[
            FiberRoot(renderer_id=1, root_index=i, tree=FiberNode.from_dict(tree))
            for i, tree in enumerate(trees)
        ]
    )


def _sign_up_page():
    """App > main > [h1 "Welcome", Button > button "Sign up"]."""
    ax = [
        ax_node("1", "RootWebArea", "Demo", backend=1, children=["2"]),
        ax_node("2", "main", "", backend=2, children=["4", "3"]),
        ax_node("3", "button", "Sign up", backend=3, children=["5"]),
        ax_node("4", "heading", "Welcome", backend=4),
        ax_node("5", "StaticText", "Sign up", backend=5),
    ]
    correlation = build_correlation(build_snapshot(ax, snapshot_id="s").root)
    tree = {
        "id": 0,
        "tag": 3,
        "children": [
            _component(
                1,
                "App",
                source={"fileName": "src/App.tsx", "lineNumber": 1, "columnNumber": 1},
                children=[
                    _host(
                        2,
                        "main",
                        ref=2,
                        role="main",
                        children=[
                            _host(3, "h1", ref=4, role="heading", name="Welcome"),
                            _component(
                                4,
                                "Button",
                                props=[
                                    ["children", {"t": "string", "v": "Sign up"}],
                                    ["variant", {"t": "string", "v": "primary"}],
                                ],
                                source={
                                    "fileName": "src/Button.tsx",
                                    "lineNumber": 42,
                                    "columnNumber": 8,
                                },
                                state=[False],
                                children=[
                                    _host(5, "button", ref=3, role="button", name="Sign up")
                                ],
                            ),
                        ],
                    )
                ],
            )
        ],
    }
    return correlation, _forest(tree)


@pytest.mark.unit
@pytest.mark.inspect
class TestComponentTreeWalker:
    def test_component_nested_under_owner(self):
        correlation, forest = _sign_up_page()

        text = ComponentTreeWalker(correlation).walk(forest).render()

        assert text.splitlines() == [
            "React Component Tree:",
            'App [role="main" name=""] (src/App.tsx:1:1)',
            '├─ [role="heading" name="Welcome"]',
            '└─ Button {variant="primary"} [role="button" name="Sign up"] (src/Button.tsx:42:8)',
        ]

    def test_counts(self):
        correlation, forest = _sign_up_page()

        result = ComponentTreeWalker(correlation).walk(forest)

        assert result.components == 2
        assert result.leaves == 1
        assert result.truncated is False

    def test_claimed_element_not_repeated_as_leaf(self):
        correlation, forest = _sign_up_page()

        text = ComponentTreeWalker(correlation).walk(forest).render()

        assert text.count('[role="button" name="Sign up"]') == 1
        assert text.count('[role="heading" name="Welcome"]') == 1

    def test_state_appended_when_requested(self):
        correlation, forest = _sign_up_page()

        text = ComponentTreeWalker(correlation, include_state=True).walk(forest).render()

        assert "(src/Button.tsx:42:8) state=[false]" in text

    def test_output_is_deterministic(self):
        correlation, forest = _sign_up_page()
        walker_text = ComponentTreeWalker(correlation).walk(forest).render()

        correlation2, forest2 = _sign_up_page()
        assert ComponentTreeWalker(correlation2).walk(forest2).render() == walker_text

    def test_unclaimed_host_gets_bare_line(self):
        ax = [
            ax_node("1", "RootWebArea", backend=1, children=["7"]),
            ax_node("7", "link", "Home", backend=7),
        ]
        correlation = build_correlation(build_snapshot(ax, snapshot_id="s").root)
        tree = _component(
            1,
            "Nav",
            children=[_host(2, "div", children=[_host(3, "a", ref=7, role="link", name="Home")])],
        )

        text = ComponentTreeWalker(correlation).walk(_forest(tree)).render()

        assert text.splitlines()[1:] == ["Nav", '└─ [role="link" name="Home"]']

    def test_non_semantic_host_is_transparent(self):
        ax = [
            ax_node("1", "RootWebArea", backend=1, children=["8"]),
            ax_node("8", "generic", "", backend=8),
        ]
        correlation = build_correlation(build_snapshot(ax, snapshot_id="s").root)
        tree = {"id": 0, "tag": 3, "children": [_host(1, "div", ref=8, role="generic")]}

        result = ComponentTreeWalker(correlation).walk(_forest(tree))

        assert result.lines == []
        assert result.render() == "React Component Tree:"

    def test_multiple_roots_in_order(self):
        correlation = build_correlation(
            build_snapshot([ax_node("1", "RootWebArea", backend=1)], snapshot_id="s").root
        )

        text = ComponentTreeWalker(correlation).walk(
            _forest(_component(0, "Main"), _component(1, "Modal"))
        ).render()

        assert text.splitlines()[1:] == ["Main", "Modal"]

    def test_cycle_visited_once(self):
        correlation = build_correlation(
            build_snapshot([ax_node("1", "RootWebArea", backend=1)], snapshot_id="s").root
        )
        node = FiberNode(id=1, tag=0, kind=FiberKind.COMPONENT, name="Loop")
        node.children.append(node)
        forest = FiberForest(roots=[FiberRoot(renderer_id=1, root_index=0, tree=node)])

        result = ComponentTreeWalker(correlation).walk(forest)

        assert result.components == 1

    def test_step_ceiling_truncates(self):
        correlation = build_correlation(
            build_snapshot([ax_node("1", "RootWebArea", backend=1)], snapshot_id="s").root
        )
        tree = _component(0, "A", children=[_component(1, "B", children=[_component(2, "C")])])

        result = ComponentTreeWalker(correlation, max_steps=2).walk(_forest(tree))

        assert result.truncated is True
        assert result.components == 2
        assert result.render().endswith("(tree truncated: node limit reached)")

    def test_markers_from_earlier_pass_ignored(self):
        correlation = build_correlation(
            build_snapshot([ax_node("1", "RootWebArea", backend=1)], snapshot_id="s").root
        )
        stale = _host(1, "button", ref=99, role="button", name="Old")
        tree = _component(0, "Card", children=[stale])

        text = ComponentTreeWalker(correlation).walk(_forest(tree)).render()

        assert text.splitlines()[1:] == ["Card"]

    def test_markers_on_element_no_longer_semantic_ignored(self):
        ax = [
            ax_node("1", "RootWebArea", backend=1, children=["6"]),
            ax_node("6", "generic", "", backend=6),
        ]
        correlation = build_correlation(build_snapshot(ax, snapshot_id="s").root)
        # Tagged as a button by an earlier pass; the element is now a plain container.
        tree = _component(0, "Card", children=[_host(1, "div", ref=6, role="button", name="Old")])

        text = ComponentTreeWalker(correlation).walk(_forest(tree)).render()

        assert text.splitlines()[1:] == ["Card"]
