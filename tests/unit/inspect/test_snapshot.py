"""Unit tests for the accessibility snapshot builder."""

from __future__ import annotations

import pytest
from fakes import ax_node

from react_lens.inspect.snapshot import build_correlation, build_snapshot, take_snapshot


def _page() -> list[dict]:
    """RootWebArea > generic(ignored) > [button, link > StaticText]."""
    return [
        ax_node("1", "RootWebArea", "Demo", backend=1, children=["2"]),
        ax_node("2", "generic", backend=2, children=["3", "4"], ignored=True),
        ax_node(
            "3",
            "button",
            "Sign up",
            backend=3,
            properties=[
                {"name": "focusable", "value": {"type": "booleanOrUndefined", "value": True}},
                {"name": "pressed", "value": {"type": "tristate", "value": "mixed"}},
            ],
        ),
        ax_node("4", "link", "Docs", backend=4, children=["5"]),
        ax_node("5", "StaticText", "Docs", backend=5),
    ]


@pytest.mark.unit
@pytest.mark.inspect
class TestBuildSnapshot:
    def test_empty_list_returns_none(self):
        assert build_snapshot([]) is None

    def test_ignored_nodes_pruned_and_children_promoted(self):
        snapshot = build_snapshot(_page(), snapshot_id="s1")

        root = snapshot.root
        assert root.role == "RootWebArea"
        assert [child.role for child in root.children] == ["button", "link"]
        assert snapshot.node_count == 4

    def test_verbose_keeps_ignored_nodes(self):
        snapshot = build_snapshot(_page(), verbose=True, snapshot_id="s1")

        assert [child.role for child in snapshot.root.children] == ["generic"]
        assert snapshot.node_count == 5

    def test_uids_are_preorder_and_prefixed(self):
        snapshot = build_snapshot(_page(), snapshot_id="s1")

        uids = [node.uid for node in snapshot.root.iter_nodes()]
        assert uids == ["s1_0", "s1_1", "s1_2", "s1_3"]

    def test_states_and_backend_ids_read(self):
        snapshot = build_snapshot(_page(), snapshot_id="s1")
        button = snapshot.root.children[0]

        assert button.backend_dom_node_id == 3
        assert button.states == {"focusable": True, "pressed": "mixed"}

    def test_unknown_and_repeated_child_ids_skipped(self):
        nodes = [
            ax_node("1", "RootWebArea", backend=1, children=["2", "missing", "2", 7]),
            ax_node("2", "button", "Go", backend=2, children=["1"]),
        ]
        snapshot = build_snapshot(nodes, snapshot_id="s")

        assert [child.role for child in snapshot.root.children] == ["button"]
        assert snapshot.root.children[0].children == ()

    def test_to_dict_uses_cdp_field_names(self):
        data = build_snapshot(_page(), snapshot_id="s1").to_dict()

        assert data["snapshotId"] == "s1"
        button = data["root"]["children"][0]
        assert button["role"] == "button"
        assert button["name"] == "Sign up"
        assert button["backendDOMNodeId"] == 3
        assert button["focusable"] is True


@pytest.mark.unit
@pytest.mark.inspect
class TestBuildCorrelation:
    def test_facts_and_adjacency(self):
        snapshot = build_snapshot(_page(), snapshot_id="s1")
        correlation = build_correlation(snapshot.root)

        assert correlation.facts[3].role == "button"
        assert correlation.facts[3].name == "Sign up"
        assert correlation.adjacency[1] == [3, 4]
        assert correlation.adjacency[4] == [5]

    def test_pruned_nodes_do_not_contribute(self):
        snapshot = build_snapshot(_page(), snapshot_id="s1")
        correlation = build_correlation(snapshot.root)

        assert 2 not in correlation.facts
        assert all(2 not in children for children in correlation.adjacency.values())

    def test_first_occurrence_wins(self):
        nodes = [
            ax_node("1", "RootWebArea", backend=1, children=["2", "3"]),
            ax_node("2", "button", "First", backend=9),
            ax_node("3", "button", "Second", backend=9),
        ]
        correlation = build_correlation(build_snapshot(nodes, snapshot_id="s").root)

        assert correlation.facts[9].name == "First"


@pytest.mark.unit
@pytest.mark.inspect
async def test_take_snapshot_reads_driver(driver):
    driver.ax_nodes = _page()

    snapshot = await take_snapshot(driver)

    assert snapshot is not None
    assert snapshot.root.role == "RootWebArea"


@pytest.mark.unit
@pytest.mark.inspect
async def test_take_snapshot_empty_page(driver):
    assert await take_snapshot(driver) is None
