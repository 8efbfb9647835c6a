"""Unit tests for component map text rendering."""

from __future__ import annotations

import pytest

from react_lens.inspect.format import (
    RenderedLine,
    child_prefix,
    format_annotation,
    format_prop_value,
    format_props,
    format_state,
    render_lines,
)
from react_lens.inspect.models import SourceLocation


@pytest.mark.unit
@pytest.mark.inspect
class TestPropValues:
    @pytest.mark.parametrize(
        ("descriptor", "expected"),
        [
            ({"t": "string", "v": "primary"}, '"primary"'),
            ({"t": "number", "v": 1}, "{1}"),
            ({"t": "boolean", "v": True}, "{true}"),
            ({"t": "boolean", "v": False}, "{false}"),
            ({"t": "null"}, "{null}"),
            ({"t": "undefined"}, "{undefined}"),
            ({"t": "function", "n": "onClick"}, "{fn}"),
            ({"t": "array", "n": 3}, "{[...]}"),
            ({"t": "object"}, "{{...}}"),
            ({"t": "element"}, "{<Element>}"),
        ],
    )
    def test_one_line_values(self, descriptor, expected):
        assert format_prop_value(descriptor) == expected

    def test_long_string_truncated(self):
        value = format_prop_value({"t": "string", "v": "x" * 100}, max_string_length=10)

        assert value == '"' + "x" * 9 + '…"'

    def test_quotes_escaped(self):
        assert format_prop_value({"t": "string", "v": 'say "hi"'}) == '"say \\"hi\\""'


@pytest.mark.unit
@pytest.mark.inspect
class TestProps:
    def test_first_three_non_internal(self):
        props = [
            ("children", {"t": "element"}),
            ("variant", {"t": "string", "v": "primary"}),
            ("__source", {"t": "object"}),
            ("data-inspector-line", {"t": "string", "v": "4"}),
            ("count", {"t": "number", "v": 2}),
            ("onClick", {"t": "function"}),
            ("disabled", {"t": "boolean", "v": False}),
        ]

        assert format_props(props) == '{variant="primary", count={2}, onClick={fn}}'

    def test_nothing_to_show(self):
        assert format_props([("children", {"t": "element"})]) is None


@pytest.mark.unit
@pytest.mark.inspect
class TestStateAndAnnotation:
    def test_state_compact_and_capped(self):
        assert format_state([0, "a"]) == '[0,"a"]'
        assert len(format_state({"text": "y" * 200}, max_chars=20)) == 20
        assert format_state(None) is None

    def test_annotation(self):
        assert format_annotation("button", "Sign up") == '[role="button" name="Sign up"]'


@pytest.mark.unit
@pytest.mark.inspect
class TestTreeRendering:
    def test_child_prefix(self):
        assert child_prefix("", is_last=False) == "├─ "
        assert child_prefix("├─ ", is_last=True) == "│  └─ "
        assert child_prefix("└─ ", is_last=False) == "   ├─ "

    def test_render_lines(self):
        tree = [
            RenderedLine(
                component_name="App",
                source=SourceLocation(file_name="src/App.tsx", line_number=1, column_number=1),
                children=[
                    RenderedLine(
                        component_name="Header",
                        children=[RenderedLine(annotation='[role="link" name="Home"]')],
                    ),
                    RenderedLine(component_name="Footer", props_summary='{year={2024}}'),
                ],
            )
        ]

        assert render_lines(tree) == [
            "App (src/App.tsx:1:1)",
            "├─ Header",
            '│  └─ [role="link" name="Home"]',
            "└─ Footer {year={2024}}",
        ]
        assert tree[0].children[0].children[0].depth == 2

    def test_state_appended(self):
        line = RenderedLine(component_name="Counter", state_summary="[1]")

        assert line.text == "Counter state=[1]"
