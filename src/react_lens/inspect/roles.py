"""Semantic role filter.

Decides which accessibility roles are worth correlating. Only nodes that
pass are tagged in the DOM, so this filter bounds the number of
cross-process calls made per snapshot.
"""

from __future__ import annotations

# Interactive widgets, landmarks and meaningful content.
ALLOWED_ROLES = frozenset(
    {
        # Widgets
        "button",
        "checkbox",
        "combobox",
        "gridcell",
        "link",
        "listbox",
        "menu",
        "menubar",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "progressbar",
        "radio",
        "radiogroup",
        "scrollbar",
        "searchbox",
        "slider",
        "spinbutton",
        "switch",
        "tab",
        "tablist",
        "tabpanel",
        "textbox",
        "tree",
        "treeitem",
        "treegrid",
        # Landmarks
        "banner",
        "complementary",
        "contentinfo",
        "form",
        "main",
        "navigation",
        "region",
        "search",
        # Structure with meaning to a reader
        "alert",
        "alertdialog",
        "article",
        "cell",
        "columnheader",
        "dialog",
        "figure",
        "grid",
        "heading",
        "img",
        "image",
        "list",
        "listitem",
        "log",
        "marquee",
        "math",
        "meter",
        "row",
        "rowheader",
        "status",
        "table",
        "timer",
        "toolbar",
        "tooltip",
    }
)

# Containers and text runs that never carry a correlation on their own.
DENIED_ROLES = frozenset(
    {
        "generic",
        "none",
        "presentation",
        "StaticText",
        "InlineTextBox",
        "LineBreak",
        "RootWebArea",
        "WebArea",
        "group",
        "paragraph",
        "Section",
        "LabelText",
        "Legend",
        "ListMarker",
        "Ignored",
        "IgnoredRole",
    }
)


def is_semantic_role(role: str | None) -> bool:
    """Return True when nodes with this role should be correlated."""
    if not role:
        return False
    return role in ALLOWED_ROLES and role not in DENIED_ROLES
