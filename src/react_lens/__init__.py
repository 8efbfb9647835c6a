"""react-lens - correlate a live React page's fiber tree with its accessibility tree.

Exposes an MCP server that answers "which authored component rendered this
element, with what props, and from which source location?".
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
