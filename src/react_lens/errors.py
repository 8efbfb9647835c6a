"""Exception types raised by the inspection layer.

Tool handlers convert these to ``"Error: ..."`` text; nothing here is meant
to cross the MCP boundary as an exception.
"""

from __future__ import annotations


class LensError(Exception):
    """Base class for react-lens errors."""


class ResolutionError(LensError):
    """A backend node reference could not be turned into a live element.

    Raised for stale references (the page reloaded or navigated), detached
    nodes, and references from another browser session.
    """

    def __init__(self, backend_node_id: int, reason: str) -> None:
        self.backend_node_id = backend_node_id
        self.reason = reason
        super().__init__(
            f"Failed to resolve backendDOMNodeId {backend_node_id} to a DOM element: {reason}"
        )


class ComponentNotFoundError(LensError):
    """The element exists but no authored React component owns it."""


class HookNotAttachedError(LensError):
    """The React DevTools hook is missing or no renderer has registered."""


class NoRootsError(LensError):
    """Renderers registered but no committed fiber root could be found."""
