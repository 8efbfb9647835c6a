"""Inspection layer: hook bootstrap, snapshots, tagging, tree walking and lookups."""

from react_lens.inspect.hook import HookBootstrap, HookState
from react_lens.inspect.session import InspectionSession
from react_lens.inspect.snapshot import AccessibilityNode, Snapshot, build_correlation, build_snapshot
from react_lens.inspect.walker import ComponentTreeWalker

__all__ = [
    "AccessibilityNode",
    "ComponentTreeWalker",
    "HookBootstrap",
    "HookState",
    "InspectionSession",
    "Snapshot",
    "build_correlation",
    "build_snapshot",
]
