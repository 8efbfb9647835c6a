"""Shared utilities."""

from react_lens.utils.format import serialize_result

__all__ = ["serialize_result"]
