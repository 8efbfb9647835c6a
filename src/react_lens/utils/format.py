"""Result serialization for MCP responses."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

__all__ = ["serialize_result"]


def _to_native(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: _to_native(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_native(item) for item in value]
    return value


def serialize_result(result: Any) -> str:
    """Serialize a tool result to MCP text content.

    - Strings pass through unchanged
    - Pydantic models and objects with ``to_dict()`` are converted first
    - Dicts and lists become compact JSON, ``None`` becomes ``null``
    - Anything else uses str()
    """
    if isinstance(result, str):
        return result
    result = _to_native(result)
    if result is None or isinstance(result, (dict, list)):
        return json.dumps(result, ensure_ascii=False, separators=(",", ":"), default=str)
    return str(result)
