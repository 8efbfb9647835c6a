"""Inspection models - Pydantic models for tool-facing results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form with camelCase keys and unset optionals dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RendererInfo(_Model):
    """A React renderer registered with the DevTools hook."""

    id: int = Field(description="Renderer id assigned by the hook")
    name: str | None = Field(default=None, description="rendererPackageName")
    version: str | None = Field(default=None, description="rendererVersion")
    bundle_type: int | None = Field(
        default=None, description="0 for production builds, 1 for development"
    )


class AttachResult(_Model):
    """Outcome of ensuring the DevTools hook is attached."""

    attached: bool
    renderers: list[RendererInfo] = Field(default_factory=list)
    message: str | None = None


class RootInfo(_Model):
    """A committed React root."""

    renderer_id: int
    renderer_name: str | None = None
    renderer_version: str | None = None
    root_id: str
    root_index: int
    display_name: str = "Unknown"
    nodes: int = 0
    capped: bool = False


class SourceLocation(_Model):
    """Where an authored component was written."""

    file_name: str | None = None
    line_number: int | None = None
    column_number: int | None = None

    def format(self) -> str:
        """Render as ``file:line:col``, leaving out missing parts."""
        parts = [self.file_name or "unknown"]
        if self.line_number is not None:
            parts.append(str(self.line_number))
            if self.column_number is not None:
                parts.append(str(self.column_number))
        return ":".join(parts)


class OwnerInfo(_Model):
    """An authored ancestor in an owner chain."""

    name: str
    type: str
    source: SourceLocation | None = None


class ComponentDetails(_Model):
    """Full description of the component that owns one element."""

    name: str
    type: str
    props: Any = None
    state: Any = None
    source: SourceLocation | None = None
    owners: list[OwnerInfo] = Field(default_factory=list)
