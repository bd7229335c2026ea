"""
Type definitions for tool results and handlers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..errors import ErrorKind

if TYPE_CHECKING:
    from ..config import ServerConfig
    from ..sessions import SessionRegistry


@dataclass(slots=True)
class ToolContent:
    """Single content item in a tool response."""

    type: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution: content on success, kind + message on error.

    Both variants render to the same list of text items on the wire.
    """

    content: list[ToolContent] = field(default_factory=list)
    error: ErrorKind | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def text(cls, *texts: str) -> ToolResult:
        """Create a successful result with one text item per argument."""
        return cls(content=[ToolContent(type="text", text=t) for t in texts])

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> ToolResult:
        return cls(content=[ToolContent(type="text", text=message)], error=kind)

    @property
    def message(self) -> str:
        return "\n".join(c.text for c in self.content)

    def to_content_list(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self.content]


HandlerFunc = Callable[["ServerConfig", "SessionRegistry", dict[str, Any]], ToolResult]


@dataclass(slots=True, frozen=True)
class ToolSpec:
    """A registered tool: handler plus the phrase that prefixes its failures."""

    name: str
    handler: HandlerFunc
    error_prefix: str


__all__ = ["HandlerFunc", "ToolContent", "ToolResult", "ToolSpec"]
