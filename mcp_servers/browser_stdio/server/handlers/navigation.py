"""
Navigation handler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..params import require_str
from ..types import ToolResult
from .common import session_handle

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def handle_navigate(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    url = require_str(args, "url")
    session_handle(registry, args).navigate(url)
    return ToolResult.text(f"Navigated to {url}")


NAVIGATION_HANDLERS: dict[str, tuple] = {
    "navigate": (handle_navigate, "Error navigating"),
}
