"""
Keyboard handler - press_key goes to whatever element has focus.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...errors import InvalidParameter
from ..params import require_str
from ..types import ToolResult
from .common import session_handle

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def handle_press_key(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    key = require_str(args, "key")
    if not key:
        raise InvalidParameter("Parameter 'key' must not be empty")
    session_handle(registry, args).act("key_press", None, key)
    return ToolResult.text(f"Key '{key}' pressed")


INPUT_HANDLERS: dict[str, tuple] = {
    "press_key": (handle_press_key, "Error pressing key"),
}
