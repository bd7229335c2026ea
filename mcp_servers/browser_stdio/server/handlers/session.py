"""
Session lifecycle handlers: start_browser and close_session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...errors import ErrorKind, UnsupportedEngine
from ..params import optional_bool, optional_object, optional_str, optional_str_list, require_str
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def handle_start_browser(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    browser = require_str(args, "browser")
    options = optional_object(args, "options")
    headless = optional_bool(options, "headless", False)
    arguments = optional_str_list(options, "arguments")
    try:
        session = registry.create(browser, headless=headless, extra_args=arguments)
    except UnsupportedEngine as exc:
        # Reported bare, without the "Error starting browser" prefix.
        return ToolResult.failure(exc.kind, str(exc))
    return ToolResult.text(f"Browser started with session_id: {session.id}")


def handle_close_session(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    session_id = optional_str(args, "session_id")
    if session_id is None:
        session_id = registry.current_id
        if session_id is None:
            return ToolResult.failure(ErrorKind.NO_ACTIVE_SESSION, "No active session to close")
    registry.close(session_id)
    return ToolResult.text(f"Browser session {session_id} closed")


SESSION_HANDLERS: dict[str, tuple] = {
    "start_browser": (handle_start_browser, "Error starting browser"),
    "close_session": (handle_close_session, "Error closing session"),
}
