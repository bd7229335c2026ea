"""
Command dispatcher: name -> handler lookup for tool calls.

Every call ends in a ``ToolResult``; failures below this point never
escape to the server loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import BrowserStdioError, ErrorKind, UnknownOperation
from .redaction import redact_tool_arguments
from .types import HandlerFunc, ToolResult, ToolSpec

if TYPE_CHECKING:
    from ..config import ServerConfig
    from ..sessions import SessionRegistry

logger = logging.getLogger("mcp.browser.registry")


class CommandDispatcher:
    """Routes tool calls to handlers bound to one config and one session registry."""

    def __init__(self, config: ServerConfig, sessions: SessionRegistry) -> None:
        self.config = config
        self.sessions = sessions
        self._tools: dict[str, ToolSpec] = {}

    def register(self, name: str, handler: HandlerFunc, error_prefix: str) -> None:
        """Register a tool handler."""
        self._tools[name] = ToolSpec(name=name, handler=handler, error_prefix=error_prefix)

    def register_many(self, handlers: dict[str, tuple[HandlerFunc, str]]) -> None:
        """Register multiple handlers at once."""
        for name, (handler, error_prefix) in handlers.items():
            self.register(name, handler, error_prefix)

    def has(self, name: str) -> bool:
        return name in self._tools

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def _log_call(self, name: str, arguments: dict[str, Any]) -> None:
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        """
        Run one tool call.

        Args:
            name: Tool name
            arguments: Tool params object

        Returns:
            ToolResult; failures carry an ErrorKind and a prefixed message
        """
        self._log_call(name, arguments)

        if not self.has(name):
            exc = UnknownOperation(name)
            logger.info("tool_error tool=%s kind=%s", name, exc.kind.value)
            return ToolResult.failure(exc.kind, str(exc))

        spec = self._tools[name]

        try:
            return spec.handler(self.config, self.sessions, arguments)
        except BrowserStdioError as e:
            logger.info("tool_error tool=%s kind=%s reason=%s", name, e.kind.value, e)
            return ToolResult.failure(e.kind, f"{spec.error_prefix}: {e}")
        except Exception as exc:
            logger.exception("tool_call_failed tool=%s", name)
            return ToolResult.failure(ErrorKind.INTERNAL, f"{spec.error_prefix}: {exc}")


def create_default_dispatcher(config: ServerConfig, sessions: SessionRegistry) -> CommandDispatcher:
    """Create a dispatcher with every catalog tool registered."""
    from .handlers import ALL_HANDLERS

    dispatcher = CommandDispatcher(config, sessions)
    dispatcher.register_many(ALL_HANDLERS)
    return dispatcher


__all__ = ["CommandDispatcher", "create_default_dispatcher"]
