"""
Tool handlers organized by domain.

All handlers follow the signature: (config, registry, arguments) -> ToolResult.
Each table maps a tool name to (handler, error prefix).
"""

from .capture import CAPTURE_HANDLERS
from .elements import ELEMENT_HANDLERS
from .input import INPUT_HANDLERS
from .navigation import NAVIGATION_HANDLERS
from .session import SESSION_HANDLERS

ALL_HANDLERS: dict[str, tuple] = {
    **SESSION_HANDLERS,
    **NAVIGATION_HANDLERS,
    **ELEMENT_HANDLERS,
    **INPUT_HANDLERS,
    **CAPTURE_HANDLERS,
}

__all__ = [
    "ALL_HANDLERS",
    "CAPTURE_HANDLERS",
    "ELEMENT_HANDLERS",
    "INPUT_HANDLERS",
    "NAVIGATION_HANDLERS",
    "SESSION_HANDLERS",
]
