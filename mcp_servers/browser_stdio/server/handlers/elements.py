"""
Element handlers - every operation that first waits for an element.

Wait states: ``clickable`` before pointer and typing actions, ``visible``
before reading or hovering, ``present`` for lookup and file inputs.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ...errors import BrowserStdioError, InvalidParameter
from ...locators import resolve_locator
from ..params import require_str, timeout_ms
from ..types import ToolResult
from .common import session_handle, wait_for_element

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def handle_find_element(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "present")
    handle.release(element)
    return ToolResult.text("Element found")


def handle_click_element(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "clickable")
    handle.act("click", element)
    return ToolResult.text("Element clicked")


def handle_send_keys(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    text = require_str(args, "text")
    handle, element = wait_for_element(config, registry, args, "clickable")
    handle.act("type", element, text)
    return ToolResult.text(f'Text "{text}" entered into element')


def handle_get_element_text(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "visible")
    text = handle.act("text", element)
    return ToolResult.text(text if isinstance(text, str) else "")


def handle_hover(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "visible")
    handle.act("hover", element)
    return ToolResult.text("Hovered over element")


def handle_drag_and_drop(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    source_locator = resolve_locator(require_str(args, "by"), require_str(args, "value"))
    target_locator = resolve_locator(require_str(args, "targetBy"), require_str(args, "targetValue"))
    wait = timeout_ms(args, config.element_timeout_ms)
    handle = session_handle(registry, args)
    # Both elements share one deadline.
    deadline = time.monotonic() + wait / 1000.0
    source = handle.locate(source_locator, wait, state="visible")
    remaining = max(0, int((deadline - time.monotonic()) * 1000))
    try:
        target = handle.locate(target_locator, remaining, state="visible")
    except BrowserStdioError:
        handle.release(source)
        raise
    handle.act("drag_drop", source, target)
    return ToolResult.text("Drag and drop completed")


def handle_double_click(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "clickable")
    handle.act("double_click", element)
    return ToolResult.text("Double click performed")


def handle_right_click(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    handle, element = wait_for_element(config, registry, args, "clickable")
    handle.act("context_click", element)
    return ToolResult.text("Right click performed")


def handle_upload_file(config: ServerConfig, registry: SessionRegistry, args: dict[str, Any]) -> ToolResult:
    file_path = require_str(args, "filePath")
    if not Path(file_path).expanduser().is_file():
        raise InvalidParameter(f"File not found: {file_path}")
    handle, element = wait_for_element(config, registry, args, "present")
    handle.act("upload", element, str(Path(file_path).expanduser().resolve()))
    return ToolResult.text("File upload initiated")


ELEMENT_HANDLERS: dict[str, tuple] = {
    "find_element": (handle_find_element, "Error finding element"),
    "click_element": (handle_click_element, "Error clicking element"),
    "send_keys": (handle_send_keys, "Error entering text"),
    "get_element_text": (handle_get_element_text, "Error getting element text"),
    "hover": (handle_hover, "Error hovering over element"),
    "drag_and_drop": (handle_drag_and_drop, "Error performing drag and drop"),
    "double_click": (handle_double_click, "Error performing double click"),
    "right_click": (handle_right_click, "Error performing right click"),
    "upload_file": (handle_upload_file, "Error uploading file"),
}
