"""Capability catalog: server identity and the static tool list sent in the handshake."""

from __future__ import annotations

import copy
from typing import Any

from ..locators import LOCATOR_STRATEGIES

SERVER_INFO: dict[str, str] = {"name": "browser-stdio", "version": "0.1.0"}

_SESSION_ID: dict[str, Any] = {
    "type": "string",
    "description": "Session to act on (default: the most recently started session)",
}

_ELEMENT_PROPERTIES: dict[str, Any] = {
    "by": {
        "type": "string",
        "enum": list(LOCATOR_STRATEGIES),
        "description": "Locator strategy to find element",
    },
    "value": {"type": "string", "description": "Value for the locator strategy"},
    "timeout": {"type": "number", "description": "Maximum time to wait for element in milliseconds"},
    "session_id": _SESSION_ID,
}


def _element_schema(extra: dict[str, Any] | None = None, required: tuple[str, ...] = ()) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {**_ELEMENT_PROPERTIES, **(extra or {})},
        "required": ["by", "value", *required],
    }


TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "start_browser",
        "description": "launches browser",
        "parameters": {
            "type": "object",
            "properties": {
                "browser": {
                    "type": "string",
                    "enum": ["chrome", "firefox"],
                    "description": "Browser to launch (chrome or firefox)",
                },
                "options": {
                    "type": "object",
                    "description": "Browser options",
                    "properties": {
                        "headless": {"type": "boolean", "description": "Run browser in headless mode"},
                        "arguments": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Additional browser arguments",
                        },
                    },
                },
            },
            "required": ["browser"],
        },
    },
    {
        "name": "navigate",
        "description": "navigates to a URL",
        "parameters": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "URL to navigate to"},
                "session_id": _SESSION_ID,
            },
            "required": ["url"],
        },
    },
    {"name": "find_element", "description": "finds an element", "parameters": _element_schema()},
    {"name": "click_element", "description": "clicks an element", "parameters": _element_schema()},
    {
        "name": "send_keys",
        "description": "sends keys to an element, aka typing",
        "parameters": _element_schema(
            {"text": {"type": "string", "description": "Text to enter into the element"}},
            required=("text",),
        ),
    },
    {"name": "get_element_text", "description": "gets the text() of an element", "parameters": _element_schema()},
    {"name": "hover", "description": "moves the mouse to hover over an element", "parameters": _element_schema()},
    {
        "name": "drag_and_drop",
        "description": "drags an element and drops it onto another element",
        "parameters": _element_schema(
            {
                "targetBy": {
                    "type": "string",
                    "enum": list(LOCATOR_STRATEGIES),
                    "description": "Locator strategy to find target element",
                },
                "targetValue": {"type": "string", "description": "Value for the target locator strategy"},
            },
            required=("targetBy", "targetValue"),
        ),
    },
    {"name": "double_click", "description": "performs a double click on an element", "parameters": _element_schema()},
    {
        "name": "right_click",
        "description": "performs a right click (context click) on an element",
        "parameters": _element_schema(),
    },
    {
        "name": "press_key",
        "description": "simulates pressing a keyboard key",
        "parameters": {
            "type": "object",
            "properties": {
                "key": {"type": "string", "description": "Key to press (e.g., 'Enter', 'Tab', 'a', etc.)"},
                "session_id": _SESSION_ID,
            },
            "required": ["key"],
        },
    },
    {
        "name": "upload_file",
        "description": "uploads a file using a file input element",
        "parameters": _element_schema(
            {"filePath": {"type": "string", "description": "Absolute path to the file to upload"}},
            required=("filePath",),
        ),
    },
    {
        "name": "take_screenshot",
        "description": "captures a screenshot of the current page",
        "parameters": {
            "type": "object",
            "properties": {
                "outputPath": {
                    "type": "string",
                    "description": "Optional path where to save the screenshot. If not provided, returns base64 data.",
                },
                "session_id": _SESSION_ID,
            },
        },
    },
    {
        "name": "close_session",
        "description": "closes the current browser session",
        "parameters": {"type": "object", "properties": {"session_id": _SESSION_ID}},
    },
]


def tool_names() -> list[str]:
    return [t["name"] for t in TOOL_DEFINITIONS]


def handshake() -> dict[str, Any]:
    """First outbound message; a deep copy so callers cannot mutate the catalog."""
    return {**SERVER_INFO, "tools": copy.deepcopy(TOOL_DEFINITIONS)}


__all__ = ["SERVER_INFO", "TOOL_DEFINITIONS", "handshake", "tool_names"]
