"""
Line-delimited JSON framing.

One envelope per line in each direction. Requests decode into ``ToolCall``
or ``ResourceRequest``; responses are plain dicts built by the helpers
below and encoded with ``encode``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors import MalformedEnvelope

TOOL_CALL = "tool_call"
RESOURCE_REQUEST = "resource_request"
TOOL_RESPONSE = "tool_response"
RESOURCE_RESPONSE = "resource_response"


@dataclass(slots=True)
class ToolCall:
    tool_call_id: str | int
    name: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ResourceRequest:
    request_id: str | int
    uri: str


Envelope = ToolCall | ResourceRequest


def _require_id(msg: dict[str, Any], key: str) -> str | int:
    value = msg.get(key)
    # bool is an int subclass but never a valid id.
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise MalformedEnvelope(f"{msg.get('type')} envelope needs a string '{key}'")
    return value


def decode(line: bytes | str) -> Envelope:
    """Parse one request line."""
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedEnvelope(f"Line is not UTF-8: {exc}") from exc
    try:
        msg = json.loads(line)
    except json.JSONDecodeError as exc:
        raise MalformedEnvelope(f"Invalid JSON: {exc}") from exc
    if not isinstance(msg, dict):
        raise MalformedEnvelope("Envelope must be a JSON object")

    kind = msg.get("type")
    if not isinstance(kind, str):
        raise MalformedEnvelope("Envelope has no 'type'")

    if kind == TOOL_CALL:
        call_id = _require_id(msg, "tool_call_id")
        name = msg.get("name")
        if not isinstance(name, str):
            raise MalformedEnvelope("tool_call envelope needs a string 'name'")
        params = msg.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise MalformedEnvelope("tool_call 'params' must be an object")
        return ToolCall(tool_call_id=call_id, name=name, params=params)

    if kind == RESOURCE_REQUEST:
        request_id = _require_id(msg, "request_id")
        uri = msg.get("uri")
        if not isinstance(uri, str):
            raise MalformedEnvelope("resource_request envelope needs a string 'uri'")
        return ResourceRequest(request_id=request_id, uri=uri)

    raise MalformedEnvelope(f"Unknown envelope type: {kind}")


def tool_response(tool_call_id: str | int, content: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": TOOL_RESPONSE, "tool_call_id": tool_call_id, "content": content}


def resource_response(request_id: str | int, uri: str, text: str) -> dict[str, Any]:
    return {"type": RESOURCE_RESPONSE, "request_id": request_id, "contents": [{"uri": uri, "text": text}]}


def encode(payload: dict[str, Any]) -> bytes:
    """Serialize one envelope as a single terminated line."""
    data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return (data + "\n").encode("utf-8")


__all__ = [
    "RESOURCE_REQUEST",
    "RESOURCE_RESPONSE",
    "TOOL_CALL",
    "TOOL_RESPONSE",
    "Envelope",
    "ResourceRequest",
    "ToolCall",
    "decode",
    "encode",
    "resource_response",
    "tool_response",
]
