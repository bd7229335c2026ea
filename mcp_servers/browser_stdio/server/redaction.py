"""Redaction utilities for logging and frame dumps.

Prefers safety over fidelity: typed text, credentials in URLs and large
payloads (screenshots) never reach the logs verbatim.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_SUBSTRINGS = (
    "token",
    "secret",
    "password",
    "passwd",
    "pwd",
    "authorization",
    "cookie",
    "jwt",
    "bearer",
    "api-key",
    "api_key",
    "apikey",
)

# Avoid false-positives like "author" while still protecting obvious keys.
_SENSITIVE_EXACT = {"auth", "key", "sig", "signature"}

# (tool, argument) pairs whose values are user content, not addressing.
_CONTENT_ARGUMENTS = {("send_keys", "text")}

LOG_MAX_TEXT_CHARS = 512


def is_sensitive_key(key: str) -> bool:
    k = (key or "").strip().lower()
    if not k:
        return False
    if k in _SENSITIVE_EXACT:
        return True
    return any(s in k for s in _SENSITIVE_SUBSTRINGS)


def _redacted_summary(value: Any) -> str:
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple)):
        return f"<redacted list len={len(value)}>"
    if isinstance(value, dict):
        return f"<redacted dict keys={len(value)}>"
    return "<redacted>"


def redact_url(url: str) -> str:
    """Drop userinfo and redact sensitive query values; unchanged URLs are returned as-is."""
    if not isinstance(url, str) or not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    changed = False
    netloc = parts.netloc
    query = parts.query

    if "@" in netloc:
        netloc = netloc.rsplit("@", 1)[1]
        changed = True

    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        out_pairs: list[tuple[str, str]] = []
        redacted_any = False
        for k, v in pairs:
            if v and is_sensitive_key(k):
                out_pairs.append((k, "<redacted>"))
                redacted_any = True
            else:
                out_pairs.append((k, v))
        if redacted_any:
            query = urlencode(out_pairs, doseq=True)
            changed = True

    if not changed:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


def _redact_any(value: Any, *, tool: str, key: str | None) -> Any:
    if isinstance(value, dict):
        return {k: _redact_any(v, tool=tool, key=str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_any(v, tool=tool, key=key) for v in value]

    lk = (key or "").lower()
    if isinstance(value, str) and lk == "url":
        return redact_url(value)
    if (tool, lk) in _CONTENT_ARGUMENTS:
        return _redacted_summary(value)
    if is_sensitive_key(lk):
        return _redacted_summary(value)
    return value


def redact_tool_arguments(tool: str, args: dict[str, Any]) -> dict[str, Any]:
    """Redact tool arguments for safe logging."""
    return _redact_any(args, tool=tool, key=None)


def _truncate(text: str, max_chars: int | None) -> str:
    if max_chars is None or len(text) <= max_chars:
        return text
    return text[:max_chars] + f"… <truncated len={len(text)}>"


# Tools whose responses echo user content back.
_CONTENT_RESPONSES = {tool for tool, _ in _CONTENT_ARGUMENTS}


def redact_frame(
    payload: dict[str, Any],
    *,
    tool: str | None = None,
    max_text_chars: int | None = LOG_MAX_TEXT_CHARS,
) -> dict[str, Any]:
    """Redact one protocol envelope (either direction) for dumps and traces.

    ``tool`` names the call a ``tool_response`` answers; responses to tools
    that echo typed content are summarized instead of truncated.
    """
    msg = dict(payload) if isinstance(payload, dict) else {}

    params = msg.get("params")
    name = msg.get("name")
    if isinstance(params, dict) and isinstance(name, str):
        msg["params"] = redact_tool_arguments(name, params)

    content = msg.get("content")
    if isinstance(content, list):
        echoes_content = tool in _CONTENT_RESPONSES
        out = []
        for item in content:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                text = item["text"]
                text = _redacted_summary(text) if echoes_content else _truncate(text, max_text_chars)
                item = {**item, "text": text}
            out.append(item)
        msg["content"] = out

    return msg


__all__ = ["LOG_MAX_TEXT_CHARS", "is_sensitive_key", "redact_frame", "redact_tool_arguments", "redact_url"]
