"""Typed reads from a tool call's ``params`` object."""

from __future__ import annotations

from typing import Any

from ..errors import InvalidParameter, MissingParameter


def require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None:
        raise MissingParameter(key)
    if not isinstance(value, str):
        raise InvalidParameter(f"Parameter '{key}' must be a string")
    return value


def optional_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidParameter(f"Parameter '{key}' must be a string")
    return value


def optional_bool(args: dict[str, Any], key: str, default: bool = False) -> bool:
    value = args.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise InvalidParameter(f"Parameter '{key}' must be a boolean")
    return value


def optional_str_list(args: dict[str, Any], key: str) -> list[str]:
    value = args.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidParameter(f"Parameter '{key}' must be an array of strings")
    return list(value)


def optional_object(args: dict[str, Any], key: str) -> dict[str, Any]:
    value = args.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidParameter(f"Parameter '{key}' must be an object")
    return value


def timeout_ms(args: dict[str, Any], default: int, key: str = "timeout") -> int:
    """Element wait in milliseconds; non-negative number, booleans rejected."""
    value = args.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameter(f"Parameter '{key}' must be a number of milliseconds")
    if value < 0 or value != value:
        raise InvalidParameter(f"Parameter '{key}' must not be negative")
    return int(value)


__all__ = [
    "optional_bool",
    "optional_object",
    "optional_str",
    "optional_str_list",
    "require_str",
    "timeout_ms",
]
