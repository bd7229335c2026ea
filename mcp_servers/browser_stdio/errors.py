"""
Error taxonomy for the stdio browser server.

Everything raised below the command dispatcher is a ``BrowserStdioError``
subclass (or gets translated into one). The dispatcher turns these into
text content; only ``MalformedEnvelope`` is handled by the server loop.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MALFORMED_ENVELOPE = "malformed_envelope"
    UNKNOWN_OPERATION = "unknown_operation"
    MISSING_PARAMETER = "missing_parameter"
    INVALID_PARAMETER = "invalid_parameter"
    NO_ACTIVE_SESSION = "no_active_session"
    UNKNOWN_SESSION = "unknown_session"
    UNSUPPORTED_ENGINE = "unsupported_engine"
    UNSUPPORTED_LOCATOR = "unsupported_locator_strategy"
    LAUNCH_FAILURE = "launch_failure"
    NAVIGATION_FAILURE = "navigation_failure"
    NOT_FOUND = "not_found"
    ACTION_FAILURE = "action_failure"
    CAPTURE_FAILURE = "capture_failure"
    INTERNAL = "internal"


class BrowserStdioError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL


class MalformedEnvelope(BrowserStdioError):
    kind = ErrorKind.MALFORMED_ENVELOPE


class UnknownOperation(BrowserStdioError):
    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingParameter(BrowserStdioError):
    kind = ErrorKind.MISSING_PARAMETER

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required parameter: {field}")
        self.field = field


class InvalidParameter(BrowserStdioError):
    kind = ErrorKind.INVALID_PARAMETER


class NoActiveSession(BrowserStdioError):
    kind = ErrorKind.NO_ACTIVE_SESSION

    def __init__(self, message: str = "No active browser session") -> None:
        super().__init__(message)


class UnknownSession(BrowserStdioError):
    kind = ErrorKind.UNKNOWN_SESSION

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Unknown session: {session_id}")
        self.session_id = session_id


class UnsupportedEngine(BrowserStdioError):
    kind = ErrorKind.UNSUPPORTED_ENGINE

    def __init__(self, engine: str) -> None:
        super().__init__(f"Unsupported browser: {engine}")
        self.engine = engine


class UnsupportedLocatorStrategy(BrowserStdioError):
    kind = ErrorKind.UNSUPPORTED_LOCATOR

    def __init__(self, strategy: str) -> None:
        super().__init__(f"Unsupported locator strategy: {strategy}")
        self.strategy = strategy


class DriverError(BrowserStdioError):
    kind = ErrorKind.ACTION_FAILURE


class LaunchFailure(DriverError):
    kind = ErrorKind.LAUNCH_FAILURE


class NavigationFailure(DriverError):
    kind = ErrorKind.NAVIGATION_FAILURE


class NotFound(DriverError):
    kind = ErrorKind.NOT_FOUND


class ActionFailure(DriverError):
    kind = ErrorKind.ACTION_FAILURE


class CaptureFailure(DriverError):
    kind = ErrorKind.CAPTURE_FAILURE


__all__ = [
    "ActionFailure",
    "BrowserStdioError",
    "CaptureFailure",
    "DriverError",
    "ErrorKind",
    "InvalidParameter",
    "LaunchFailure",
    "MalformedEnvelope",
    "MissingParameter",
    "NavigationFailure",
    "NoActiveSession",
    "NotFound",
    "UnknownOperation",
    "UnknownSession",
    "UnsupportedEngine",
    "UnsupportedLocatorStrategy",
]
