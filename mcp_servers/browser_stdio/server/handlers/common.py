"""Helpers shared by handlers: session lookup and element waits."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...drivers import BrowserHandle, ElementRef
from ...locators import resolve_locator
from ..params import optional_str, require_str, timeout_ms

if TYPE_CHECKING:
    from ...config import ServerConfig
    from ...sessions import SessionRegistry


def session_handle(registry: SessionRegistry, args: dict[str, Any]) -> BrowserHandle:
    return registry.resolve(optional_str(args, "session_id")).handle


def wait_for_element(
    config: ServerConfig,
    registry: SessionRegistry,
    args: dict[str, Any],
    state: str,
) -> tuple[BrowserHandle, ElementRef]:
    """Resolve ``by``/``value`` and wait for the element in ``state``."""
    locator = resolve_locator(require_str(args, "by"), require_str(args, "value"))
    wait = timeout_ms(args, config.element_timeout_ms)
    handle = session_handle(registry, args)
    return handle, handle.locate(locator, wait, state=state)
